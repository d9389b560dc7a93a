"""gitstage — stage and unstage individual lines from the command line."""

__version__ = "0.1.0"

# Quiet until a caller configures logging.
from gitstage import logging as _logging  # noqa: E402,F401
