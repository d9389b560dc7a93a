"""Starter .gitstage.toml template."""

DEFAULT_TOML = """\
# gitstage configuration
version = "1.0"

[git]
timeout = 30              # seconds before a git command is abandoned
context_lines = 3         # context lines requested from git diff

[output]
format = "terminal"       # terminal | json | yaml
show_line_numbers = true

[log]
level = "WARNING"         # DEBUG | INFO | WARNING | ERROR
format = "console"        # console | json
"""
