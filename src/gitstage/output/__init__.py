"""Renderers for status and diff output."""
