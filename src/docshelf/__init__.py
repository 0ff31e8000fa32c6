"""Docshelf - a Markdown documentation viewer."""

__version__ = "0.1.0"
