"""SnipMate: live Python snippets kept in a markdown document."""

__version__ = "0.1.0"
