"""dirlens - cached directory listings and disk usage statistics."""

__version__ = "0.1.0"
