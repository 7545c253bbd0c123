"""redirectfinder - resolve broken URLs to their best-matching live page."""

__version__ = "0.1.0"
