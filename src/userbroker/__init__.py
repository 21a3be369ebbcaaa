"""User-provided service broker."""

__version__ = "0.1.0"
