"""Git Timer - time tracking written into commit messages."""

__version__ = "0.1.0"
