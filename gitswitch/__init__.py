"""Switch the active git and GitHub identity."""

__version__ = "0.1.0"
