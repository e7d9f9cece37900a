"""Azure architecture diagram generator."""

__version__ = "0.5.0"
