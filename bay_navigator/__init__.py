"""Bay Navigator safety and privacy layer."""

__version__ = "0.1.0"
