"""Video metadata resolution and caching."""

__version__ = "0.1.0"
