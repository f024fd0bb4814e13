"""Blog and user REST backend on MongoDB."""

__version__ = "1.0.0"
