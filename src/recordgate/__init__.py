"""Schema-validated record access with per-language translation tables."""

__version__ = "0.3.0"
