"""Space reservations REST backend."""

__version__ = "1.0.0"
