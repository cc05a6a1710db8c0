"""IShare ride-sharing client core."""

__version__ = "1.0.0"
