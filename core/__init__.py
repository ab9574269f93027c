"""Panel core: application registry and derived icon cache."""

__version__ = "1.0.0"
