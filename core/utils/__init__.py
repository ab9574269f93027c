"""Utility helpers for the panel service."""

from .timing import time_taken

__all__ = [
    'time_taken',
]
