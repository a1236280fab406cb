"""Core module exports."""

from __future__ import annotations

from .enums import RetryState
from .types import P, R

__all__ = [
    "P",
    "R",
    "RetryState",
]
