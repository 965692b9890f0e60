"""Structured warning classes for the :mod:`icestream` package."""
from __future__ import annotations


class IceStreamWarning(UserWarning):
    """Base warning class for icestream."""


class PhysicsWarning(IceStreamWarning):
    """Raw model state outside its physically valid range."""


__all__ = [
    "IceStreamWarning",
    "PhysicsWarning",
]
