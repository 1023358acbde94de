"""Rotation store errors."""

from wardrobe.errors import WardrobeError


class StateError(WardrobeError):
    """Base exception for rotation store operations."""


class CorruptStateError(StateError):
    """Raised when the rotation store file exists but cannot be parsed."""
