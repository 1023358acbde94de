"""Exceptions shared across the Wardrobe packages."""


class WardrobeError(Exception):
    """Base exception for every failure surfaced by Wardrobe."""


class InvalidInputError(WardrobeError):
    """Raised when a caller supplies a blank name, filename, or pattern."""


class ItemNotFoundError(WardrobeError):
    """Raised when a named item is no longer present in its category."""


class FilesystemError(WardrobeError):
    """Raised when the category tree cannot be listed or read."""
