"""Rotation engine for Wardrobe."""

from .aio import AsyncRotationService
from .changes import ChangeSet, detect_changes
from .service import RotationService

__all__ = ["AsyncRotationService", "ChangeSet", "RotationService", "detect_changes"]
