"""Configuration models describing Wardrobe settings."""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_ROOT_LENGTH = 4096
SUPPORTED_LANGUAGES = frozenset(
    {
        "en", "es", "fr", "de", "it", "pt", "nl", "ru", "ja", "zh", "ko",
        "ar", "hi", "no", "sv", "fi", "da", "pl", "hu", "hr", "sr", "ro",
        "el", "tr", "bg", "lt", "lv", "et", "is", "mt", "ca", "uk", "sk",
        "cs", "sl", "bn", "vi", "th", "he", "id", "ms", "ta", "te", "gu",
        "pa", "ur", "sw", "am", "yo", "zu", "af",
    }
)  # fmt: skip


class WardrobeBaseModel(BaseModel):
    """Shared configuration for Wardrobe Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class ScanningOptions(WardrobeBaseModel):
    """Options governing which files count as items.

    Attributes:
        item_extension: Extension (without the dot) that qualifying item files
            carry. Matched case-insensitively.
    """

    item_extension: str = "avatar"

    @field_validator("item_extension")
    @classmethod
    def _strip_dot(cls, value: str) -> str:
        cleaned = value.strip().lstrip(".")
        if not cleaned:
            raise ValueError("item_extension cannot be empty")
        return cleaned


class LoggingSettings(WardrobeBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
    """

    level: str = "WARNING"


class WardrobeConfig(WardrobeBaseModel):
    """Top-level configuration struct for Wardrobe.

    Attributes:
        root: Directory whose immediate subdirectories are categories.
        language: Preferred ISO 639-1 language code; must be one of
            ``SUPPORTED_LANGUAGES``.
        excluded_categories: Category names skipped during selection.
        known_categories: Category names recorded by the last reconciliation.
        known_category_files: Item filenames per category recorded by the last
            reconciliation.
        scanning: Item discovery settings.
        logging: Logging configuration.
    """

    root: Optional[str] = None
    language: str = "en"
    excluded_categories: List[str] = Field(default_factory=list)
    known_categories: List[str] = Field(default_factory=list)
    known_category_files: Dict[str, List[str]] = Field(default_factory=dict)
    scanning: ScanningOptions = Field(default_factory=ScanningOptions)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @field_validator("root")
    @classmethod
    def _validate_root(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        if not value.strip():
            raise ValueError("root directory cannot be empty")
        if len(value) > MAX_ROOT_LENGTH:
            raise ValueError("root path too long")
        if any(ord(char) < 32 for char in value):
            raise ValueError("root path contains control characters")
        if ".." in value.replace("\\", "/").split("/"):
            raise ValueError("path traversal not allowed in root")
        return value

    @field_validator("language")
    @classmethod
    def _validate_language(cls, value: str) -> str:
        if value not in SUPPORTED_LANGUAGES:
            raise ValueError(f"unsupported language '{value}'")
        return value

    @field_validator("excluded_categories", "known_categories")
    @classmethod
    def _sorted_unique(cls, value: List[str]) -> List[str]:
        return sorted(set(value))

    @field_validator("known_category_files")
    @classmethod
    def _sorted_files(cls, value: Dict[str, List[str]]) -> Dict[str, List[str]]:
        return {name: sorted(set(files)) for name, files in value.items()}

    def excluded_set(self) -> set[str]:
        """Return excluded category names as a set."""
        return set(self.excluded_categories)

    def known_category_set(self) -> set[str]:
        """Return the coarse category snapshot as a set."""
        return set(self.known_categories)

    def known_file_map(self) -> dict[str, set[str]]:
        """Return the detailed per-category file snapshot."""
        return {name: set(files) for name, files in self.known_category_files.items()}


__all__ = [
    "MAX_ROOT_LENGTH",
    "SUPPORTED_LANGUAGES",
    "WardrobeBaseModel",
    "ScanningOptions",
    "LoggingSettings",
    "WardrobeConfig",
]
