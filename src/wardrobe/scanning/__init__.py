"""Filesystem discovery of categories and items."""

from .discovery import CategoryScanner
from .models import CategoryInfo, CategoryRef, CategoryState, ItemRef

__all__ = ["CategoryScanner", "CategoryInfo", "CategoryRef", "CategoryState", "ItemRef"]
