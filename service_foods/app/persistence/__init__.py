"""
Storage backends for the foods service.
"""

from .fallback import FallbackCatalog
from .postgres import ConnectionState, FoodStore, StoreResult

__all__ = ["FallbackCatalog", "ConnectionState", "FoodStore", "StoreResult"]
