"""
Response shapes consumed by the gateway client.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class Food(BaseModel):
    """Food item as returned by the service."""

    model_config = ConfigDict(extra="ignore")

    id: int
    name: str
    calories: int
    protein: Optional[float] = None
    carbs: Optional[float] = None
    fat: Optional[float] = None


class Envelope(BaseModel):
    """``{success, data|error, source}`` wrapper around every response."""

    model_config = ConfigDict(extra="allow")

    # Typed loosely; only ``data`` is interpreted by the client
    success: Any = False
    data: Any = None
    error: Any = None
    source: Any = None
    message: Any = None

    @property
    def from_fallback(self) -> bool:
        return self.source == "fallback"
