"""
Data models for the foods service.
"""

import base64
import binascii
import json
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator


CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type,X-Amz-Date,Authorization,X-Api-Key,X-Amz-Security-Token,X-Requested-With",
    "Access-Control-Allow-Methods": "GET,POST,PUT,DELETE,OPTIONS",
    "Content-Type": "application/json",
}


class Source(str, Enum):
    """Provenance of response data."""
    DATABASE = "database"
    FALLBACK = "fallback"


class FoodItem(BaseModel):
    """A food with nutrition values per 100 grams."""

    id: int
    name: str = Field(min_length=1)
    calories: int = Field(ge=0)
    protein: Optional[float] = None
    carbs: Optional[float] = None
    fat: Optional[float] = None

    @field_validator("protein", "carbs", "fat", mode="before")
    @classmethod
    def _decimal_to_float(cls, value: Any) -> Any:
        if isinstance(value, Decimal):
            return float(value)
        return value

    @classmethod
    def from_row(cls, row: Any) -> "FoodItem":
        """Build from a database record or mapping."""
        data = dict(row)
        return cls(
            id=int(data["id"]),
            name=str(data["name"]),
            calories=int(data["calories"]),
            protein=data.get("protein"),
            carbs=data.get("carbs"),
            fat=data.get("fat"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class FoodCreateRequest(BaseModel):
    """Body of ``POST /foods``."""

    name: str = Field(min_length=1)
    calories: int = Field(ge=0)
    protein: Optional[float] = Field(default=None, ge=0)
    carbs: Optional[float] = Field(default=None, ge=0)
    fat: Optional[float] = Field(default=None, ge=0)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value


def decode_body(raw: bytes) -> Optional[str]:
    """Request body as text; invalid UTF-8 becomes U+FFFD and fails JSON parsing later."""
    return raw.decode("utf-8", errors="replace") if raw else None


class FoodsRequest(BaseModel):
    """Transport-neutral inbound request."""

    method: str
    path: str = "/"
    query: Dict[str, str] = Field(default_factory=dict)
    headers: Dict[str, str] = Field(default_factory=dict)
    body: Optional[str] = None
    request_id: Optional[str] = None

    @classmethod
    def from_proxy_event(cls, event: Dict[str, Any], request_id: Optional[str] = None) -> "FoodsRequest":
        """Build from an API Gateway REST proxy event."""
        body = event.get("body")
        if body and event.get("isBase64Encoded"):
            try:
                raw = base64.b64decode(body)
            except binascii.Error:
                raw = body.encode("utf-8")
            body = decode_body(raw)

        return cls(
            method=(event.get("httpMethod") or "GET").upper(),
            path=event.get("path") or "/",
            query=event.get("queryStringParameters") or {},
            headers=event.get("headers") or {},
            body=body,
            request_id=request_id,
        )


class HandlerResponse(BaseModel):
    """Envelope plus status and CORS headers."""

    status_code: int
    body: Dict[str, Any]
    headers: Dict[str, str] = Field(default_factory=lambda: dict(CORS_HEADERS))

    @classmethod
    def success(cls, data: Union[Dict[str, Any], List[Dict[str, Any]]], source: Source,
                status_code: int = 200, **extra: Any) -> "HandlerResponse":
        body: Dict[str, Any] = {"success": True, "data": data, "source": source.value}
        body.update(extra)
        return cls(status_code=status_code, body=body)

    @classmethod
    def failure(cls, status_code: int, error: str, **extra: Any) -> "HandlerResponse":
        body: Dict[str, Any] = {"success": False, "error": error}
        body.update(extra)
        return cls(status_code=status_code, body=body)

    def to_proxy(self) -> Dict[str, Any]:
        """Render as an API Gateway proxy result."""
        return {
            "statusCode": self.status_code,
            "headers": dict(self.headers),
            "body": json.dumps(self.body),
        }
