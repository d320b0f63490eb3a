"""
Authenticated, retrying client for the foods collection API.
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx
import pydantic

from shared.config import ClientConfig, get_client_config
from shared.errors import ApiError, ErrorCode
from shared.logging import get_logger
from shared.retry import RetryConfig, retry_async

from .models import Envelope, Food
from .session import TokenProvider


MESSAGES = {
    ErrorCode.NETWORK_ERROR: "Network error. Please check your connection and try again.",
    ErrorCode.UNAUTHORIZED: "Your session has expired. Please sign in again.",
    ErrorCode.FORBIDDEN: "You do not have permission to perform this action.",
    ErrorCode.RATE_LIMITED: "Too many requests. Please wait a moment and try again.",
    ErrorCode.SERVICE_UNAVAILABLE: "The service is temporarily unavailable. Please try again later.",
    ErrorCode.UNKNOWN_ERROR: "An unexpected error occurred.",
}


def classify_status(status_code: int) -> ApiError:
    """Map an HTTP error status to a classified error."""
    if status_code == 401:
        code = ErrorCode.UNAUTHORIZED
    elif status_code == 403:
        code = ErrorCode.FORBIDDEN
    elif status_code == 429:
        code = ErrorCode.RATE_LIMITED
    elif status_code == 503:
        code = ErrorCode.SERVICE_UNAVAILABLE
    elif status_code >= 500:
        code = ErrorCode.SERVER_ERROR
    elif status_code >= 400:
        code = ErrorCode.HTTP_ERROR
    else:
        code = ErrorCode.UNKNOWN_ERROR

    message = MESSAGES.get(code, f"HTTP {status_code}: Request failed")
    return ApiError(code, message, status_code=status_code)


def classify_exception(exc: BaseException) -> ApiError:
    """Map any failure raised while performing a call to a classified error."""
    if isinstance(exc, ApiError):
        return exc
    if isinstance(exc, httpx.HTTPStatusError):
        return classify_status(exc.response.status_code)
    if isinstance(exc, httpx.TransportError):
        return ApiError(
            ErrorCode.NETWORK_ERROR,
            MESSAGES[ErrorCode.NETWORK_ERROR],
            details={"reason": type(exc).__name__}
        )
    return ApiError(
        ErrorCode.UNKNOWN_ERROR,
        MESSAGES[ErrorCode.UNKNOWN_ERROR],
        details={"reason": type(exc).__name__}
    )


class FoodsApiClient:
    """Client for the foods collection service.

    Construct once per process with an explicit configuration and share the
    instance. Use as an async context manager, or call ``aclose()``.
    """

    def __init__(self,
                 config: Optional[ClientConfig] = None,
                 token_provider: Optional[TokenProvider] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None,
                 sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep):
        self.config = config or get_client_config()
        self.token_provider = token_provider
        self.logger = get_logger("foods_client")
        self.retry_config = RetryConfig(
            max_retries=self.config.max_retries,
            base_delay=self.config.retry_base_delay,
            exponential_base=2.0
        )
        self._sleep = sleep
        self._http = httpx.AsyncClient(
            base_url=self.config.base_url.rstrip("/"),
            timeout=self.config.timeout,
            transport=transport
        )

    async def __aenter__(self) -> "FoodsApiClient":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()

    async def aclose(self):
        await self._http.aclose()

    async def list_items(self) -> List[Food]:
        """All food items; an empty list when the payload carries no usable data."""
        envelope = await self._call("list_items", "GET", "/foods")
        return self._food_list(envelope, "list_items")

    async def search(self, term: str) -> List[Food]:
        """Foods whose name contains ``term``; the term is passed through unvalidated."""
        envelope = await self._call("search", "GET", "/foods/search", params={"name": term})
        return self._food_list(envelope, "search")

    async def get_item(self, food_id: int) -> Food:
        envelope = await self._call("get_item", "GET", f"/foods/{food_id}")
        return self._food(envelope, "get_item")

    async def create(self, name: str, calories: int) -> Food:
        envelope = await self._call(
            "create", "POST", "/foods",
            json={"name": name, "calories": calories}
        )
        return self._food(envelope, "create")

    async def update(self, food_id: int, name: str, calories: int) -> Food:
        """Replace name and calories of an existing item."""
        envelope = await self._call(
            "update", "PUT", f"/foods/{food_id}",
            json={"name": name, "calories": calories}
        )
        return self._food(envelope, "update")

    async def delete(self, food_id: int) -> None:
        await self._call("delete", "DELETE", f"/foods/{food_id}")

    async def _auth_headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token_provider is None:
            return headers

        try:
            token = await self.token_provider.get_token()
        except Exception as e:
            # Proceed unauthenticated; the server decides whether to reject
            self.logger.warning("Failed to get auth token", error=str(e))
            return headers

        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _call(self, operation: str, method: str, endpoint: str, **kwargs) -> Envelope:
        async def attempt() -> Envelope:
            try:
                headers = await self._auth_headers()
                response = await self._http.request(method, endpoint, headers=headers, **kwargs)
                response.raise_for_status()
                if not response.content:
                    return Envelope(success=True)
                payload = response.json()
                if not isinstance(payload, dict):
                    return Envelope(success=True, data=None)
                return Envelope.model_validate(payload)
            except Exception as e:
                error = classify_exception(e)
                self.logger.error(
                    "API error",
                    operation=operation,
                    code=error.code,
                    status_code=error.status_code,
                    retryable=error.retryable,
                    error=str(e)
                )
                if error is e:
                    raise
                raise error from e

        envelope = await retry_async(
            attempt,
            config=self.retry_config,
            is_retryable=lambda e: isinstance(e, ApiError) and e.retryable,
            sleep=self._sleep,
            name=operation
        )

        if envelope.from_fallback:
            self.logger.warning("Response served from fallback data", operation=operation)
        return envelope

    def _food_list(self, envelope: Envelope, operation: str) -> List[Food]:
        if not isinstance(envelope.data, list):
            self.logger.warning("Response has no item list", operation=operation)
            return []

        foods = []
        for entry in envelope.data:
            try:
                foods.append(Food.model_validate(entry))
            except pydantic.ValidationError:
                self.logger.warning("Skipping malformed item", operation=operation, item=entry)
        return foods

    def _food(self, envelope: Envelope, operation: str) -> Food:
        try:
            return Food.model_validate(envelope.data)
        except pydantic.ValidationError as e:
            self.logger.error("Response carries no food item", operation=operation)
            raise ApiError(
                ErrorCode.UNKNOWN_ERROR,
                "Unexpected response from server.",
                details={"operation": operation}
            ) from e
