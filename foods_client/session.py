"""
Session token providers for the gateway client.

The client never inspects tokens; it only asks a provider for the current
bearer string and forwards it.
"""

import os
from typing import Awaitable, Callable, Optional, Protocol


class TokenProvider(Protocol):
    """Anything that can supply the current session's access token."""

    async def get_token(self) -> Optional[str]:
        ...


class StaticTokenProvider:
    """Provider for a token obtained elsewhere."""

    def __init__(self, token: Optional[str]):
        self.token = token

    async def get_token(self) -> Optional[str]:
        return self.token


class EnvTokenProvider:
    """Reads the token from an environment variable on every call."""

    def __init__(self, variable: str = "FOODS_API_TOKEN"):
        self.variable = variable

    async def get_token(self) -> Optional[str]:
        return os.getenv(self.variable) or None


class CallableTokenProvider:
    """Adapts an async callable such as an identity SDK's session fetch."""

    def __init__(self, fetch: Callable[[], Awaitable[Optional[str]]]):
        self.fetch = fetch

    async def get_token(self) -> Optional[str]:
        return await self.fetch()
