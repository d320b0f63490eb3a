"""
Gateway client for the Calorie Foods API.
"""

from .client import FoodsApiClient, classify_exception, classify_status
from .models import Envelope, Food
from .session import CallableTokenProvider, EnvTokenProvider, StaticTokenProvider, TokenProvider

__all__ = [
    "FoodsApiClient",
    "classify_exception",
    "classify_status",
    "Envelope",
    "Food",
    "CallableTokenProvider",
    "EnvTokenProvider",
    "StaticTokenProvider",
    "TokenProvider",
]
