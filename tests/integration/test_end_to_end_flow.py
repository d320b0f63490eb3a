"""
End-to-end tests: gateway client against the foods service in-process.
"""

import httpx
import pytest
from unittest.mock import AsyncMock

from foods_client import FoodsApiClient, StaticTokenProvider
from service_foods.app.main import FoodsService
from shared.config import ClientConfig, HandlerConfig
from shared.errors import ApiError, ErrorCode
from shared.test_helpers import InMemoryFoodStore, TestDataFactory


@pytest.fixture
def store():
    return InMemoryFoodStore(TestDataFactory.create_test_foods())


@pytest.fixture
def app(store):
    service = FoodsService(config=HandlerConfig(log_level="warning"), store=store)
    return service.create_app()


@pytest.fixture
def sleep():
    return AsyncMock()


@pytest.fixture
def client(app, sleep):
    session = TestDataFactory.create_test_session()
    return FoodsApiClient(
        ClientConfig(base_url="http://testserver/prod"),
        token_provider=StaticTokenProvider(session.access_token),
        transport=httpx.ASGITransport(app=app),
        sleep=sleep
    )


class TestEndToEndFlow:
    """Client and handler exercised together."""

    @pytest.mark.asyncio
    async def test_create_then_list_and_fetch(self, client):
        async with client:
            created = await client.create("Mango", 60)
            listed = await client.list_items()
            fetched = await client.get_item(created.id)

        assert created.name == "Mango"
        assert created.calories == 60
        assert created.id in [food.id for food in listed]
        assert (fetched.name, fetched.calories) == ("Mango", 60)

    @pytest.mark.asyncio
    async def test_search(self, client):
        async with client:
            foods = await client.search("applE")

        assert [food.name for food in foods] == ["Apple", "Pineapple"]

    @pytest.mark.asyncio
    async def test_blank_search_is_rejected_without_retry(self, client, sleep):
        async with client:
            with pytest.raises(ApiError) as exc_info:
                await client.search("  ")

        assert exc_info.value.kind == ErrorCode.HTTP_ERROR
        assert exc_info.value.status_code == 400
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_id_is_not_found(self, client):
        async with client:
            with pytest.raises(ApiError) as exc_info:
                await client.get_item(999)

        assert exc_info.value.status_code == 404
        assert exc_info.value.retryable is False

    @pytest.mark.asyncio
    async def test_fallback_catalog_when_store_down(self, client, store):
        store.available = False

        async with client:
            foods = await client.list_items()
            created = await client.create("Mango", 60)

        assert len(foods) == 10
        assert foods[0].name == "Apple"
        assert created.id == 11

    @pytest.mark.asyncio
    async def test_delete_is_not_routed(self, client):
        """The service exposes no delete route; the client surfaces a 404."""
        async with client:
            with pytest.raises(ApiError) as exc_info:
                await client.delete(1)

        assert exc_info.value.kind == ErrorCode.HTTP_ERROR
        assert exc_info.value.status_code == 404
