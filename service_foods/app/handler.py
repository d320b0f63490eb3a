"""
Collection query handler: routes food requests to the store or the fallback catalog.
"""

import json
from typing import List, Optional, Tuple

import pydantic

from shared.errors import NotFoundError, ValidationError
from shared.logging import get_logger

from .models import FoodCreateRequest, FoodItem, FoodsRequest, HandlerResponse, Source
from .persistence.fallback import FallbackCatalog
from .persistence.postgres import FoodStore


AVAILABLE_ROUTES = [
    "GET /foods - Get all food items",
    "GET /foods/{id} - Get specific food item",
    "GET /foods/search?name={name} - Search food items",
    "POST /foods - Create new food item",
]

COLLECTION = "foods"


def split_route(path: str) -> Optional[Tuple[str, ...]]:
    """Segments after the last ``foods`` segment, or None when absent.

    Stage prefixes such as ``/prod`` and trailing slashes are ignored.
    """
    segments = [segment for segment in path.split("/") if segment]
    for index in range(len(segments) - 1, -1, -1):
        if segments[index] == COLLECTION:
            return tuple(segments[index + 1:])
    return None


class FoodsHandler:
    """Stateless request handler; the store carries the cached connection."""

    def __init__(self, store: FoodStore, fallback: Optional[FallbackCatalog] = None):
        self.store = store
        self.fallback = fallback or FallbackCatalog()
        self.logger = get_logger("foods.handler")

    async def handle(self, request: FoodsRequest) -> HandlerResponse:
        """Handle one request; always returns a response."""
        method = request.method.upper()

        if method == "OPTIONS":
            return HandlerResponse(status_code=200, body={"message": "CORS preflight successful"})

        self.logger.info("Processing request", method=method, path=request.path)

        try:
            return await self._dispatch(method, request)

        except (ValidationError, NotFoundError) as e:
            self.logger.info("Request rejected", code=e.code, error=e.message)
            return HandlerResponse.failure(e.status_code, e.message, **e.details)

        except Exception as e:
            self.logger.exception("Unexpected error handling request", error=str(e))
            return HandlerResponse.failure(
                500,
                "Internal server error",
                details=type(e).__name__
            )

    async def _dispatch(self, method: str, request: FoodsRequest) -> HandlerResponse:
        route = split_route(request.path)

        if route is not None:
            if method == "GET" and route == ("search",):
                return await self.search_foods(request.query.get("name"))

            if method == "GET" and len(route) == 1 and route[0].isdigit():
                return await self.get_food(int(route[0]))

            if method == "GET" and route == ():
                return await self.list_foods()

            if method == "POST" and route == ():
                return await self.create_food(request.body)

        self.logger.info("Route not found", method=method, path=request.path)
        raise NotFoundError(
            f"Route not found: {method} {request.path}",
            details={"availableRoutes": AVAILABLE_ROUTES}
        )

    async def list_foods(self) -> HandlerResponse:
        result = await self.store.list_foods()

        if result.ok:
            return HandlerResponse.success(
                _dump(result.value),
                Source.DATABASE,
                message="Food items retrieved from PostgreSQL database",
                count=len(result.value)
            )

        self.logger.warning("Using fallback data for list", reason=result.error.code)
        foods = self.fallback.list_foods()
        return HandlerResponse.success(
            _dump(foods),
            Source.FALLBACK,
            message="Food items retrieved from fallback data (database not available)",
            count=len(foods)
        )

    async def get_food(self, food_id: int) -> HandlerResponse:
        result = await self.store.get_food(food_id)

        if result.ok and result.value is not None:
            return HandlerResponse.success(result.value.to_dict(), Source.DATABASE)

        if not result.ok:
            self.logger.warning("Using fallback data for lookup", food_id=food_id, reason=result.error.code)

        food = self.fallback.get_food(food_id)
        if food is None:
            raise NotFoundError("Food item not found", details={"id": food_id})

        return HandlerResponse.success(food.to_dict(), Source.FALLBACK)

    async def search_foods(self, term: Optional[str]) -> HandlerResponse:
        if term is None or not term.strip():
            raise ValidationError("Name parameter is required")

        result = await self.store.search_foods(term)

        if result.ok:
            return HandlerResponse.success(
                _dump(result.value),
                Source.DATABASE,
                query=term.lower(),
                message=f"Found {len(result.value)} matching items in database",
                count=len(result.value)
            )

        self.logger.warning("Using fallback data for search", term=term, reason=result.error.code)
        foods = self.fallback.search_foods(term)
        return HandlerResponse.success(
            _dump(foods),
            Source.FALLBACK,
            query=term.lower(),
            message=f"Found {len(foods)} matching items in fallback data",
            count=len(foods)
        )

    async def create_food(self, body: Optional[str]) -> HandlerResponse:
        food = _parse_create_body(body)

        result = await self.store.create_food(food)

        if result.ok:
            return HandlerResponse.success(
                result.value.to_dict(),
                Source.DATABASE,
                status_code=201,
                message="Food item created in PostgreSQL database"
            )

        created = FoodItem(id=self.fallback.next_id(), **food.model_dump())
        self.logger.warning(
            "Food item created in fallback storage and will not be persisted",
            name=created.name,
            reason=result.error.code
        )
        return HandlerResponse.success(
            created.to_dict(),
            Source.FALLBACK,
            status_code=201,
            message="Food item created in fallback storage (not persistent)"
        )


def _dump(foods: List[FoodItem]) -> List[dict]:
    return [food.to_dict() for food in foods]


def _parse_create_body(body: Optional[str]) -> FoodCreateRequest:
    try:
        payload = json.loads(body) if body else {}
    except ValueError:
        raise ValidationError("Request body must be valid JSON")

    if not isinstance(payload, dict) or payload.get("name") is None or payload.get("calories") is None:
        raise ValidationError("Name and calories are required")

    try:
        return FoodCreateRequest(**payload)
    except pydantic.ValidationError as e:
        raise ValidationError(
            "Invalid food item",
            details={"fields": [".".join(str(part) for part in err["loc"]) for err in e.errors()]}
        )
