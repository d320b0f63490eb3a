"""
PostgreSQL persistence layer for the foods service.
"""

import asyncio
import ssl
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

import asyncpg

from shared.config import HandlerConfig
from shared.errors import StoreUnavailableError
from shared.logging import get_logger
from shared.secrets_manager import SecretsManager

from ..models import FoodCreateRequest, FoodItem


T = TypeVar("T")

FOOD_COLUMNS = "id, name, calories, protein, carbs, fat"


class ConnectionState(Enum):
    """Lifecycle of the cached connection pool."""
    UNINITIALIZED = "uninitialized"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    FAILED = "failed"


@dataclass
class StoreResult(Generic[T]):
    """Outcome of a store operation: a value or the reason it is unavailable."""

    value: Optional[T] = None
    error: Optional[StoreUnavailableError] = field(default=None)

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Optional[T]) -> "StoreResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: StoreUnavailableError) -> "StoreResult[T]":
        return cls(error=error)


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so the term matches literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class FoodStore:
    """Lazily connected store over the ``food_items`` table."""

    def __init__(self, config: HandlerConfig, secrets: Optional[SecretsManager] = None):
        self.config = config
        self.secrets = secrets or SecretsManager(config)
        self.logger = get_logger("foods.persistence.postgres")
        self.pool: Optional[asyncpg.Pool] = None
        self.state = ConnectionState.UNINITIALIZED
        self.last_error: Optional[str] = None
        self._connect_lock = asyncio.Lock()

    @property
    def connected(self) -> bool:
        return self.state == ConnectionState.CONNECTED and self.pool is not None

    def _pool_ready(self) -> bool:
        return self.connected and not self.pool.is_closing()

    async def connect(self) -> StoreResult[asyncpg.Pool]:
        """Return the cached pool, creating it when absent or after a failure."""
        if self._pool_ready():
            return StoreResult.success(self.pool)

        async with self._connect_lock:
            # Another request may have connected while this one waited
            if self._pool_ready():
                return StoreResult.success(self.pool)
            return await self._open_pool()

    async def _open_pool(self) -> StoreResult[asyncpg.Pool]:
        await self._discard_pool()
        self.state = ConnectionState.CONNECTING

        try:
            connect_kwargs = await asyncio.to_thread(self._connect_kwargs)
            pool = await asyncpg.create_pool(
                min_size=1,
                max_size=self.config.db_pool_max_size,
                timeout=self.config.db_connect_timeout,
                command_timeout=self.config.db_command_timeout,
                **connect_kwargs
            )
            self.pool = pool
            await self._create_tables(pool)

            self.state = ConnectionState.CONNECTED
            self.last_error = None
            self.logger.info("Connected to PostgreSQL database")
            return StoreResult.success(pool)

        except Exception as e:
            await self._discard_pool()
            self.state = ConnectionState.FAILED
            self.last_error = type(e).__name__
            self.logger.error("Failed to connect to PostgreSQL", error=str(e))
            return StoreResult.failure(StoreUnavailableError(
                "Database connection failed",
                details={"reason": type(e).__name__}
            ))

    async def close(self):
        """Release the pool."""
        await self._discard_pool()
        self.state = ConnectionState.UNINITIALIZED
        self.logger.info("PostgreSQL pool closed")

    async def _discard_pool(self):
        pool, self.pool = self.pool, None
        if pool is not None:
            try:
                await pool.close()
            except Exception as e:
                self.logger.warning("Error closing PostgreSQL pool", error=str(e))

    def _connect_kwargs(self) -> Dict[str, Any]:
        """Build asyncpg connection arguments; resolves credentials on first use."""
        kwargs: Dict[str, Any] = {}
        if self.config.db_ssl:
            # RDS presents a certificate the default trust store may not chain to
            context = ssl.create_default_context()
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
            kwargs["ssl"] = context

        if self.config.database_url:
            kwargs["dsn"] = self.config.database_url
            return kwargs

        credentials = self.secrets.get_database_credentials()
        kwargs.update(
            host=self.config.db_host,
            port=self.config.db_port,
            database=self.config.db_name,
            user=credentials["username"],
            password=credentials["password"],
        )
        return kwargs

    async def _create_tables(self, pool: asyncpg.Pool):
        """Create the food_items table if it does not exist."""
        await pool.execute("""
            CREATE TABLE IF NOT EXISTS food_items (
                id SERIAL PRIMARY KEY,
                name VARCHAR(255) NOT NULL,
                calories INTEGER NOT NULL,
                protein NUMERIC(6, 2),
                carbs NUMERIC(6, 2),
                fat NUMERIC(6, 2),
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

    async def _run(self, operation: str, query) -> StoreResult:
        connection = await self.connect()
        if not connection.ok:
            return StoreResult.failure(connection.error)

        try:
            return StoreResult.success(await query(connection.value))
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError) as e:
            self.logger.error("Database query failed", operation=operation, error=str(e))
            if isinstance(e, (asyncpg.InterfaceError, OSError)):
                # Connection-level failure; reconnect on the next call
                if self.pool is connection.value:
                    await self._discard_pool()
                    self.state = ConnectionState.FAILED
            return StoreResult.failure(StoreUnavailableError(
                "Database query failed",
                details={"operation": operation, "reason": type(e).__name__}
            ))

    async def list_foods(self) -> StoreResult[List[FoodItem]]:
        """All food items ordered by id."""
        async def query(pool):
            rows = await pool.fetch(f"SELECT {FOOD_COLUMNS} FROM food_items ORDER BY id ASC")
            self.logger.info("Fetched food items", count=len(rows))
            return [FoodItem.from_row(row) for row in rows]

        return await self._run("list_foods", query)

    async def get_food(self, food_id: int) -> StoreResult[FoodItem]:
        """Food item by exact id; the value is None when absent."""
        async def query(pool):
            row = await pool.fetchrow(
                f"SELECT {FOOD_COLUMNS} FROM food_items WHERE id = $1",
                food_id
            )
            return FoodItem.from_row(row) if row else None

        return await self._run("get_food", query)

    async def search_foods(self, term: str) -> StoreResult[List[FoodItem]]:
        """Case-insensitive substring match on name, ordered by id."""
        async def query(pool):
            rows = await pool.fetch(
                f"SELECT {FOOD_COLUMNS} FROM food_items "
                "WHERE LOWER(name) LIKE LOWER($1) ESCAPE '\\' ORDER BY id ASC",
                f"%{escape_like(term)}%"
            )
            self.logger.info("Searched food items", term=term, count=len(rows))
            return [FoodItem.from_row(row) for row in rows]

        return await self._run("search_foods", query)

    async def create_food(self, food: FoodCreateRequest) -> StoreResult[FoodItem]:
        """Insert a food item; the id comes from the table's sequence."""
        async def query(pool):
            row = await pool.fetchrow(
                "INSERT INTO food_items (name, calories, protein, carbs, fat) "
                f"VALUES ($1, $2, $3, $4, $5) RETURNING {FOOD_COLUMNS}",
                food.name, food.calories, food.protein, food.carbs, food.fat
            )
            created = FoodItem.from_row(row)
            self.logger.info("Created food item", food_id=created.id, name=created.name)
            return created

        return await self._run("create_food", query)
