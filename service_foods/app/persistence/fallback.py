"""
Read-only fallback catalog served when the database is unreachable.
"""

from typing import List, Optional, Tuple

from ..models import FoodItem


FALLBACK_FOODS: Tuple[FoodItem, ...] = (
    FoodItem(id=1, name="Apple", calories=95),
    FoodItem(id=2, name="Banana", calories=105),
    FoodItem(id=3, name="Chicken Breast (100g)", calories=165),
    FoodItem(id=4, name="Rice (1 cup cooked)", calories=205),
    FoodItem(id=5, name="Broccoli (100g)", calories=34),
    FoodItem(id=6, name="Salmon (100g)", calories=208),
    FoodItem(id=7, name="Greek Yogurt (1 cup)", calories=130),
    FoodItem(id=8, name="Almonds (28g)", calories=164),
    FoodItem(id=9, name="Avocado (1 medium)", calories=234),
    FoodItem(id=10, name="Oatmeal (1 cup cooked)", calories=154),
)


class FallbackCatalog:
    """Fixed in-memory substitute for the ``food_items`` table."""

    def __init__(self, foods: Tuple[FoodItem, ...] = FALLBACK_FOODS):
        self._foods = tuple(sorted(foods, key=lambda food: food.id))

    def list_foods(self) -> List[FoodItem]:
        return list(self._foods)

    def get_food(self, food_id: int) -> Optional[FoodItem]:
        for food in self._foods:
            if food.id == food_id:
                return food
        return None

    def search_foods(self, term: str) -> List[FoodItem]:
        needle = term.lower()
        return [food for food in self._foods if needle in food.name.lower()]

    def next_id(self) -> int:
        # Never written back; the synthesized record is not persisted
        return max((food.id for food in self._foods), default=0) + 1
