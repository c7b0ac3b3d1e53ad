"""Offline suggestion provider built from a fixed meal catalog."""

import json
import re
from dataclasses import dataclass

from verified_meals.services.providers import SuggestionProvider

# name, portion, grams, calories, protein, carbs, fat
_Food = tuple[str, str, float, float, float, float, float]

_CATALOG: dict[str, list[tuple[str, list[_Food]]]] = {
    "mediterranean": [
        (
            "Mediterranean Salmon Bowl",
            [
                ("Salmon, grilled", "4 oz fillet", 113, 206, 28, 0, 9),
                ("Quinoa, cooked", "1/2 cup", 92, 111, 4, 20, 2),
                ("Olives, ripe", "8 olives", 32, 40, 0, 1, 4),
                ("Tomatoes, cherry, raw", "1/2 cup", 75, 13, 1, 3, 0),
            ],
        ),
        (
            "Chickpea and Feta Plate",
            [
                ("Chickpeas, cooked", "3/4 cup", 123, 202, 11, 34, 3),
                ("Feta cheese", "1 oz", 28, 75, 4, 1, 6),
                ("Cucumber, raw", "1/2 cup", 52, 8, 0, 2, 0),
                ("Spinach sauteed in olive oil", "1 cup", 100, 90, 3, 4, 7),
            ],
        ),
    ],
    "mexican": [
        (
            "Mexican Protein Bowl",
            [
                ("Turkey, ground, lean, cooked", "3 oz", 85, 120, 22, 0, 3),
                ("Beans, black, cooked", "1/2 cup", 86, 114, 8, 20, 0),
                ("Rice, brown, cooked", "1/3 cup", 65, 73, 2, 15, 1),
                ("Avocado, raw", "1/4 medium", 50, 80, 1, 4, 7),
            ],
        ),
        (
            "Chicken Fajita Plate",
            [
                ("Chicken breast cooked with peppers", "4 oz", 113, 190, 33, 3, 5),
                ("Tortillas, corn", "2 small", 52, 114, 3, 23, 1),
                ("Salsa", "1/4 cup", 65, 23, 1, 5, 0),
            ],
        ),
    ],
    "asian": [
        (
            "Ginger Chicken Rice Bowl",
            [
                ("Chicken breast, grilled", "3 oz", 85, 140, 26, 0, 3),
                ("Rice, brown, cooked", "2/3 cup", 130, 150, 3, 32, 1),
                ("Bok choy, cooked", "1 cup", 170, 20, 3, 3, 0),
                ("Oil, sesame", "2 tsp", 9, 80, 0, 0, 9),
            ],
        ),
        (
            "Tofu Vegetable Stir Fry",
            [
                ("Tofu, firm", "4 oz", 113, 163, 17, 4, 10),
                ("Broccoli sauteed in oil with garlic", "1 cup", 100, 85, 3, 7, 5),
                ("Noodles, soba, cooked", "1 cup", 114, 113, 6, 24, 0),
            ],
        ),
    ],
    "american": [
        (
            "Classic American Plate",
            [
                ("Chicken breast, grilled", "4 oz", 113, 185, 35, 0, 4),
                ("Sweet potato, baked", "1 medium", 128, 115, 2, 27, 0),
                ("Green beans, cooked", "1 cup", 125, 44, 2, 10, 0),
            ],
        ),
        (
            "Egg and Oat Breakfast",
            [
                ("Egg, whole, hard-boiled", "2 large", 100, 155, 13, 1, 11),
                ("Oats, cooked", "1 cup", 234, 166, 6, 28, 4),
                ("Blueberries, raw", "1/2 cup", 74, 42, 1, 11, 0),
            ],
        ),
    ],
}

_CALORIES_RE = re.compile(r"CALORIES:\s*([\d.]+)")
_CUISINE_RE = re.compile(r"Preferred Cuisine Style:\s*([^\n]+)")
_AVOID_RE = re.compile(r"avoid these recently used ingredients:\s*([^.\n]+)", re.I)


@dataclass
class TemplateProvider(SuggestionProvider):
    """Deterministic provider that always answers from the catalog."""

    name: str = "template"
    default_cuisine: str = "american"

    async def generate_completion(self, prompt: str) -> str:
        """Pick a catalog meal for the prompt's cuisine and scale it."""
        calories = _extract_calories(prompt)
        cuisine = _extract_cuisine(prompt) or self.default_cuisine
        avoided = _extract_avoided(prompt)
        options = _CATALOG.get(cuisine, _CATALOG[self.default_cuisine])
        meal_name, foods = _pick_option(options, avoided)
        return _render(meal_name, foods, calories)


def _extract_calories(prompt: str) -> float | None:
    match = _CALORIES_RE.search(prompt)
    return float(match.group(1)) if match else None


def _extract_cuisine(prompt: str) -> str | None:
    match = _CUISINE_RE.search(prompt)
    return match.group(1).strip().lower() if match else None


def _extract_avoided(prompt: str) -> set[str]:
    match = _AVOID_RE.search(prompt)
    if not match:
        return set()
    return {part.strip().lower() for part in match.group(1).split(",") if part.strip()}


def _pick_option(
    options: list[tuple[str, list[_Food]]], avoided: set[str]
) -> tuple[str, list[_Food]]:
    for meal_name, foods in options:
        names = " ".join(food[0].lower() for food in foods)
        if not any(term in names for term in avoided):
            return meal_name, foods
    return options[0]


def _render(meal_name: str, foods: list[_Food], calories: float | None) -> str:
    base_calories = sum(food[3] for food in foods)
    factor = 1.0
    if calories and base_calories:
        factor = min(3.0, max(0.25, calories / base_calories))
    rendered = [
        {
            "food_name": name,
            "portion_description": portion,
            "gram_weight": round(grams * factor, 1),
            "calories": round(kcal * factor, 1),
            "protein": round(protein * factor, 1),
            "carbs": round(carbs * factor, 1),
            "fat": round(fat * factor, 1),
        }
        for name, portion, grams, kcal, protein, carbs, fat in foods
    ]
    payload = {
        "meal_name": meal_name,
        "foods": rendered,
        "total_nutrition": {
            key: round(sum(item[key] for item in rendered), 1)
            for key in ("calories", "protein", "carbs", "fat")
        },
        "preparation_notes": "Prepare all components fresh and season to taste.",
        "nutritionist_notes": "Balanced plate built from a fixed offline catalog.",
    }
    return json.dumps(payload)
