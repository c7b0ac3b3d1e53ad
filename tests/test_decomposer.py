"""Tests for compound food decomposition."""

import pytest

from verified_meals.domain.suggestions import SuggestedFood
from verified_meals.services.decomposer import OIL_NAME, IngredientDecomposer


def _food(name: str, grams: float = 100, calories: float = 200) -> SuggestedFood:
    return SuggestedFood(
        food_name=name,
        portion_description="1 serving",
        gram_weight=grams,
        calories=calories,
        protein=20,
        carbs=10,
        fat=10,
    )


def test_plain_food_passes_through() -> None:
    parts = IngredientDecomposer().decompose(_food("Quinoa, cooked"))

    assert len(parts) == 1
    part = parts[0]
    assert part.name == "Quinoa, cooked"
    assert part.grams == 100
    assert part.portion == "1 serving"
    assert part.estimated.calories == 200
    assert not part.is_compound_part


def test_pattern_with_oil_splits_base_and_oil() -> None:
    parts = IngredientDecomposer().decompose(
        _food("Spinach sautéed in olive oil", grams=200)
    )

    assert [part.name for part in parts] == ["Spinach", OIL_NAME]
    base, oil = parts
    assert base.grams == pytest.approx(170)
    assert base.estimated.calories == pytest.approx(160)
    assert base.estimated.protein_g == pytest.approx(18)
    assert base.estimated.fat_g == pytest.approx(3)
    assert oil.grams == pytest.approx(30)
    assert oil.estimated.calories == pytest.approx(40)
    assert oil.estimated.fat_g == pytest.approx(7)
    assert all(part.parent_name == "Spinach sautéed in olive oil" for part in parts)
    assert all(part.is_compound_part for part in parts)


def test_pattern_without_oil_keeps_only_base() -> None:
    parts = IngredientDecomposer().decompose(_food("Greek yogurt mixed with honey"))

    assert [part.name for part in parts] == ["Greek Yogurt"]
    assert parts[0].grams == pytest.approx(85)


def test_indicator_maps_staple_to_raw_term() -> None:
    parts = IngredientDecomposer().decompose(_food("Salmon, grilled", grams=150))

    assert [part.name for part in parts] == ["Salmon, raw"]
    assert parts[0].grams == pytest.approx(120)


def test_indicator_adds_oil_and_additions() -> None:
    parts = IngredientDecomposer().decompose(
        _food("Chicken sautéed with garlic and herbs", grams=150)
    )

    assert [part.name for part in parts] == [
        "Chicken, raw",
        OIL_NAME,
        "Garlic, raw",
        "Herbs, fresh, mixed",
    ]
    assert parts[1].grams == pytest.approx(30)
    assert parts[2].grams == pytest.approx(15)
    assert parts[2].estimated.calories == 10
    assert parts[2].estimated.carbs_g == 2


def test_oil_is_not_added_twice() -> None:
    parts = IngredientDecomposer().decompose(_food("Kale, sautéed with olive oil"))

    assert [part.name for part in parts] == ["Kale", OIL_NAME]


def test_staples_match_whole_words_only() -> None:
    parts = IngredientDecomposer().decompose(_food("Avocado, seasoned"))

    assert [part.name for part in parts] == ["Avocado"]


def test_plural_staple_maps_to_raw_term() -> None:
    parts = IngredientDecomposer().decompose(_food("Turkeys, marinated"))

    assert [part.name for part in parts] == ["Turkey, raw"]
