"""Nutrition domain models."""

from dataclasses import dataclass, field

ENERGY_ID = 1008
PROTEIN_ID = 1003
FAT_ID = 1004
CARBS_ID = 1005
FIBER_ID = 1079

# Stable reference-database nutrient ids for the tracked micronutrients.
MICRONUTRIENT_IDS: dict[str, int] = {
    "sodium": 1093,
    "potassium": 1092,
    "calcium": 1087,
    "iron": 1089,
    "vitamin_c": 1162,
    "vitamin_d": 1114,
    "vitamin_b12": 1178,
    "folate": 1177,
    "added_sugars": 1235,
}

TRACKED_NUTRIENT_IDS: frozenset[int] = frozenset(
    {ENERGY_ID, PROTEIN_ID, FAT_ID, CARBS_ID, FIBER_ID, *MICRONUTRIENT_IDS.values()}
)


@dataclass(frozen=True)
class NutrientProfile:
    """Absolute nutrient amounts for a food portion, meal or day."""

    calories: float = 0.0
    protein_g: float = 0.0
    carbs_g: float = 0.0
    fat_g: float = 0.0
    fiber_g: float = 0.0
    micronutrients: dict[str, float] = field(default_factory=dict)

    @classmethod
    def zero(cls) -> "NutrientProfile":
        """Return an empty profile used as the start of a sum."""
        return cls()

    def __add__(self, other: "NutrientProfile") -> "NutrientProfile":
        merged = dict(self.micronutrients)
        for name, amount in other.micronutrients.items():
            merged[name] = merged.get(name, 0.0) + amount
        return NutrientProfile(
            calories=self.calories + other.calories,
            protein_g=self.protein_g + other.protein_g,
            carbs_g=self.carbs_g + other.carbs_g,
            fat_g=self.fat_g + other.fat_g,
            fiber_g=self.fiber_g + other.fiber_g,
            micronutrients=merged,
        )

    def scaled(self, factor: float) -> "NutrientProfile":
        """Return the profile multiplied by a constant factor."""
        return NutrientProfile(
            calories=self.calories * factor,
            protein_g=self.protein_g * factor,
            carbs_g=self.carbs_g * factor,
            fat_g=self.fat_g * factor,
            fiber_g=self.fiber_g * factor,
            micronutrients={
                name: amount * factor for name, amount in self.micronutrients.items()
            },
        )


def sum_profiles(profiles: "list[NutrientProfile]") -> NutrientProfile:
    """Add profiles in order without intermediate rounding."""
    total = NutrientProfile.zero()
    for profile in profiles:
        total = total + profile
    return total


@dataclass(frozen=True)
class NutrientTargets:
    """Target nutrient amounts for a meal, a day or a whole plan."""

    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float
    fiber_g: float = 0.0
    micronutrients: dict[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        values = [self.calories, self.protein_g, self.carbs_g, self.fat_g, self.fiber_g]
        values.extend(self.micronutrients.values())
        if any(value < 0 for value in values):
            raise ValueError("Nutrient targets must be non-negative")

    def scaled(self, factor: float) -> "NutrientTargets":
        """Return targets multiplied by a constant share."""
        return NutrientTargets(
            calories=self.calories * factor,
            protein_g=self.protein_g * factor,
            carbs_g=self.carbs_g * factor,
            fat_g=self.fat_g * factor,
            fiber_g=self.fiber_g * factor,
            micronutrients={
                name: amount * factor for name, amount in self.micronutrients.items()
            },
        )


@dataclass(frozen=True)
class ReferenceRecord:
    """Reference database entry with nutrient values per 100 g."""

    fdc_id: int
    description: str
    data_type: str | None
    brand: str | None
    nutrients_per_100g: dict[int, float]

    def profile(self) -> NutrientProfile:
        """Per-100 g nutrients as a profile."""
        values = self.nutrients_per_100g
        micronutrients = {
            name: values[nutrient_id]
            for name, nutrient_id in MICRONUTRIENT_IDS.items()
            if nutrient_id in values
        }
        return NutrientProfile(
            calories=values.get(ENERGY_ID, 0.0),
            protein_g=values.get(PROTEIN_ID, 0.0),
            carbs_g=values.get(CARBS_ID, 0.0),
            fat_g=values.get(FAT_ID, 0.0),
            fiber_g=values.get(FIBER_ID, 0.0),
            micronutrients=micronutrients,
        )

    def scaled_profile(self, grams: float) -> NutrientProfile:
        """Nutrients for a portion of the given weight."""
        if grams <= 0:
            return NutrientProfile.zero()
        return self.profile().scaled(grams / 100.0)

    @property
    def calories(self) -> float:
        return self.nutrients_per_100g.get(ENERGY_ID, 0.0)

    @property
    def protein_g(self) -> float:
        return self.nutrients_per_100g.get(PROTEIN_ID, 0.0)
