"""Reference tables for ingredient substitutes and produce seasons."""

from dataclasses import dataclass


@dataclass(frozen=True)
class SubstitutionRule:
    """A cheaper alternative expressed as a fraction of the current price.

    ``name`` may contain ``{name}``, which is filled with the original
    ingredient name (for store-brand or frozen variants).
    """

    name: str
    price_factor: float
    reason: str
    nutritional_impact: str = "none"
    taste_impact: str = "minimal"
    cooking_tip: str | None = None

    def substitute_name(self, ingredient_name: str) -> str:
        return self.name.format(name=ingredient_name.lower())


@dataclass(frozen=True)
class SeasonalRule:
    """Produce with its peak months and an off-season alternative."""

    in_season_months: frozenset[int]
    alternative: str
    price_factor: float


# Matched as lowercase substrings of the ingredient name, first match wins.
SUBSTITUTIONS: tuple[tuple[str, tuple[SubstitutionRule, ...]], ...] = (
    (
        "chicken breast",
        (
            SubstitutionRule(
                "chicken thighs",
                0.7,
                "More flavorful and tender",
                nutritional_impact="minimal",
                cooking_tip="Cook slightly longer than breast meat",
            ),
        ),
    ),
    (
        "beef",
        (
            SubstitutionRule(
                "ground turkey",
                0.8,
                "Leaner protein option",
                taste_impact="noticeable",
            ),
            SubstitutionRule(
                "brown lentils",
                0.4,
                "Hearty plant protein that holds up in sauces",
                nutritional_impact="minimal",
                taste_impact="noticeable",
                cooking_tip="Simmer the lentils until tender before adding sauce",
            ),
        ),
    ),
    (
        "salmon",
        (
            SubstitutionRule(
                "canned salmon", 0.5, "Same fish at a fraction of the cost"
            ),
            SubstitutionRule(
                "tilapia",
                0.6,
                "Mild white fish that takes the same seasoning",
                nutritional_impact="minimal",
            ),
        ),
    ),
    (
        "shrimp",
        (SubstitutionRule("frozen shrimp", 0.7, "Frozen at peak freshness"),),
    ),
    (
        "pork tenderloin",
        (
            SubstitutionRule(
                "pork shoulder",
                0.6,
                "Cheaper cut that stays juicy",
                cooking_tip="Braise low and slow until it pulls apart",
            ),
        ),
    ),
    (
        "fresh mozzarella",
        (
            SubstitutionRule(
                "low-moisture mozzarella", 0.6, "Keeps longer and melts well"
            ),
        ),
    ),
    (
        "parmesan",
        (SubstitutionRule("grana padano", 0.75, "Similar aged hard cheese"),),
    ),
    (
        "pine nuts",
        (SubstitutionRule("sunflower seeds", 0.3, "Toasty crunch for less"),),
    ),
    (
        "fresh basil",
        (SubstitutionRule("dried basil", 0.3, "Pantry staple with the same flavor"),),
    ),
    (
        "arborio rice",
        (
            SubstitutionRule(
                "medium-grain rice",
                0.5,
                "Still releases enough starch for a creamy texture",
            ),
        ),
    ),
    (
        "quinoa",
        (
            SubstitutionRule(
                "brown rice",
                0.5,
                "Whole grain with a similar role in bowls",
                nutritional_impact="minimal",
            ),
        ),
    ),
    (
        "mushrooms",
        (SubstitutionRule("white button mushrooms", 0.6, "Everyday variety"),),
    ),
    (
        "tahini",
        (SubstitutionRule("peanut butter", 0.5, "Similar nutty, creamy base"),),
    ),
)

CATEGORY_FALLBACKS: dict[str, tuple[SubstitutionRule, ...]] = {
    "meat": (
        SubstitutionRule(
            "chicken thighs",
            0.7,
            "Affordable, forgiving cut",
            nutritional_impact="minimal",
        ),
        SubstitutionRule(
            "dried beans",
            0.3,
            "Budget plant protein",
            nutritional_impact="minimal",
            taste_impact="noticeable",
        ),
    ),
    "seafood": (
        SubstitutionRule(
            "canned tuna", 0.5, "Shelf-stable fish", nutritional_impact="minimal"
        ),
    ),
    "protein": (
        SubstitutionRule(
            "dried lentils",
            0.4,
            "Budget plant protein",
            nutritional_impact="minimal",
            taste_impact="noticeable",
        ),
    ),
    "produce": (SubstitutionRule("frozen {name}", 0.7, "Frozen produce costs less"),),
    "dairy": (SubstitutionRule("store-brand {name}", 0.75, "Store brands cost less"),),
    "grains": (SubstitutionRule("store-brand {name}", 0.75, "Store brands cost less"),),
    "canned": (SubstitutionRule("store-brand {name}", 0.75, "Store brands cost less"),),
    "condiments": (
        SubstitutionRule("store-brand {name}", 0.75, "Store brands cost less"),
    ),
}

MEAT_AND_SEAFOOD_TERMS = (
    "chicken",
    "beef",
    "pork",
    "turkey",
    "lamb",
    "bacon",
    "sausage",
    "ham",
    "veal",
    "fish",
    "salmon",
    "tuna",
    "tilapia",
    "cod",
    "shrimp",
    "crab",
    "anchov",
)

ANIMAL_PRODUCT_TERMS = (
    "cheese",
    "mozzarella",
    "parmesan",
    "padano",
    "butter",
    "egg",
    "yogurt",
    "cream",
    "honey",
    "whey",
)

# More specific keys come first, so "strawberr" wins over "berr".
SEASONAL_PRODUCE: tuple[tuple[str, SeasonalRule], ...] = (
    ("strawberr", SeasonalRule(frozenset({4, 5, 6}), "apples", 0.6)),
    ("berr", SeasonalRule(frozenset({6, 7, 8}), "frozen berries", 0.6)),
    ("tomato", SeasonalRule(frozenset({6, 7, 8, 9}), "canned tomatoes", 0.6)),
    ("asparagus", SeasonalRule(frozenset({3, 4, 5, 6}), "broccoli", 0.6)),
    ("zucchini", SeasonalRule(frozenset({6, 7, 8, 9}), "cabbage", 0.6)),
    ("bell pepper", SeasonalRule(frozenset({7, 8, 9, 10}), "carrots", 0.5)),
    ("corn", SeasonalRule(frozenset({7, 8, 9}), "frozen corn", 0.6)),
    ("peach", SeasonalRule(frozenset({6, 7, 8, 9}), "canned peaches", 0.6)),
)


def lookup_substitutions(name: str, category: str) -> tuple[SubstitutionRule, ...]:
    """Return the rules for an ingredient, falling back to its category."""
    lowered = name.lower()
    for key, rules in SUBSTITUTIONS:
        if key in lowered:
            return rules
    return CATEGORY_FALLBACKS.get(category.lower(), ())


def lookup_seasonal(name: str) -> SeasonalRule | None:
    lowered = name.lower()
    for key, rule in SEASONAL_PRODUCE:
        if key in lowered:
            return rule
    return None
