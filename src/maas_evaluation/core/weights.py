"""Weight-table loading and validation.

A weight configuration covers both genders at once:

    {
        "name": "default",
        "male": {"categories": {...}, "combinations": {"default": {...}}},
        "female": {"categories": {...}, "combinations": {"default": {...}, "young": {...}}},
    }

Each category distributes exactly 100 points across its items, and each
combination profile splits the aggregate across the gender's categories
with shares summing to 1.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Iterable, Optional

from pydantic import ValidationError as PydanticValidationError

from .errors import ConfigurationError
from .models import CATEGORIES_BY_GENDER, CATEGORY_MAX, Gender, Question, WeightTable
from .questions import FEMALE_QUESTIONS, MALE_QUESTIONS

logger = logging.getLogger(__name__)

# Items that are computed from other answers instead of read directly.
DERIVED_ITEMS: dict[str, tuple[Gender, str]] = {
    "bmi": (Gender.MALE, "physical"),
    "biological_age": (Gender.FEMALE, "age"),
}

DEFAULT_WEIGHT_CONFIG: dict[str, Any] = {
    "name": "default",
    "description": "Reference weights",
    "male": {
        "categories": {
            "wealth": {"income": 50, "assets": 30, "job_stability": 20},
            "sense": {"social_intelligence": 40, "humor": 30, "positivity": 30},
            "physical": {"bmi": 40, "exercise": 40, "style": 20},
        },
        "combinations": {
            "default": {"wealth": 0.6, "sense": 0.3, "physical": 0.1},
        },
    },
    "female": {
        "categories": {
            "age": {"biological_age": 100},
            "appearance": {"attractiveness": 50, "body_management": 30, "style_atmosphere": 20},
            "values": {"emotional_stability": 50, "rational_thinking": 30, "family_values": 20},
        },
        "combinations": {
            "default": {"age": 0.4, "appearance": 0.2, "values": 0.4},
            "young": {"age": 0.2, "appearance": 0.4, "values": 0.4},
        },
    },
}

_TOLERANCE = 1e-6


def _check_keys(found: Iterable[str], expected: Iterable[str], where: str) -> None:
    found_set, expected_set = set(found), set(expected)
    missing = sorted(expected_set - found_set)
    unexpected = sorted(found_set - expected_set)
    if missing:
        raise ConfigurationError(f"{where} is missing categories: {', '.join(missing)}", field=where)
    if unexpected:
        raise ConfigurationError(f"{where} has unknown categories: {', '.join(unexpected)}", field=where)


def validate_weight_table(table: WeightTable, catalog: Optional[Iterable[Question]] = None) -> WeightTable:
    """Check the invariants of a weight table and return it unchanged.

    When ``catalog`` is given, every item must be either a derived item of
    the right category or a question of that category in the catalog.
    """
    gender = Gender(table.gender)
    expected = CATEGORIES_BY_GENDER[gender]
    where = gender.value

    _check_keys(table.categories.keys(), expected, f"{where}.categories")

    for category, weights in table.categories.items():
        if not weights.points:
            raise ConfigurationError(f"{where}.{category} has no items", field=f"{where}.categories.{category}")
        for item, points in weights.points.items():
            if points < 0 or not math.isfinite(points):
                raise ConfigurationError(
                    f"{where}.{category}.{item} must be a non-negative number, got {points}",
                    field=f"{where}.categories.{category}.{item}",
                )
        if not math.isclose(weights.total, CATEGORY_MAX, abs_tol=_TOLERANCE):
            raise ConfigurationError(
                f"{where}.{category} points sum to {weights.total:g}, expected {CATEGORY_MAX:g}",
                field=f"{where}.categories.{category}",
            )

    if "default" not in table.combinations:
        raise ConfigurationError(f"{where}.combinations needs a 'default' profile", field=f"{where}.combinations")
    for profile, shares in table.combinations.items():
        _check_keys(shares.keys(), expected, f"{where}.combinations.{profile}")
        if any(s < 0 or not math.isfinite(s) for s in shares.values()):
            raise ConfigurationError(
                f"{where}.combinations.{profile} shares must be non-negative",
                field=f"{where}.combinations.{profile}",
            )
        total = sum(shares.values())
        if not math.isclose(total, 1.0, abs_tol=_TOLERANCE):
            raise ConfigurationError(
                f"{where}.combinations.{profile} shares sum to {total:g}, expected 1",
                field=f"{where}.combinations.{profile}",
            )

    if catalog is not None:
        by_id = {q.id: q for q in catalog if q.gender == gender}
        for category, weights in table.categories.items():
            for item in weights.points:
                derived = DERIVED_ITEMS.get(item)
                if derived is not None:
                    if derived != (gender, category):
                        raise ConfigurationError(
                            f"Derived item '{item}' does not belong to {where}.{category}",
                            field=f"{where}.categories.{category}.{item}",
                        )
                    continue
                question = by_id.get(item)
                if question is None or question.category != category:
                    raise ConfigurationError(
                        f"Item '{item}' is not a {where} question in category '{category}'",
                        field=f"{where}.categories.{category}.{item}",
                    )

    return table


def build_weight_table(
    name: str,
    gender: Gender,
    subtree: Any,
    description: str = "",
    catalog: Optional[Iterable[Question]] = None,
) -> WeightTable:
    """Build and validate one gender's table from a raw configuration sub-tree."""
    gender = Gender(gender)
    if not isinstance(subtree, dict):
        raise ConfigurationError(f"'{gender.value}' weights must be an object", field=gender.value)
    for key in ("categories", "combinations"):
        if not isinstance(subtree.get(key), dict):
            raise ConfigurationError(f"'{gender.value}.{key}' is required", field=f"{gender.value}.{key}")

    categories = subtree["categories"]
    # Check category keys before pydantic so the error names the category.
    _check_keys(categories.keys(), CATEGORIES_BY_GENDER[gender], f"{gender.value}.categories")

    try:
        table = WeightTable.model_validate({
            "name": name,
            "gender": gender,
            "description": description,
            "categories": {cat: {"points": points} for cat, points in categories.items()},
            "combinations": subtree["combinations"],
        })
    except PydanticValidationError as exc:
        raise ConfigurationError(f"Malformed '{gender.value}' weights: {exc.errors()[0]['msg']}", field=gender.value) from exc

    return validate_weight_table(table, catalog)


def parse_weight_config(payload: Any, catalog: Optional[Iterable[Question]] = None) -> dict[Gender, WeightTable]:
    """Validate a full administrative weight configuration.

    Every per-gender sub-tree must be present; nothing is accepted partially.
    """
    if not isinstance(payload, dict):
        raise ConfigurationError("Weight configuration must be an object")
    name = payload.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ConfigurationError("Weight configuration needs a non-empty 'name'", field="name")
    description = payload.get("description") or ""
    catalog = list(catalog) if catalog is not None else None

    tables: dict[Gender, WeightTable] = {}
    for gender in Gender:
        if gender.value not in payload:
            raise ConfigurationError(f"Weight configuration is missing the '{gender.value}' sub-tree", field=gender.value)
        tables[gender] = build_weight_table(name.strip(), gender, payload[gender.value], description, catalog)

    logger.debug("Parsed weight configuration %s", name)
    return tables


def weight_config_from_tables(tables: Iterable[WeightTable]) -> dict[str, Any]:
    """Inverse of ``parse_weight_config``, for exporting the active tables."""
    config: dict[str, Any] = {}
    for table in tables:
        config.setdefault("name", table.name)
        config.setdefault("description", table.description)
        config[Gender(table.gender).value] = {
            "categories": {cat: dict(w.points) for cat, w in table.categories.items()},
            "combinations": {profile: dict(shares) for profile, shares in table.combinations.items()},
        }
    return config


def default_weight_tables() -> dict[Gender, WeightTable]:
    """The reference tables, validated against the built-in catalog."""
    return parse_weight_config(DEFAULT_WEIGHT_CONFIG, MALE_QUESTIONS + FEMALE_QUESTIONS)
