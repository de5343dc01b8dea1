"""Questionnaire scoring engine.

Turns a set of answers into per-category totals and a weighted aggregate,
using a weight-table snapshot the caller passes in. Every scoring item
resolves to a fraction in [0, 1] that is multiplied by the item's points:

* select questions use their option's fixed score relative to the best option;
* slider and number questions scale the raw value linearly against ``max``;
* derived items (BMI, biological age) are looked up from banded tables.

This module is pure: no I/O, no globals read at call time.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Iterable, Optional, Union

from .errors import ConfigurationError, ValidationError
from .models import (
    CATEGORIES_BY_GENDER,
    CATEGORY_MAX,
    Answer,
    CategoryScore,
    FemaleBreakdown,
    Gender,
    MaleBreakdown,
    Question,
    QuestionKind,
    WeightTable,
)
from .questions import get_questions

logger = logging.getLogger(__name__)

AnswerInput = Union[Answer, tuple[str, object], dict]


def bmi_fraction(values: dict[str, float]) -> float:
    """BMI band score. Healthy range earns full points, missing data earns none."""
    height, weight = values.get("height"), values.get("weight")
    if not height or not weight:
        return 0.0
    bmi = weight / ((height / 100) ** 2)
    if 18.5 <= bmi < 25:
        return 1.0
    if bmi < 30:
        return 0.5
    return 0.25


# (inclusive upper age, fraction of the category)
AGE_BANDS: tuple[tuple[float, float], ...] = (
    (29, 0.95),
    (32, 0.85),
    (34, 0.75),
    (35, 0.60),
    (37, 0.50),
    (40, 0.35),
)


def biological_age_fraction(values: dict[str, float]) -> float:
    age = values.get("age")
    if age is None:
        return 0.0
    for upper, fraction in AGE_BANDS:
        if age <= upper:
            return fraction
    return 0.20


DERIVED_RESOLVERS: dict[str, Callable[[dict[str, float]], float]] = {
    "bmi": bmi_fraction,
    "biological_age": biological_age_fraction,
}


def _unpack(answer: AnswerInput) -> tuple[str, object]:
    if isinstance(answer, Answer):
        return answer.question_id, answer.value
    if isinstance(answer, dict):
        return str(answer.get("question_id", "")), answer.get("value")
    try:
        question_id, value = answer
    except (TypeError, ValueError):
        raise ValidationError(f"Malformed answer {answer!r}; expected (question_id, value)", field="answers")
    return str(question_id), value


def _validate_value(question: Question, raw: object) -> float:
    try:
        number = float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise ValidationError(f"Answer to '{question.id}' must be numeric, got {raw!r}", field=question.id)
    if not math.isfinite(number):
        raise ValidationError(f"Answer to '{question.id}' must be finite", field=question.id)

    if question.kind == QuestionKind.SELECT:
        if question.option_for(number) is None:
            raise ValidationError(f"{number:g} is not an option of '{question.id}'", field=question.id)
        return number

    low = question.min if question.min is not None else -math.inf
    high = question.max if question.max is not None else math.inf
    if not low <= number <= high:
        raise ValidationError(
            f"Answer to '{question.id}' must be between {low:g} and {high:g}, got {number:g}",
            field=question.id,
        )
    return number


def collect_answers(answers: Iterable[AnswerInput], questions: Iterable[Question]) -> dict[str, float]:
    """Validate answers against the catalog and return question id -> value.

    Later answers to the same question replace earlier ones. Answers to
    questions outside the catalog are ignored.
    """
    latest: dict[str, object] = {}
    for answer in answers:
        question_id, value = _unpack(answer)
        latest[question_id] = value

    values: dict[str, float] = {}
    known: set[str] = set()
    for question in questions:
        known.add(question.id)
        raw = latest.get(question.id)
        if raw is None or raw == "":
            if question.required:
                raise ValidationError(f"Missing answer for required question '{question.id}'", field=question.id)
            continue
        values[question.id] = _validate_value(question, raw)

    ignored = sorted(set(latest) - known)
    if ignored:
        logger.debug("Ignoring answers to unknown questions: %s", ", ".join(ignored))
    return values


def _resolve_item(item: str, values: dict[str, float], by_id: dict[str, Question]) -> float:
    resolver = DERIVED_RESOLVERS.get(item)
    if resolver is not None:
        return resolver(values)

    question = by_id.get(item)
    if question is None:
        raise ConfigurationError(f"Weight table item '{item}' has no matching question", field=item)
    value = values.get(item)
    if value is None:
        return 0.0

    if question.kind == QuestionKind.SELECT:
        top = question.max_option_score
        option = question.option_for(value)
        return option.score / top if option is not None and top > 0 else 0.0

    if not question.max:
        return 0.0
    return max(0.0, min(1.0, value / question.max))


def calculate_breakdown(
    gender: Gender,
    answers: Iterable[AnswerInput],
    table: WeightTable,
    evaluator_age: Optional[int] = None,
    catalog: Optional[Iterable[Question]] = None,
) -> Union[MaleBreakdown, FemaleBreakdown]:
    """Score one questionnaire against a weight-table snapshot.

    Raises ValidationError for missing required answers or out-of-bounds
    values, and ConfigurationError when the table references unknown items.
    """
    try:
        gender = Gender(gender)
    except ValueError:
        raise ValidationError(f"Unknown gender {gender!r}", field="gender")
    if Gender(table.gender) != gender:
        raise ValidationError(
            f"Weight table '{table.name}' is for {Gender(table.gender).value}, not {gender.value}",
            field="gender",
        )

    questions = [q for q in (catalog if catalog is not None else get_questions(gender)) if q.gender == gender]
    by_id = {q.id: q for q in questions}
    values = collect_answers(answers, questions)

    categories: dict[str, CategoryScore] = {}
    for category in CATEGORIES_BY_GENDER[gender]:
        weights = table.categories.get(category)
        if weights is None:
            raise ConfigurationError(f"Weight table '{table.name}' has no '{category}' category", field=category)
        items = {item: round(_resolve_item(item, values, by_id) * points, 2) for item, points in weights.points.items()}
        total = min(CATEGORY_MAX, round(sum(items.values()), 2))
        categories[category] = CategoryScore(items=items, total=total)

    profile, shares = table.combination_for(evaluator_age)
    aggregate = sum(categories[c].total * shares.get(c, 0.0) for c in CATEGORIES_BY_GENDER[gender])
    aggregate = max(0.0, min(100.0, round(aggregate, 2)))

    logger.debug("Scored %s questionnaire with %s/%s: %.2f", gender.value, table.name, profile, aggregate)

    breakdown_cls = MaleBreakdown if gender == Gender.MALE else FemaleBreakdown
    return breakdown_cls(
        aggregate=aggregate,
        weight_table=table.name,
        combination=profile,
        **categories,
    )
