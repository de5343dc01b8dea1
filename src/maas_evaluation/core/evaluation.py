"""End-to-end questionnaire evaluation.

answers + weight table -> breakdown -> percentile -> grade -> analysis.
The weight table is a snapshot supplied by the caller for this one call.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from .analysis import analyze_breakdown
from .grades import grade_for_percentile
from .models import EvaluationResult, Gender, Question, WeightTable
from .percentile import percentile_result
from .scoring import AnswerInput, calculate_breakdown

logger = logging.getLogger(__name__)


def evaluate(
    gender: Gender,
    answers: Iterable[AnswerInput],
    table: WeightTable,
    evaluator_age: Optional[int] = None,
    catalog: Optional[Iterable[Question]] = None,
) -> EvaluationResult:
    """Score, rank and grade one questionnaire.

    The grade comes from the displayed one-decimal percentile, so the tier
    always matches the band a reader would look up for that number.
    """
    breakdown = calculate_breakdown(gender, answers, table, evaluator_age=evaluator_age, catalog=catalog)
    percentile = percentile_result(breakdown.normalized)
    grade = grade_for_percentile(percentile.percentile)
    logger.debug(
        "Evaluation: aggregate=%.2f percentile=%.1f tier=%s",
        breakdown.aggregate,
        percentile.percentile,
        grade.tier.value,
    )
    return EvaluationResult(
        breakdown=breakdown,
        percentile=percentile,
        grade=grade,
        analysis=analyze_breakdown(breakdown),
    )
