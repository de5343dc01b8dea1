"""Plain-language reading of a score breakdown."""

from __future__ import annotations

from typing import Union

from .models import Analysis, FemaleBreakdown, Gender, MaleBreakdown

STRENGTH_AT = 70.0
WEAKNESS_AT = 40.0


def _male(breakdown: MaleBreakdown) -> Analysis:
    result = Analysis()

    if breakdown.wealth.total >= 80:
        result.strengths.append("Solid financial footing")
    elif breakdown.wealth.total <= WEAKNESS_AT:
        result.weaknesses.append("Financial position needs work")
        result.advice.append("Invest more in your career and personal finances")

    if breakdown.sense.total >= STRENGTH_AT:
        result.strengths.append("Strong communication and humor")
    elif breakdown.sense.total <= WEAKNESS_AT:
        result.weaknesses.append("Social skills need practice")
        result.advice.append("Meet a wider range of people to sharpen how you communicate")

    if breakdown.physical.total >= STRENGTH_AT:
        result.strengths.append("Healthy body and well-kept appearance")
    elif breakdown.physical.total <= WEAKNESS_AT:
        result.weaknesses.append("Self-care is lacking")
        result.advice.append("Exercise regularly and put some effort into your style")

    return result


def _female(breakdown: FemaleBreakdown) -> Analysis:
    result = Analysis()

    if breakdown.age.total >= 85:
        result.strengths.append("Ideal age for marriage")
    elif breakdown.age.total <= 50:
        result.advice.append("Age is just a number; lean into your other strengths")

    if breakdown.appearance.total >= STRENGTH_AT:
        result.strengths.append("Striking looks and self-care")
    elif breakdown.appearance.total <= WEAKNESS_AT:
        result.weaknesses.append("Appearance needs attention")
        result.advice.append("A healthy diet, exercise and some style research will go a long way")

    if breakdown.values.total >= STRENGTH_AT:
        result.strengths.append("Emotionally stable with mature values")
    elif breakdown.values.total <= WEAKNESS_AT:
        result.weaknesses.append("Emotional stability is lacking")
        result.advice.append("Meditation or counselling can help you find inner balance")

    return result


def analyze_breakdown(breakdown: Union[MaleBreakdown, FemaleBreakdown]) -> Analysis:
    if breakdown.gender == Gender.MALE:
        result = _male(breakdown)
        noun = "man"
    else:
        result = _female(breakdown)
        noun = "woman"

    parts = []
    if result.strengths:
        parts.append("with " + ", ".join(s.lower() for s in result.strengths))
    if result.weaknesses:
        parts.append("who could improve on: " + ", ".join(w.lower() for w in result.weaknesses))
    result.summary = f"A {noun} " + " ".join(parts) + "." if parts else f"A well-balanced {noun}."
    return result
