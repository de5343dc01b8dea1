from maas_evaluation.core.analysis import analyze_breakdown
from maas_evaluation.core.models import CategoryScore, FemaleBreakdown, Gender, MaleBreakdown
from maas_evaluation.core.scoring import calculate_breakdown


def _male(wealth, sense, physical):
    return MaleBreakdown(
        aggregate=0,
        weight_table="default",
        wealth=CategoryScore(total=wealth),
        sense=CategoryScore(total=sense),
        physical=CategoryScore(total=physical),
    )


def test_male_reference_answers(male_answers, weight_tables):
    analysis = analyze_breakdown(calculate_breakdown(Gender.MALE, male_answers, weight_tables[Gender.MALE]))
    assert analysis.strengths == ["Healthy body and well-kept appearance"]
    assert analysis.weaknesses == []
    assert analysis.summary == "A man with healthy body and well-kept appearance."


def test_male_weaknesses_come_with_advice():
    analysis = analyze_breakdown(_male(wealth=30, sense=20, physical=50))
    assert len(analysis.weaknesses) == 2
    assert len(analysis.advice) == 2
    assert analysis.strengths == []
    assert analysis.summary.startswith("A man who could improve on:")


def test_wealth_needs_80_to_count_as_strength():
    assert analyze_breakdown(_male(wealth=75, sense=50, physical=50)).strengths == []
    assert analyze_breakdown(_male(wealth=80, sense=50, physical=50)).strengths == ["Solid financial footing"]


def test_middle_scores_are_balanced():
    assert analyze_breakdown(_male(wealth=60, sense=60, physical=60)).summary == "A well-balanced man."


def test_female_reference_answers(female_answers, weight_tables):
    analysis = analyze_breakdown(calculate_breakdown(Gender.FEMALE, female_answers, weight_tables[Gender.FEMALE]))
    assert len(analysis.strengths) == 3
    assert analysis.weaknesses == []
    assert analysis.summary.startswith("A woman with ideal age for marriage")


def test_female_low_age_gets_advice_not_weakness():
    breakdown = FemaleBreakdown(
        aggregate=0,
        weight_table="default",
        age=CategoryScore(total=20),
        appearance=CategoryScore(total=55),
        values=CategoryScore(total=55),
    )
    analysis = analyze_breakdown(breakdown)
    assert analysis.weaknesses == []
    assert len(analysis.advice) == 1
