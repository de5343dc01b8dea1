import pytest

from maas_evaluation.core.errors import ConfigurationError, ValidationError
from maas_evaluation.core.models import Answer, FemaleBreakdown, Gender, MaleBreakdown
from maas_evaluation.core.scoring import bmi_fraction, biological_age_fraction, calculate_breakdown


def _replace(answers, question_id, value):
    return [a if a.question_id != question_id else Answer(question_id=question_id, value=value) for a in answers]


class TestMaleScoring:

    def test_category_totals_and_aggregate(self, male_answers, weight_tables):
        breakdown = calculate_breakdown(Gender.MALE, male_answers, weight_tables[Gender.MALE])

        assert isinstance(breakdown, MaleBreakdown)
        assert breakdown.wealth.total == pytest.approx(75)
        assert breakdown.sense.total == pytest.approx(60)
        assert breakdown.physical.total == pytest.approx(85)
        assert breakdown.physical.items["bmi"] == pytest.approx(40)
        assert breakdown.aggregate == pytest.approx(71.5)
        assert breakdown.normalized == pytest.approx(7.15)
        assert breakdown.weight_table == "default"
        assert breakdown.combination == "default"
        assert list(breakdown.category_scores()) == ["wealth", "sense", "physical"]

    def test_deterministic(self, male_answers, weight_tables):
        table = weight_tables[Gender.MALE]
        first = calculate_breakdown(Gender.MALE, male_answers, table)
        for _ in range(5):
            assert calculate_breakdown(Gender.MALE, male_answers, table) == first

    def test_lowest_answers_stay_in_bounds(self, weight_tables):
        answers = [
            ("income", 2000), ("assets", 3000), ("job_stability", 5),
            ("social_intelligence", 10), ("humor", 5), ("positivity", 5),
            ("height", 150), ("weight", 150), ("exercise", 10), ("style", 5),
        ]
        breakdown = calculate_breakdown("male", answers, weight_tables[Gender.MALE])

        assert breakdown.wealth.total == pytest.approx(20)
        assert breakdown.physical.items["bmi"] == pytest.approx(10)
        for total in breakdown.category_totals().values():
            assert 0 <= total <= 100
        assert 0 <= breakdown.aggregate <= 100

    def test_duplicate_answers_last_write_wins(self, male_answers, weight_tables):
        answers = male_answers + [Answer(question_id="humor", value=30)]
        breakdown = calculate_breakdown(Gender.MALE, answers, weight_tables[Gender.MALE])
        assert breakdown.sense.items["humor"] == pytest.approx(30)

    def test_accepts_dict_answers(self, male_answers, weight_tables):
        as_dicts = [a.model_dump() for a in male_answers]
        breakdown = calculate_breakdown(Gender.MALE, as_dicts, weight_tables[Gender.MALE])
        assert breakdown.aggregate == pytest.approx(71.5)

    def test_unknown_questions_ignored(self, male_answers, weight_tables):
        answers = male_answers + [Answer(question_id="favourite_color", value=3)]
        breakdown = calculate_breakdown(Gender.MALE, answers, weight_tables[Gender.MALE])
        assert breakdown.aggregate == pytest.approx(71.5)


class TestFemaleScoring:

    def test_default_combination(self, female_answers, weight_tables):
        breakdown = calculate_breakdown(Gender.FEMALE, female_answers, weight_tables[Gender.FEMALE])

        assert isinstance(breakdown, FemaleBreakdown)
        assert breakdown.age.total == pytest.approx(95)
        assert breakdown.appearance.total == pytest.approx(75)
        assert breakdown.values.total == pytest.approx(70)
        assert breakdown.aggregate == pytest.approx(81)
        assert breakdown.combination == "default"

    def test_category_scores_follow_gender_categories(self, female_answers, weight_tables):
        breakdown = calculate_breakdown(Gender.FEMALE, female_answers, weight_tables[Gender.FEMALE])
        assert list(breakdown.category_scores()) == ["age", "appearance", "values"]
        assert breakdown.category_scores()["values"] is breakdown.values
        assert breakdown.category_totals() == {"age": 95.0, "appearance": 75.0, "values": 70.0}

    def test_young_evaluator_combination(self, female_answers, weight_tables):
        breakdown = calculate_breakdown(
            Gender.FEMALE, female_answers, weight_tables[Gender.FEMALE], evaluator_age=30
        )
        assert breakdown.combination == "young"
        assert breakdown.aggregate == pytest.approx(77)

    def test_evaluator_35_uses_default(self, female_answers, weight_tables):
        breakdown = calculate_breakdown(
            Gender.FEMALE, female_answers, weight_tables[Gender.FEMALE], evaluator_age=35
        )
        assert breakdown.combination == "default"


class TestValidation:

    def test_missing_required_answer(self, male_answers, weight_tables):
        answers = [a for a in male_answers if a.question_id != "income"]
        with pytest.raises(ValidationError) as excinfo:
            calculate_breakdown(Gender.MALE, answers, weight_tables[Gender.MALE])
        assert excinfo.value.field == "income"

    def test_slider_out_of_range(self, male_answers, weight_tables):
        with pytest.raises(ValidationError, match="humor"):
            calculate_breakdown(Gender.MALE, _replace(male_answers, "humor", 35), weight_tables[Gender.MALE])

    def test_select_value_not_an_option(self, male_answers, weight_tables):
        with pytest.raises(ValidationError, match="not an option"):
            calculate_breakdown(Gender.MALE, _replace(male_answers, "income", 5000), weight_tables[Gender.MALE])

    def test_non_numeric_value(self, female_answers, weight_tables):
        with pytest.raises(ValidationError, match="numeric"):
            calculate_breakdown(
                Gender.FEMALE, _replace(female_answers, "age", "twenty"), weight_tables[Gender.FEMALE]
            )

    @pytest.mark.parametrize("malformed", [42, ("income",), ("income", 8500, "extra")])
    def test_malformed_answer_entry(self, male_answers, weight_tables, malformed):
        with pytest.raises(ValidationError) as excinfo:
            calculate_breakdown(Gender.MALE, male_answers + [malformed], weight_tables[Gender.MALE])
        assert excinfo.value.field == "answers"

    def test_table_gender_mismatch(self, male_answers, weight_tables):
        with pytest.raises(ValidationError):
            calculate_breakdown(Gender.MALE, male_answers, weight_tables[Gender.FEMALE])

    def test_unknown_gender(self, male_answers, weight_tables):
        with pytest.raises(ValidationError):
            calculate_breakdown("other", male_answers, weight_tables[Gender.MALE])

    def test_table_with_unknown_item(self, male_answers, weight_tables):
        table = weight_tables[Gender.MALE].model_copy(deep=True)
        table.categories["sense"].points = {"charisma": 100}
        with pytest.raises(ConfigurationError):
            calculate_breakdown(Gender.MALE, male_answers, table)


class TestDerivedItems:

    @pytest.mark.parametrize(
        "height,weight,expected",
        [
            (175, 70, 1.0),
            (180, 55, 0.5),
            (170, 80, 0.5),
            (170, 100, 0.25),
        ],
    )
    def test_bmi_bands(self, height, weight, expected):
        assert bmi_fraction({"height": height, "weight": weight}) == expected

    def test_bmi_missing(self):
        assert bmi_fraction({"height": 175}) == 0.0

    @pytest.mark.parametrize(
        "age,expected",
        [(25, 0.95), (29, 0.95), (30, 0.85), (34, 0.75), (35, 0.60), (37, 0.50), (40, 0.35), (45, 0.20)],
    )
    def test_age_bands(self, age, expected):
        assert biological_age_fraction({"age": age}) == expected
