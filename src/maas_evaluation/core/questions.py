"""Built-in question catalog.

Question content is static configuration. The calculator accepts any
catalog with the same shape, so callers can supply their own.
"""

from __future__ import annotations

from .models import Gender, Question, QuestionKind, QuestionOption


def _options(*rows: tuple[float, str, float]) -> tuple[QuestionOption, ...]:
    return tuple(QuestionOption(value=v, label=label, score=s) for v, label, s in rows)


MALE_QUESTIONS: tuple[Question, ...] = (
    # Wealth
    Question(
        id="income",
        category="wealth",
        text="What is your current annual income?",
        sub_text="Before tax, in KRW",
        kind=QuestionKind.SELECT,
        gender=Gender.MALE,
        options=_options(
            (2000, "Under 30M", 10),
            (4000, "30M-50M", 20),
            (6000, "50M-70M", 30),
            (8500, "70M-100M", 40),
            (12000, "Over 100M", 50),
        ),
    ),
    Question(
        id="assets",
        category="wealth",
        text="What is your net worth?",
        sub_text="All assets including real estate, minus debt",
        kind=QuestionKind.SELECT,
        gender=Gender.MALE,
        options=_options(
            (3000, "Under 50M", 5),
            (12500, "50M-200M", 15),
            (30000, "Over 200M", 30),
        ),
    ),
    Question(
        id="job_stability",
        category="wealth",
        text="How stable is your current job?",
        kind=QuestionKind.SELECT,
        gender=Gender.MALE,
        options=_options(
            (5, "Unstable (unemployed, day labor)", 5),
            (10, "Average (contract, freelance)", 10),
            (15, "Stable (SME full-time)", 15),
            (20, "Very stable (large company, civil service, profession)", 20),
        ),
    ),
    # Sense
    Question(
        id="social_intelligence",
        category="sense",
        text="Do you lead conversations and read the other person's feelings well?",
        kind=QuestionKind.SLIDER,
        gender=Gender.MALE,
        min=10,
        max=40,
        step=5,
    ),
    Question(
        id="humor",
        category="sense",
        text="Are you often told you have a great sense of humor?",
        kind=QuestionKind.SLIDER,
        gender=Gender.MALE,
        min=5,
        max=30,
        step=5,
    ),
    Question(
        id="positivity",
        category="sense",
        text="Do you stay positive and look for solutions in hard situations?",
        kind=QuestionKind.SLIDER,
        gender=Gender.MALE,
        min=5,
        max=30,
        step=5,
    ),
    # Physical
    Question(
        id="height",
        category="physical",
        text="Height",
        sub_text="cm",
        kind=QuestionKind.NUMBER,
        gender=Gender.MALE,
        min=150,
        max=200,
    ),
    Question(
        id="weight",
        category="physical",
        text="Weight",
        sub_text="kg",
        kind=QuestionKind.NUMBER,
        gender=Gender.MALE,
        min=40,
        max=150,
    ),
    Question(
        id="exercise",
        category="physical",
        text="Do you exercise at least twice a week?",
        kind=QuestionKind.SELECT,
        gender=Gender.MALE,
        options=_options(
            (10, "Never", 10),
            (20, "Sometimes", 20),
            (30, "Regularly", 30),
            (40, "Very intensively", 40),
        ),
    ),
    Question(
        id="style",
        category="physical",
        text="Do you pay attention to your clothes and grooming?",
        kind=QuestionKind.SELECT,
        gender=Gender.MALE,
        options=_options(
            (5, "Not at all", 5),
            (10, "Average", 10),
            (15, "Somewhat", 15),
            (20, "A lot", 20),
        ),
    ),
)

FEMALE_QUESTIONS: tuple[Question, ...] = (
    # Age
    Question(
        id="age",
        category="age",
        text="Age",
        sub_text="International age",
        kind=QuestionKind.NUMBER,
        gender=Gender.FEMALE,
        min=20,
        max=50,
    ),
    # Appearance
    Question(
        id="attractiveness",
        category="appearance",
        text="Would you say your looks appeal to the opposite sex?",
        sub_text="Try to be objective",
        kind=QuestionKind.SLIDER,
        gender=Gender.FEMALE,
        min=10,
        max=50,
        step=10,
    ),
    Question(
        id="body_management",
        category="appearance",
        text="Do you keep in shape through diet or exercise?",
        kind=QuestionKind.SLIDER,
        gender=Gender.FEMALE,
        min=5,
        max=30,
        step=5,
    ),
    Question(
        id="style_atmosphere",
        category="appearance",
        text="Do you know which style suits you and carry an attractive presence?",
        kind=QuestionKind.SLIDER,
        gender=Gender.FEMALE,
        min=5,
        max=20,
        step=5,
    ),
    # Values
    Question(
        id="emotional_stability",
        category="values",
        text="Under stress, do you respond rationally rather than emotionally?",
        kind=QuestionKind.SLIDER,
        gender=Gender.FEMALE,
        min=10,
        max=50,
        step=10,
    ),
    Question(
        id="rational_thinking",
        category="values",
        text="Do you listen to others and discuss things logically?",
        kind=QuestionKind.SLIDER,
        gender=Gender.FEMALE,
        min=5,
        max=30,
        step=5,
    ),
    Question(
        id="family_values",
        category="values",
        text="How do you feel about building a stable family?",
        kind=QuestionKind.SLIDER,
        gender=Gender.FEMALE,
        min=5,
        max=20,
        step=5,
    ),
    # Collected for the profile, not weighted by default
    Question(
        id="height",
        category="appearance",
        text="Height",
        sub_text="cm",
        kind=QuestionKind.NUMBER,
        gender=Gender.FEMALE,
        min=140,
        max=185,
    ),
    Question(
        id="weight",
        category="appearance",
        text="Weight",
        sub_text="kg",
        kind=QuestionKind.NUMBER,
        gender=Gender.FEMALE,
        min=35,
        max=100,
    ),
)

QUESTIONS_BY_GENDER: dict[Gender, tuple[Question, ...]] = {
    Gender.MALE: MALE_QUESTIONS,
    Gender.FEMALE: FEMALE_QUESTIONS,
}


def get_questions(gender: Gender) -> tuple[Question, ...]:
    """Ordered, immutable question list for one gender."""
    return QUESTIONS_BY_GENDER[Gender(gender)]
