"""Pydantic data models: the shared business objects.

The MCP server, the SQLite store and the pure scoring core all exchange
these records. Score breakdowns come in two closed shapes selected by the
``gender`` tag rather than one loose structure with optional keys.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Gender(str, Enum):
    """Questionnaire variant."""

    MALE = "male"
    FEMALE = "female"


class MaleCategory(str, Enum):
    """Scoring categories for the male questionnaire."""

    WEALTH = "wealth"
    SENSE = "sense"
    PHYSICAL = "physical"


class FemaleCategory(str, Enum):
    """Scoring categories for the female questionnaire."""

    AGE = "age"
    APPEARANCE = "appearance"
    VALUES = "values"


CATEGORIES_BY_GENDER: dict[Gender, tuple[str, ...]] = {
    Gender.MALE: tuple(c.value for c in MaleCategory),
    Gender.FEMALE: tuple(c.value for c in FemaleCategory),
}

# Every category is scored out of this many points.
CATEGORY_MAX = 100.0


class QuestionKind(str, Enum):
    """How a submitted value is interpreted."""

    SELECT = "select"
    SLIDER = "slider"
    NUMBER = "number"


class QuestionOption(BaseModel):
    """One choice of a select question, carrying its fixed score."""

    model_config = ConfigDict(frozen=True)

    value: float
    label: str
    score: float = Field(ge=0.0)


class Question(BaseModel):
    """A single questionnaire item with its declared bounds."""

    model_config = ConfigDict(frozen=True)

    id: str
    category: str
    text: str
    sub_text: str = ""
    kind: QuestionKind
    gender: Gender
    required: bool = True
    min: Optional[float] = None
    max: Optional[float] = None
    step: Optional[float] = None
    options: tuple[QuestionOption, ...] = ()

    @property
    def is_numeric(self) -> bool:
        return self.kind in (QuestionKind.SLIDER, QuestionKind.NUMBER)

    @property
    def max_option_score(self) -> float:
        return max((o.score for o in self.options), default=0.0)

    def option_for(self, value: float) -> Optional[QuestionOption]:
        for option in self.options:
            if option.value == value:
                return option
        return None


class Answer(BaseModel):
    """A submitted value for one question. Its score is always derived."""

    question_id: str
    value: Union[float, str]


class CategoryWeights(BaseModel):
    """Points assigned to each scoring item of one category."""

    points: dict[str, float]

    @property
    def total(self) -> float:
        return sum(self.points.values())


class WeightTable(BaseModel):
    """A named, versioned scoring configuration for one gender.

    ``categories`` distributes each category's 100 points across its items.
    ``combinations`` holds the category shares that fold category totals
    into the aggregate; ``default`` is always present and female tables add
    a ``young`` profile used for evaluators under 35.
    """

    name: str
    gender: Gender
    categories: dict[str, CategoryWeights]
    combinations: dict[str, dict[str, float]]
    description: str = ""

    def combination_for(self, evaluator_age: Optional[int] = None) -> tuple[str, dict[str, float]]:
        if evaluator_age is not None and evaluator_age < 35 and "young" in self.combinations:
            return "young", self.combinations["young"]
        return "default", self.combinations["default"]


class CategoryScore(BaseModel):
    """Resolved item points and their total for one category."""

    items: dict[str, float] = Field(default_factory=dict)
    total: float = Field(ge=0.0, le=CATEGORY_MAX)


class _BreakdownBase(BaseModel):
    gender: Gender
    aggregate: float = Field(ge=0.0, le=100.0, description="Weighted combination of category totals")
    weight_table: str = Field(description="Name of the weight table version used")
    combination: str = Field("default", description="Combination profile applied")

    @property
    def normalized(self) -> float:
        """Aggregate rescaled onto the 0-10 scale the percentile model expects."""
        return self.aggregate / 10.0

    def category_scores(self) -> dict[str, CategoryScore]:
        """Category scores keyed by name, in questionnaire order."""
        return {name: getattr(self, name) for name in CATEGORIES_BY_GENDER[Gender(self.gender)]}

    def category_totals(self) -> dict[str, float]:
        return {name: score.total for name, score in self.category_scores().items()}


class MaleBreakdown(_BreakdownBase):
    gender: Literal[Gender.MALE] = Gender.MALE
    wealth: CategoryScore
    sense: CategoryScore
    physical: CategoryScore


class FemaleBreakdown(_BreakdownBase):
    gender: Literal[Gender.FEMALE] = Gender.FEMALE
    age: CategoryScore
    appearance: CategoryScore
    values: CategoryScore


ScoreBreakdown = Annotated[Union[MaleBreakdown, FemaleBreakdown], Field(discriminator="gender")]


class PercentileResult(BaseModel):
    """Position of a normalized score in the reference population.

    Lower percentiles are more exclusive: 2.3 means top 2.3%.
    """

    score: float = Field(description="Normalized score on the 0-10 scale")
    z_score: float
    exact: float = Field(ge=0.0, le=100.0, description="Unrounded upper-tail percentage")
    percentile: float = Field(gt=0.0, le=100.0, description="Upper-tail percentage, one decimal")


class Tier(str, Enum):
    """Closed, ranked tier set. Declaration order is worst to best."""

    IRON = "Iron"
    BRONZE = "Bronze"
    SILVER = "Silver"
    GOLD = "Gold"
    PLATINUM = "Platinum"
    EMERALD = "Emerald"
    DIAMOND = "Diamond"
    MASTER = "Master"
    GRANDMASTER = "Grandmaster"
    CHALLENGER = "Challenger"

    @property
    def rank(self) -> int:
        return list(type(self)).index(self)

    @classmethod
    def lookup(cls, name: object) -> Optional[Tier]:
        """Resolve a tier by name, case-insensitively. Unknown names give None."""
        if isinstance(name, cls):
            return name
        if not isinstance(name, str):
            return None
        wanted = name.strip().lower()
        for tier in cls:
            if tier.value.lower() == wanted:
                return tier
        return None


class GradeInfo(BaseModel):
    """Display metadata for a tier band."""

    tier: Tier
    code: str = Field(description="Short grade code, e.g. 'A+'")
    title: str
    description: str
    color: str = Field(description="Visual category used by the result card")
    max_percentile: Optional[float] = Field(None, description="Inclusive upper bound; None for the catch-all band")


class TierAccess(str, Enum):
    OWN_OR_BELOW = "own_or_below"
    ALL = "all"


class PlanStatus(str, Enum):
    ACTIVE = "active"
    COMING_SOON = "coming_soon"


# Sentinel for plans without a daily view cap.
UNLIMITED = -1


class SubscriptionPlan(BaseModel):
    """A subscription tier and the entitlements it grants."""

    id: str
    name: str
    price: int = 0
    original_price: Optional[int] = None
    daily_view_limit: int = Field(ge=UNLIMITED, description=f"Views per day, or {UNLIMITED} for unlimited")
    tier_access: TierAccess
    status: PlanStatus = PlanStatus.ACTIVE
    features: list[str] = Field(default_factory=list)

    @property
    def unlimited(self) -> bool:
        return self.daily_view_limit == UNLIMITED


class DailyLimitDecision(BaseModel):
    allowed: bool
    remaining: int


class Analysis(BaseModel):
    """Rule-based reading of a score breakdown."""

    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    advice: list[str] = Field(default_factory=list)
    summary: str = ""


class EvaluationResult(BaseModel):
    """Everything one questionnaire evaluation produces. Never stored by the core."""

    breakdown: ScoreBreakdown
    percentile: PercentileResult
    grade: GradeInfo
    analysis: Analysis
    computed_at: datetime = Field(default_factory=datetime.utcnow)
