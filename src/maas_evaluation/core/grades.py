"""Percentile to tier mapping.

Bands are checked best-first with inclusive upper bounds, so a percentile
sitting exactly on a boundary lands in the better band. The last band is a
catch-all, which makes the mapping total.

Scores are graded by their displayed percentile, which never drops below
0.1, so a score reaches Master at best. Challenger and Grandmaster are only
assigned to percentiles passed in directly.
"""

from __future__ import annotations

from .models import GradeInfo, Tier
from .percentile import percentile_result

GRADE_BANDS: tuple[GradeInfo, ...] = (
    GradeInfo(
        tier=Tier.CHALLENGER,
        code="S+",
        title="Challenger",
        description="Rules the market: top 0.01%",
        color="yellow",
        max_percentile=0.01,
    ),
    GradeInfo(
        tier=Tier.GRANDMASTER,
        code="S",
        title="Grandmaster",
        description="One of a kind: top 0.05%",
        color="purple",
        max_percentile=0.05,
    ),
    GradeInfo(
        tier=Tier.MASTER,
        code="S-",
        title="Master",
        description="Admired by everyone: top 0.5%",
        color="indigo",
        max_percentile=0.5,
    ),
    GradeInfo(
        tier=Tier.DIAMOND,
        code="A+",
        title="Diamond",
        description="Clearly upper class: top 3%",
        color="cyan",
        max_percentile=3,
    ),
    GradeInfo(
        tier=Tier.EMERALD,
        code="A",
        title="Emerald",
        description="Proven upper tier: top 15%",
        color="emerald",
        max_percentile=15,
    ),
    GradeInfo(
        tier=Tier.PLATINUM,
        code="B+",
        title="Platinum",
        description="Above-average appeal: top 35%",
        color="slate",
        max_percentile=35,
    ),
    GradeInfo(
        tier=Tier.GOLD,
        code="B",
        title="Gold",
        description="The national standard: top 50%",
        color="amber",
        max_percentile=50,
    ),
    GradeInfo(
        tier=Tier.SILVER,
        code="C",
        title="Silver",
        description="Room to grow: top 65%",
        color="gray",
        max_percentile=65,
    ),
    GradeInfo(
        tier=Tier.BRONZE,
        code="D",
        title="Bronze",
        description="Building the basics: top 85%",
        color="orange",
        max_percentile=85,
    ),
    GradeInfo(
        tier=Tier.IRON,
        code="F",
        title="Iron",
        description="Where honest self-assessment begins",
        color="red",
        max_percentile=None,
    ),
)

_BY_TIER = {band.tier: band for band in GRADE_BANDS}


def grade_for_percentile(percentile: float) -> GradeInfo:
    """Pick the band for an upper-tail percentage."""
    for band in GRADE_BANDS:
        if band.max_percentile is not None and percentile <= band.max_percentile:
            return band
    return GRADE_BANDS[-1]


def grade_for_score(score: float) -> GradeInfo:
    """Grade a 0-10 score by its displayed percentile."""
    return grade_for_percentile(percentile_result(score).percentile)


def grade_for_tier(tier: Tier) -> GradeInfo:
    return _BY_TIER[tier]
