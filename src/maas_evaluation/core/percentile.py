"""Normal-distribution percentile model.

Scores live on a 0-10 scale and are modelled as N(5, 1.5). The percentile
reported is the upper tail, "top X%", so a lower value is more exclusive.

The tail is computed with the Abramowitz & Stegun 7.1.26 rational
approximation to erfc (max abs error 1.5e-7), which keeps this free of any
special-function dependency.
"""

from __future__ import annotations

import math

from .models import PercentileResult

MEAN = 5.0
STD_DEV = 1.5

# A&S 7.1.26 coefficients
_P = 0.3275911
_A1 = 0.254829592
_A2 = -0.284496736
_A3 = 1.421413741
_A4 = -1.453152027
_A5 = 1.061405429

# Smallest percentile ever reported, so results stay inside (0, 100].
PERCENTILE_FLOOR = 0.1


def _erfc_nonnegative(x: float) -> float:
    """erfc(x) for x >= 0."""
    t = 1.0 / (1.0 + _P * x)
    poly = t * (_A1 + t * (_A2 + t * (_A3 + t * (_A4 + t * _A5))))
    return poly * math.exp(-x * x)


def z_score(score: float, mean: float = MEAN, std_dev: float = STD_DEV) -> float:
    return (score - mean) / std_dev


def upper_tail(score: float, mean: float = MEAN, std_dev: float = STD_DEV) -> float:
    """P(X > score) for X ~ N(mean, std_dev)."""
    z = z_score(score, mean, std_dev)
    half = 0.5 * _erfc_nonnegative(abs(z) / math.sqrt(2.0))
    return half if z >= 0 else 1.0 - half


def normal_cdf(score: float, mean: float = MEAN, std_dev: float = STD_DEV) -> float:
    return 1.0 - upper_tail(score, mean, std_dev)


def calculate_percentile(score: float) -> float:
    """Upper-tail percentage for a 0-10 score, rounded to one decimal.

    Non-increasing in ``score``. Accepts any finite number.
    """
    return max(PERCENTILE_FLOOR, round(upper_tail(score) * 100, 1))


def percentile_result(score: float) -> PercentileResult:
    exact = upper_tail(score) * 100
    return PercentileResult(
        score=score,
        z_score=round(z_score(score), 2),
        exact=min(100.0, max(0.0, exact)),
        percentile=max(PERCENTILE_FLOOR, round(exact, 1)),
    )


def distribution_curve(step: float = 0.1, upper: float = 10.0) -> list[dict]:
    """Density samples of the reference distribution, for charting."""
    points = []
    steps = int(round(upper / step))
    for i in range(steps + 1):
        x = round(i * step, 1)
        z = z_score(x)
        density = math.exp(-0.5 * z * z) / (STD_DEV * math.sqrt(2 * math.pi))
        points.append({"x": x, "density": round(density, 6), "percentile": calculate_percentile(x)})
    return points
