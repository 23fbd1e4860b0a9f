import math

from models import TechnicalMetrics

# Weight of each lab category in the overall score
SCORE_WEIGHTS = {
    "seo_score": 0.30,
    "performance": 0.25,
    "accessibility": 0.20,
    "best_practices": 0.15,
}
ISSUES_WEIGHT = 0.10
PENALTY_PER_NEGATIVE_FACTOR = 5


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (12.5 -> 13)"""
    return int(math.floor(value + 0.5))


def calculate_overall_score(technical_metrics: TechnicalMetrics, negative_factor_count: int) -> int:
    """
    Combine the lab sub-scores and the number of negative findings into a
    single 0-100 score.

    Every weighted term is bounded by its input range, so the result stays
    within 0-100 without an explicit clamp.
    """
    weighted = sum(
        getattr(technical_metrics, name) * weight
        for name, weight in SCORE_WEIGHTS.items()
    )
    issues_score = max(0, 100 - negative_factor_count * PENALTY_PER_NEGATIVE_FACTOR)
    return round_half_up(weighted + issues_score * ISSUES_WEIGHT)
