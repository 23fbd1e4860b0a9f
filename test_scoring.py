import pytest

from scoring import calculate_overall_score, round_half_up


@pytest.mark.parametrize("value, expected", [(12.5, 13), (12.49, 12), (0.5, 1), (99.5, 100), (0, 0)])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


def test_perfect_page_scores_100(make_metrics):
    metrics = make_metrics(performance=100, seo_score=100, accessibility=100, best_practices=100)
    assert calculate_overall_score(metrics, 0) == 100


def test_weighted_formula(make_metrics):
    metrics = make_metrics(performance=80, seo_score=90, accessibility=70, best_practices=60)
    # 27 + 20 + 14 + 9 + 9
    assert calculate_overall_score(metrics, 2) == 79


def test_negative_factor_penalty_floors_at_zero(make_metrics):
    metrics = make_metrics(performance=0, seo_score=0, accessibility=0, best_practices=0)
    assert calculate_overall_score(metrics, 0) == 10
    assert calculate_overall_score(metrics, 20) == 0
    assert calculate_overall_score(metrics, 50) == 0


def test_score_is_deterministic(make_metrics):
    metrics = make_metrics(performance=63, seo_score=71, accessibility=88, best_practices=94)
    scores = {calculate_overall_score(metrics, 3) for _ in range(5)}
    assert len(scores) == 1
