"""Tests for learning statistics."""

import pytest

from conftest import NOW, OTHER_OWNER, OWNER, make_correction
from taxxy.services.learning_stats import (
    compute_learning_stats,
    estimate_confidence_improvement,
    get_learning_stats,
    infer_stats_category,
    weekly_trend,
)


@pytest.mark.parametrize("description, expected", [
    ("Adobe subscription", "Software"),
    ("Office chair", "Office Supplies"),
    ("Flight to NYC", "Travel"),
    ("Restaurant tab", "Meals"),
    ("Gas station", "Transportation"),
    ("Facebook ads", "Marketing"),
    ("Birthday gift", "Other"),
])
def test_infer_stats_category(description, expected):
    assert infer_stats_category(description) == expected


@pytest.mark.parametrize("total, expected", [(0, 0.0), (1, 0.75), (10, 7.5), (20, 15.0), (55, 15.0)])
def test_estimate_confidence_improvement(total, expected):
    assert estimate_confidence_improvement(total) == expected


def test_weekly_trend_most_recent_last():
    corrections = [
        make_correction("a", days_ago=0),
        make_correction("b", days_ago=6.9),
        make_correction("c", days_ago=7.5),
        make_correction("d", days_ago=55),
        make_correction("e", days_ago=60),
    ]
    assert weekly_trend(corrections, NOW) == [1, 0, 0, 0, 0, 0, 1, 2]


def test_compute_learning_stats():
    corrections = [
        make_correction("Software license", days_ago=1),
        make_correction("Adobe subscription", days_ago=3),
        make_correction("Lunch restaurant", days_ago=10),
        make_correction("Random thing", days_ago=45),
    ]

    stats = compute_learning_stats(corrections, NOW)

    assert stats.total_corrections == 4
    assert stats.recent_corrections == 3
    assert stats.avg_confidence_improvement == 3.0
    assert stats.top_categories[0] == {"category": "Software", "corrections": 2}
    assert {c["category"] for c in stats.top_categories} == {"Software", "Meals", "Other"}
    assert sum(stats.weekly_corrections) == 4


def test_empty_stats():
    data = compute_learning_stats([], NOW).to_dict()
    assert data == {
        "total_corrections": 0,
        "recent_corrections": 0,
        "avg_confidence_improvement": 0.0,
        "top_categories": [],
        "learning_trends": {"weekly_corrections": [0] * 8},
    }


def test_get_learning_stats_reads_only_owner(store):
    store.add(make_correction("Software", owner=OWNER))
    store.add(make_correction("Software", owner=OTHER_OWNER))
    store.add(make_correction("Software", owner=OTHER_OWNER))

    assert get_learning_stats(store, OWNER, NOW).total_corrections == 1
