"""
Tests for category normalization and healthier-alternative ranking.
"""

import pytest

from alternatives import (
    AlternativeCandidate,
    AlternativeRanker,
    alternatives_for,
    match_category,
    normalize_category,
    parse_price,
    price_level_for,
    rank_alternatives,
)
from scanner_errors import InvalidInputError


class TestCategories:

    @pytest.mark.parametrize("category,expected", [
        ("Beverage", "Beverage"),
        ("Baby Food", "Baby Food"),
        ("baby food", "Other"),
        ("  Snack ", "Other"),
        ("Cosmetics", "Other"),
        ("", "Other"),
        (None, "Other"),
        (42, "Other"),
    ])
    def test_normalize(self, category, expected) -> None:
        assert normalize_category(category) == expected

    def test_legacy_product_type(self) -> None:
        assert normalize_category(None, "drink") == "Beverage"
        assert normalize_category("Cosmetics", "Supplement") == "Supplement"

    def test_category_wins_over_product_type(self) -> None:
        assert normalize_category("Dairy", "drink") == "Dairy"

    def test_match_category_is_exact(self) -> None:
        assert match_category("Cosmetics") is None
        assert match_category("other") is None
        assert match_category("Other") == "Other"

    def test_lenient_matching_is_opt_in(self) -> None:
        assert match_category("  meat ", lenient=True) == "Meat"
        assert normalize_category("baby food", lenient=True) == "Baby Food"
        assert match_category("Cosmetics", lenient=True) is None


class TestPrices:

    @pytest.mark.parametrize("price,expected", [
        ("$3.99", 3.99),
        ("$28.00", 28.0),
        ("$5.99/8pk", 5.998),
        ("Varies", None),
        ("", None),
    ])
    def test_parse_price(self, price, expected) -> None:
        assert parse_price(price) == expected

    @pytest.mark.parametrize("value,level", [
        (8.49, "high"), (7.0, "moderate"), (4.29, "moderate"), (4.0, "budget"), (1.49, "budget"), (None, "budget"),
    ])
    def test_price_level(self, value, level) -> None:
        assert price_level_for(value) == level


class TestRanking:
    """Test ranking against the built-in catalog."""

    def test_supplement(self) -> None:
        ranking = rank_alternatives("Supplement", 40)
        assert [item.candidate.brand for item in ranking.alternatives] == [
            "Thorne", "Pure Encapsulations", "Garden of Life",
        ]
        assert [item.improvement for item in ranking.alternatives] == [52, 50, 42]
        assert all(item.price_level == "high" for item in ranking.alternatives)
        assert not any(item.budget_pick for item in ranking.alternatives)
        assert ranking.best_score == 92

    def test_beverage_filters_non_improvements(self) -> None:
        ranking = rank_alternatives("Beverage", 80)
        assert [item.candidate.brand for item in ranking.alternatives] == ["Spindrift", "Harmless Harvest", "GT's"]
        spindrift, harmless, gts = ranking.alternatives
        assert (spindrift.id, spindrift.improvement, spindrift.price_level) == (2, 10, "moderate")
        assert (harmless.id, harmless.improvement, harmless.price_level) == (4, 5, "moderate")
        assert (gts.id, gts.improvement, gts.price_level, gts.budget_pick) == (1, 2, "budget", True)

    def test_meat(self) -> None:
        brands = [item.candidate.brand for item in alternatives_for("Meat", 60)]
        assert brands == ["Organic Prairie", "Applegate", "Niman Ranch"]

    def test_ties_with_original_are_not_improvements(self) -> None:
        ranking = rank_alternatives("Other", 75)
        assert ranking.is_empty
        assert ranking.has_catalog is True
        assert ranking.best_score == 75

    def test_unknown_category_falls_back_to_other(self) -> None:
        ranking = rank_alternatives("Cosmetics", 50)
        assert ranking.category == "Other"
        assert ranking.requested_category == "Cosmetics"
        assert ranking.has_catalog is False
        only = ranking.alternatives[0]
        assert only.candidate.name == "Organic Alternative"
        assert only.improvement == 25
        assert only.price_level == "budget"
        assert only.budget_pick is False

    def test_never_crosses_categories(self) -> None:
        for item in alternatives_for("Candy", 0):
            assert item.candidate.brand in ("Hu", "That's It")

    def test_category_must_match_exactly(self) -> None:
        ranking = rank_alternatives("meat", 60)
        assert ranking.category == "Other"
        assert ranking.has_catalog is False
        assert [item.candidate.name for item in ranking.alternatives] == ["Organic Alternative"]

    def test_lenient_ranker(self) -> None:
        ranking = AlternativeRanker(lenient_categories=True).rank("  meat ", 60)
        assert ranking.category == "Meat"
        assert ranking.has_catalog is True

    def test_non_numeric_score(self) -> None:
        with pytest.raises(InvalidInputError):
            rank_alternatives("Meat", "60")
        with pytest.raises(InvalidInputError):
            rank_alternatives("Meat", None)

    @pytest.mark.parametrize("score", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_score(self, score) -> None:
        with pytest.raises(InvalidInputError, match="finite"):
            rank_alternatives("Meat", score)

    def test_repeated_calls_are_identical(self) -> None:
        first = rank_alternatives("Beverage", 80).to_dict()
        for _ in range(3):
            assert rank_alternatives("Beverage", 80).to_dict() == first

    def test_to_dict(self) -> None:
        data = rank_alternatives("Baby Food", 85).to_dict()
        assert data["category"] == "Baby Food"
        assert data["alternatives"] == [{
            "id": 1,
            "name": "Organic Baby Puree",
            "brand": "Happy Baby",
            "score": 88,
            "price": "$1.49",
            "stores": ["Target", "Walmart", "Kroger"],
            "highlights": ["Organic", "No added sugar", "Non-GMO"],
            "improvement": 3,
            "price_level": "budget",
            "budget_pick": True,
        }]


class TestViews:

    def test_budget_view(self) -> None:
        ranking = rank_alternatives("Beverage", 80, view="budget")
        assert [item.candidate.brand for item in ranking.alternatives] == ["GT's"]

    def test_best_view_sorts_by_score(self) -> None:
        ranking = rank_alternatives("Beverage", 80, view="best")
        assert [item.score for item in ranking.alternatives] == [90, 85, 82]

    def test_best_view_drops_weak_scores(self) -> None:
        ranking = rank_alternatives("Frozen", 50, view="best")
        assert [item.candidate.brand for item in ranking.alternatives] == ["Cascadian Farm"]

    def test_unknown_view(self) -> None:
        with pytest.raises(InvalidInputError):
            rank_alternatives("Meat", 60, view="cheapest")


class TestCustomCatalog:

    def test_equal_improvements_keep_catalog_order(self, tied_ranker) -> None:
        ranking = tied_ranker.rank("Snack", 70)
        assert [item.candidate.name for item in ranking.alternatives] == [
            "Top Crackers", "First Crackers", "Second Crackers",
        ]

    def test_category_missing_from_catalog_uses_other(self, tied_ranker) -> None:
        ranking = tied_ranker.rank("Dairy", 50)
        assert ranking.category == "Other"
        assert ranking.has_catalog is False

    def test_catalog_needs_other_bucket(self) -> None:
        with pytest.raises(ValueError):
            AlternativeRanker({"Snack": (AlternativeCandidate("A", "B", 80, "$1"),)})
