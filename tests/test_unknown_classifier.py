"""
Tests for the provisional classifier used on ingredients missing from the database.
"""

import pytest

from ingredient_scanner import check_for_msg, classify_unknown_ingredient, is_hidden_sugar
from scanner_config import AliasLists
from scanner_errors import InvalidInputError


class TestRules:
    """The first matching rule wins."""

    @pytest.mark.parametrize("name,score,concern,category", [
        ("Cane Sugar", 30, "moderate", "Hidden Sugar"),
        ("Hydrolyzed Pea Protein", 50, "moderate", "Flavor Enhancer"),
        ("Chicken Broth", 60, "moderate", "Flavor Enhancer"),
        ("Artificial Vanilla", 40, "moderate", "Processed Additive"),
        ("Annatto Color", 50, "moderate", "Additive"),
        ("Water", 80, "low", "Natural Ingredient"),
        ("Organic Quinoa Flakes", 80, "low", "Natural Ingredient"),
        ("Quinoa", 70, "low", "Ingredient"),
    ])
    def test_classification(self, name, score, concern, category) -> None:
        assessment = classify_unknown_ingredient(name)
        assert (assessment.score, assessment.concern, assessment.category) == (score, concern, category)

    def test_sugar_beats_msg(self) -> None:
        """'Barley malt' is on both lists; sugar is checked first."""
        assessment = classify_unknown_ingredient("Barley Malt")
        assert assessment.category == "Hidden Sugar"
        assert assessment.score == 30

    def test_sugar_note(self) -> None:
        assert classify_unknown_ingredient("Honey").note == "This is a form of added sugar"

    def test_msg_note_names_certainty(self) -> None:
        assert classify_unknown_ingredient("Hydrolyzed Pea Protein").note == "May contain MSG (high certainty)"
        assert classify_unknown_ingredient("Chicken Broth").note == "May contain MSG (moderate certainty)"

    def test_keyword_rules_have_no_note(self) -> None:
        assert classify_unknown_ingredient("Quinoa").note is None

    def test_rejects_non_string(self) -> None:
        with pytest.raises(InvalidInputError):
            classify_unknown_ingredient(42)


class TestAliasChecks:

    def test_hidden_sugar_is_case_insensitive(self) -> None:
        assert is_hidden_sugar("ORGANIC AGAVE NECTAR") is True
        assert is_hidden_sugar("Quinoa") is False

    def test_msg_tiers(self) -> None:
        assert check_for_msg("Autolyzed Yeast") == (True, "high")
        assert check_for_msg("Natural Flavoring") == (True, "moderate")
        assert check_for_msg("Quinoa") == (False, None)

    def test_injected_alias_lists(self) -> None:
        aliases = AliasLists(hidden_sugars=("quinoa",), msg_always=(), msg_often=())
        assert classify_unknown_ingredient("Quinoa", aliases).category == "Hidden Sugar"
        assert classify_unknown_ingredient("Cane Sugar", aliases).score == 70
