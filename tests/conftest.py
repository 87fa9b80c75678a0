"""
Pytest configuration and shared fixtures for the ingredient scanner tests.
"""

import pytest

from alternatives import AlternativeCandidate, AlternativeRanker
from ingredient_database import load_reference_database
from ingredient_scanner import IngredientScanner


def make_row(ingredient_id, name, score, concern, category, hidden_names=(), **alerts):
    row = {
        "id": ingredient_id,
        "name": name,
        "score": score,
        "concern": concern,
        "category": category,
        "hidden_names": list(hidden_names),
    }
    row.update(alerts)
    return row


@pytest.fixture
def scanner():
    """Scanner over the built-in reference database in substring mode."""
    return IngredientScanner(match_mode="substring")


@pytest.fixture
def token_scanner():
    return IngredientScanner(match_mode="token")


@pytest.fixture
def small_database():
    """Three-record database where only sodium nitrite is high concern."""
    return load_reference_database([
        {
            "sodium-nitrite": make_row("sodium-nitrite", "Sodium Nitrite", 25, "high", "Preservative",
                                       ["Curing salt"], kid_alert=True, heart_health_alert=True),
        },
        {
            "hfcs": make_row("hfcs", "High Fructose Corn Syrup", 30, "moderate", "Sweetener",
                             diabetic_alert=True),
            "citric-acid": make_row("citric-acid", "Citric Acid", 90, "low", "Acidulant/Preservative"),
        },
    ], version="test")


@pytest.fixture
def small_scanner(small_database):
    return IngredientScanner(database=small_database, match_mode="substring")


@pytest.fixture
def tied_ranker():
    """Catalog with two equal improvements to check stable ordering."""
    return AlternativeRanker({
        "Snack": (
            AlternativeCandidate("First Crackers", "Alpha", 80, "$3.00"),
            AlternativeCandidate("Second Crackers", "Beta", 80, "$3.50"),
            AlternativeCandidate("Top Crackers", "Gamma", 90, "$8.00"),
        ),
        "Other": (
            AlternativeCandidate("Generic", "Various", 60, "Varies"),
        ),
    })


@pytest.fixture
def client():
    from app import app

    app.config["TESTING"] = True
    with app.test_client() as test_client:
        yield test_client
