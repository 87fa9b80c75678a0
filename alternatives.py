# alternatives.py - Category-locked healthier alternatives for a scanned product
import math
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from scanner_config import (
    BEST_VIEW_MIN_SCORE,
    BUDGET_PICK_MAX_PRICE,
    FALLBACK_CATEGORY,
    HIGH_PRICE_THRESHOLD,
    LEGACY_PRODUCT_TYPES,
    MODERATE_PRICE_THRESHOLD,
    PRODUCT_CATEGORIES,
    log_debug,
)
from scanner_errors import InvalidInputError

ALTERNATIVE_VIEWS = ("all", "budget", "best")


@dataclass(frozen=True)
class AlternativeCandidate:
    name: str
    brand: str
    score: int
    price: str
    stores: Tuple[str, ...] = ()
    highlights: Tuple[str, ...] = ()


def _candidate(name, brand, score, price, stores, highlights):
    return AlternativeCandidate(name, brand, score, price, tuple(stores), tuple(highlights))


CATEGORY_ALTERNATIVES: Dict[str, Tuple[AlternativeCandidate, ...]] = {
    "Beverage": (
        _candidate("Organic Kombucha", "GT's", 82, "$3.99", ["Whole Foods", "Target", "Kroger"], ["Probiotics", "Low sugar", "Organic"]),
        _candidate("Sparkling Water with Fruit", "Spindrift", 90, "$5.99/8pk", ["Target", "Walmart", "Costco"], ["Real fruit juice", "No sweeteners", "Zero calories"]),
        _candidate("Cold-Pressed Green Juice", "Suja", 78, "$4.49", ["Whole Foods", "Target", "Kroger"], ["Cold-pressed", "No added sugar", "Organic"]),
        _candidate("Coconut Water", "Harmless Harvest", 85, "$4.29", ["Whole Foods", "Sprouts", "Target"], ["Raw", "No added sugar", "Electrolytes"]),
    ),
    "Dairy": (
        _candidate("Organic Whole Milk Yogurt", "Stonyfield", 80, "$5.49", ["Target", "Kroger", "Whole Foods"], ["Organic", "Probiotics", "No artificial ingredients"]),
        _candidate("Grass-Fed Whole Milk", "Organic Valley", 85, "$6.99", ["Whole Foods", "Kroger", "Sprouts"], ["Grass-fed", "No hormones", "Pasture-raised"]),
        _candidate("Oat Milk (Unsweetened)", "Oatly", 75, "$4.99", ["Target", "Walmart", "Whole Foods"], ["Plant-based", "No added sugar", "Fortified"]),
    ),
    "Snack": (
        _candidate("Organic Veggie Straws", "Hippeas", 72, "$4.29", ["Target", "Walmart", "Whole Foods"], ["Organic chickpeas", "No artificial flavors", "Gluten-free"]),
        _candidate("Mixed Nuts (Unsalted)", "Planters", 88, "$7.99", ["Target", "Walmart", "Costco"], ["Whole foods", "Heart-healthy fats", "Protein"]),
        _candidate("Organic Apple Chips", "Bare", 82, "$3.99", ["Target", "Whole Foods", "Kroger"], ["Single ingredient", "No added sugar", "Organic"]),
    ),
    "Meat": (
        _candidate("Uncured Turkey Dogs", "Applegate", 72, "$6.99", ["Target", "Whole Foods", "Kroger"], ["No nitrites", "No artificial ingredients", "Organic"]),
        _candidate("Organic Grass-Fed Beef Franks", "Organic Prairie", 78, "$8.49", ["Whole Foods", "Sprouts"], ["Grass-fed", "No added sugar", "No nitrites"]),
        _candidate("All Natural Uncured Beef Franks", "Niman Ranch", 70, "$7.49", ["Whole Foods", "Safeway", "Costco"], ["Humanely raised", "No antibiotics", "No hormones"]),
    ),
    "Grain": (
        _candidate("Organic Sprouted Bread", "Ezekiel 4:9", 88, "$5.99", ["Whole Foods", "Kroger", "Sprouts"], ["Sprouted grains", "No flour", "Complete protein"]),
        _candidate("Organic Brown Rice", "Lundberg", 92, "$4.99", ["Target", "Whole Foods", "Kroger"], ["Whole grain", "Organic", "Single ingredient"]),
        _candidate("Ancient Grain Pasta", "Banza", 80, "$3.49", ["Target", "Walmart", "Kroger"], ["Chickpea-based", "High protein", "Gluten-free"]),
    ),
    "Condiment": (
        _candidate("Organic Yellow Mustard", "Annie's", 85, "$3.49", ["Target", "Whole Foods", "Kroger"], ["Organic", "Simple ingredients", "No artificial colors"]),
        _candidate("Avocado Oil Mayo", "Primal Kitchen", 78, "$8.99", ["Whole Foods", "Target", "Sprouts"], ["Avocado oil", "No soybean oil", "No sugar"]),
        _candidate("Organic Ketchup", "Annie's", 72, "$3.99", ["Target", "Kroger", "Whole Foods"], ["Organic tomatoes", "No HFCS", "Non-GMO"]),
    ),
    "Supplement": (
        _candidate("Methylated B-Complex", "Thorne", 92, "$28.00", ["Amazon", "Thorne.com", "Whole Foods"], ["Bioavailable forms", "Third-party tested", "No fillers"]),
        _candidate("Chelated Magnesium Glycinate", "Pure Encapsulations", 90, "$24.00", ["Amazon", "PureEncapsulations.com"], ["Chelated form", "High absorption", "Hypoallergenic"]),
        _candidate("Whole Food Multivitamin", "Garden of Life", 82, "$32.99", ["Whole Foods", "Amazon", "Target"], ["Whole food sourced", "Probiotics included", "Non-GMO"]),
    ),
    "Baby Food": (
        _candidate("Organic Baby Puree", "Happy Baby", 88, "$1.49", ["Target", "Walmart", "Kroger"], ["Organic", "No added sugar", "Non-GMO"]),
        _candidate("Organic Teething Wafers", "Happy Baby", 80, "$3.99", ["Target", "Walmart", "Whole Foods"], ["Organic rice", "No wheat", "Gentle ingredients"]),
    ),
    "Frozen": (
        _candidate("Organic Frozen Vegetables", "Cascadian Farm", 92, "$3.49", ["Target", "Kroger", "Whole Foods"], ["Organic", "Flash frozen", "No additives"]),
        _candidate("Cauliflower Crust Pizza", "Caulipower", 68, "$8.99", ["Target", "Walmart", "Kroger"], ["Cauliflower crust", "Gluten-free", "Lower carb"]),
    ),
    "Bakery": (
        _candidate("Organic Sourdough Bread", "Dave's Killer Bread", 78, "$5.49", ["Target", "Kroger", "Walmart"], ["Organic", "Whole grains", "Non-GMO"]),
        _candidate("Gluten-Free Seed Crackers", "Simple Mills", 80, "$4.99", ["Target", "Whole Foods", "Kroger"], ["Almond flour", "No grains", "Simple ingredients"]),
    ),
    "Candy": (
        _candidate("Dark Chocolate (85%)", "Hu", 75, "$4.99", ["Whole Foods", "Target", "Sprouts"], ["No refined sugar", "Organic cacao", "Fair trade"]),
        _candidate("Fruit Snacks (Real Fruit)", "That's It", 85, "$4.49", ["Target", "Walmart", "Whole Foods"], ["Only fruit", "No added sugar", "No preservatives"]),
    ),
    "Other": (
        _candidate("Organic Alternative", "Various", 75, "Varies", ["Whole Foods", "Target", "Sprouts"], ["Organic", "Fewer additives", "Cleaner label"]),
    ),
}


def match_category(category, lenient=False):
    """Vocabulary entry for an exact category name, or None.

    lenient=True also accepts other casing and surrounding whitespace.
    """
    if not isinstance(category, str):
        return None
    if category in PRODUCT_CATEGORIES:
        return category
    if lenient:
        for known in PRODUCT_CATEGORIES:
            if known.lower() == category.strip().lower():
                return known
    return None


def normalize_category(category, product_type=None, lenient=False):
    """Resolve a detected category to the fixed vocabulary. Anything unrecognized becomes Other."""
    known = match_category(category, lenient)
    if known is not None:
        return known

    if isinstance(product_type, str):
        legacy = LEGACY_PRODUCT_TYPES.get(product_type.strip().lower())
        if legacy:
            return legacy

    return FALLBACK_CATEGORY


def parse_price(price):
    """Numeric value of a display price, parseFloat-style: '$5.99/8pk' -> 5.998, 'Varies' -> None"""
    digits = re.sub(r'[^0-9.]', '', price or '')
    match = re.match(r'\d*\.?\d*', digits)
    number = match.group(0) if match else ''
    if number in ('', '.'):
        return None
    return float(number)


def price_level_for(price_value):
    # Unparseable prices land in "budget" but are never a budget pick
    if price_value is not None and price_value > HIGH_PRICE_THRESHOLD:
        return "high"
    if price_value is not None and price_value > MODERATE_PRICE_THRESHOLD:
        return "moderate"
    return "budget"


@dataclass(frozen=True)
class RankedAlternative:
    id: int
    candidate: AlternativeCandidate
    improvement: int
    price_level: str
    budget_pick: bool

    @property
    def score(self):
        return self.candidate.score

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.candidate.name,
            "brand": self.candidate.brand,
            "score": self.candidate.score,
            "price": self.candidate.price,
            "stores": list(self.candidate.stores),
            "highlights": list(self.candidate.highlights),
            "improvement": self.improvement,
            "price_level": self.price_level,
            "budget_pick": self.budget_pick,
        }


@dataclass(frozen=True)
class AlternativeRanking:
    requested_category: Optional[str]
    category: str
    has_catalog: bool
    original_score: float
    alternatives: Tuple[RankedAlternative, ...]

    @property
    def is_empty(self):
        return not self.alternatives

    @property
    def best_score(self):
        if not self.alternatives:
            return self.original_score
        return max(alternative.score for alternative in self.alternatives)

    def to_dict(self):
        return {
            "requested_category": self.requested_category,
            "category": self.category,
            "has_catalog": self.has_catalog,
            "original_score": self.original_score,
            "best_score": self.best_score,
            "alternatives": [alternative.to_dict() for alternative in self.alternatives],
        }


def _require_score(original_score):
    if isinstance(original_score, bool) or not isinstance(original_score, (int, float)):
        raise InvalidInputError(f"original score must be a number, got {type(original_score).__name__}")
    if not math.isfinite(original_score):
        raise InvalidInputError(f"original score must be finite, got {original_score}")


def apply_view(alternatives: Sequence[RankedAlternative], view="all") -> List[RankedAlternative]:
    """'budget' keeps budget picks, 'best' keeps strong scorers ordered by score"""
    if view not in ALTERNATIVE_VIEWS:
        raise InvalidInputError(f"view must be one of {ALTERNATIVE_VIEWS}, got {view!r}")

    filtered = list(alternatives)
    if view == "budget":
        filtered = [item for item in filtered if item.budget_pick or item.price_level == "budget"]
    elif view == "best":
        filtered = [item for item in filtered if item.score >= BEST_VIEW_MIN_SCORE]
        filtered.sort(key=lambda item: item.score, reverse=True)
    return filtered


class AlternativeRanker:
    """Ranks catalog alternatives that beat a product's score without leaving its category"""

    def __init__(self, catalog: Optional[Dict[str, Sequence[AlternativeCandidate]]] = None,
                 lenient_categories: bool = False):
        self.catalog = catalog if catalog is not None else CATEGORY_ALTERNATIVES
        self.lenient_categories = lenient_categories
        if FALLBACK_CATEGORY not in self.catalog:
            raise ValueError(f"alternative catalog must define a '{FALLBACK_CATEGORY}' bucket")

    def rank(self, category, original_score, view="all") -> AlternativeRanking:
        _require_score(original_score)

        resolved = match_category(category, self.lenient_categories)
        has_catalog = resolved is not None and resolved in self.catalog
        if not has_catalog:
            resolved = FALLBACK_CATEGORY
        bucket = self.catalog[resolved]

        ranked = []
        for index, candidate in enumerate(bucket):
            price_value = parse_price(candidate.price)
            ranked.append(RankedAlternative(
                id=index + 1,
                candidate=candidate,
                improvement=max(0, candidate.score - original_score),
                price_level=price_level_for(price_value),
                budget_pick=price_value is not None and price_value <= BUDGET_PICK_MAX_PRICE,
            ))

        # Ties are not improvements; sorted() is stable so equal improvements keep catalog order
        ranked = [item for item in ranked if item.score > original_score]
        ranked = sorted(ranked, key=lambda item: item.improvement, reverse=True)
        ranked = apply_view(ranked, view)

        log_debug(f"Alternatives for '{category}' -> {resolved} (score {original_score}): {len(ranked)} found")
        return AlternativeRanking(
            requested_category=category if isinstance(category, str) else None,
            category=resolved,
            has_catalog=has_catalog,
            original_score=original_score,
            alternatives=tuple(ranked),
        )

    def alternatives_for(self, category, original_score) -> List[RankedAlternative]:
        return list(self.rank(category, original_score).alternatives)


default_ranker = AlternativeRanker()


def rank_alternatives(category, original_score, view="all"):
    return default_ranker.rank(category, original_score, view)


def alternatives_for(category, original_score):
    return default_ranker.alternatives_for(category, original_score)
