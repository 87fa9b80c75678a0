import re
from collections import namedtuple
from collections.abc import Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import List, Mapping, Optional, Tuple

from alternatives import normalize_category
from ingredient_database import IngredientRecord, ReferenceDatabase, get_reference_database
from scanner_config import (
    DEFAULT_ALIAS_LISTS,
    DEFAULT_SCORING_POLICY,
    MATCH_MODE,
    MATCH_MODES,
    PROFILE_ALERTS,
    SCANNER_DEBUG,
    AliasLists,
    ScoringPolicy,
    green_flag_keywords,
    log_debug,
    red_flag_keywords,
    yellow_flag_keywords,
)
from scanner_errors import InvalidInputError

CONCERN_BUCKETS = ("sugar", "preservatives", "artificial")


def normalize_ingredient_text(text):
    """Lowercase, keep only [a-z0-9] and whitespace, collapse spaces, trim"""
    text = text.lower()
    text = re.sub(r'[^a-z0-9\s]', '', text)
    text = re.sub(r'\s+', ' ', text)
    return text.strip()


def round_half_up(value):
    """Round .5 away from zero for positive averages (Python's round() is banker's rounding)"""
    return int(value + 0.5)


def _require_text(value, what="ingredient name"):
    if not isinstance(value, str):
        raise InvalidInputError(f"{what} must be a string, got {type(value).__name__}")


def is_hidden_sugar(name, alias_lists=DEFAULT_ALIAS_LISTS):
    lower = name.lower()
    return any(sugar.lower() in lower for sugar in alias_lists.hidden_sugars)


MsgCheck = namedtuple('MsgCheck', ['contains_msg', 'certainty'])


def check_for_msg(name, alias_lists=DEFAULT_ALIAS_LISTS):
    """Check a label name against the MSG alias tiers. certainty is 'high', 'moderate' or None."""
    lower = name.lower()

    if any(alias.lower() in lower for alias in alias_lists.msg_always):
        return MsgCheck(True, 'high')

    if any(alias.lower() in lower for alias in alias_lists.msg_often):
        return MsgCheck(True, 'moderate')

    return MsgCheck(False, None)


@dataclass(frozen=True)
class UnknownAssessment:
    score: int
    concern: str
    category: str
    note: Optional[str] = None


def classify_unknown_ingredient(name, alias_lists=DEFAULT_ALIAS_LISTS):
    """Provisional score for an ingredient missing from the reference database.

    Assumes an unknown ingredient is moderately safe unless a negative signal fires.
    The first matching rule wins: hidden sugar, MSG, red flag, yellow flag, green flag, default.
    """
    _require_text(name)
    lower = name.lower()

    if is_hidden_sugar(name, alias_lists):
        return UnknownAssessment(30, 'moderate', 'Hidden Sugar', 'This is a form of added sugar')

    msg_check = check_for_msg(name, alias_lists)
    if msg_check.contains_msg:
        score = 50 if msg_check.certainty == 'high' else 60
        return UnknownAssessment(score, 'moderate', 'Flavor Enhancer',
                                 f"May contain MSG ({msg_check.certainty} certainty)")

    if any(flag in lower for flag in red_flag_keywords):
        return UnknownAssessment(40, 'moderate', 'Processed Additive')

    if any(flag in lower for flag in yellow_flag_keywords):
        return UnknownAssessment(50, 'moderate', 'Additive')

    if any(flag in lower for flag in green_flag_keywords):
        return UnknownAssessment(80, 'low', 'Natural Ingredient')

    return UnknownAssessment(70, 'low', 'Ingredient')


@dataclass(frozen=True)
class ParsedIngredient:
    id: str
    name: str
    score: int
    concern: str
    category: str
    found_in_database: bool
    note: Optional[str] = None
    plain_english: Optional[str] = None

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "score": self.score,
            "concern": self.concern,
            "category": self.category,
            "found_in_database": self.found_in_database,
            "note": self.note,
            "plain_english": self.plain_english,
        }


@dataclass(frozen=True)
class ConcernTally:
    count: int = 0
    names: Tuple[str, ...] = ()

    def to_dict(self):
        return {"count": self.count, "names": list(self.names)}


@dataclass(frozen=True)
class ProfileAlert:
    profile: str
    message: str

    def to_dict(self):
        return {"profile": self.profile, "message": self.message}


@dataclass(frozen=True)
class ProductResult:
    product_name: str
    brand: str
    product_category: str
    raw_text: str
    overall_score: int
    rating: str
    ingredients: Tuple[ParsedIngredient, ...]
    concerns: Mapping[str, ConcernTally] = field(default_factory=lambda: MappingProxyType({}))
    profile_alerts: Tuple[ProfileAlert, ...] = ()

    @property
    def total_concerns(self):
        return sum(tally.count for tally in self.concerns.values())

    def to_dict(self):
        return {
            "product_name": self.product_name,
            "brand": self.brand,
            "product_category": self.product_category,
            "raw_text": self.raw_text,
            "overall_score": self.overall_score,
            "rating": self.rating,
            "ingredients": [ingredient.to_dict() for ingredient in self.ingredients],
            "concerns": {bucket: self.concerns[bucket].to_dict() for bucket in CONCERN_BUCKETS},
            "profile_alerts": [alert.to_dict() for alert in self.profile_alerts],
        }


def rating_for_score(score, policy=DEFAULT_SCORING_POLICY):
    if score >= policy.excellent_threshold:
        return "excellent"
    elif score >= policy.good_threshold:
        return "good"
    elif score >= policy.fair_threshold:
        return "fair"
    elif score >= policy.poor_threshold:
        return "poor"
    return "bad"


_IndexEntry = namedtuple('_IndexEntry', ['record', 'name', 'hidden_names'])


class IngredientScanner:
    """Matches raw label names against a reference database and scores whole products.

    Everything the scanner reads is passed in, so tests can swap in a fake database.
    Instances hold no mutable state and can be shared across threads.
    """

    def __init__(self, database: Optional[ReferenceDatabase] = None,
                 alias_lists: Optional[AliasLists] = None,
                 policy: Optional[ScoringPolicy] = None,
                 match_mode: Optional[str] = None):
        self.database = database if database is not None else get_reference_database()
        self.alias_lists = alias_lists or DEFAULT_ALIAS_LISTS
        self.policy = policy or DEFAULT_SCORING_POLICY
        self.match_mode = match_mode or MATCH_MODE
        if self.match_mode not in MATCH_MODES:
            raise ValueError(f"match_mode must be one of {MATCH_MODES}, got {self.match_mode!r}")

        # Names that normalize to "" would be contained in everything
        self._index = []
        for record in self.database:
            hidden = tuple(
                normalized for normalized in (normalize_ingredient_text(n) for n in record.hidden_names)
                if normalized
            )
            self._index.append(_IndexEntry(record, normalize_ingredient_text(record.name), hidden))

    def _contains(self, haystack, needle):
        if not haystack or not needle:
            return False
        if self.match_mode == 'token':
            return f" {needle} " in f" {haystack} "
        return needle in haystack

    def match(self, raw_name) -> Optional[IngredientRecord]:
        """Resolve a raw name to a reference record, or None.

        Passes, first hit wins, each over the whole database in table order:
        1. record name contains the raw name
        2. exact normalized equality
        3. raw name and record name contain one another (either way)
        4. raw name and a hidden name contain one another (either way)
        Substring matching is deliberately simple: "Salt" resolves through the
        "Curing salt" alias to sodium nitrite.
        """
        _require_text(raw_name)
        normalized = normalize_ingredient_text(raw_name)
        if not normalized:
            log_debug(f"'{raw_name}' normalizes to nothing - no match")
            return None

        for entry in self._index:
            if self._contains(entry.name, normalized):
                log_debug(f"NAME MATCH: '{raw_name}' -> {entry.record.id}")
                return entry.record

        for entry in self._index:
            if entry.name == normalized:
                log_debug(f"EXACT MATCH: '{raw_name}' -> {entry.record.id}")
                return entry.record

        for entry in self._index:
            if self._contains(normalized, entry.name) or self._contains(entry.name, normalized):
                log_debug(f"PARTIAL MATCH: '{raw_name}' -> {entry.record.id}")
                return entry.record

        for entry in self._index:
            for hidden in entry.hidden_names:
                if self._contains(normalized, hidden) or self._contains(hidden, normalized):
                    log_debug(f"HIDDEN NAME MATCH: '{raw_name}' -> {entry.record.id} via '{hidden}'")
                    return entry.record

        log_debug(f"NO MATCH: '{raw_name}'")
        return None

    def classify_unknown(self, raw_name) -> UnknownAssessment:
        return classify_unknown_ingredient(raw_name, self.alias_lists)

    def is_hidden_sugar(self, raw_name) -> bool:
        return is_hidden_sugar(raw_name, self.alias_lists)

    def _parse_ingredient(self, raw_name):
        record = self.match(raw_name)
        if record is not None:
            return record, ParsedIngredient(
                id=record.id,
                name=record.name,
                score=record.score,
                concern=record.concern,
                category=record.category,
                found_in_database=True,
                plain_english=record.plain_english,
            )

        assessment = self.classify_unknown(raw_name)
        unknown_id = normalize_ingredient_text(raw_name).replace(' ', '-') or 'unknown'
        return None, ParsedIngredient(
            id=unknown_id,
            name=raw_name,
            score=assessment.score,
            concern=assessment.concern,
            category=assessment.category,
            found_in_database=False,
            note=assessment.note,
        )

    def lookup_ingredient(self, raw_name) -> ParsedIngredient:
        """Single-ingredient lookup: the matched record, or the unknown-ingredient assessment"""
        return self._parse_ingredient(raw_name)[1]

    def score_product(self, product_name=None, brand=None, raw_ingredients=(),
                      raw_text=None, category=None) -> ProductResult:
        """Score one scanned product from its already-segmented ingredient names"""
        if isinstance(raw_ingredients, (str, bytes)) or not isinstance(raw_ingredients, Sequence):
            raise InvalidInputError(
                f"ingredients must be a list of strings, got {type(raw_ingredients).__name__}"
            )
        for index, raw_name in enumerate(raw_ingredients):
            _require_text(raw_name, f"ingredient #{index + 1}")
        for value, what in ((product_name, "product name"), (brand, "brand"), (raw_text, "raw text")):
            if value is not None:
                _require_text(value, what)

        parsed_ingredients: List[ParsedIngredient] = []
        concern_names = {bucket: [] for bucket in CONCERN_BUCKETS}
        profile_alerts: List[ProfileAlert] = []
        alerted_profiles = set()
        total_score = 0
        high_concern_count = 0

        for raw_name in raw_ingredients:
            record, parsed = self._parse_ingredient(raw_name)

            if record is not None:
                record_category = record.category.lower()
                if 'sweetener' in record_category or self.is_hidden_sugar(raw_name):
                    concern_names["sugar"].append(record.name)
                if 'preservative' in record_category:
                    concern_names["preservatives"].append(record.name)
                if 'artificial' in record_category or 'color' in record_category:
                    concern_names["artificial"].append(record.name)

                for flag, profile, message in PROFILE_ALERTS:
                    if record.alert_flags.is_set(flag) and profile not in alerted_profiles:
                        alerted_profiles.add(profile)
                        profile_alerts.append(ProfileAlert(profile, f"Contains {record.name} - {message}"))

            elif parsed.category == 'Hidden Sugar':
                # Unknown ingredients only ever count toward sugar
                concern_names["sugar"].append(raw_name)

            parsed_ingredients.append(parsed)
            total_score += parsed.score
            if parsed.concern == 'high':
                high_concern_count += 1

        policy = self.policy
        if parsed_ingredients:
            overall_score = round_half_up(total_score / len(parsed_ingredients))
        else:
            overall_score = policy.empty_product_score

        overall_score = max(policy.score_floor, overall_score - high_concern_count * policy.high_concern_penalty)

        total_concerns = sum(len(names) for names in concern_names.values())
        if total_concerns > policy.bulk_concern_threshold:
            overall_score = max(policy.score_floor, overall_score - policy.bulk_concern_penalty)

        result = ProductResult(
            product_name=product_name or 'Scanned Product',
            brand=brand or 'Unknown Brand',
            product_category=normalize_category(category),
            raw_text=raw_text or ', '.join(raw_ingredients),
            overall_score=overall_score,
            rating=rating_for_score(overall_score, policy),
            ingredients=tuple(parsed_ingredients),
            concerns=MappingProxyType({
                bucket: ConcernTally(len(names), tuple(names)) for bucket, names in concern_names.items()
            }),
            profile_alerts=tuple(profile_alerts),
        )

        if SCANNER_DEBUG:
            print_scan_summary(result, high_concern_count)

        return result


def print_scan_summary(result, high_concern_count=None):
    """Print comprehensive scan summary"""
    print(f"\n{'🎯 SCAN SUMMARY':=^80}")
    print(f"🏆 OVERALL SCORE: {result.overall_score} ({result.rating})")
    print(f"📦 Product: {result.product_name} / {result.brand} [{result.product_category}]")
    if high_concern_count is not None:
        print(f"🚨 High concern ingredients: {high_concern_count}")

    print(f"\n🧬 INGREDIENTS:")
    for ingredient in result.ingredients:
        source = "db" if ingredient.found_in_database else "heuristic"
        print(f"  {ingredient.name}: {ingredient.score} / {ingredient.concern} ({ingredient.category}, {source})")

    for bucket in CONCERN_BUCKETS:
        tally = result.concerns[bucket]
        if tally.count:
            print(f"  ⚠️ {bucket.title()}: {list(tally.names)}")
        else:
            print(f"  ❌ {bucket.title()}: None detected")

    for alert in result.profile_alerts:
        print(f"  📣 {alert.profile}: {alert.message}")
    print(f"{'='*80}\n")


# Module-level scanner over the built-in reference database
default_scanner = IngredientScanner()


def find_ingredient_match(raw_name):
    return default_scanner.match(raw_name)


def lookup_ingredient(raw_name):
    return default_scanner.lookup_ingredient(raw_name)


def score_product(product_name=None, brand=None, raw_ingredients=(), raw_text=None, category=None):
    return default_scanner.score_product(product_name, brand, raw_ingredients, raw_text, category)
