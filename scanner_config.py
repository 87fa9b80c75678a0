# scanner_config.py - Alias lists, keyword flags and scoring policy for the ingredient scanner
import os
from dataclasses import dataclass

# Environment settings
SCANNER_DEBUG = os.getenv('SCANNER_DEBUG', '0') == '1'
MATCH_MODE = os.getenv('MATCH_MODE', 'substring').strip().lower()

MATCH_MODES = ('substring', 'token')

if MATCH_MODE not in MATCH_MODES:
    print(f"WARNING: Unknown MATCH_MODE '{MATCH_MODE}' - falling back to 'substring'")
    MATCH_MODE = 'substring'


def log_debug(message):
    """Print a DEBUG line when SCANNER_DEBUG=1"""
    if SCANNER_DEBUG:
        print(f"DEBUG: {message}")


# HIDDEN SUGARS - label names that are added sugar under another name
hidden_sugar_names = [
    "sucrose", "glucose", "fructose", "dextrose", "maltose", "lactose", "galactose", "trehalose",
    "high fructose corn syrup", "corn syrup", "corn syrup solids", "malt syrup", "maple syrup",
    "rice syrup", "brown rice syrup", "golden syrup", "agave syrup", "agave nectar", "carob syrup",
    "buttered syrup", "sorghum syrup", "refiner's syrup", "tapioca syrup", "oat syrup", "starch syrup",
    "brown sugar", "cane sugar", "raw sugar", "beet sugar", "coconut sugar", "coconut palm sugar",
    "date sugar", "grape sugar", "golden sugar", "yellow sugar", "castor sugar", "confectioner's sugar",
    "powdered sugar", "icing sugar", "turbinado sugar", "demerara sugar", "muscovado sugar",
    "panela sugar", "sucanat", "granulated sugar", "table sugar", "florida crystals", "cane juice crystals",
    "organic raw sugar", "fruit juice", "fruit juice concentrate", "evaporated cane juice",
    "concentrated fruit juice", "barley malt", "barley malt extract", "malt extract", "maltodextrin",
    "diastatic malt", "ethyl maltol", "malted barley", "honey", "molasses", "blackstrap molasses",
    "treacle", "invert sugar", "crystalline fructose", "dextrin", "caramel", "panocha",
    "glucose syrup solids", "mannose", "sweet sorghum"
]

# MSG - 🔴 always contains free glutamate
msg_always_names = [
    "monosodium glutamate", "glutamic acid", "glutamate", "monopotassium glutamate",
    "calcium glutamate", "monoammonium glutamate", "magnesium glutamate", "natrium glutamate",
    "yeast extract", "torula yeast", "autolyzed yeast", "brewer's yeast", "nutritional yeast",
    "yeast food", "yeast nutrient", "hydrolyzed protein", "hydrolyzed soy protein",
    "hydrolyzed wheat protein", "hydrolyzed pea protein", "hydrolyzed whey protein",
    "hydrolyzed corn protein", "hydrolyzed vegetable protein", "calcium caseinate",
    "sodium caseinate", "gelatin", "textured protein", "soy protein", "soy protein concentrate",
    "soy protein isolate", "whey protein", "whey protein concentrate", "whey protein isolate",
    "soy sauce", "soy sauce extract", "protease", "vetsin", "ajinomoto"
]

# MSG - 🟡 often contains or creates free glutamate during processing
msg_often_names = [
    "carrageenan", "bouillon", "broth", "stock", "flavors", "flavoring",
    "natural flavor", "natural flavoring", "maltodextrin", "oligodextrin", "citric acid",
    "barley malt", "malted barley", "pectin", "malt extract", "seasonings"
]

# Informational only - boost MSG effect, not used by scoring
msg_synergistic_indicators = [
    "disodium 5'-guanylate (E627)",
    "disodium 5'-inosinate (E631)",
    "disodium 5'-ribonucleotides (E635)"
]

# KEYWORD FLAGS for ingredients missing from the reference database
red_flag_keywords = ["artificial", "synthetic", "hydrogenated", "modified"]
yellow_flag_keywords = ["flavor", "color", "dye", "preservative"]
green_flag_keywords = ["organic", "natural", "vitamin", "mineral", "water", "salt", "spice"]

CONCERN_LEVELS = ("none", "low", "moderate", "high")

# PRODUCT CATEGORIES - fixed vocabulary shared with the upstream category anchor
PRODUCT_CATEGORIES = [
    "Beverage",
    "Dairy",
    "Snack",
    "Meat",
    "Grain",
    "Condiment",
    "Supplement",
    "Baby Food",
    "Frozen",
    "Bakery",
    "Candy",
    "Other",
]

FALLBACK_CATEGORY = "Other"

# Legacy productType values sent by older extraction payloads
LEGACY_PRODUCT_TYPES = {
    "food": "Other",
    "drink": "Beverage",
    "snack": "Snack",
    "supplement": "Supplement",
    "condiment": "Condiment",
    "other": "Other",
}


@dataclass(frozen=True)
class AliasLists:
    """Static name lists consulted by the unknown-ingredient classifier"""
    hidden_sugars: tuple
    msg_always: tuple
    msg_often: tuple
    msg_synergistic: tuple = ()


DEFAULT_ALIAS_LISTS = AliasLists(
    hidden_sugars=tuple(hidden_sugar_names),
    msg_always=tuple(msg_always_names),
    msg_often=tuple(msg_often_names),
    msg_synergistic=tuple(msg_synergistic_indicators),
)


@dataclass(frozen=True)
class ScoringPolicy:
    """Knobs for the overall product score. Heuristic weights, not a fitted model."""
    empty_product_score: int = 50
    score_floor: int = 5
    high_concern_penalty: int = 8
    bulk_concern_threshold: int = 5
    bulk_concern_penalty: int = 10

    # Rating thresholds (score >= threshold)
    excellent_threshold: int = 80
    good_threshold: int = 60
    fair_threshold: int = 40
    poor_threshold: int = 20


DEFAULT_SCORING_POLICY = ScoringPolicy()

# PROFILE ALERTS - alert flag -> (profile label, message suffix)
PROFILE_ALERTS = [
    ("kid", "Kids", "caution advised for children"),
    ("heart_health", "Heart Health", "monitor for heart health"),
    ("diabetic", "Diabetic", "watch glycemic impact"),
]

# ALTERNATIVE PRICE LEVELS
HIGH_PRICE_THRESHOLD = 7
MODERATE_PRICE_THRESHOLD = 4
BUDGET_PICK_MAX_PRICE = 4
BEST_VIEW_MIN_SCORE = 70

# SCORING HIERARCHY:
# 1. Each ingredient resolves to a reference record (name, then exact, then partial, then hidden name)
# 2. Unmatched ingredients get a keyword-based provisional score
# 3. Overall = rounded average, minus 8 per high-concern ingredient (floor 5)
# 4. More than 5 sugar/preservative/artificial hits = extra 10 off (floor 5)
# 5. Profile alerts (kids, heart, diabetic) fire once per product
