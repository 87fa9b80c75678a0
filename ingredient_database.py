# ingredient_database.py - Reference database of known food additives and ingredients
#
# Safety data compiled from FDA (21 CFR, GRAS determinations), EFSA and JECFA opinions,
# IARC monographs, CSPI and EWG ratings.
#
# Table order matters: the matcher breaks ties by the first record in
# preservatives -> sweeteners -> colors -> emulsifiers/thickeners -> other additives -> safe ingredients.
from dataclasses import dataclass
from typing import Dict, Iterable, List, Literal, Mapping, Optional, Tuple

from pydantic import BaseModel, Field, StrictBool, StrictInt, StrictStr, ValidationError, field_validator

from scanner_config import log_debug
from scanner_errors import ReferenceDataError

DATABASE_VERSION = "2025.02"

# =============================================================================
# PRESERVATIVES
# =============================================================================
preservatives = {
    "sodium-nitrite": {
        "id": "sodium-nitrite",
        "name": "Sodium Nitrite",
        "e_number": "E250",
        "category": "Preservative",
        "score": 25,
        "concern": "high",
        "plain_english": "A preservative used to cure meats, giving them their pink color and preventing bacterial growth. It can form cancer-causing compounds (nitrosamines) when cooked at high heat or combined with proteins.",
        "hidden_names": [
            "Curing salt",
            "Prague Powder #1",
            "Pink curing salt",
            "Nitrite pickling salt",
            "Celery powder",
            "Celery juice",
            "Celery extract",
        ],
        "kid_alert": True,
        "heart_health_alert": True,
        "diabetic_alert": False,
    },
    "sodium-benzoate": {
        "id": "sodium-benzoate",
        "name": "Sodium Benzoate",
        "e_number": "E211",
        "category": "Preservative",
        "score": 45,
        "concern": "moderate",
        "plain_english": "A preservative that prevents mold and bacteria growth in acidic foods. Generally safe alone, but can form benzene (a carcinogen) when combined with vitamin C, especially when heated or exposed to light.",
        "hidden_names": [
            "Benzoate of soda",
            "Sodium salt of benzoic acid",
            "Benzoic acid (E210)",
            "Potassium benzoate (E212)",
            "Calcium benzoate (E213)",
        ],
        "kid_alert": True,
        "heart_health_alert": False,
        "diabetic_alert": False,
    },
    "bha": {
        "id": "bha",
        "name": "BHA (Butylated Hydroxyanisole)",
        "e_number": "E320",
        "category": "Preservative/Antioxidant",
        "score": 30,
        "concern": "high",
        "plain_english": "A synthetic antioxidant that prevents fats and oils from going rancid. It's been found to cause cancer in lab animals and is listed as \"reasonably anticipated to be a human carcinogen\" by the US National Toxicology Program.",
        "hidden_names": [
            "Butylated hydroxyanisole",
            "tert-butyl-4-hydroxyanisole",
            "Antioxidant BHA",
            "E320",
        ],
        "kid_alert": True,
        "heart_health_alert": False,
        "diabetic_alert": False,
    },
    "bht": {
        "id": "bht",
        "name": "BHT (Butylated Hydroxytoluene)",
        "e_number": "E321",
        "category": "Preservative/Antioxidant",
        "score": 40,
        "concern": "moderate",
        "plain_english": "A synthetic antioxidant similar to BHA, used to keep fats from going rancid. Less concerning than BHA, but major food companies like General Mills have voluntarily removed it from products due to consumer concerns.",
        "hidden_names": [
            "Butylated hydroxytoluene",
            "2,6-di-tert-butyl-4-methylphenol",
            "DBPC",
            "E321",
        ],
        "kid_alert": True,
        "heart_health_alert": False,
        "diabetic_alert": False,
    },
    "potassium-bromate": {
        "id": "potassium-bromate",
        "name": "Potassium Bromate",
        "e_number": "E924",
        "category": "Flour Improver",
        "score": 10,
        "concern": "high",
        "plain_english": "A flour improver that makes bread rise higher and gives it a better texture. It's been found to cause cancer in animals and is banned in most countries worldwide, but remains legal in the US.",
        "hidden_names": [
            "Bromate",
            "Bromated flour",
            "KBrO3",
        ],
        "kid_alert": True,
        "heart_health_alert": False,
        "diabetic_alert": False,
    },
    "calcium-propionate": {
        "id": "calcium-propionate",
        "name": "Calcium Propionate",
        "e_number": "E282",
        "category": "Preservative",
        "score": 85,
        "concern": "low",
        "plain_english": "A mold inhibitor commonly used in bread and baked goods. It's the calcium salt of propionic acid, which is naturally produced in your body during metabolism. Considered very safe.",
        "hidden_names": [
            "Calcium propanoate",
            "E282",
        ],
        "kid_alert": False,
        "heart_health_alert": False,
        "diabetic_alert": False,
    },
}

# =============================================================================
# SWEETENERS
# =============================================================================
sweeteners = {
    "aspartame": {
        "id": "aspartame",
        "name": "Aspartame",
        "e_number": "E951",
        "category": "Artificial Sweetener",
        "score": 35,
        "concern": "high",
        "plain_english": "An artificial sweetener about 200 times sweeter than sugar. In July 2023, WHO's cancer research agency classified it as \"possibly carcinogenic to humans\" based on limited evidence linking it to liver cancer.",
        "hidden_names": [
            "NutraSweet",
            "Equal",
            "Canderel",
            "AminoSweet",
            "L-aspartyl-L-phenylalanine methyl ester",
            "E951",
        ],
        "kid_alert": True,
        "heart_health_alert": False,
        "diabetic_alert": True,
        "pku_alert": True,
    },
    "sucralose": {
        "id": "sucralose",
        "name": "Sucralose",
        "e_number": "E955",
        "category": "Artificial Sweetener",
        "score": 40,
        "concern": "moderate",
        "plain_english": "An artificial sweetener about 600 times sweeter than sugar, made by chemically modifying sugar molecules with chlorine. Recent research suggests it may harm gut bacteria and affect blood sugar regulation.",
        "hidden_names": [
            "Splenda",
            "Sukrana",
            "SucraPlus",
            "Candys",
            "Nevella",
            "E955",
        ],
        "kid_alert": True,
        "heart_health_alert": False,
        "diabetic_alert": True,
    },
    "high-fructose-corn-syrup": {
        "id": "high-fructose-corn-syrup",
        "name": "High Fructose Corn Syrup",
        "e_number": None,
        "category": "Sweetener",
        "score": 30,
        "concern": "high",
        "plain_english": "A liquid sweetener made from corn starch, with a similar fructose-glucose ratio to table sugar. It's not chemically very different from sugar, but its cheapness has led to massive overuse in processed foods, contributing to obesity and metabolic disease.",
        "hidden_names": [
            "Isoglucose",
            "Glucose-fructose syrup",
            "Fructose-glucose syrup",
            "Corn sugar (rejected by FDA)",
            "Maize syrup",
            "HFCS-42",
            "HFCS-55",
            "HFCS-90",
        ],
        "kid_alert": True,
        "heart_health_alert": True,
        "diabetic_alert": True,
    },
}

# =============================================================================
# COLORS
# =============================================================================
colors = {
    "red-40": {
        "id": "red-40",
        "name": "Red 40 (Allura Red AC)",
        "e_number": "E129",
        "category": "Artificial Color",
        "score": 35,
        "concern": "high",
        "plain_english": "The most widely used artificial food dye in the US. Derived from petroleum. The EU requires warning labels stating it \"may have an adverse effect on activity and attention in children.\"",
        "hidden_names": [
            "Allura Red AC",
            "CI 16035",
            "Red 40 Lake",
            "FD&C Red No. 40",
            "INS 129",
            "E129",
        ],
        "kid_alert": True,
        "heart_health_alert": False,
        "diabetic_alert": False,
    },
    "yellow-5": {
        "id": "yellow-5",
        "name": "Yellow 5 (Tartrazine)",
        "e_number": "E102",
        "category": "Artificial Color",
        "score": 35,
        "concern": "high",
        "plain_english": "A bright yellow dye derived from petroleum. One of the \"Southampton Six\" dyes linked to hyperactivity in children. Can cause allergic reactions, especially in people sensitive to aspirin.",
        "hidden_names": [
            "Tartrazine",
            "CI 19140",
            "Acid Yellow 23",
            "FD&C Yellow No. 5",
            "INS 102",
            "E102",
        ],
        "kid_alert": True,
        "heart_health_alert": False,
        "diabetic_alert": False,
    },
    "yellow-6": {
        "id": "yellow-6",
        "name": "Yellow 6 (Sunset Yellow)",
        "e_number": "E110",
        "category": "Artificial Color",
        "score": 35,
        "concern": "high",
        "plain_english": "An orange-yellow dye derived from petroleum. Part of the \"Southampton Six\" linked to hyperactivity in children. EFSA temporarily lowered its safe limit due to concerns about reproductive toxicity.",
        "hidden_names": [
            "Sunset Yellow FCF",
            "CI 15985",
            "Orange Yellow S",
            "FD&C Yellow No. 6",
            "INS 110",
            "E110",
        ],
        "kid_alert": True,
        "heart_health_alert": False,
        "diabetic_alert": False,
    },
    "red-3": {
        "id": "red-3",
        "name": "Red 3 (Erythrosine)",
        "e_number": "E127",
        "category": "Artificial Color",
        "score": 15,
        "concern": "high",
        "plain_english": "A cherry-red dye that was just BANNED by the FDA in January 2025. It was linked to thyroid tumors in rats and was already banned in cosmetics since 1990. Food companies have until 2027 to remove it.",
        "hidden_names": [
            "Erythrosine B",
            "CI 45430",
            "Acid Red 51",
            "FD&C Red No. 3",
            "INS 127",
            "E127",
        ],
        "kid_alert": True,
        "heart_health_alert": False,
        "diabetic_alert": False,
    },
    "caramel-color": {
        "id": "caramel-color",
        "name": "Caramel Color (Class III/IV)",
        "e_number": "E150c/E150d",
        "category": "Color",
        "score": 50,
        "concern": "moderate",
        "plain_english": "The most widely used food coloring in the world, giving brown color to colas and many other products. Classes III and IV contain 4-MEI, a chemical classified as \"possibly carcinogenic\" that forms during production.",
        "hidden_names": [
            "Caramel color",
            "E150a (Class I - Plain, safer)",
            "E150b (Class II - Caustic sulfite)",
            "E150c (Class III - Ammonia, contains 4-MEI)",
            "E150d (Class IV - Sulfite ammonia, contains 4-MEI)",
        ],
        "kid_alert": True,
        "heart_health_alert": False,
        "diabetic_alert": False,
    },
}

# =============================================================================
# EMULSIFIERS & THICKENERS
# =============================================================================
emulsifiers_thickeners = {
    "carrageenan": {
        "id": "carrageenan",
        "name": "Carrageenan",
        "e_number": "E407",
        "category": "Thickener/Stabilizer",
        "score": 55,
        "concern": "moderate",
        "plain_english": "A seaweed extract used to thicken and stabilize foods, especially dairy alternatives and ice cream. There's ongoing debate about whether it causes gut inflammation, and it was removed from the approved organic foods list.",
        "hidden_names": [
            "Irish moss extract",
            "Chondrus crispus extract",
            "E407a (processed Eucheuma seaweed)",
            "PES",
            "E407",
        ],
        "kid_alert": True,
        "heart_health_alert": False,
        "diabetic_alert": False,
    },
    "xanthan-gum": {
        "id": "xanthan-gum",
        "name": "Xanthan Gum",
        "e_number": "E415",
        "category": "Thickener/Stabilizer",
        "score": 90,
        "concern": "low",
        "plain_english": "A natural thickener produced by bacterial fermentation. It's considered one of the safest food additives available and is widely used in gluten-free baking as a binder.",
        "hidden_names": [
            "Corn sugar gum",
            "Polysaccharide gum",
            "E415",
        ],
        "kid_alert": False,
        "heart_health_alert": False,
        "diabetic_alert": False,
    },
    "mono-diglycerides": {
        "id": "mono-diglycerides",
        "name": "Mono- and Diglycerides",
        "e_number": "E471",
        "category": "Emulsifier",
        "score": 40,
        "concern": "moderate",
        "plain_english": "Common emulsifiers that help ingredients blend together. THE MAJOR TRANS FAT LOOPHOLE: Because they're classified as emulsifiers, not fats, they're exempt from trans fat labeling - even though they can contain up to 60% trans fat.",
        "hidden_names": [
            "Glyceryl monostearate (GMS)",
            "Glyceryl monopalmitate",
            "Distilled monoglycerides",
            "Acetylated monoglycerides",
            "DATEM (E472e)",
            "E471",
        ],
        "kid_alert": False,
        "heart_health_alert": True,
        "diabetic_alert": False,
    },
}

# =============================================================================
# OTHER ADDITIVES
# =============================================================================
other_additives = {
    "msg": {
        "id": "msg",
        "name": "MSG (Monosodium Glutamate)",
        "e_number": "E621",
        "category": "Flavor Enhancer",
        "score": 70,
        "concern": "low",
        "plain_english": "A flavor enhancer that adds \"umami\" or savory taste. Despite its bad reputation, large-scale scientific studies have consistently failed to confirm \"MSG sensitivity\" in the general population. Your body naturally produces ~50g of glutamate per day.",
        "hidden_names": [
            "Glutamic acid (E620)",
            "Monopotassium glutamate (E622)",
            "Yeast extract",
            "Autolyzed yeast",
            "Hydrolyzed protein",
            "Natural flavors (may contain)",
        ],
        "kid_alert": False,
        "heart_health_alert": False,
        "diabetic_alert": False,
    },
    "maltodextrin": {
        "id": "maltodextrin",
        "name": "Maltodextrin",
        "e_number": None,
        "category": "Filler/Thickener",
        "score": 50,
        "concern": "moderate",
        "plain_english": "A highly processed carbohydrate made from starch, used as a filler and thickener. Its main concern is an extremely high glycemic index (85-136) - even higher than table sugar (65) - which can spike blood sugar rapidly.",
        "hidden_names": [
            "Modified cornstarch",
            "Modified food starch",
            "Glucose polymer",
            "Dextrin",
            "Corn starch solids",
        ],
        "kid_alert": False,
        "heart_health_alert": False,
        "diabetic_alert": True,
    },
    "partially-hydrogenated-oils": {
        "id": "partially-hydrogenated-oils",
        "name": "Partially Hydrogenated Oils (PHOs)",
        "e_number": None,
        "category": "Fat/Oil",
        "score": 5,
        "concern": "high",
        "plain_english": "Artificial trans fats created by adding hydrogen to vegetable oils. BANNED BY FDA since 2018 because they're considered unsafe at ANY level - they simultaneously raise bad cholesterol AND lower good cholesterol. WHO estimates they cause 500,000+ deaths annually worldwide.",
        "hidden_names": [
            "Partially hydrogenated vegetable oil",
            "Partially hydrogenated soybean oil",
            "Partially hydrogenated cottonseed oil",
            "Partially hydrogenated canola oil",
            "Shortening (when made from PHOs)",
            "Hard margarine",
        ],
        "kid_alert": True,
        "heart_health_alert": True,
        "diabetic_alert": True,
    },
}

# =============================================================================
# SAFE INGREDIENTS
# =============================================================================
safe_ingredients = {
    "citric-acid": {
        "id": "citric-acid",
        "name": "Citric Acid",
        "e_number": "E330",
        "category": "Acidulant/Preservative",
        "score": 90,
        "concern": "low",
        "plain_english": "A natural acid found in citrus fruits, used to add tartness and as a preservative. Commercially produced by fungal fermentation. Generally recognized as safe with no established upper limit.",
        "kid_alert": False,
        "heart_health_alert": False,
        "diabetic_alert": False,
    },
    "ascorbic-acid": {
        "id": "ascorbic-acid",
        "name": "Ascorbic Acid (Vitamin C)",
        "e_number": "E300",
        "category": "Antioxidant/Vitamin",
        "score": 95,
        "concern": "low",
        "plain_english": "Vitamin C, used as an antioxidant to prevent browning and preserve freshness. An essential nutrient that also provides health benefits beyond preservation.",
        "kid_alert": False,
        "heart_health_alert": False,
        "diabetic_alert": False,
    },
    "tocopherols": {
        "id": "tocopherols",
        "name": "Tocopherols (Vitamin E)",
        "e_number": "E306-E309",
        "category": "Antioxidant/Vitamin",
        "score": 92,
        "concern": "low",
        "plain_english": "Vitamin E compounds used as natural antioxidants to prevent fats from going rancid. A healthy alternative to synthetic antioxidants like BHA and BHT.",
        "kid_alert": False,
        "heart_health_alert": False,
        "diabetic_alert": False,
    },
    "stevia": {
        "id": "stevia",
        "name": "Stevia (Steviol Glycosides)",
        "e_number": "E960",
        "category": "Natural Sweetener",
        "score": 80,
        "concern": "low",
        "plain_english": "A zero-calorie sweetener extracted from the stevia plant, about 200-300 times sweeter than sugar. Generally considered safer than artificial sweeteners, though WHO advises against using any non-sugar sweeteners for weight control.",
        "kid_alert": False,
        "heart_health_alert": False,
        "diabetic_alert": False,
    },
    "pectin": {
        "id": "pectin",
        "name": "Pectin",
        "e_number": "E440",
        "category": "Gelling Agent",
        "score": 95,
        "concern": "low",
        "plain_english": "A natural fiber found in fruits, used as a gelling agent in jams and jellies. It's essentially a soluble fiber that may even have health benefits like lowering cholesterol.",
        "kid_alert": False,
        "heart_health_alert": False,
        "diabetic_alert": False,
    },
}

# Combined in tie-break order
REFERENCE_TABLES = [
    preservatives,
    sweeteners,
    colors,
    emulsifiers_thickeners,
    other_additives,
    safe_ingredients,
]

REQUIRED_FIELDS = ("id", "name", "score", "concern", "category")

# raw table key -> AlertFlags field
ALERT_FIELDS = {
    "kid_alert": "kid",
    "heart_health_alert": "heart_health",
    "diabetic_alert": "diabetic",
    "pku_alert": "pku",
}
ALERT_FLAGS = tuple(ALERT_FIELDS.values())

Concern = Literal["none", "low", "moderate", "high"]


class AlertFlags(BaseModel):
    """Per-profile warnings. Validated from the raw *_alert table keys."""
    kid: StrictBool = Field(False, alias="kid_alert")
    heart_health: StrictBool = Field(False, alias="heart_health_alert")
    diabetic: StrictBool = Field(False, alias="diabetic_alert")
    pku: StrictBool = Field(False, alias="pku_alert")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
    }

    def is_set(self, flag: str) -> bool:
        return flag in ALERT_FLAGS and getattr(self, flag)

    def to_dict(self) -> dict:
        return self.model_dump()


class IngredientRecord(BaseModel):
    """One known ingredient. Concern is authoritative and never re-derived from score."""
    id: StrictStr
    name: StrictStr
    score: StrictInt = Field(..., ge=0, le=100)
    concern: Concern
    category: StrictStr
    hidden_names: Tuple[StrictStr, ...] = ()
    alert_flags: AlertFlags = Field(default_factory=AlertFlags)
    e_number: Optional[StrictStr] = None
    plain_english: Optional[StrictStr] = None

    model_config = {
        "frozen": True,
        "extra": "forbid",
    }

    @field_validator("id", "name", "category")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must be a non-empty string")
        return value

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")


@dataclass(frozen=True)
class SearchHit:
    record: IngredientRecord
    match_type: str  # "name" or "hidden"
    matched_name: Optional[str] = None

    def to_dict(self) -> dict:
        result = self.record.to_dict()
        result["match_type"] = self.match_type
        result["matched_name"] = self.matched_name
        return result


def _describe(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in detail['loc'])}: {detail['msg']}" for detail in error.errors()
    )


def build_record(key: str, raw: Mapping) -> IngredientRecord:
    """Validate one raw table row and turn it into an IngredientRecord"""
    if not isinstance(raw, Mapping):
        raise ReferenceDataError(key, "record must be a mapping")
    if raw.get("id") != key:
        raise ReferenceDataError(key, f"id {raw.get('id')!r} does not match table key")

    fields = {name: raw[name] for name in REQUIRED_FIELDS + ("e_number", "plain_english") if name in raw}
    fields["hidden_names"] = raw.get("hidden_names") or ()
    fields["alert_flags"] = {name: raw[name] for name in ALERT_FIELDS if name in raw}

    try:
        return IngredientRecord(**fields)
    except ValidationError as e:
        raise ReferenceDataError(key, _describe(e)) from e


class ReferenceDatabase:
    """Read-only, ordered collection of validated ingredient records"""

    def __init__(self, records: Iterable[IngredientRecord], version: str = DATABASE_VERSION):
        self.version = version
        self._records = tuple(records)
        self._by_id = {record.id: record for record in self._records}

    def __iter__(self):
        return iter(self._records)

    def __len__(self):
        return len(self._records)

    def __contains__(self, ingredient_id):
        return ingredient_id in self._by_id

    @property
    def records(self) -> Tuple[IngredientRecord, ...]:
        return self._records

    def get(self, ingredient_id: str) -> Optional[IngredientRecord]:
        return self._by_id.get(ingredient_id)

    def search(self, query: str) -> List[SearchHit]:
        """Records whose name, or failing that a hidden name, contains the query (case-insensitive)"""
        normalized_query = query.lower().strip()
        results = []

        for record in self._records:
            if normalized_query in record.name.lower():
                results.append(SearchHit(record, "name"))
                continue

            for hidden_name in record.hidden_names:
                if normalized_query in hidden_name.lower():
                    results.append(SearchHit(record, "hidden", hidden_name))
                    break

        return results

    def by_concern(self, concern_level: str) -> List[IngredientRecord]:
        return [record for record in self._records if record.concern == concern_level]

    def with_alert(self, flag: str) -> List[IngredientRecord]:
        return [record for record in self._records if record.alert_flags.is_set(flag)]


def load_reference_database(tables: Optional[Iterable[Mapping[str, Mapping]]] = None,
                            version: str = DATABASE_VERSION) -> ReferenceDatabase:
    """Validate every row of the given tables (defaults to the built-in ones) in order.

    Raises ReferenceDataError on the first malformed or duplicate record so a bad
    table never reaches the scanner.
    """
    if tables is None:
        tables = REFERENCE_TABLES

    records: Dict[str, IngredientRecord] = {}
    for table in tables:
        for key, raw in table.items():
            if key in records:
                raise ReferenceDataError(key, "duplicate id across reference tables")
            records[key] = build_record(key, raw)

    log_debug(f"Loaded reference database v{version} with {len(records)} ingredients")
    return ReferenceDatabase(records.values(), version=version)


# Loaded once at import - fails fast if the built-in tables are malformed
REFERENCE_DATABASE = load_reference_database()


def get_reference_database() -> ReferenceDatabase:
    return REFERENCE_DATABASE
