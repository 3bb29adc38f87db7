"""Keyword classification of annotation text into finding categories."""

from __future__ import annotations

from dataclasses import dataclass, field

from varianthub.models import Category

DEFAULT_CATEGORY_RULES: tuple[tuple[Category, tuple[str, ...]], ...] = (
    (
        Category.PHARMACOGENOMICS,
        (
            "drug", "medication", "warfarin", "clopidogrel", "statin",
            "metabolism", "metabolizer", "cyp", "enzyme",
            "response", "sensitivity", "resistance", "dosage",
            "adverse", "side effect", "toxicity",
            "pharmacokinetic", "pharmacodynamic",
        ),
    ),
    (
        Category.CARRIER,
        (
            "carrier", "recessive", "inherited",
            "cystic fibrosis", "sickle cell", "tay-sachs",
            "hemophilia", "thalassemia",
        ),
    ),
    (
        Category.ANCESTRY,
        (
            "ancestry", "haplogroup", "population", "ethnicity",
            "european", "african", "asian", "native american",
            "neanderthal", "denisovan",
        ),
    ),
    (
        Category.TRAITS,
        (
            "eye color", "hair color", "skin", "pigment", "freckling",
            "height", "tall", "short",
            "caffeine", "alcohol", "bitter taste", "cilantro",
            "lactose", "gluten",
            "muscle", "athletic", "endurance", "sprint",
            "sleep", "circadian", "morning person", "night owl",
            "earwax", "dimple", "cleft chin", "widow peak",
        ),
    ),
    (
        Category.HEALTH,
        (
            "cancer", "tumor", "carcinoma", "leukemia", "lymphoma", "melanoma",
            "diabetes", "heart", "cardiac", "cardiovascular", "stroke", "hypertension",
            "alzheimer", "parkinson", "dementia", "neurological",
            "obesity", "bmi", "weight", "cholesterol", "triglyceride",
            "disease", "disorder", "syndrome", "risk", "susceptibility",
            "asthma", "arthritis", "autoimmune", "inflammation",
            "schizophrenia", "depression", "bipolar", "anxiety",
            "macular degeneration", "glaucoma", "blindness",
            "osteoporosis", "fracture", "bone density",
        ),
    ),
)


@dataclass(frozen=True)
class CategoryClassifier:
    """Ordered ``(category, keywords)`` rules evaluated first-match-wins."""

    rules: tuple[tuple[Category, tuple[str, ...]], ...] = field(
        default=DEFAULT_CATEGORY_RULES
    )
    fallback: Category = Category.OTHER

    def classify(self, text: str | None) -> Category:
        if not text:
            return self.fallback

        lowered = text.lower()
        for category, keywords in self.rules:
            if any(keyword in lowered for keyword in keywords):
                return category
        return self.fallback

    def resolve(self, explicit: Category | None, text: str | None) -> Category:
        """Keep an explicit, specific category; otherwise classify ``text``."""

        if explicit is not None and explicit is not self.fallback:
            return explicit
        return self.classify(text)


DEFAULT_CLASSIFIER = CategoryClassifier()


def classify(text: str | None) -> Category:
    """Classify free text with the default keyword table."""

    return DEFAULT_CLASSIFIER.classify(text)


def resolve_category(explicit: Category | None, text: str | None) -> Category:
    return DEFAULT_CLASSIFIER.resolve(explicit, text)
