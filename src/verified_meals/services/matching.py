"""Match atomic ingredients against reference records."""

import logging
import re
from dataclasses import dataclass, field

from verified_meals.domain.meals import (
    AtomicIngredient,
    VerificationStatus,
    VerifiedIngredient,
)
from verified_meals.domain.nutrition import ENERGY_ID, NutrientProfile, ReferenceRecord
from verified_meals.domain.selection import PendingSelection, ScoredCandidate
from verified_meals.services.reference import ReferenceLookupService
from verified_meals.services.selection import SelectionResolver

ENHANCED_THRESHOLD = 0.7
UNATTENDED_THRESHOLD = 0.8

NAME_WEIGHT = 0.5
CALORIE_WEIGHT = 0.3
PROTEIN_WEIGHT = 0.2

_TOKEN_SPLIT_RE = re.compile(r"[\s.,!?;:()\[\]{}\"'\-]+")

SIMPLIFY_STOP_WORDS = frozenset(
    {
        "grilled",
        "baked",
        "sautéed",
        "sauteed",
        "cooked",
        "fresh",
        "organic",
        "in",
        "with",
        "oil",
    }
)

# Substring -> coarse search term, checked in order.
CATEGORY_TERMS: tuple[tuple[str, str], ...] = (
    ("chicken", "chicken breast"),
    ("salmon", "salmon"),
    ("spinach", "spinach"),
    ("broccoli", "broccoli"),
    ("rice", "rice brown"),
    ("quinoa", "quinoa"),
    ("beef", "beef"),
    ("turkey", "turkey"),
    ("egg", "egg"),
    ("oil", "oil olive"),
)

_logger = logging.getLogger(__name__)


def tokenize(text: str) -> set[str]:
    return {token for token in _TOKEN_SPLIT_RE.split(text.lower()) if token}


def mentions_word(text: str, word: str) -> bool:
    """Whole-word match that also accepts a plural "s"."""
    tokens = tokenize(text)
    return word in tokens or f"{word}s" in tokens


def name_similarity(left: str, right: str) -> float:
    """Jaccard similarity of lowercase word tokens."""
    left_tokens = tokenize(left)
    right_tokens = tokenize(right)
    union = left_tokens | right_tokens
    if not union:
        return 0.0
    return len(left_tokens & right_tokens) / len(union)


def value_similarity(left: float, right: float) -> float:
    """Ratio of the smaller to the larger value; zero if either is not positive."""
    if left <= 0 or right <= 0:
        return 0.0
    return min(left, right) / max(left, right)


def match_score(ingredient: AtomicIngredient, record: ReferenceRecord) -> float:
    """Weighted blend of name, calorie and protein similarity.

    The ingredient estimate covers its whole portion, so it is brought to a
    per-100 g basis before being compared with the record.
    """
    per_100g = _per_100g(ingredient)
    return (
        NAME_WEIGHT * name_similarity(ingredient.name, record.description)
        + CALORIE_WEIGHT * value_similarity(per_100g.calories, record.calories)
        + PROTEIN_WEIGHT * value_similarity(per_100g.protein_g, record.protein_g)
    )


def simplify_name(name: str) -> str:
    """Drop cooking-method and filler words."""
    tokens = [
        token
        for token in _TOKEN_SPLIT_RE.split(name.lower())
        if token and token not in SIMPLIFY_STOP_WORDS
    ]
    return " ".join(tokens)


def category_term(name: str) -> str | None:
    for keyword, term in CATEGORY_TERMS:
        if mentions_word(name, keyword):
            return term
    return None


def search_queries(name: str) -> list[str]:
    """Escalating queries for one ingredient, without repeats."""
    queries: list[str] = []
    for query in (name.strip(), simplify_name(name), category_term(name)):
        if query and query.lower() not in {existing.lower() for existing in queries}:
            queries.append(query)
    return queries


@dataclass(frozen=True)
class MatchPolicy:
    """Acceptance threshold and the fixed confidences of non-automatic outcomes."""

    threshold: float = ENHANCED_THRESHOLD
    manual_confidence: float = 0.9
    skip_confidence: float = 0.5
    estimated_confidence: float = 0.55
    max_candidates: int = 10
    page_size: int = 25

    @classmethod
    def attended(cls) -> "MatchPolicy":
        return cls(threshold=ENHANCED_THRESHOLD)

    @classmethod
    def unattended(cls) -> "MatchPolicy":
        return cls(threshold=UNATTENDED_THRESHOLD)


@dataclass
class MatchingEngine:
    """Resolve each atomic ingredient to a reference record or an estimate.

    With a resolver attached, low-confidence matches are escalated to it.
    Without one, they degrade to the provider's estimate.
    """

    resolver: SelectionResolver | None = None
    policy: MatchPolicy = field(default_factory=MatchPolicy)

    @classmethod
    def create(cls, resolver: SelectionResolver | None = None) -> "MatchingEngine":
        """Pick the threshold that fits whether a person reviews matches."""
        policy = MatchPolicy.attended() if resolver else MatchPolicy.unattended()
        return cls(resolver=resolver, policy=policy)

    async def match(
        self, ingredient: AtomicIngredient, reference: ReferenceLookupService
    ) -> VerifiedIngredient:
        candidates = await self.find_candidates(ingredient, reference)
        if not candidates:
            _logger.info("No reference match for %r, keeping estimate", ingredient.name)
            return _estimated(
                ingredient,
                VerificationStatus.AI_ESTIMATED,
                self.policy.estimated_confidence,
                "No reference database match",
            )

        best = candidates[0]
        if best.score > self.policy.threshold:
            record = await _with_details(best.record, reference)
            _logger.info(
                "Auto-matched %r to %r (score %.2f)",
                ingredient.name,
                record.description,
                best.score,
            )
            return _matched(
                ingredient,
                record,
                best.score,
                VerificationStatus.AUTO_MATCHED,
                f"Matched to {record.description}",
            )

        if self.resolver is None:
            _logger.info(
                "Best match for %r scored %.2f, below %.2f; keeping estimate",
                ingredient.name,
                best.score,
                self.policy.threshold,
            )
            return _estimated(
                ingredient,
                VerificationStatus.AI_ESTIMATED,
                self.policy.estimated_confidence,
                f"Best candidate {best.record.description!r} scored {best.score:.2f}",
            )

        selection = PendingSelection(
            ingredient=ingredient,
            candidates=tuple(candidates[: self.policy.max_candidates]),
        )
        _logger.info(
            "Escalating %r for manual selection (best score %.2f)",
            ingredient.name,
            best.score,
        )
        decision = await self.resolver.submit(selection)
        if decision.record is None:
            reason = "timed out" if decision.timed_out else "skipped"
            return _estimated(
                ingredient,
                VerificationStatus.SKIPPED,
                self.policy.skip_confidence,
                f"Manual selection {reason}",
            )
        record = await _with_details(decision.record, reference)
        return _matched(
            ingredient,
            record,
            self.policy.manual_confidence,
            VerificationStatus.MANUALLY_MATCHED,
            f"Manually matched to {record.description}",
        )

    async def find_candidates(
        self, ingredient: AtomicIngredient, reference: ReferenceLookupService
    ) -> list[ScoredCandidate]:
        """Search tier by tier and rank the first non-empty result set."""
        for tier, query in enumerate(search_queries(ingredient.name), start=1):
            records = await reference.search(query, page_size=self.policy.page_size)
            if not records:
                continue
            _logger.debug(
                "Tier %s query %r returned %s records for %r",
                tier,
                query,
                len(records),
                ingredient.name,
            )
            scored = [
                ScoredCandidate(record=record, score=match_score(ingredient, record))
                for record in records
            ]
            scored.sort(key=lambda candidate: candidate.score, reverse=True)
            return scored
        return []


def _per_100g(ingredient: AtomicIngredient) -> NutrientProfile:
    if ingredient.grams <= 0:
        return ingredient.estimated
    return ingredient.estimated.scaled(100.0 / ingredient.grams)


async def _with_details(
    record: ReferenceRecord, reference: ReferenceLookupService
) -> ReferenceRecord:
    # Abridged search results can lack energy; the detail view carries it.
    if ENERGY_ID in record.nutrients_per_100g:
        return record
    return await reference.fetch_details(record.fdc_id)


def _matched(
    ingredient: AtomicIngredient,
    record: ReferenceRecord,
    confidence: float,
    status: VerificationStatus,
    notes: str,
) -> VerifiedIngredient:
    return VerifiedIngredient(
        ingredient=ingredient,
        record=record,
        nutrients=record.scaled_profile(ingredient.grams),
        confidence=min(1.0, max(0.0, confidence)),
        status=status,
        notes=notes,
    )


def _estimated(
    ingredient: AtomicIngredient,
    status: VerificationStatus,
    confidence: float,
    notes: str,
) -> VerifiedIngredient:
    return VerifiedIngredient(
        ingredient=ingredient,
        record=None,
        nutrients=ingredient.estimated,
        confidence=confidence,
        status=status,
        notes=notes,
    )
