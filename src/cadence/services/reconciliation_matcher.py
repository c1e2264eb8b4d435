"""
Reconciliation Matcher - pair expected transactions with actual ones.

Pure matching logic (no stores, no printing).

Algorithm:
1. Score every (expected, actual) pair of the same type as a weighted sum of
   independent signals: category, amount, date, description. Pairs of
   different type score 0; pairs scoring <= 0.3 are dropped as noise.
2. Sort surviving candidates by confidence, highest first; ties keep their
   enumeration order (expected-major, actual-minor).
3. Greedily commit candidates, skipping any whose expected or actual side
   is already taken. This is greedy bipartite matching, not a global optimum.

Output depends only on input order, never on hash/set iteration.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple

from cadence.config import (
    AMOUNT_TOLERANCE_FLOOR,
    AMOUNT_TOLERANCE_RATIO,
    DATE_CLOSE_DAYS,
    DATE_WITHIN_DAYS,
    MATCH_NOISE_THRESHOLD,
    RECURRING_KEYWORDS,
    WEIGHT_AMOUNT_CLOSE,
    WEIGHT_AMOUNT_WITHIN,
    WEIGHT_CATEGORY_EXACT,
    WEIGHT_CATEGORY_SIMILAR,
    WEIGHT_DATE_CLOSE,
    WEIGHT_DATE_WITHIN,
    WEIGHT_DESCRIPTION,
)
from cadence.model.reconciliation import ReconciliationMatch, ReconciliationResult
from cadence.model.transaction import Transaction
from cadence.services.similarity import FuzzyTable, SimilarityProvider

SECONDS_PER_DAY = 24 * 60 * 60
ONE = Decimal("1")


@dataclass
class PairScore:
    confidence: Decimal
    reasons: List[str]

    @property
    def reason(self) -> str:
        return ", ".join(self.reasons)


@dataclass
class _Candidate:
    expected_idx: int
    actual_idx: int
    score: PairScore


def amount_tolerance(expected_amount: Decimal) -> Decimal:
    return max(abs(expected_amount) * AMOUNT_TOLERANCE_RATIO, AMOUNT_TOLERANCE_FLOOR)


def score_pair(
    expected: Transaction,
    actual: Transaction,
    similarity: SimilarityProvider,
) -> PairScore:
    """Confidence that actual is the realization of expected (capped at 1)."""
    if expected.type != actual.type:
        return PairScore(Decimal("0"), ["Type mismatch"])

    confidence = Decimal("0")
    reasons: List[str] = []

    if expected.category.strip().lower() == actual.category.strip().lower():
        confidence += WEIGHT_CATEGORY_EXACT
        reasons.append("Same category")
    elif similarity.categories_similar(expected.category, actual.category):
        confidence += WEIGHT_CATEGORY_SIMILAR
        reasons.append("Similar category")

    diff = abs(abs(expected.amount) - abs(actual.amount))
    tolerance = amount_tolerance(expected.amount)
    if diff <= tolerance:
        confidence += WEIGHT_AMOUNT_WITHIN
        reasons.append("Amount matches")
    elif diff <= tolerance * 2:
        confidence += WEIGHT_AMOUNT_CLOSE
        reasons.append("Amount close")

    seconds = abs((expected.date - actual.date).total_seconds())
    if seconds <= DATE_WITHIN_DAYS * SECONDS_PER_DAY:
        confidence += WEIGHT_DATE_WITHIN
        reasons.append("Date matches")
    elif seconds <= DATE_CLOSE_DAYS * SECONDS_PER_DAY:
        confidence += WEIGHT_DATE_CLOSE
        reasons.append("Date close")

    if similarity.descriptions_similar(expected.description, actual.description):
        confidence += WEIGHT_DESCRIPTION
        reasons.append("Description similar")

    return PairScore(min(confidence, ONE), reasons)


def generate_suggestions(
    unmatched_expected: Sequence[Transaction],
    unmatched_actual: Sequence[Transaction],
) -> List[str]:
    suggestions: List[str] = []
    if unmatched_expected:
        suggestions.append(
            f"You have {len(unmatched_expected)} expected transactions that haven't been matched yet"
        )
    if unmatched_actual:
        suggestions.append(
            f"You have {len(unmatched_actual)} actual transactions that might need categorization"
        )
    if any(
        keyword in (t.description or "").lower()
        for t in unmatched_actual
        for keyword in RECURRING_KEYWORDS
    ):
        suggestions.append(
            "Consider creating expected transactions for recurring expenses like rent and salary"
        )
    return suggestions


class ReconciliationMatcher:
    """Greedy confidence-scored matcher between expected and actual sets."""

    def __init__(self, similarity: Optional[SimilarityProvider] = None):
        self.similarity = similarity or FuzzyTable()

    def reconcile(
        self,
        expected: Sequence[Transaction],
        actual: Sequence[Transaction],
    ) -> ReconciliationResult:
        """Match expected against actual transactions.

        Args:
            expected: Budgeted/projected transactions
            actual: Recorded transactions

        Returns:
            ReconciliationResult with matches in commit order, unmatched items
            in their input order, and suggestions
        """
        candidates = self._candidates(expected, actual)
        # sorted() is stable, so equal confidences keep enumeration order
        candidates = sorted(candidates, key=lambda c: c.score.confidence, reverse=True)

        used_expected: set[int] = set()
        used_actual: set[int] = set()
        matches: List[ReconciliationMatch] = []
        for cand in candidates:
            if cand.expected_idx in used_expected or cand.actual_idx in used_actual:
                continue
            used_expected.add(cand.expected_idx)
            used_actual.add(cand.actual_idx)
            matches.append(
                ReconciliationMatch(
                    expected=expected[cand.expected_idx],
                    actual=actual[cand.actual_idx],
                    confidence=float(cand.score.confidence),
                    reason=cand.score.reason,
                )
            )

        unmatched_expected = [e for i, e in enumerate(expected) if i not in used_expected]
        unmatched_actual = [a for i, a in enumerate(actual) if i not in used_actual]
        return ReconciliationResult(
            matches=matches,
            unmatched_expected=unmatched_expected,
            unmatched_actual=unmatched_actual,
            suggestions=generate_suggestions(unmatched_expected, unmatched_actual),
        )

    def _candidates(
        self,
        expected: Sequence[Transaction],
        actual: Sequence[Transaction],
    ) -> List[_Candidate]:
        out: List[_Candidate] = []
        for ei, exp in enumerate(expected):
            for ai, act in enumerate(actual):
                score = score_pair(exp, act, self.similarity)
                if score.confidence > MATCH_NOISE_THRESHOLD:
                    out.append(_Candidate(ei, ai, score))
        return out


def reconcile(
    expected: Sequence[Transaction],
    actual: Sequence[Transaction],
    similarity: Optional[SimilarityProvider] = None,
) -> ReconciliationResult:
    return ReconciliationMatcher(similarity).reconcile(expected, actual)


__all__ = [
    "PairScore",
    "ReconciliationMatcher",
    "amount_tolerance",
    "generate_suggestions",
    "reconcile",
    "score_pair",
]
