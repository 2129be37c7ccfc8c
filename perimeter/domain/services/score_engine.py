"""Perimeter scoring: one comparable [0, 100] accuracy score per resolved claim.

Perimeter = 100 * (1 - |predicted - actual| / range)

- Numeric claims are normalized by a domain/subtype range.
- Categorical claims get exact / partial / no credit.
- Probabilistic claims use the Brier rule rescaled to [0, 100].
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Tuple, Union

from ..exceptions import (
    MissingActualError,
    MissingPredictionError,
    TypeMismatchError,
    UnsupportedClaimTypeError,
)
from ..models.claim import Claim, ClaimType
from ..models.outcome import ObservedOutcome
from .domain_ranges import DomainRangeRegistry, NumericRange

logger = logging.getLogger(__name__)

MIN_SCORE = 0.0
MAX_SCORE = 100.0
PARTIAL_MATCH_SCORE = 50.0


@dataclass(frozen=True)
class NumericPair:
    """Numeric prediction and realized value, with the claim's range keys."""

    predicted: float
    actual: float
    domain: str
    subtype: Optional[str] = None


@dataclass(frozen=True)
class CategoricalPair:
    """Predicted and realized category."""

    predicted: str
    actual: str


@dataclass(frozen=True)
class ProbabilisticPair:
    """Predicted probability and realized outcome (0 or 1 for binary events)."""

    predicted: float
    actual: float


ScoringPair = Union[NumericPair, CategoricalPair, ProbabilisticPair]

# Weight of one (claim, outcome) pair in a weighted average.
WeightFn = Callable[[Claim, ObservedOutcome], float]


def uniform_weight(claim: Claim, outcome: ObservedOutcome) -> float:
    """Every resolved claim counts the same."""
    return 1.0


def clamp_score(score: float) -> float:
    """Clamp a raw score into [0, 100]."""
    return max(MIN_SCORE, min(MAX_SCORE, score))


def _category_present(value: Optional[str]) -> bool:
    return bool(value and value.strip())


def _has_prediction(claim: Claim) -> bool:
    return (
        claim.predicted_value is not None
        or _category_present(claim.predicted_category)
        or claim.predicted_probability is not None
    )


def _has_actual(outcome: ObservedOutcome) -> bool:
    return (
        outcome.actual_value is not None
        or _category_present(outcome.actual_category)
        or outcome.actual_probability is not None
    )


def _claim_type(claim: Claim) -> ClaimType:
    try:
        return ClaimType(claim.claim_type)
    except ValueError:
        raise UnsupportedClaimTypeError(f"Unknown claim type: {claim.claim_type}")


def build_pair(claim: Claim, outcome: ObservedOutcome) -> ScoringPair:
    """Check preconditions and extract the typed pair for a claim's encoding.

    Raises:
        MissingPredictionError: If the claim has no predicted field
        MissingActualError: If the outcome has no actual field
        UnsupportedClaimTypeError: If the claim type is unknown
        TypeMismatchError: If the fields for the claim type are not both set
    """
    if not _has_prediction(claim):
        raise MissingPredictionError(
            "Claim must have a predicted value, category, or probability"
        )
    if not _has_actual(outcome):
        raise MissingActualError(
            "Outcome must have an actual value, category, or probability"
        )

    claim_type = _claim_type(claim)

    if claim_type == ClaimType.NUMERIC:
        if claim.predicted_value is None or outcome.actual_value is None:
            raise TypeMismatchError("Numeric claim requires predicted_value and actual_value")
        return NumericPair(
            predicted=claim.predicted_value,
            actual=outcome.actual_value,
            domain=claim.domain,
            subtype=getattr(claim, "subtype", None),
        )

    if claim_type == ClaimType.CATEGORICAL:
        if not _category_present(claim.predicted_category) or not _category_present(outcome.actual_category):
            raise TypeMismatchError("Categorical claim requires predicted_category and actual_category")
        return CategoricalPair(predicted=claim.predicted_category, actual=outcome.actual_category)

    if claim.predicted_probability is None or outcome.actual_probability is None:
        raise TypeMismatchError(
            "Probabilistic claim requires predicted_probability and actual_probability"
        )
    return ProbabilisticPair(predicted=claim.predicted_probability, actual=outcome.actual_probability)


def score_numeric(predicted: float, actual: float, value_range: NumericRange) -> float:
    """Score a numeric prediction by its error relative to the range width."""
    range_size = value_range.size
    if range_size == 0:
        return MAX_SCORE if predicted == actual else MIN_SCORE

    normalized_error = abs(predicted - actual) / range_size
    return clamp_score(MAX_SCORE * (1 - normalized_error))


def score_categorical(predicted: str, actual: str) -> float:
    """Exact match scores 100, containment either way 50, otherwise 0."""
    predicted = predicted.strip().lower()
    actual = actual.strip().lower()

    if predicted == actual:
        return MAX_SCORE
    if predicted in actual or actual in predicted:
        return PARTIAL_MATCH_SCORE
    return MIN_SCORE


def score_probabilistic(predicted: float, actual: float) -> float:
    """Brier rule: 100 * (1 - (predicted - actual)^2), clamped.

    ``actual`` is meant to be 0 or 1, but any real is scored as the same
    squared distance. A distance of 1 or more already scores 0.
    """
    distance = abs(predicted - actual)
    if distance >= 1:
        return MIN_SCORE
    brier = distance * distance
    return clamp_score(MAX_SCORE * (1 - brier))


class ScoreEngine:
    """Stateless scorer for (claim, outcome) pairs.

    Holds only the read-only range registry used for numeric claims, so a
    single instance can be shared freely.
    """

    def __init__(self, ranges: Optional[DomainRangeRegistry] = None):
        """Initialize the engine.

        Args:
            ranges: Normalization ranges for numeric claims (built-in table
                when omitted)
        """
        self.ranges = ranges or DomainRangeRegistry()

    def calculate(self, claim: Claim, outcome: ObservedOutcome) -> float:
        """Compute the Perimeter score of a claim against its outcome.

        Returns:
            Score in [0, 100]

        Raises:
            ScoringError: Subclass describing the malformed input
        """
        pair = build_pair(claim, outcome)
        return self.score_pair(pair)

    def score_pair(self, pair: ScoringPair) -> float:
        """Score an already-validated pair."""
        if isinstance(pair, NumericPair):
            value_range = self.ranges.resolve(pair.domain, pair.subtype)
            score = score_numeric(pair.predicted, pair.actual, value_range)
        elif isinstance(pair, CategoricalPair):
            score = score_categorical(pair.predicted, pair.actual)
        else:
            score = score_probabilistic(pair.predicted, pair.actual)

        logger.debug(f"Scored {type(pair).__name__}: {score:.4f}")
        return score

    def weighted_average(
        self,
        pairs: Iterable[Tuple[Claim, ObservedOutcome]],
        weight: WeightFn = uniform_weight,
    ) -> float:
        """Weighted mean Perimeter score over resolved pairs.

        Outcomes that already carry a ``perimeter_score`` contribute it as is;
        others are scored on the fly.

        Returns:
            sum(score * weight) / sum(weight), or 0 for empty input
        """
        total_weight = 0.0
        weighted_sum = 0.0

        for claim, outcome in pairs:
            perimeter = getattr(outcome, "perimeter_score", None)
            if perimeter is None:
                perimeter = self.calculate(claim, outcome)
            w = weight(claim, outcome)
            weighted_sum += perimeter * w
            total_weight += w

        return weighted_sum / total_weight if total_weight > 0 else 0.0
