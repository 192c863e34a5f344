from __future__ import annotations

import logging
import math
from typing import Iterable, List, Tuple

from finalcalc.core.models import (
    TOTAL_WEIGHT,
    Achievable,
    CalculationMode,
    Completed,
    ComponentSet,
    DirectCombination,
    LetterGrade,
    Result,
    ThresholdInversion,
    Unachievable,
    WeightedComponent,
)
from finalcalc.core.validation import (
    AmbiguousUnknownsError,
    GradeCalculationError,
    IncompleteInputError,
    InvalidWeightError,
    check_weights,
)

logger = logging.getLogger(__name__)

LETTER_BANDS: List[Tuple[float, LetterGrade]] = [
    (90, LetterGrade.AA),
    (85, LetterGrade.BA),
    (80, LetterGrade.BB),
    (75, LetterGrade.CB),
    (70, LetterGrade.CC),
    (65, LetterGrade.DC),
    (60, LetterGrade.DD),
    (50, LetterGrade.FD),
]


def compute_contribution(components: Iterable[WeightedComponent]) -> float:
    """
    Σ(score * weight / 100) over every component.
    Raises IncompleteInputError if any score is unset.
    """
    components = list(components)
    missing = [i for i, c in enumerate(components) if not c.is_known]
    if missing:
        raise IncompleteInputError(missing)

    total = 0.0
    for component in components:
        total += component.score * component.weight / TOTAL_WEIGHT
    return total


def invert_threshold(contribution: float, unknown_weight: float, passing_grade: float) -> Result:
    """
    Score the unknown component needs so that
    contribution + score * unknown_weight / 100 == passing_grade.
    """
    if unknown_weight <= 0:
        raise InvalidWeightError(
            f"The unknown component has weight {unknown_weight:g}% and cannot affect the outcome"
        )

    required = (passing_grade - contribution) * TOTAL_WEIGHT / unknown_weight
    if not math.isfinite(required):
        raise GradeCalculationError("Passing grade and weights must be finite numbers")
    if required > 100:
        return Unachievable(required_score=required)
    if required < 0:
        return Achievable(required_score=0.0)
    return Achievable(required_score=required)


def _warn_if_imbalanced(component_set: ComponentSet) -> None:
    advisory = check_weights(component_set)
    if advisory is not None:
        logger.warning("Imbalanced weights in %s set: %s", component_set.scheme, advisory.message)


def solve_required_score(component_set: ComponentSet, passing_grade: float) -> Result:
    unknown = component_set.unknown_indices
    if len(unknown) != 1:
        raise AmbiguousUnknownsError(unknown)

    _warn_if_imbalanced(component_set)
    target = unknown[0]
    known = [c for i, c in enumerate(component_set) if i != target]
    contribution = compute_contribution(known)
    result = invert_threshold(contribution, component_set[target].weight, passing_grade)
    logger.debug(
        "Solved component %d of %s set for passing grade %g: %s",
        target,
        component_set.scheme,
        passing_grade,
        result,
    )
    return result


def combine_scores(component_set: ComponentSet, passing_grade: float) -> Completed:
    _warn_if_imbalanced(component_set)
    final_score = compute_contribution(component_set)
    return Completed(final_score=final_score, passed=final_score >= passing_grade)


def calculate(component_set: ComponentSet, mode: CalculationMode) -> Result:
    if isinstance(mode, ThresholdInversion):
        return solve_required_score(component_set, mode.passing_grade)
    if isinstance(mode, DirectCombination):
        return combine_scores(component_set, mode.passing_grade)
    raise TypeError(f"Unsupported calculation mode: {mode!r}")


def classify(score: float) -> LetterGrade:
    for lower_bound, letter in LETTER_BANDS:
        if score >= lower_bound:
            return letter
    return LetterGrade.FF
