from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from finalcalc.core.models import TOTAL_WEIGHT, ComponentSet

WEIGHT_TOLERANCE = 1e-9


class GradeCalculationError(ValueError):
    code = "GRADE_CALCULATION_ERROR"


class IncompleteInputError(GradeCalculationError):
    code = "INCOMPLETE_INPUT"

    def __init__(self, missing: Iterable[int]) -> None:
        self.missing = tuple(missing)
        positions = ", ".join(str(i + 1) for i in self.missing)
        super().__init__(f"Missing scores for components: {positions}")


class InvalidWeightError(GradeCalculationError):
    code = "INVALID_WEIGHT"


class AmbiguousUnknownsError(GradeCalculationError):
    code = "AMBIGUOUS_UNKNOWNS"

    def __init__(self, unknown: Iterable[int]) -> None:
        self.unknown = tuple(unknown)
        super().__init__(f"Exactly one unknown score is required, found {len(self.unknown)}")


class ReadOnlyWeightError(GradeCalculationError):
    code = "READ_ONLY_WEIGHT"


@dataclass(frozen=True)
class ImbalancedWeights:
    total_weight: float
    derived_weight: float
    out_of_range: Tuple[int, ...] = ()

    @property
    def message(self) -> str:
        if self.derived_weight < 0:
            return (
                f"Weights are over-allocated: total {self.total_weight:g}%, "
                f"derived weight {self.derived_weight:g}%"
            )
        if self.out_of_range:
            positions = ", ".join(str(index + 1) for index in self.out_of_range)
            return f"Weights must be between 0% and 100%, check components: {positions}"
        return f"Weights total {self.total_weight:g}% instead of 100%"


def clamp_0_100(value: float) -> float:
    return max(0.0, min(100.0, value))


def normalize_score(value: Optional[float]) -> Optional[float]:
    if value is None:
        return None
    value = float(value)
    if math.isnan(value):
        return None
    return clamp_0_100(value)


def normalize_weight(value: float) -> float:
    value = float(value)
    if math.isnan(value):
        raise InvalidWeightError("Weight must be a number")
    return clamp_0_100(value)


def is_balanced(component_set: ComponentSet) -> bool:
    return math.isclose(component_set.total_weight, TOTAL_WEIGHT, abs_tol=WEIGHT_TOLERANCE)


def check_weights(component_set: ComponentSet) -> Optional[ImbalancedWeights]:
    """Return an advisory when the set does not add up to 100 or a weight
    falls outside [0, 100], else None."""
    out_of_range = tuple(
        index for index, weight in enumerate(component_set.weights) if weight < 0 or weight > TOTAL_WEIGHT
    )
    if is_balanced(component_set) and not out_of_range:
        return None
    return ImbalancedWeights(
        total_weight=component_set.total_weight,
        derived_weight=component_set.derived_weight,
        out_of_range=out_of_range,
    )
