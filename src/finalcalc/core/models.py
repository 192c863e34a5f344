from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional, Tuple, Union

MIN_COMPONENTS = 1
MAX_COMPONENTS = 10
TOTAL_WEIGHT = 100.0
DEFAULT_PASSING_GRADE = 60.0

MIDTERM_SCHEME = "midterm"
COMMITTEE_SCHEME = "committee"


class LetterGrade(str, Enum):
    AA = "AA"
    BA = "BA"
    BB = "BB"
    CB = "CB"
    CC = "CC"
    DC = "DC"
    DD = "DD"
    FD = "FD"
    FF = "FF"


@dataclass(frozen=True)
class WeightedComponent:
    weight: float
    score: Optional[float] = None
    label: str = ""

    @property
    def is_known(self) -> bool:
        return self.score is not None


@dataclass(frozen=True)
class ComponentSet:
    """Ordered, immutable list of graded components.

    The last component holds the derived weight: it is never edited directly
    and is recomputed as ``100 - sum(other weights)`` by the manager
    functions in ``finalcalc.core.components``.
    """

    components: Tuple[WeightedComponent, ...]
    scheme: str = MIDTERM_SCHEME
    customized: bool = False

    def __post_init__(self) -> None:
        if not MIN_COMPONENTS <= len(self.components) <= MAX_COMPONENTS:
            raise ValueError(
                f"A component set holds {MIN_COMPONENTS}-{MAX_COMPONENTS} components, got {len(self.components)}"
            )

    def __iter__(self) -> Iterator[WeightedComponent]:
        return iter(self.components)

    def __len__(self) -> int:
        return len(self.components)

    def __getitem__(self, index: int) -> WeightedComponent:
        return self.components[index]

    @property
    def derived_index(self) -> int:
        return len(self.components) - 1

    @property
    def derived_weight(self) -> float:
        return self.components[-1].weight

    @property
    def weights(self) -> Tuple[float, ...]:
        return tuple(c.weight for c in self.components)

    @property
    def scores(self) -> Tuple[Optional[float], ...]:
        return tuple(c.score for c in self.components)

    @property
    def total_weight(self) -> float:
        return sum(self.weights)

    @property
    def unknown_indices(self) -> Tuple[int, ...]:
        return tuple(i for i, c in enumerate(self.components) if not c.is_known)


@dataclass(frozen=True)
class ThresholdInversion:
    passing_grade: float = DEFAULT_PASSING_GRADE


@dataclass(frozen=True)
class DirectCombination:
    passing_grade: float = DEFAULT_PASSING_GRADE


CalculationMode = Union[ThresholdInversion, DirectCombination]


@dataclass(frozen=True)
class Achievable:
    required_score: float

    @property
    def display_score(self) -> int:
        # Any score below the exact threshold fails, so displays round up.
        return int(math.ceil(round(self.required_score, 9)))


@dataclass(frozen=True)
class Unachievable:
    required_score: float


@dataclass(frozen=True)
class Completed:
    final_score: float
    passed: bool


Result = Union[Achievable, Unachievable, Completed]
