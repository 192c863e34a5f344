from dataclasses import dataclass, field
from typing import Optional

from finalcalc.config.settings import settings
from finalcalc.core.components import committee_preset, midterm_preset
from finalcalc.core.models import COMMITTEE_SCHEME, MIDTERM_SCHEME, ComponentSet, Result


@dataclass
class CalculatorState:
    """Current inputs of one calculator screen.

    The component sets themselves are immutable; every edit swaps in the new
    snapshot returned by the manager functions.
    """

    passing_grade: float = settings.default_passing_grade
    scheme: str = MIDTERM_SCHEME
    midterm_set: ComponentSet = field(default_factory=midterm_preset)
    committee_set: ComponentSet = field(default_factory=committee_preset)
    last_result: Optional[Result] = None

    @property
    def active_set(self) -> ComponentSet:
        return self.committee_set if self.scheme == COMMITTEE_SCHEME else self.midterm_set

    def replace_active(self, component_set: ComponentSet) -> None:
        if self.scheme == COMMITTEE_SCHEME:
            self.committee_set = component_set
        else:
            self.midterm_set = component_set
        self.last_result = None

    def switch_scheme(self, scheme: str) -> None:
        if scheme not in (MIDTERM_SCHEME, COMMITTEE_SCHEME):
            raise ValueError(f"Unsupported weighting scheme: {scheme}")
        self.scheme = scheme
        self.last_result = None

    def reset(self) -> None:
        if self.scheme == COMMITTEE_SCHEME:
            self.committee_set = committee_preset()
        else:
            self.midterm_set = midterm_preset()
        self.last_result = None
