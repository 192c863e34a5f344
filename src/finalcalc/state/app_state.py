from dataclasses import dataclass, field
from finalcalc.state.calculator_state import CalculatorState


@dataclass
class AppState:
    minimum_final: CalculatorState = field(default_factory=CalculatorState)
    year_end: CalculatorState = field(default_factory=CalculatorState)


app_state = AppState()
