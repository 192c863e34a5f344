import logging
import math
from typing import Callable, Optional

import flet as ft

from finalcalc.core.components import add_component, remove_component, set_score, set_weight
from finalcalc.core.grades import calculate, classify
from finalcalc.core.models import (
    COMMITTEE_SCHEME,
    MAX_COMPONENTS,
    MIDTERM_SCHEME,
    Achievable,
    CalculationMode,
    Completed,
    Unachievable,
)
from finalcalc.core.validation import GradeCalculationError, check_weights
from finalcalc.services.history_service import HistoryServiceError, HistoryStore, record_from_calculation
from finalcalc.state.calculator_state import CalculatorState

logger = logging.getLogger(__name__)


def parse_number(value: Optional[str]) -> Optional[float]:
    """Parse a text field, accepting a decimal comma. Empty text is None."""
    text = (value or "").strip().replace(",", ".")
    if not text:
        return None
    number = float(text)
    if not math.isfinite(number):
        raise ValueError(f"Not a finite number: {text}")
    return number


def parse_passing_grade(value: Optional[str]) -> float:
    number = parse_number(value)
    if number is None:
        raise ValueError("Passing grade is required")
    return number


def _format_number(value: Optional[float]) -> str:
    if value is None:
        return ""
    return f"{value:g}"


def describe_result(result) -> str:
    if isinstance(result, Achievable):
        return (
            f"Minimum score needed: {result.display_score} "
            f"(exact {result.required_score:.2f})"
        )
    if isinstance(result, Unachievable):
        return f"Passing is not possible: {result.required_score:.2f} would be needed"
    if isinstance(result, Completed):
        verdict = "Passed" if result.passed else "Failed"
        return f"Final score: {result.final_score:.2f} • {classify(result.final_score).value} • {verdict}"
    return ""


def build_calculator_view(
    page: ft.Page,
    state: CalculatorState,
    *,
    route: str,
    title: str,
    hint: str,
    make_mode: Callable[[float], CalculationMode],
    on_history: Callable[[], None],
    on_switch: Callable[[], None],
    switch_label: str,
) -> ft.View:
    store = HistoryStore.from_settings()

    status = ft.Text(color=ft.Colors.RED_400)
    advisory_text = ft.Text(color=ft.Colors.AMBER_400)
    result_text = ft.Text(size=18, weight=ft.FontWeight.BOLD)
    rows = ft.Column(spacing=10)

    scheme = ft.Dropdown(
        label="Weighting scheme",
        width=240,
        options=[
            ft.dropdown.Option(MIDTERM_SCHEME, "Midterms + final"),
            ft.dropdown.Option(COMMITTEE_SCHEME, "Committees"),
        ],
        value=state.scheme,
    )
    passing_grade = ft.TextField(
        label="Passing grade",
        width=160,
        value=_format_number(state.passing_grade),
    )

    def set_status(message: str, is_error: bool = True) -> None:
        status.value = message
        status.color = ft.Colors.RED_400 if is_error else ft.Colors.GREEN_400

    def refresh_advisory() -> None:
        advisory = check_weights(state.active_set)
        advisory_text.value = advisory.message if advisory is not None else ""

    def on_score_change(index: int):
        def handler(e: ft.ControlEvent) -> None:
            try:
                state.replace_active(set_score(state.active_set, index, parse_number(e.control.value)))
                set_status("")
            except ValueError:
                set_status(f"Score {index + 1} must be a number between 0 and 100")
            build_rows()
            result_text.value = ""
            page.update()

        return handler

    def on_weight_change(index: int):
        def handler(e: ft.ControlEvent) -> None:
            try:
                value = parse_number(e.control.value)
                state.replace_active(set_weight(state.active_set, index, value or 0.0))
                set_status("")
            except ValueError:
                set_status(f"Weight {index + 1} must be a number between 0 and 100")
            build_rows()
            refresh_advisory()
            result_text.value = ""
            page.update()

        return handler

    def build_rows() -> None:
        rows.controls.clear()
        component_set = state.active_set
        for index, component in enumerate(component_set):
            derived = index == component_set.derived_index
            rows.controls.append(
                ft.Row(
                    controls=[
                        ft.Text(component.label, width=140),
                        ft.TextField(
                            label="Score",
                            width=140,
                            value=_format_number(component.score),
                            hint_text="0-100",
                            on_blur=on_score_change(index),
                        ),
                        ft.TextField(
                            label="Weight (%)" if not derived else "Weight (%) - derived",
                            width=200,
                            value=_format_number(component.weight),
                            read_only=derived,
                            on_blur=None if derived else on_weight_change(index),
                        ),
                    ]
                )
            )

    def rebuild() -> None:
        build_rows()
        refresh_advisory()
        result_text.value = ""
        page.update()

    def on_scheme_change(_):
        state.switch_scheme(scheme.value)
        set_status("")
        rebuild()

    def on_add(_):
        if len(state.active_set) >= MAX_COMPONENTS:
            set_status(f"At most {MAX_COMPONENTS} components are supported")
        state.replace_active(add_component(state.active_set))
        rebuild()

    def on_remove(_):
        state.replace_active(remove_component(state.active_set))
        rebuild()

    def on_reset(_):
        state.reset()
        set_status("Form reset.", is_error=False)
        rebuild()

    def on_calculate(_):
        try:
            state.passing_grade = parse_passing_grade(passing_grade.value)
        except ValueError:
            set_status("Passing grade must be a number")
            page.update()
            return

        try:
            state.last_result = calculate(state.active_set, make_mode(state.passing_grade))
            result_text.value = describe_result(state.last_result)
            set_status("")
        except GradeCalculationError as exc:
            state.last_result = None
            result_text.value = ""
            set_status(str(exc))
        page.update()

    def on_save(_):
        if state.last_result is None:
            set_status("Calculate a result before saving.")
            page.update()
            return
        try:
            record = record_from_calculation(state.active_set, make_mode(state.passing_grade), state.last_result)
            store.add_record(record)
            set_status("Calculation saved.", is_error=False)
        except HistoryServiceError as exc:
            logger.error("Could not save calculation: %s", exc)
            set_status(f"Failed to save: {exc}")
        page.update()

    scheme.on_change = on_scheme_change
    build_rows()
    refresh_advisory()

    return ft.View(
        route=route,
        controls=[
            ft.AppBar(title=ft.Text(f"FinalCalc - {title}")),
            ft.Container(
                padding=20,
                content=ft.Column(
                    scroll=ft.ScrollMode.AUTO,
                    controls=[
                        ft.Row(
                            controls=[
                                ft.Button(switch_label, on_click=lambda _: on_switch()),
                                ft.Button("History", on_click=lambda _: on_history()),
                            ]
                        ),
                        ft.Text(title, size=22, weight=ft.FontWeight.BOLD),
                        ft.Text(hint),
                        ft.Row(controls=[scheme, passing_grade]),
                        rows,
                        ft.Row(
                            controls=[
                                ft.OutlinedButton("Add component", on_click=on_add),
                                ft.OutlinedButton("Remove component", on_click=on_remove),
                                ft.TextButton("Reset", on_click=on_reset),
                            ]
                        ),
                        advisory_text,
                        ft.Row(
                            controls=[
                                ft.Button("Calculate", on_click=on_calculate),
                                ft.OutlinedButton("Save", on_click=on_save),
                            ]
                        ),
                        status,
                        result_text,
                    ],
                ),
            ),
        ],
    )
