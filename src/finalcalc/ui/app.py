import flet as ft

from finalcalc.core.models import DirectCombination, ThresholdInversion
from finalcalc.state.app_state import app_state
from finalcalc.ui.views.calculator_view import build_calculator_view
from finalcalc.ui.views.history_view import build_history_view

MINIMUM_FINAL_ROUTE = "/minimum-final"
YEAR_END_ROUTE = "/year-end"
HISTORY_ROUTE = "/history"


def main(page: ft.Page) -> None:
    page.title = "FinalCalc"
    page.scroll = ft.ScrollMode.AUTO
    previous_route = {"value": MINIMUM_FINAL_ROUTE}

    def build_view(route: str) -> ft.View:
        if route == YEAR_END_ROUTE:
            previous_route["value"] = route
            return build_calculator_view(
                page,
                app_state.year_end,
                route=YEAR_END_ROUTE,
                title="Year-end score",
                hint="Enter every score to get the weighted course score and letter grade.",
                make_mode=lambda grade: DirectCombination(passing_grade=grade),
                on_history=lambda: page.go(HISTORY_ROUTE),
                on_switch=lambda: page.go(MINIMUM_FINAL_ROUTE),
                switch_label="Minimum final",
            )
        if route == HISTORY_ROUTE:
            return build_history_view(page, on_back=lambda: page.go(previous_route["value"]))

        previous_route["value"] = MINIMUM_FINAL_ROUTE
        return build_calculator_view(
            page,
            app_state.minimum_final,
            route=MINIMUM_FINAL_ROUTE,
            title="Minimum final score",
            hint="Leave exactly one score empty: the calculator solves for it.",
            make_mode=lambda grade: ThresholdInversion(passing_grade=grade),
            on_history=lambda: page.go(HISTORY_ROUTE),
            on_switch=lambda: page.go(YEAR_END_ROUTE),
            switch_label="Year-end score",
        )

    def on_route_change(e: ft.RouteChangeEvent) -> None:
        page.views.clear()
        page.views.append(build_view(e.route))
        page.update()

    page.on_route_change = on_route_change
    page.go(page.route if page.route not in ("", "/") else MINIMUM_FINAL_ROUTE)
