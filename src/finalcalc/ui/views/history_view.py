from typing import Callable
import flet as ft

from finalcalc.services.history_service import (
    MINIMUM_FINAL_MODE,
    HistoryRecord,
    HistoryServiceError,
    HistoryStore,
    result_from_dict,
)
from finalcalc.ui.views.calculator_view import describe_result


def _format_values(values) -> str:
    return ", ".join("-" if v is None else f"{v:g}" for v in values)


def _record_card(record: HistoryRecord, on_delete: Callable[[int], None]) -> ft.Card:
    kind = "Minimum final" if record.mode == MINIMUM_FINAL_MODE else "Year end"
    try:
        summary = describe_result(result_from_dict(record.result))
    except HistoryServiceError:
        summary = "Unreadable result"

    return ft.Card(
        content=ft.Container(
            padding=12,
            content=ft.Row(
                alignment=ft.MainAxisAlignment.SPACE_BETWEEN,
                controls=[
                    ft.Column(
                        controls=[
                            ft.Text(f"{kind} ({record.scheme})", weight=ft.FontWeight.BOLD),
                            ft.Text(f"Passing grade: {record.passing_grade:g} • {record.created_at[:16]}"),
                            ft.Text(f"Scores: {_format_values(record.scores)}"),
                            ft.Text(f"Weights: {_format_values(record.weights)}"),
                            ft.Text(summary),
                        ]
                    ),
                    ft.IconButton(icon=ft.Icons.DELETE, on_click=lambda _, rid=record.id: on_delete(rid)),
                ],
            ),
        )
    )


def build_history_view(page: ft.Page, on_back: Callable[[], None]) -> ft.View:
    store = HistoryStore.from_settings()

    status = ft.Text(color=ft.Colors.RED_400)
    records_list = ft.Column(spacing=8)

    def refresh() -> None:
        records_list.controls.clear()
        try:
            records = store.list_records()
        except HistoryServiceError as exc:
            status.value = str(exc)
            return
        if not records:
            records_list.controls.append(ft.Text("No saved calculations yet."))
            return
        for record in reversed(records):
            records_list.controls.append(_record_card(record, on_delete))

    def on_delete(record_id: int) -> None:
        try:
            store.delete_record(record_id)
            status.value = ""
        except HistoryServiceError as exc:
            status.value = str(exc)
        refresh()
        page.update()

    def on_clear(_):
        try:
            store.clear()
            status.value = ""
        except HistoryServiceError as exc:
            status.value = str(exc)
        refresh()
        page.update()

    refresh()

    return ft.View(
        route="/history",
        controls=[
            ft.AppBar(title=ft.Text("FinalCalc - History")),
            ft.Container(
                padding=20,
                content=ft.Column(
                    scroll=ft.ScrollMode.AUTO,
                    controls=[
                        ft.Row(
                            controls=[
                                ft.Button("Back", on_click=lambda _: on_back()),
                                ft.OutlinedButton("Clear all", on_click=on_clear),
                            ]
                        ),
                        ft.Text("Saved calculations", size=22, weight=ft.FontWeight.BOLD),
                        status,
                        records_list,
                    ],
                ),
            ),
        ],
    )
