import unittest
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

from finalcalc.core.models import ThresholdInversion
from finalcalc.state.calculator_state import CalculatorState
from finalcalc.ui.views.calculator_view import build_calculator_view, parse_number, parse_passing_grade


def _event(value):
    return SimpleNamespace(control=SimpleNamespace(value=value))


class ParseTests(unittest.TestCase):
    def test_decimal_comma(self):
        self.assertEqual(parse_number(" 72,5 "), 72.5)
        self.assertIsNone(parse_number(""))
        self.assertIsNone(parse_number(None))

    def test_non_finite_is_rejected(self):
        for text in ("nan", "NaN", "inf", "-inf"):
            with self.assertRaises(ValueError):
                parse_number(text)

    def test_passing_grade_is_required(self):
        self.assertEqual(parse_passing_grade("55"), 55.0)
        for text in ("", "nan", "abc"):
            with self.assertRaises(ValueError):
                parse_passing_grade(text)


class CalculatorViewTests(unittest.TestCase):
    def setUp(self):
        patcher = patch("finalcalc.ui.views.calculator_view.HistoryStore.from_settings")
        patcher.start()
        self.addCleanup(patcher.stop)
        self.state = CalculatorState()
        view = build_calculator_view(
            MagicMock(),
            self.state,
            route="/minimum-final",
            title="Minimum final score",
            hint="",
            make_mode=lambda grade: ThresholdInversion(passing_grade=grade),
            on_history=lambda: None,
            on_switch=lambda: None,
            switch_label="Year-end score",
        )
        body = view.controls[1].content.controls
        self.passing_grade = body[3].controls[1]
        self.rows = body[4]
        self.calculate_button = body[7].controls[0]
        self.status = body[8]
        self.result_text = body[9]

    def score_field(self, index):
        return self.rows.controls[index].controls[1]

    def test_clamped_score_is_shown(self):
        self.score_field(0).on_blur(_event("150"))
        self.assertEqual(self.state.active_set.scores[0], 100.0)
        self.assertEqual(self.score_field(0).value, "100")

    def test_non_finite_passing_grade_shows_status(self):
        self.score_field(0).on_blur(_event("50"))
        self.passing_grade.value = "nan"
        self.calculate_button.on_click(None)
        self.assertEqual(self.status.value, "Passing grade must be a number")
        self.assertIsNone(self.state.last_result)
        self.assertFalse(self.result_text.value)

    def test_calculate_shows_required_score(self):
        self.score_field(0).on_blur(_event("30"))
        self.passing_grade.value = "60"
        self.calculate_button.on_click(None)
        # 30 * 40 / 100 = 12, so the final needs (60 - 12) / 0.6 = 80.
        self.assertIn("Minimum score needed: 80", self.result_text.value)


if __name__ == "__main__":
    unittest.main()
