import unittest

from finalcalc.core.components import (
    add_component,
    build_component_set,
    committee_preset,
    even_weights,
    midterm_preset,
    preset_for,
    remove_component,
    set_count,
    set_score,
    set_weight,
)
from finalcalc.core.models import COMMITTEE_SCHEME, MIDTERM_SCHEME, ComponentSet
from finalcalc.core.validation import ReadOnlyWeightError, check_weights


class PresetTests(unittest.TestCase):
    def test_midterm_preset(self):
        preset = midterm_preset()
        self.assertEqual(preset.weights, (40.0, 60.0))
        self.assertEqual(preset.scores, (None, None))
        self.assertEqual([c.label for c in preset], ["Midterm 1", "Final"])
        self.assertFalse(preset.customized)

    def test_committee_preset(self):
        preset = committee_preset()
        self.assertEqual(preset.weights, (30.0, 30.0, 40.0))
        self.assertEqual(preset.scheme, COMMITTEE_SCHEME)

    def test_unknown_scheme(self):
        with self.assertRaises(ValueError):
            preset_for("semester")

    def test_size_limits(self):
        with self.assertRaises(ValueError):
            ComponentSet(components=())
        with self.assertRaises(ValueError):
            build_component_set([10] * 11)

    def test_mismatched_lists(self):
        with self.assertRaises(ValueError):
            build_component_set([50, 50], [10])


class SetCountTests(unittest.TestCase):
    def test_default_weights_redistribute_evenly(self):
        updated = set_count(midterm_preset(), 3)
        self.assertEqual(updated.weights, (33.0, 33.0, 34.0))
        self.assertEqual(sum(updated.weights), 100.0)
        self.assertEqual([c.label for c in updated], ["Midterm 1", "Midterm 2", "Final"])

    def test_scores_survive_resize(self):
        base = set_score(midterm_preset(), 0, 75)
        grown = set_count(base, 4)
        self.assertEqual(grown.scores, (75.0, None, None, None))
        shrunk = set_count(grown, 1)
        self.assertEqual(shrunk.scores, (75.0,))
        self.assertEqual(shrunk.weights, (100.0,))

    def test_customized_weights_are_kept(self):
        base = set_weight(committee_preset(), 0, 20)
        grown = set_count(base, 4)
        self.assertEqual(grown.weights[:3], (20.0, 30.0, 50.0))
        self.assertEqual(grown.derived_weight, 0.0)
        shrunk = set_count(base, 2)
        self.assertEqual(shrunk.weights, (20.0, 80.0))

    def test_count_is_clamped(self):
        self.assertEqual(len(set_count(midterm_preset(), 25)), 10)
        self.assertEqual(len(set_count(midterm_preset(), 0)), 1)

    def test_same_count_returns_same_set(self):
        preset = midterm_preset()
        self.assertIs(set_count(preset, 2), preset)

    def test_even_weights_sum_to_hundred(self):
        for count in range(1, 11):
            self.assertAlmostEqual(sum(even_weights(count)), 100.0, places=9)


class SetWeightTests(unittest.TestCase):
    def test_derived_weight_follows(self):
        updated = set_weight(midterm_preset(), 0, 30)
        self.assertEqual(updated.weights, (30.0, 70.0))
        self.assertTrue(updated.customized)

    def test_input_is_not_mutated(self):
        preset = midterm_preset()
        set_weight(preset, 0, 30)
        self.assertEqual(preset.weights, (40.0, 60.0))

    def test_value_is_clamped(self):
        self.assertEqual(set_weight(midterm_preset(), 0, 150).weights, (100.0, 0.0))
        self.assertEqual(set_weight(midterm_preset(), 0, -5).weights, (0.0, 100.0))

    def test_derived_slot_is_read_only(self):
        with self.assertRaises(ReadOnlyWeightError):
            set_weight(midterm_preset(), 1, 50)

    def test_index_out_of_range(self):
        with self.assertRaises(IndexError):
            set_weight(midterm_preset(), 5, 10)

    def test_over_allocation_is_not_clamped(self):
        updated = set_weight(set_weight(committee_preset(), 0, 80), 1, 60)
        self.assertEqual(updated.derived_weight, -40.0)
        advisory = check_weights(updated)
        self.assertIsNotNone(advisory)
        self.assertIn("over-allocated", advisory.message)


class SetScoreTests(unittest.TestCase):
    def test_score_is_clamped(self):
        self.assertEqual(set_score(midterm_preset(), 0, 120).scores[0], 100.0)
        self.assertEqual(set_score(midterm_preset(), 0, -3).scores[0], 0.0)

    def test_unset_score(self):
        scored = set_score(midterm_preset(), 0, 70)
        self.assertIsNone(set_score(scored, 0, None).scores[0])
        self.assertIsNone(set_score(scored, 0, float("nan")).scores[0])

    def test_zero_is_a_real_score(self):
        self.assertEqual(set_score(midterm_preset(), 0, 0).scores[0], 0.0)


class AddRemoveTests(unittest.TestCase):
    def test_add_keeps_balanced_total(self):
        updated = add_component(committee_preset())
        self.assertEqual(updated.weights, (30.0, 30.0, 30.0, 10.0))
        self.assertEqual(updated.scores, (None, None, None, None))

    def test_add_never_drops_previous_below_floor(self):
        base = set_weight(set_weight(committee_preset(), 0, 45), 1, 47)
        updated = add_component(base)
        self.assertEqual(updated.weights, (45.0, 47.0, 5.0, 3.0))
        self.assertAlmostEqual(updated.total_weight, 100.0, places=9)

    def test_add_assigns_shortfall_when_unbalanced(self):
        base = build_component_set([30, 30, 20], scheme=COMMITTEE_SCHEME)
        updated = add_component(base)
        self.assertEqual(updated.weights, (30.0, 30.0, 20.0, 20.0))

    def test_add_stops_at_ten(self):
        full = set_count(committee_preset(), 10)
        self.assertIs(add_component(full), full)

    def test_remove_gives_weight_to_last(self):
        updated = remove_component(committee_preset())
        self.assertEqual(updated.weights, (30.0, 70.0))

    def test_remove_stops_at_one(self):
        single = set_count(committee_preset(), 1)
        self.assertIs(remove_component(single), single)

    def test_labels_follow_count(self):
        updated = add_component(midterm_preset())
        self.assertEqual([c.label for c in updated], ["Midterm 1", "Midterm 2", "Final"])
        self.assertEqual(updated.scheme, MIDTERM_SCHEME)


if __name__ == "__main__":
    unittest.main()
