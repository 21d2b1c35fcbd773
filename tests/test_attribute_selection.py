import unittest

import numpy as np

from workbench.attribute_selection import (
	AttributeSelection,
	BestFirst,
	CfsSubsetEval,
	FCBFSearch,
	Ranker,
	ReliefFAttributeEval,
	SymmetricalUncertAttributeEval,
	SymmetricalUncertAttributeSetEval,
)
from workbench.attribute_selection.best_first import BoundedOpenList
from tests.synthetic import linear, threshold_class, weather


class TestBoundedOpenList(unittest.TestCase):
	def test_keeps_best_first_and_caps_size(self):
		ol = BoundedOpenList(2)
		ol.add(frozenset({1}), 0.5)
		ol.add(frozenset({2}), 0.9)
		ol.add(frozenset({3}), 0.1)
		self.assertEqual(len(ol), 2)
		self.assertEqual(ol.pop_head().group, frozenset({2}))
		self.assertEqual(ol.pop_head().group, frozenset({1}))
		with self.assertRaises(IndexError):
			ol.pop_head()

	def test_ties_keep_insertion_order(self):
		ol = BoundedOpenList(5)
		ol.add(frozenset({1}), 0.5)
		ol.add(frozenset({2}), 0.5)
		self.assertEqual(ol.pop_head().group, frozenset({1}))


class TestBestFirstCfs(unittest.TestCase):
	def test_forward_picks_one_of_the_duplicates(self):
		d = threshold_class()
		sel = AttributeSelection(CfsSubsetEval(), BestFirst())
		chosen = sel.select_attributes(d)
		self.assertEqual(chosen[-1], 3)
		self.assertEqual(sel.number_attributes_selected(), 1)
		self.assertIn(int(chosen[0]), (0, 1))
		self.assertIn("Selected attributes: ", sel.to_results_string())

	def test_backward_and_bidirectional(self):
		d = threshold_class()
		for direction in ("backward", "bidirectional"):
			search = BestFirst(direction=direction)
			sel = AttributeSelection(CfsSubsetEval(), search)
			chosen = [int(j) for j in sel.select_attributes(d) if j != 3]
			self.assertEqual(len(chosen), 1)
			self.assertIn(chosen[0], (0, 1))
			self.assertGreater(search.total_evals, 1)
			self.assertAlmostEqual(search.best_merit, 1.0)

	def test_start_set_and_debug_trace(self):
		d = threshold_class()
		search = BestFirst(start_set="3", debug=True)
		AttributeSelection(CfsSubsetEval(locally_predictive=False), search).select_attributes(d)
		kinds = {e.kind for e in search.trace}
		self.assertEqual(kinds, {"evaluate", "expand"})
		self.assertIn("Start set: 3", search.to_string())

	def test_invalid_options(self):
		with self.assertRaises(ValueError):
			BestFirst(direction="sideways")
		with self.assertRaises(ValueError):
			BestFirst(search_termination=0)
		with self.assertRaises(ValueError):
			BestFirst(start_set="x-y")

	def test_search_needs_subset_evaluator(self):
		with self.assertRaises(TypeError):
			AttributeSelection(ReliefFAttributeEval(), BestFirst()).select_attributes(weather())

	def test_numeric_class(self):
		d = linear()
		chosen = AttributeSelection(CfsSubsetEval(), BestFirst()).select_attributes(d)
		self.assertIn(0, list(chosen))
		self.assertEqual(chosen[-1], 3)

	def test_cross_validated_selection(self):
		d = threshold_class()
		sel = AttributeSelection(CfsSubsetEval(), BestFirst())
		df = sel.cross_validate_attributes(d, folds=5, seed=1)
		self.assertEqual(list(df.columns), ["att_index", "attribute", "folds_selected", "percent"])
		self.assertEqual(df.shape[0], 3)
		self.assertEqual(int(df["folds_selected"].iloc[0] + df["folds_selected"].iloc[1]), 5)
		self.assertIn("number of folds (%)", sel.cv_results_string())


class TestRankers(unittest.TestCase):
	def test_symmetrical_uncertainty_ranking(self):
		d = threshold_class()
		search = Ranker(threshold=0.5)
		sel = AttributeSelection(SymmetricalUncertAttributeEval(), search)
		chosen = sel.select_attributes(d)
		ranked = sel.ranked_attributes()
		self.assertEqual([int(j) for j in ranked[:, 0]], [0, 1, 2])
		self.assertAlmostEqual(ranked[0, 1], 1.0)
		self.assertEqual(list(chosen), [0, 1, 3])
		self.assertIn("Ranked attributes:", sel.to_results_string())

	def test_num_to_select_overrides_threshold(self):
		d = threshold_class()
		sel = AttributeSelection(SymmetricalUncertAttributeEval(), Ranker(threshold=0.5, num_to_select=1))
		self.assertEqual(list(sel.select_attributes(d)), [0, 3])

	def test_ranker_start_set_ignores_attributes(self):
		d = threshold_class()
		sel = AttributeSelection(SymmetricalUncertAttributeEval(), Ranker(start_set="1"))
		sel.select_attributes(d)
		self.assertNotIn(0, [int(j) for j in sel.ranked_attributes()[:, 0]])

	def test_relieff_nominal_class(self):
		d = threshold_class()
		ev = ReliefFAttributeEval(num_neighbours=5)
		sel = AttributeSelection(ev, Ranker())
		sel.select_attributes(d)
		ranked = sel.ranked_attributes()
		self.assertEqual(int(ranked[-1, 0]), 2)
		self.assertGreater(ranked[0, 1], ranked[-1, 1])

	def test_relieff_numeric_class(self):
		d = linear()
		sel = AttributeSelection(ReliefFAttributeEval(num_neighbours=10), Ranker())
		sel.select_attributes(d)
		self.assertEqual(int(sel.ranked_attributes()[-1, 0]), 2)

	def test_relieff_invalid_options(self):
		with self.assertRaises(ValueError):
			ReliefFAttributeEval(sample_size=0)
		with self.assertRaises(ValueError):
			ReliefFAttributeEval(num_neighbours=0)

	def test_ranking_cross_validation(self):
		d = threshold_class()
		sel = AttributeSelection(SymmetricalUncertAttributeEval(), Ranker())
		df = sel.cross_validate_attributes(d, folds=3, seed=2)
		self.assertEqual(int(df["att_index"].iloc[0]), 1)
		self.assertAlmostEqual(float(df["rank_mean"].iloc[0]), 1.0)
		self.assertIn("average merit", sel.cv_results_string())

	def test_ranked_before_search(self):
		with self.assertRaises(RuntimeError):
			Ranker().ranked_attributes()


class TestFCBF(unittest.TestCase):
	def test_drops_redundant_duplicate(self):
		d = threshold_class()
		search = FCBFSearch()
		chosen = AttributeSelection(SymmetricalUncertAttributeSetEval(), search).select_attributes(d)
		self.assertEqual(list(chosen), [0, 3])
		self.assertEqual(search.num_redundant, 2)

	def test_needs_set_evaluator(self):
		with self.assertRaises(TypeError):
			AttributeSelection(SymmetricalUncertAttributeEval(), FCBFSearch()).select_attributes(threshold_class())


if __name__ == "__main__":
	unittest.main()
