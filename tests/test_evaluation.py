import math
import unittest

import numpy as np

from workbench.classifiers import LinearRegression, ZeroR
from workbench.evaluation import Evaluation
from workbench.evaluation.splits import (
	KFold,
	RandomHoldout,
	StratifiedHoldout,
	StratifiedKFold,
	cross_validation_splits,
)
from tests.synthetic import blobs, linear, weather


class TestNominalEvaluation(unittest.TestCase):
	def setUp(self):
		self.data = weather()
		self.model = ZeroR()
		self.model.build_classifier(self.data)
		self.ev = Evaluation(self.data)
		self.pred = self.ev.evaluate_model(self.model, self.data)

	def test_counts(self):
		self.assertTrue(np.all(self.pred == 0.0))
		self.assertEqual(self.ev.correct, 9.0)
		self.assertEqual(self.ev.incorrect, 5.0)
		self.assertAlmostEqual(self.ev.pct_correct(), 900.0 / 14.0)
		self.assertEqual(self.ev.num_instances(), 14.0)
		np.testing.assert_array_equal(self.ev.confusion_matrix(), [[9.0, 0.0], [5.0, 0.0]])

	def test_kappa_of_majority_vote_is_zero(self):
		self.assertAlmostEqual(self.ev.kappa(), 0.0)

	def test_errors_relative_to_prior(self):
		self.assertAlmostEqual(self.ev.mean_absolute_error(), 6.5 / 14.0)
		self.assertAlmostEqual(self.ev.relative_absolute_error(), 100.0)
		self.assertAlmostEqual(self.ev.root_relative_squared_error(), 100.0)

	def test_information_scores(self):
		self.assertAlmostEqual(self.ev.kb_information(), 0.0)
		self.assertAlmostEqual(self.ev.sf_entropy_gain(), 0.0)
		self.assertGreater(self.ev.sf_prior_entropy(), 0.0)

	def test_per_class_measures(self):
		self.assertEqual(self.ev.true_positive_rate(0), 1.0)
		self.assertEqual(self.ev.false_positive_rate(0), 1.0)
		self.assertAlmostEqual(self.ev.precision(0), 9.0 / 14.0)
		self.assertEqual(self.ev.recall(1), 0.0)
		self.assertEqual(self.ev.f_measure(1), 0.0)
		self.assertEqual(self.ev.num_false_negatives(1), 5.0)

	def test_strings(self):
		summary = self.ev.to_summary_string(complexity_statistics=True)
		self.assertIn("Correctly Classified Instances", summary)
		self.assertIn("K&B Relative Info Score", summary)
		self.assertIn("Total Number of Instances", summary)
		matrix = self.ev.to_matrix_string()
		self.assertIn("<-- classified as", matrix)
		self.assertIn("| a = yes", matrix)
		self.assertIn("| b = no", matrix)
		self.assertIn("TP Rate", self.ev.to_class_details_string())

	def test_numeric_only_measures_raise(self):
		with self.assertRaises(ValueError):
			self.ev.correlation_coefficient()

	def test_missing_class_is_ignored(self):
		d = weather()
		d.X[0, 4] = np.nan
		ev = Evaluation(d)
		ev.evaluate_model(self.model, d)
		self.assertEqual(ev.missing_class, 1.0)
		self.assertEqual(ev.num_instances(), 13.0)
		self.assertIn("Ignored Class Unknown Instances", ev.to_summary_string())

	def test_weighted_predictions(self):
		ev = Evaluation(self.data)
		ev.evaluate_prediction(0.0, 0.0, weight=3.0)
		ev.evaluate_prediction(1.0, 0.0, weight=1.0)
		self.assertAlmostEqual(ev.pct_correct(), 75.0)

	def test_rejects_headers_without_class(self):
		d = weather()
		d.set_class_index(-1)
		with self.assertRaises(ValueError):
			Evaluation(d)
		with self.assertRaises(TypeError):
			Evaluation("weather")


class TestNumericEvaluation(unittest.TestCase):
	def test_good_fit(self):
		d = linear()
		m = LinearRegression()
		m.build_classifier(d)
		ev = Evaluation(d)
		ev.evaluate_model(m, d)
		self.assertGreater(ev.correlation_coefficient(), 0.999)
		self.assertLess(ev.root_mean_squared_error(), 0.05)
		self.assertLess(ev.root_relative_squared_error(), 5.0)
		self.assertIn("Correlation coefficient", ev.to_summary_string())
		with self.assertRaises(ValueError):
			ev.kappa()

	def test_mean_predictor(self):
		d = linear()
		m = ZeroR()
		m.build_classifier(d)
		ev = Evaluation(d)
		ev.evaluate_model(m, d)
		self.assertAlmostEqual(ev.correlation_coefficient(), 0.0)
		self.assertAlmostEqual(ev.relative_absolute_error(), 100.0)

	def test_unclassified_rows_are_left_out_of_errors(self):
		ev = Evaluation(linear())
		ev.evaluate_prediction(2.0, 1.0)
		ev.evaluate_prediction(float("nan"), 1.0)
		self.assertEqual(ev.unclassified, 1.0)
		self.assertAlmostEqual(ev.mean_absolute_error(), 1.0)


class TestCrossValidation(unittest.TestCase):
	def test_every_row_tested_once(self):
		d = weather()
		ev = Evaluation(d)
		ev.cross_validate_model(ZeroR(), d, folds=7, seed=1)
		self.assertEqual(ev.num_instances(), 14.0)
		self.assertEqual(ev.num_folds, 7)

	def test_regression_cv(self):
		d = linear()
		ev = Evaluation(d)
		ev.cross_validate_model(LinearRegression(), d, folds=5, seed=3)
		self.assertGreater(ev.correlation_coefficient(), 0.99)

	def test_too_many_folds(self):
		d = weather()
		with self.assertRaises(ValueError):
			Evaluation(d).cross_validate_model(ZeroR(), d, folds=15)


class TestSplits(unittest.TestCase):
	def test_kfold_partitions_rows(self):
		splits = KFold.splits(10, k=3, seed=0)
		self.assertEqual(len(splits), 3)
		tested = np.sort(np.concatenate([te for _, te in splits]))
		np.testing.assert_array_equal(tested, np.arange(10))
		for tr, te in splits:
			self.assertEqual(len(np.intersect1d(tr, te)), 0)
			self.assertEqual(len(tr) + len(te), 10)

	def test_kfold_is_deterministic(self):
		a = KFold.splits(12, k=4, seed=5)
		b = KFold.splits(12, k=4, seed=5)
		for (tr1, te1), (tr2, te2) in zip(a, b):
			np.testing.assert_array_equal(te1, te2)

	def test_stratified_kfold_balances_classes(self):
		y = np.array([0] * 10 + [1] * 5)
		for _, te in StratifiedKFold.splits(y, k=5, seed=1):
			self.assertEqual(int(np.sum(y[te] == 0)), 2)
			self.assertEqual(int(np.sum(y[te] == 1)), 1)

	def test_cross_validation_splits_dispatch(self):
		d = blobs(n_per=5)
		splits = cross_validation_splits(d, folds=5, seed=2)
		for _, te in splits:
			self.assertEqual(sorted(d.class_values()[te].tolist()), [0.0, 1.0, 2.0])
		self.assertEqual(len(cross_validation_splits(linear(), folds=4, seed=2)), 4)

	def test_holdouts(self):
		tr, te = RandomHoldout.split(20, test_size=0.25, seed=1)
		self.assertEqual(len(te), 5)
		self.assertEqual(len(np.union1d(tr, te)), 20)
		y = np.array([0] * 8 + [1] * 12)
		tr, te = StratifiedHoldout.split(y, test_size=0.25, seed=1)
		self.assertEqual(int(np.sum(y[te] == 0)), 2)
		self.assertEqual(int(np.sum(y[te] == 1)), 3)

	def test_invalid_arguments(self):
		with self.assertRaises(ValueError):
			KFold.splits(10, k=1)
		with self.assertRaises(ValueError):
			KFold.splits(3, k=4)
		with self.assertRaises(ValueError):
			RandomHoldout.split(10, test_size=1.5)

	def test_nan_is_not_a_number(self):
		self.assertTrue(math.isnan(Evaluation(weather()).pct_correct()))


if __name__ == "__main__":
	unittest.main()
