import unittest

import numpy as np

from workbench.core import Attribute, Instances
from workbench.filters import Discretize, MakeIndicatorFilter, NominalToBinary, Remove, ReplaceMissingValues
from tests.synthetic import threshold_class, weather


class TestReplaceMissingValues(unittest.TestCase):
	def test_means_and_modes_from_training_data(self):
		d = weather()
		d.X[0, 0] = np.nan
		d.X[1, 1] = np.nan
		d.X[2, 4] = np.nan
		f = ReplaceMissingValues()
		out = f.fit_transform(d)
		self.assertEqual(out.X[0, 0], 2.0)
		expected = float(np.nanmean(d.X[:, 1]))
		self.assertAlmostEqual(out.X[1, 1], expected)
		self.assertTrue(np.isnan(out.X[2, 4]))

	def test_transform_uses_stored_values(self):
		d = weather()
		f = ReplaceMissingValues().set_input_format(d)
		row = d.X[0].copy()
		row[2] = np.nan
		self.assertAlmostEqual(f.transform_row(row)[2], float(np.mean(d.X[:, 2])))

	def test_use_filter_and_output_format(self):
		d = weather()
		f = ReplaceMissingValues().set_input_format(d)
		self.assertEqual(f.output_format().num_instances(), 0)
		self.assertEqual(ReplaceMissingValues.use_filter(d, f).num_instances(), 14)

	def test_transform_before_fit(self):
		with self.assertRaises(RuntimeError):
			ReplaceMissingValues().transform(weather())


class TestNominalToBinary(unittest.TestCase):
	def test_unsupervised(self):
		d = weather()
		out = NominalToBinary().fit_transform(d)
		names = [a.name for a in out.attributes]
		self.assertEqual(names[:3], ["outlook=sunny", "outlook=overcast", "outlook=rainy"])
		self.assertEqual(names[5], "windy")
		self.assertEqual(out.class_index, 6)
		np.testing.assert_array_equal(out.X[0, :3], [1.0, 0.0, 0.0])

	def test_supervised_numeric_class(self):
		atts = [Attribute.nominal("g", ["a", "b", "c"]), Attribute.numeric("y")]
		X = np.array([[0, 5.0], [1, 1.0], [2, 3.0], [0, 5.0]])
		d = Instances("s", atts, X, None, 1)
		out = NominalToBinary(supervised=True).fit_transform(d)
		self.assertEqual([a.name for a in out.attributes], ["g=c,a", "g=a", "y"])
		np.testing.assert_array_equal(out.X[:, 0], [1.0, 0.0, 1.0, 1.0])
		np.testing.assert_array_equal(out.X[:, 1], [1.0, 0.0, 0.0, 1.0])


class TestRemove(unittest.TestCase):
	def test_remove_and_keep(self):
		d = weather()
		out = Remove([1, 2]).fit_transform(d)
		self.assertEqual([a.name for a in out.attributes], ["outlook", "windy", "play"])
		self.assertEqual(out.class_index, 2)
		kept = Remove([0, 4], invert_selection=True).fit_transform(d)
		self.assertEqual(kept.num_attributes(), 2)
		self.assertEqual(kept.class_index, 1)

	def test_out_of_range(self):
		with self.assertRaises(ValueError):
			Remove([9]).fit_transform(weather())


class TestMakeIndicator(unittest.TestCase):
	def test_numeric_indicator(self):
		d = weather()
		out = MakeIndicatorFilter(attribute_index=0, value_indices="1,3").fit_transform(d)
		self.assertTrue(out.attribute(0).is_numeric())
		np.testing.assert_array_equal(out.X[:4, 0], [1.0, 1.0, 0.0, 1.0])

	def test_nominal_indicator(self):
		out = MakeIndicatorFilter(attribute_index=3, value_indices=[0], numeric=False).fit_transform(weather())
		self.assertEqual(out.attribute(3).values, ("neg", "pos"))

	def test_rejects_class_and_numeric(self):
		with self.assertRaises(ValueError):
			MakeIndicatorFilter(attribute_index=-1).fit_transform(weather())
		with self.assertRaises(ValueError):
			MakeIndicatorFilter(attribute_index=1).fit_transform(weather())


class TestDiscretize(unittest.TestCase):
	def test_finds_the_class_boundary(self):
		d = threshold_class()
		f = Discretize()
		out = f.fit_transform(d)
		cuts = f.cut_points[0]
		self.assertEqual(cuts.shape[0], 1)
		lo = d.X[d.X[:, 3] == 0, 0].max()
		hi = d.X[d.X[:, 3] == 1, 0].min()
		self.assertTrue(lo < cuts[0] < hi)
		self.assertTrue(out.attribute(0).is_nominal())
		np.testing.assert_array_equal(out.X[:, 0], d.X[:, 3])

	def test_needs_nominal_class(self):
		d = weather()
		d.set_class_index(1)
		with self.assertRaises(ValueError):
			Discretize().fit_transform(d)


if __name__ == "__main__":
	unittest.main()
