import math
import unittest

import numpy as np
import pandas as pd

from workbench.core import Attribute, Capabilities, Instances, OptionParser, Range, Stats, Utils
from workbench.core.contingency import ContingencyTables as CT
from tests.synthetic import weather


class TestAttribute(unittest.TestCase):
	def test_nominal_values(self):
		a = Attribute.nominal("colour", ["red", "green"])
		self.assertTrue(a.is_nominal())
		self.assertEqual(a.num_values(), 2)
		self.assertEqual(a.index_of_value("green"), 1)
		self.assertEqual(a.index_of_value("blue"), -1)
		self.assertEqual(a.value(0), "red")

	def test_invalid_declarations(self):
		with self.assertRaises(ValueError):
			Attribute("s", "string")
		with self.assertRaises(ValueError):
			Attribute.nominal("n", [])
		with self.assertRaises(ValueError):
			Attribute.nominal("n", ["a", "a"])


class TestInstances(unittest.TestCase):
	def test_shape_and_class(self):
		d = weather()
		self.assertEqual(d.num_instances(), 14)
		self.assertEqual(d.num_attributes(), 5)
		self.assertEqual(d.class_attribute().name, "play")
		self.assertEqual(d.num_classes(), 2)
		self.assertEqual(list(d.non_class_indices()), [0, 1, 2, 3])

	def test_column_mismatch_raises(self):
		with self.assertRaises(ValueError):
			Instances("r", [Attribute.numeric("a")], np.zeros((3, 2)))

	def test_class_index_out_of_range(self):
		d = weather()
		with self.assertRaises(ValueError):
			d.set_class_index(5)

	def test_select_attributes_moves_class(self):
		d = weather()
		s = d.select_attributes([4, 0])
		self.assertEqual(s.class_index, 0)
		self.assertEqual(s.attribute(1).name, "outlook")
		s2 = d.select_attributes([0, 1])
		self.assertEqual(s2.class_index, -1)

	def test_subset_copies_rows(self):
		d = weather()
		s = d.subset([0, 2])
		s.X[0, 1] = -1.0
		self.assertEqual(d.X[0, 1], 85.0)
		mask = np.zeros(14, dtype=bool)
		mask[:3] = True
		self.assertEqual(d.subset(mask).num_instances(), 3)

	def test_append_and_weights(self):
		d = weather()
		both = d.append(d.subset([0, 1]))
		self.assertEqual(both.num_instances(), 16)
		self.assertEqual(both.sum_of_weights(), 16.0)
		with self.assertRaises(ValueError):
			d.append(d.select_attributes([0, 4]))
		c = d.copy()
		c.X[0, 1] = 0.0
		self.assertEqual(d.X[0, 1], 85.0)

	def test_delete_with_missing_class(self):
		d = weather()
		d.X[0, 4] = np.nan
		self.assertEqual(d.delete_with_missing_class().num_instances(), 13)

	def test_sorted_by_puts_missing_last(self):
		d = weather()
		d.X[3, 1] = np.nan
		s = d.sorted_by(1)
		self.assertTrue(np.isnan(s.X[-1, 1]))
		self.assertEqual(s.X[0, 1], 64.0)

	def test_frame_round_trip(self):
		d = weather()
		df = d.to_frame()
		self.assertEqual(df["outlook"].iloc[0], "sunny")
		back = Instances.from_frame(df, relation="weather", class_column="play")
		self.assertEqual(back.class_index, 4)
		self.assertTrue(back.attribute(0).is_nominal())
		self.assertTrue(back.attribute(1).is_numeric())

	def test_from_frame_missing_labels(self):
		df = pd.DataFrame({"a": ["x", None, "y"], "b": [1.0, 2.0, np.nan]})
		d = Instances.from_frame(df)
		self.assertTrue(np.isnan(d.X[1, 0]))
		self.assertTrue(np.isnan(d.X[2, 1]))
		self.assertEqual(d.attribute(0).values, ("x", "y"))


class TestCapabilities(unittest.TestCase):
	def test_rejects_missing_class_index(self):
		d = weather()
		d.set_class_index(-1)
		with self.assertRaises(ValueError):
			Capabilities(owner="T", nominal_class=True).test(d)

	def test_rejects_class_type(self):
		with self.assertRaises(ValueError):
			Capabilities(owner="T", numeric_class=True).test(weather())

	def test_rejects_missing_values(self):
		d = weather()
		d.X[0, 1] = np.nan
		with self.assertRaises(ValueError):
			Capabilities(owner="T", nominal_class=True, missing_values=False).test(d)

	def test_minimum_instances(self):
		with self.assertRaises(ValueError):
			Capabilities(owner="T", nominal_class=True, min_instances=20).test(weather())

	def test_accepts(self):
		Capabilities(owner="T", nominal_class=True).test(weather())


class TestStats(unittest.TestCase):
	def test_mean_and_std(self):
		s = Stats()
		for v in [2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0]:
			s.add(v)
		s.calculate_derived()
		self.assertAlmostEqual(s.mean, 5.0)
		self.assertAlmostEqual(s.std_dev, math.sqrt(32.0 / 7.0))
		self.assertEqual(s.min, 2.0)
		self.assertEqual(s.max, 9.0)

	def test_subtract(self):
		s = Stats()
		s.add(1.0)
		s.add(3.0)
		s.subtract(3.0)
		s.calculate_derived()
		self.assertAlmostEqual(s.mean, 1.0)
		self.assertTrue(math.isnan(s.std_dev))


class TestUtils(unittest.TestCase):
	def test_tolerant_comparisons(self):
		self.assertTrue(Utils.eq(1.0, 1.0 + 1e-9))
		self.assertTrue(Utils.gr(1.0, 0.5))
		self.assertFalse(Utils.gr(1.0, 1.0 + 1e-9))
		self.assertTrue(Utils.sm(0.5, 1.0))

	def test_normalize(self):
		np.testing.assert_allclose(Utils.normalize(np.array([1.0, 3.0])), [0.25, 0.75])
		np.testing.assert_allclose(Utils.normalize(np.zeros(4)), [0.25] * 4)

	def test_double_to_string(self):
		self.assertEqual(Utils.double_to_string(1.5, 0, 3), "1.5")
		self.assertEqual(Utils.double_to_string(1.5, 6, 2), "  1.50")
		self.assertEqual(Utils.double_to_string(float("nan")), "NaN")
		self.assertEqual(Utils.double_to_string(-0.0001, 0, 2), "0")

	def test_rng_is_deterministic(self):
		a = Utils.rng(7).random(5)
		b = Utils.rng(7).random(5)
		np.testing.assert_array_equal(a, b)


class TestRange(unittest.TestCase):
	def test_selection(self):
		self.assertEqual(list(Range("1,3-4").selection(5)), [0, 2, 3])
		self.assertEqual(list(Range("first-last").selection(2)), [0, 1, 2])
		self.assertEqual(list(Range("2-last").selection(3)), [1, 2, 3])

	def test_invert(self):
		r = Range("!1,2")
		self.assertEqual(list(r.selection(3)), [2, 3])
		self.assertEqual(r.ranges, "!1,2")
		none = Range("", invert=True)
		self.assertEqual(none.ranges, "!")
		again = Range(none.ranges)
		self.assertTrue(again.invert)
		self.assertEqual(list(again.selection(2)), [0, 1, 2])

	def test_invalid(self):
		with self.assertRaises(ValueError):
			Range("a-b")
		with self.assertRaises(ValueError):
			Range("9").selection(3)

	def test_indices_to_string(self):
		self.assertEqual(Range.indices_to_string([0, 1, 2, 5]), "1-3,6")


class TestOptionParser(unittest.TestCase):
	def test_parse(self):
		opts = OptionParser.parse(["min-num-instances=8", "unpruned=true", "direction=backward", "ratio=0.5"])
		self.assertEqual(opts, {"min_num_instances": 8, "unpruned": True, "direction": "backward", "ratio": 0.5})

	def test_malformed(self):
		with self.assertRaises(ValueError):
			OptionParser.parse(["novalue"])
		with self.assertRaises(ValueError):
			OptionParser.parse(["=3"])


class TestContingencyTables(unittest.TestCase):
	def test_entropy(self):
		self.assertAlmostEqual(CT.entropy([1, 1]), 1.0)
		self.assertAlmostEqual(CT.entropy([4, 0]), 0.0)

	def test_symmetrical_uncertainty(self):
		perfect = np.array([[5.0, 0.0], [0.0, 5.0]])
		independent = np.array([[5.0, 5.0], [5.0, 5.0]])
		self.assertAlmostEqual(CT.symmetrical_uncertainty(perfect), 1.0)
		self.assertAlmostEqual(CT.symmetrical_uncertainty(independent), 0.0)

	def test_rank_with_ties(self):
		ranked = CT.rank_with_ties([(2, 0.5), (0, 0.9), (1, 0.5)])
		self.assertEqual([it.index for it in ranked], [0, 1, 2])


if __name__ == "__main__":
	unittest.main()
