import json
import tempfile
import unittest
from pathlib import Path

import numpy as np

from workbench.classifiers import ZeroR
from workbench.io import ArffLoader, ArffSaver, CSVLoader, LibSVMLoader, SerializedModelSaver, load_dataset
from tests.synthetic import weather


ARFF = """% the weather data
@relation 'weather small'
@attribute outlook {sunny, overcast, 'rainy day'}
@attribute temperature real
@attribute play {yes,no}
@data
sunny,85,no
'rainy day',?,yes
overcast,70,yes,{2.5}
"""


class TestArff(unittest.TestCase):
	def test_loads(self):
		d = ArffLoader.loads(ARFF, class_index=-1)
		self.assertEqual(d.relation, "weather small")
		self.assertEqual(d.num_instances(), 3)
		self.assertEqual(d.class_index, 2)
		self.assertEqual(d.attribute(0).values, ("sunny", "overcast", "rainy day"))
		self.assertEqual(d.X[1, 0], 2.0)
		self.assertTrue(np.isnan(d.X[1, 1]))
		self.assertEqual(d.weights[2], 2.5)

	def test_sparse_rows(self):
		text = "@relation s\n@attribute a numeric\n@attribute b numeric\n@attribute c {x,y}\n@data\n{1 4.5,2 y}\n"
		d = ArffLoader.loads(text)
		np.testing.assert_array_equal(d.X[0], [0.0, 4.5, 1.0])

	def test_rejects_string_attributes(self):
		with self.assertRaises(ValueError):
			ArffLoader.loads("@relation r\n@attribute s string\n@data\n'a'\n")

	def test_rejects_unknown_label(self):
		with self.assertRaises(ValueError):
			ArffLoader.loads("@relation r\n@attribute c {a,b}\n@data\nz\n")

	def test_rejects_wrong_row_length(self):
		with self.assertRaises(ValueError):
			ArffLoader.loads("@relation r\n@attribute a numeric\n@attribute b numeric\n@data\n1\n")

	def test_saver_output_reloads(self):
		d = ArffLoader.loads(ARFF, class_index=-1)
		text = ArffSaver.dumps(d)
		self.assertIn("@attribute outlook {sunny,overcast,'rainy day'}", text)
		self.assertIn("'rainy day',?,yes", text)
		again = ArffLoader.loads(text, class_index=-1)
		np.testing.assert_array_equal(np.isnan(again.X), np.isnan(d.X))
		np.testing.assert_array_equal(again.weights, d.weights)


class TestLibSVM(unittest.TestCase):
	def test_loads(self):
		d = LibSVMLoader.loads("1 1:0.5 3:2\n-1 2:1.5 # comment\n\n")
		self.assertEqual(d.num_attributes(), 4)
		self.assertEqual(d.class_index, 3)
		np.testing.assert_array_equal(d.X[0], [0.5, 0.0, 2.0, 1.0])
		np.testing.assert_array_equal(d.X[1], [0.0, 1.5, 0.0, -1.0])

	def test_bad_index(self):
		with self.assertRaises(ValueError):
			LibSVMLoader.loads("1 0:3\n")


class TestFilesAndModels(unittest.TestCase):
	def setUp(self):
		self.tmp = tempfile.TemporaryDirectory()
		self.dir = Path(self.tmp.name)

	def tearDown(self):
		self.tmp.cleanup()

	def test_csv_loader(self):
		p = self.dir / "toy.csv"
		p.write_text("a,b,label\n1.0,x,yes\n2.0,?,no\n3.5,y,yes\n", encoding="utf-8")
		d = CSVLoader.load(p, class_column="label")
		self.assertEqual(d.relation, "toy")
		self.assertTrue(d.attribute(0).is_numeric())
		self.assertTrue(d.attribute(1).is_nominal())
		self.assertTrue(np.isnan(d.X[1, 1]))
		self.assertEqual(d.class_index, 2)

	def test_load_dataset_class_spec(self):
		p = self.dir / "w.arff"
		ArffSaver.save(weather(), p)
		self.assertEqual(load_dataset(p).class_index, 4)
		self.assertEqual(load_dataset(p, "first").class_index, 0)
		self.assertEqual(load_dataset(p, "2").class_index, 1)
		self.assertEqual(load_dataset(p, "windy").class_index, 3)
		self.assertEqual(load_dataset(p, None).class_index, -1)
		with self.assertRaises(ValueError):
			load_dataset(p, "nosuch")
		with self.assertRaises(ValueError):
			load_dataset(self.dir / "data.xyz")

	def test_model_store(self):
		d = weather()
		m = ZeroR()
		m.build_classifier(d)
		path = self.dir / "models" / "zero.pkl"
		meta = SerializedModelSaver().save(m, d.empty_copy(), path)
		self.assertEqual(meta["scheme"], "ZeroR")
		side = json.loads(SerializedModelSaver.sidecar_path(path).read_text(encoding="utf-8"))
		self.assertEqual(side["class_index"], 4)
		model, names = SerializedModelSaver().load(path)
		self.assertEqual(names[-1], "play")
		self.assertEqual(model.classify_instance(d.X[0]), m.classify_instance(d.X[0]))

	def test_model_store_detects_tampering(self):
		d = weather()
		m = ZeroR()
		m.build_classifier(d)
		path = self.dir / "zero.pkl"
		SerializedModelSaver().save(m, d, path)
		path.write_bytes(path.read_bytes() + b"x")
		with self.assertRaises(ValueError):
			SerializedModelSaver().load(path)


if __name__ == "__main__":
	unittest.main()
