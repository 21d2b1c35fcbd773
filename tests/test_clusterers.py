import math
import unittest

import numpy as np

from workbench.clusterers import ClusterEvaluation, Cobweb, MakeDensityBasedClusterer
from workbench.core import Attribute, Instances, Utils
from tests.synthetic import blobs, weather


def features(data):
	return ClusterEvaluation.strip_class(data)


class TestCobweb(unittest.TestCase):
	def test_builds_a_hierarchy(self):
		d = features(blobs())
		cw = Cobweb()
		cw.build_clusterer(d)
		k = cw.number_of_clusters()
		self.assertGreaterEqual(k, 3)
		for i in range(d.num_instances()):
			c = cw.cluster_instance(d.X[i])
			self.assertTrue(0 <= c < k)
		text = cw.to_string()
		self.assertTrue(text.startswith("Number of merges: "))
		self.assertIn(f"Number of clusters: {k}", text)
		self.assertIn("node 0 [60]", text)

	def test_graph(self):
		d = features(blobs(n_per=4))
		cw = Cobweb(save_instance_data=True)
		cw.build_clusterer(d)
		graph = cw.graph()
		self.assertTrue(graph.startswith("digraph CobwebTree {"))
		self.assertIn('N0 [label="node 0  (12)" ', graph)
		self.assertIn("N0->N1", graph)
		self.assertIn("@relation", graph)

	def test_incremental_matches_batch(self):
		d = features(blobs())
		batch = Cobweb()
		batch.build_clusterer(d)
		inc = Cobweb()
		inc.init_clusterer(d)
		for i in range(d.num_instances()):
			inc.update_clusterer(d.X[i])
		inc.update_finished()
		self.assertEqual(inc.number_of_clusters(), batch.number_of_clusters())
		self.assertEqual(inc.number_merges, batch.number_merges)
		self.assertEqual(inc.number_splits, batch.number_splits)

	def check_node(self, node):
		rows = np.vstack(node.rows)
		w = np.asarray(node.row_weights)
		self.assertAlmostEqual(node.total_instances, float(np.sum(w)))
		for j, st in enumerate(node.numeric):
			present = ~np.isnan(rows[:, j])
			if st is None:
				np.testing.assert_allclose(node.counts[j], np.bincount(rows[present, j].astype(int), weights=w[present], minlength=node.counts[j].shape[0]), atol=1e-9)
			else:
				self.assertAlmostEqual(st.count, float(np.sum(w[present])))
				self.assertAlmostEqual(st.sum, float(np.sum(rows[present, j] * w[present])), places=6)
		if node.children is None:
			return
		self.assertGreaterEqual(len(node.children), 2)
		self.assertEqual(node.num_stored(), sum(c.num_stored() for c in node.children))
		self.assertAlmostEqual(node.total_instances, sum(c.total_instances for c in node.children))
		for child in node.children:
			self.check_node(child)

	def test_merges_and_splits_keep_node_statistics(self):
		merges = 0
		splits = 0
		for seed in range(6):
			X = Utils.rng(seed).normal(0.0, 3.0, size=(80, 2))
			d = Instances("noise", [Attribute.numeric("a"), Attribute.numeric("b")], X, None, -1)
			cw = Cobweb(acuity=0.5)
			cw.build_clusterer(d)
			merges += cw.number_merges
			splits += cw.number_splits
			self.assertEqual(cw.tree.num_stored(), 80)
			self.check_node(cw.tree)
			inc = Cobweb(acuity=0.5)
			inc.init_clusterer(d)
			for i in range(d.num_instances()):
				inc.update_clusterer(d.X[i])
			self.assertEqual((inc.number_merges, inc.number_splits), (cw.number_merges, cw.number_splits))
			self.assertEqual(inc.number_of_clusters(), cw.number_of_clusters())
		self.assertGreater(merges, 0)
		self.assertGreater(splits, 0)

	def test_nominal_attributes(self):
		d = features(weather())
		cw = Cobweb(seed=3)
		cw.build_clusterer(d)
		self.assertGreaterEqual(cw.number_of_clusters(), 1)
		self.assertEqual(cw.tree.num_stored(), 14)
		self.check_node(cw.tree)

	def test_rejects_wrong_row_length(self):
		cw = Cobweb()
		cw.init_clusterer(features(blobs()))
		with self.assertRaises(ValueError):
			cw.update_clusterer(np.zeros(5))

	def test_unbuilt(self):
		self.assertEqual(Cobweb().to_string(), "Cobweb hasn't been built yet!")
		with self.assertRaises(RuntimeError):
			Cobweb().number_of_clusters()
		with self.assertRaises(ValueError):
			Cobweb(acuity=0.0)

	def test_large_cutoff_collapses_tree(self):
		d = features(blobs(n_per=5))
		cw = Cobweb(cutoff=10.0)
		cw.build_clusterer(d)
		self.assertEqual(cw.number_of_clusters(), 1)


class TestDensityBasedClusterer(unittest.TestCase):
	def setUp(self):
		self.data = features(blobs())
		self.model = MakeDensityBasedClusterer()
		self.model.build_clusterer(self.data)

	def test_priors_and_distribution(self):
		k = self.model.number_of_clusters()
		priors = self.model.cluster_priors()
		self.assertEqual(priors.shape, (k,))
		self.assertAlmostEqual(float(np.sum(priors)), 1.0)
		self.assertTrue(np.all(priors > 0.0))
		dist = self.model.distribution_for_instance(self.data.X[0])
		self.assertAlmostEqual(float(np.sum(dist)), 1.0)
		self.assertTrue(math.isfinite(self.model.log_density(self.data.X[0])))

	def test_missing_values_contribute_nothing(self):
		row = self.data.X[0].copy()
		row[:] = np.nan
		np.testing.assert_allclose(self.model.log_joint_densities(row), np.log(self.model.cluster_priors()))

	def test_log_normal_density(self):
		self.assertAlmostEqual(MakeDensityBasedClusterer.log_normal_density(0.0, 0.0, 1.0), -0.5 * math.log(2.0 * math.pi))
		self.assertAlmostEqual(
			MakeDensityBasedClusterer.log_normal_density(1.0, 0.0, 2.0),
			-0.125 - 0.5 * math.log(2.0 * math.pi) - math.log(2.0),
		)

	def test_nominal_estimators(self):
		d = features(weather())
		m = MakeDensityBasedClusterer("Cobweb", clusterer_options={"seed": 1})
		m.build_clusterer(d)
		self.assertIn("Discrete Estimator.", m.to_string())
		self.assertIn("Normal Distribution.", m.to_string())

	def test_invalid_arguments(self):
		with self.assertRaises(TypeError):
			MakeDensityBasedClusterer(clusterer=object())
		with self.assertRaises(ValueError):
			MakeDensityBasedClusterer(min_std_dev=0.0)
		with self.assertRaises(RuntimeError):
			MakeDensityBasedClusterer().cluster_priors()


class TestClusterEvaluation(unittest.TestCase):
	def test_classes_to_clusters(self):
		d = blobs()
		ev = ClusterEvaluation.build_and_evaluate(Cobweb(), d)
		k = ev.clusterer.number_of_clusters()
		self.assertEqual(ev.assignments.shape, (60,))
		self.assertEqual(int(np.sum(ev.cluster_sizes)), 60)
		self.assertEqual(ev.confusion.shape, (k, 3))
		mapped = [int(c) for c in ev.classes_to_clusters if c >= 0]
		self.assertEqual(len(mapped), len(set(mapped)))
		self.assertTrue(0.0 <= ev.incorrect <= 60.0)
		text = ev.cluster_results_to_string()
		self.assertIn("Clustered Instances", text)
		self.assertIn("Class attribute: class", text)
		self.assertIn("Incorrectly clustered instances :", text)

	def test_perfect_mapping(self):
		atts = [Attribute.numeric("v"), Attribute.nominal("class", ["p", "q"])]
		X = np.array([[0.0, 0.0], [0.1, 0.0], [10.0, 1.0], [10.1, 1.0]])
		d = Instances("two", atts, X, None, 1)
		ev = ClusterEvaluation.build_and_evaluate(MakeDensityBasedClusterer(), d)
		self.assertTrue(math.isfinite(ev.log_likelihood))
		self.assertIn("Log likelihood:", ev.cluster_results_to_string())
		self.assertLessEqual(ev.incorrect, 2.0)

	def test_numeric_class_skips_mapping(self):
		d = weather()
		d.set_class_index(1)
		ev = ClusterEvaluation.build_and_evaluate(Cobweb(), d)
		self.assertIsNone(ev.class_attribute)
		self.assertNotIn("Classes to Clusters", ev.cluster_results_to_string())

	def test_rejects_non_clusterer(self):
		with self.assertRaises(TypeError):
			ClusterEvaluation("Cobweb")


if __name__ == "__main__":
	unittest.main()
