"""
ClusterEvaluation
-----------------
Evaluates a clusterer on a dataset. When the data carries a class the
clusterer never sees it: the class column is removed before clustering
and used afterwards for a classes-to-clusters evaluation, where each
cluster is mapped to at most one class (and vice versa) so that the
number of correctly grouped instances is maximal.
"""

from __future__ import annotations
from typing import List, Optional

import numpy as np
from scipy.optimize import linear_sum_assignment

from workbench.core.instances import Instances
from workbench.core.utils import Utils
from workbench.filters.remove import Remove
from .base import Clusterer
from .density import MakeDensityBasedClusterer


class ClusterEvaluation:
	def __init__(self, clusterer: Clusterer) -> None:
		if not isinstance(clusterer, Clusterer):
			raise TypeError(f"clusterer must be a Clusterer, got {type(clusterer).__name__}")
		self.clusterer = clusterer
		self.assignments = np.zeros(0, dtype=np.int64)
		self.cluster_sizes = np.zeros(0, dtype=np.int64)
		self.log_likelihood = float("nan")
		self.class_attribute: Optional[str] = None
		self.class_labels: List[str] = []
		self.confusion = np.zeros((0, 0), dtype=np.float64)
		self.classes_to_clusters = np.zeros(0, dtype=np.int64)
		self.incorrect = float("nan")
		self.num_evaluated = 0

	@staticmethod
	def strip_class(data: Instances) -> Instances:
		"""The data without its class column (unchanged when no class is set)."""
		if data.class_index < 0:
			return data
		return Remove([data.class_index]).fit_transform(data)

	@classmethod
	def build_and_evaluate(cls, clusterer: Clusterer, data: Instances) -> "ClusterEvaluation":
		"""Build `clusterer` on `data` minus its class, then evaluate on `data`."""
		clusterer.build_clusterer(cls.strip_class(data))
		ev = cls(clusterer)
		ev.evaluate_clusterer(data)
		return ev

	def evaluate_clusterer(self, data: Instances) -> None:
		k = self.clusterer.number_of_clusters()
		plain = self.strip_class(data)
		n = plain.num_instances()
		self.num_evaluated = n
		assign = np.asarray([self.clusterer.cluster_instance(plain.X[i]) for i in range(n)], dtype=np.int64)
		self.assignments = assign
		self.cluster_sizes = np.bincount(assign, minlength=k).astype(np.int64)

		self.log_likelihood = float("nan")
		if isinstance(self.clusterer, MakeDensityBasedClusterer):
			total = float(np.sum(plain.weights))
			ll = 0.0
			for i in range(n):
				ll += float(plain.weights[i]) * self.clusterer.log_density(plain.X[i])
			if total > 0:
				self.log_likelihood = ll / total

		self.class_attribute = None
		self.class_labels = []
		self.confusion = np.zeros((0, 0), dtype=np.float64)
		self.classes_to_clusters = np.zeros(0, dtype=np.int64)
		self.incorrect = float("nan")
		if data.class_index >= 0:
			catt = data.class_attribute()
			if not catt.is_nominal():
				print("ClusterEvaluation.evaluate_clusterer: class is numeric; skipping classes to clusters")
				return
			self._classes_to_clusters(data, assign, k)

	def _classes_to_clusters(self, data: Instances, assign: np.ndarray, k: int) -> None:
		catt = data.class_attribute()
		y = data.class_values()
		nc = catt.num_values()
		conf = np.zeros((k, nc), dtype=np.float64)
		for c, v in zip(assign, y):
			if np.isnan(v):
				continue
			conf[c, int(v)] += 1.0
		rows, cols = linear_sum_assignment(conf, maximize=True)
		mapping = np.full(k, -1, dtype=np.int64)
		for r, c in zip(rows, cols):
			if conf[r, c] > 0:
				mapping[r] = c
		correct = 0.0
		for r in range(k):
			if mapping[r] >= 0:
				correct += conf[r, mapping[r]]
		self.class_attribute = catt.name
		self.class_labels = list(catt.values)
		self.confusion = conf
		self.classes_to_clusters = mapping
		self.incorrect = float(np.sum(conf)) - correct

	def cluster_results_to_string(self) -> str:
		n = max(1, self.num_evaluated)
		lines = ["Clustered Instances\n"]
		for c, size in enumerate(self.cluster_sizes):
			if size > 0:
				pct = Utils.double_to_string(100.0 * size / n, 3, 0)
				lines.append(f"{c}      {Utils.double_to_string(size, 0, 0)} ({pct}%)")
		text = "\n".join(lines) + "\n"
		if not np.isnan(self.log_likelihood):
			text += f"\n\nLog likelihood: {Utils.double_to_string(self.log_likelihood, 1, 5)}\n"
		if self.class_attribute is not None:
			text += self._classes_to_clusters_string()
		return text

	def _classes_to_clusters_string(self) -> str:
		k = self.confusion.shape[0]
		width = max(3, len(str(int(np.max(self.confusion)))) + 1 if self.confusion.size else 3)
		lines = [f"\nClass attribute: {self.class_attribute}", "Classes to Clusters:\n"]
		head = "".join(str(c).rjust(width) for c in range(k))
		lines.append(head + "  <-- assigned to cluster")
		for v, label in enumerate(self.class_labels):
			row = "".join(Utils.double_to_string(self.confusion[c, v], width, 0) for c in range(k))
			lines.append(f"{row} | {label}")
		lines.append("")
		for c in range(k):
			target = self.classes_to_clusters[c]
			name = "No class" if target < 0 else self.class_labels[target]
			lines.append(f"Cluster {c} <-- {name}")
		total = float(np.sum(self.confusion))
		pct = 100.0 * self.incorrect / total if total > 0 else 0.0
		lines.append("")
		lines.append(
			f"Incorrectly clustered instances :\t{Utils.double_to_string(self.incorrect, 0, 1)}\t"
			f"{Utils.double_to_string(pct, 8, 4)} %"
		)
		return "\n".join(lines) + "\n"
