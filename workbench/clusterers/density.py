"""
MakeDensityBasedClusterer
-------------------------
Wraps a hard clusterer and fits, per cluster, an independent density for
every attribute:

  • nominal: Laplace-corrected value frequencies (counts start at 1)
  • numeric: normal with the weighted ML mean / std (std floored by
    min_std_dev; an empty cluster gets an effectively flat normal)

Cluster priors are Laplace-corrected weighted cluster sizes. The joint
log density of a row under cluster k is log prior_k plus the sum of its
per-attribute log densities; missing values contribute nothing.
"""

from __future__ import annotations
import math
from typing import Dict, List, Optional, Union

import numpy as np
from scipy.special import logsumexp

from workbench.core.instances import Instances
from workbench.core.utils import Utils
from .base import Clusterer


LOG_SQRT_2PI = math.log(math.sqrt(2.0 * math.pi))


class MakeDensityBasedClusterer(Clusterer):
	def __init__(self, clusterer: Union[Clusterer, str, None] = None, min_std_dev: float = 1e-6, clusterer_options: Optional[Dict[str, object]] = None) -> None:
		super().__init__()
		if clusterer is None:
			from .cobweb import Cobweb
			clusterer = Cobweb()
		elif isinstance(clusterer, str):
			from workbench.registry import make_scheme
			clusterer = make_scheme(clusterer, clusterer_options or {})
		if not isinstance(clusterer, Clusterer):
			raise TypeError(f"clusterer must be a Clusterer, got {type(clusterer).__name__}")
		if not float(min_std_dev) > 0.0:
			raise ValueError("min_std_dev must be > 0")
		self.clusterer = clusterer
		self.min_std_dev = float(min_std_dev)
		self.priors = np.zeros(0, dtype=np.float64)
		self.discrete: List[List[Optional[np.ndarray]]] = []
		self.means = np.zeros((0, 0), dtype=np.float64)
		self.std_devs = np.zeros((0, 0), dtype=np.float64)

	def options(self) -> Dict[str, object]:
		return {"clusterer": type(self.clusterer).__name__, "clusterer_options": self.clusterer.options(), "min_std_dev": self.min_std_dev}

	def build_clusterer(self, data: Instances) -> None:
		self.capabilities().test(data)
		self.clusterer.build_clusterer(data)
		k = self.clusterer.number_of_clusters()
		n, m = data.X.shape
		w = data.weights
		assign = np.asarray([self.clusterer.cluster_instance(data.X[i]) for i in range(n)], dtype=np.int64)
		sizes = np.zeros(k, dtype=np.float64)
		np.add.at(sizes, assign, w)

		self.discrete = [[None] * m for _ in range(k)]
		self.means = np.zeros((k, m), dtype=np.float64)
		self.std_devs = np.zeros((k, m), dtype=np.float64)
		for j, att in enumerate(data.attributes):
			col = data.X[:, j]
			present = ~np.isnan(col)
			if att.is_nominal():
				for c in range(k):
					counts = np.ones(att.num_values(), dtype=np.float64)
					sel = present & (assign == c)
					np.add.at(counts, col[sel].astype(np.int64), w[sel])
					self.discrete[c][j] = counts / float(np.sum(counts))
				continue
			for c in range(k):
				sel = present & (assign == c)
				if sizes[c] > 0:
					mean = float(np.sum(w[sel] * col[sel])) / sizes[c]
					var = float(np.sum(w[sel] * (col[sel] - mean) ** 2)) / sizes[c]
					sd = math.sqrt(var)
				else:
					mean = 0.0
					sd = float(np.finfo(np.float64).max)
				self.means[c, j] = mean
				self.std_devs[c, j] = max(sd, self.min_std_dev)
		self.priors = Utils.normalize(sizes + 1.0)
		self._header = data.empty_copy()

	def number_of_clusters(self) -> int:
		self._check_built()
		return int(self.priors.shape[0])

	def cluster_priors(self) -> np.ndarray:
		self._check_built()
		return self.priors.copy()

	@staticmethod
	def log_normal_density(x: float, mean: float, std_dev: float) -> float:
		diff = float(x) - float(mean)
		std_dev = float(std_dev)
		return -(diff * diff / (2.0 * std_dev * std_dev)) - LOG_SQRT_2PI - math.log(std_dev)

	def log_density_per_cluster(self, row: np.ndarray) -> np.ndarray:
		"""Per-cluster log density of `row` (priors not included)."""
		h = self._check_built()
		r = np.asarray(row, dtype=np.float64).ravel()
		k = self.priors.shape[0]
		out = np.zeros(k, dtype=np.float64)
		for c in range(k):
			lp = 0.0
			for j, att in enumerate(h.attributes):
				v = r[j]
				if np.isnan(v):
					continue
				if att.is_nominal():
					lp += math.log(self.discrete[c][j][int(v)])
				else:
					lp += self.log_normal_density(v, self.means[c, j], self.std_devs[c, j])
			out[c] = lp
		return out

	def log_joint_densities(self, row: np.ndarray) -> np.ndarray:
		return self.log_density_per_cluster(row) + np.log(self.priors)

	def log_density(self, row: np.ndarray) -> float:
		"""Log of the mixture density of `row`."""
		return float(logsumexp(self.log_joint_densities(row)))

	def distribution_for_instance(self, row: np.ndarray) -> np.ndarray:
		lj = self.log_joint_densities(row)
		return np.exp(lj - logsumexp(lj))

	def cluster_instance(self, row: np.ndarray) -> int:
		return int(np.argmax(self.distribution_for_instance(row)))

	def to_string(self) -> str:
		if self._header is None:
			return "MakeDensityBasedClusterer: No model built yet."
		lines = [f"MakeDensityBasedClusterer: \n\nWrapped clusterer: {self.clusterer.to_string()}"]
		lines.append("\nFitted estimators (with ML estimates of variance):\n")
		for c in range(self.priors.shape[0]):
			lines.append(f"\nCluster: {c} Prior probability: {Utils.double_to_string(self.priors[c], 0, 4)}\n\n")
			for j, att in enumerate(self._header.attributes):
				lines.append(f"Attribute: {att.name}\n")
				if att.is_nominal():
					probs = " ".join(
						f"{att.value(v)}={Utils.double_to_string(p, 0, 4)}" for v, p in enumerate(self.discrete[c][j])
					)
					lines.append(f"Discrete Estimator. {probs}\n")
				else:
					mean = Utils.double_to_string(self.means[c, j], 0, 4)
					sd = Utils.double_to_string(self.std_devs[c, j], 0, 4)
					lines.append(f"Normal Distribution. Mean = {mean} StdDev = {sd}\n")
		return "".join(lines)
