"""
Supervised discretization (Fayyad & Irani's MDL method).

Cut points for each numeric attribute are found recursively: the boundary
minimizing class entropy is accepted only if its information gain exceeds
the MDL cost (log2(N-1) + delta) / N. Numeric attributes with no accepted
cut point become a single-valued nominal attribute ('All').
"""

from __future__ import annotations
from typing import List, Optional

import numpy as np

from workbench.core.attribute import Attribute
from workbench.core.contingency import ContingencyTables as CT
from workbench.core.instances import Instances
from workbench.core.utils import Utils
from .base import Filter


class Discretize(Filter):
	def __init__(self) -> None:
		super().__init__()
		self.cut_points: List[Optional[np.ndarray]] = []

	@staticmethod
	def _mdl_accepts(prior: np.ndarray, best: np.ndarray, n: float) -> bool:
		num_classes_total = int(np.sum(prior > 0))
		num_classes_left = int(np.sum(best[0] > 0))
		num_classes_right = int(np.sum(best[1] > 0))
		entropy_total = CT.entropy(prior)
		entropy_left = CT.entropy(best[0])
		entropy_right = CT.entropy(best[1])
		gain = entropy_total - CT.entropy_conditioned_on_rows(best)
		delta = Utils.log2(max(1.0, 3.0 ** num_classes_total - 2.0)) - (
			num_classes_total * entropy_total
			- num_classes_left * entropy_left
			- num_classes_right * entropy_right
		)
		if n <= 1.0:
			return False
		return gain > (Utils.log2(n - 1.0) + delta) / n

	def _cut_points_for_subset(self, v: np.ndarray, y: np.ndarray, w: np.ndarray, k: int, first: int, last_plus_one: int) -> Optional[List[float]]:
		if last_plus_one - first < 2:
			return None
		prior = np.zeros(k, dtype=float)
		np.add.at(prior, y[first:last_plus_one], w[first:last_plus_one])
		n = float(np.sum(prior))
		if np.sum(prior > 0) < 2:
			return None
		prior_entropy = CT.entropy(prior)
		bags = np.zeros((2, k), dtype=float)
		bags[1] = prior
		best_entropy = prior_entropy
		best_cut = None
		best_index = -1
		best_counts = None
		for i in range(first, last_plus_one - 1):
			bags[0, y[i]] += w[i]
			bags[1, y[i]] -= w[i]
			if v[i] < v[i + 1]:
				cut = (v[i] + v[i + 1]) / 2.0
				current = CT.entropy_conditioned_on_rows(bags)
				if current < best_entropy:
					best_entropy = current
					best_cut = cut
					best_index = i
					best_counts = bags.copy()
		if best_cut is None or best_counts is None:
			return None
		gain = prior_entropy - best_entropy
		if gain <= 0:
			return None
		if not self._mdl_accepts(prior, best_counts, n):
			return None
		left = self._cut_points_for_subset(v, y, w, k, first, best_index + 1)
		right = self._cut_points_for_subset(v, y, w, k, best_index + 1, last_plus_one)
		out: List[float] = []
		if left:
			out.extend(left)
		out.append(float(best_cut))
		if right:
			out.extend(right)
		return out

	def _determine_output_format(self, data: Instances) -> Instances:
		ci = data.class_index
		if ci < 0 or not data.class_attribute().is_nominal():
			raise ValueError("Discretize: supervised discretization needs a nominal class")
		k = data.num_classes()
		cuts: List[Optional[np.ndarray]] = []
		atts: List[Attribute] = []
		yall = data.class_values()
		for j, a in enumerate(data.attributes):
			if j == ci or not a.is_numeric():
				cuts.append(None)
				atts.append(a)
				continue
			col = data.X[:, j]
			ok = ~np.isnan(col) & ~np.isnan(yall)
			order = np.argsort(col[ok], kind="stable")
			v = col[ok][order]
			y = yall[ok][order].astype(np.int64)
			w = data.weights[ok][order]
			cp = self._cut_points_for_subset(v, y, w, k, 0, v.shape[0])
			arr = np.asarray(cp if cp else [], dtype=np.float64)
			cuts.append(arr)
			atts.append(Attribute.nominal(a.name, self._labels(arr)))
		self.cut_points = cuts
		return Instances(data.relation, atts, None, None, ci)

	@staticmethod
	def _labels(cuts: np.ndarray) -> List[str]:
		if cuts.size == 0:
			return ["All"]
		labels: List[str] = []
		for i in range(cuts.size + 1):
			if i == 0:
				labels.append(f"(-inf-{Utils.double_to_string(cuts[0], 0, 6)}]")
			elif i == cuts.size:
				labels.append(f"({Utils.double_to_string(cuts[-1], 0, 6)}-inf)")
			else:
				labels.append(f"({Utils.double_to_string(cuts[i - 1], 0, 6)}-{Utils.double_to_string(cuts[i], 0, 6)}]")
		return labels

	def transform_matrix(self, X: np.ndarray) -> np.ndarray:
		X = np.array(X, dtype=np.float64, copy=True)
		for j, cuts in enumerate(self.cut_points):
			if cuts is None:
				continue
			col = X[:, j]
			ok = ~np.isnan(col)
			codes = np.full(col.shape, np.nan)
			codes[ok] = np.searchsorted(cuts, col[ok], side="left").astype(float)
			X[:, j] = codes
		return X
