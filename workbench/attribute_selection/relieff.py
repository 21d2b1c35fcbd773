"""
ReliefFAttributeEval
--------------------
Instance-based attribute weighting (Kira & Rendell; Kononenko; Robnik-Sikonja).

For each sampled instance the k nearest hits (same class) and k nearest
misses from every other class are found with a range-normalized
Manhattan distance. Weights drop by the averaged attribute difference to the
hits and rise by the difference to the misses; with more than two classes
each class's misses are weighted by P(class) / (1 - P(class of instance)).
A numeric class switches to RReliefF, which accumulates the probabilities
of a different prediction (ndc), a different attribute value (nda) and
both (ndcda) over the k nearest neighbours:

	W[a] = ndcda[a] / ndc - (nda[a] - ndcda[a]) / (m - ndc)
"""

from __future__ import annotations
from typing import Dict, Optional

import numpy as np

from workbench.core.capabilities import Capabilities
from workbench.core.instances import Instances
from workbench.core.utils import Utils
from .base import AttributeEvaluator


class ReliefFAttributeEval(AttributeEvaluator):
	def __init__(
		self,
		sample_size: int = -1,
		num_neighbours: int = 10,
		seed: int = 1,
		weight_by_distance: bool = False,
		sigma: int = 2,
	) -> None:
		if int(sample_size) == 0 or int(sample_size) < -1:
			raise ValueError("sample_size must be -1 (all) or positive")
		if int(num_neighbours) < 1:
			raise ValueError("num_neighbours must be >= 1")
		if int(sigma) <= 0:
			raise ValueError("sigma must be > 0")
		self.sample_size = int(sample_size)
		self.num_neighbours = int(num_neighbours)
		self.seed = int(seed)
		self.weight_by_distance = bool(weight_by_distance)
		self.sigma = int(sigma)
		self.weights_: Optional[np.ndarray] = None
		self._data: Optional[Instances] = None
		self._min: Optional[np.ndarray] = None
		self._max: Optional[np.ndarray] = None

	def capabilities(self) -> Capabilities:
		return Capabilities(owner=type(self).__name__, nominal_class=True, numeric_class=True)

	def options(self) -> Dict[str, object]:
		return {
			"sample_size": self.sample_size,
			"num_neighbours": self.num_neighbours,
			"seed": self.seed,
			"weight_by_distance": self.weight_by_distance,
			"sigma": self.sigma,
		}

	# ----------------------------------------------------------------- differences

	def _norm(self, x, j: int) -> np.ndarray:
		x = np.asarray(x, dtype=np.float64)
		lo = self._min[j]
		hi = self._max[j]
		if np.isnan(lo) or Utils.eq(hi, lo):
			return np.where(np.isnan(x), np.nan, 0.0)
		return (x - lo) / (hi - lo)

	@staticmethod
	def _fold(d: np.ndarray) -> np.ndarray:
		return np.where(d < 0.5, 1.0 - d, d)

	def attribute_diff(self, j: int, first: int, others: np.ndarray) -> np.ndarray:
		"""Difference on attribute j between row `first` and each row in `others`."""
		data = self._data
		x0 = data.X[int(first), int(j)]
		xs = data.X[np.asarray(others, dtype=np.int64), int(j)]
		att = data.attribute(j)
		if att.is_nominal():
			out = (xs != x0).astype(np.float64)
			miss = np.isnan(xs) | np.isnan(x0)
			out[miss] = 1.0 - 1.0 / float(att.num_values())
			return out
		ns = self._norm(xs, j)
		if np.isnan(x0):
			return np.where(np.isnan(ns), 1.0, self._fold(ns))
		n0 = float(self._norm(x0, j))
		return np.where(np.isnan(ns), float(self._fold(np.asarray(n0))), np.abs(ns - n0))

	def _diff_matrix(self, z: int, others: np.ndarray) -> np.ndarray:
		m = self._data.num_attributes()
		D = np.zeros((others.shape[0], m), dtype=np.float64)
		for j in range(m):
			D[:, j] = self.attribute_diff(j, z, others)
		return D

	# ----------------------------------------------------------------- neighbours

	def _nearest(self, dist: np.ndarray, candidates: np.ndarray) -> np.ndarray:
		"""Positions (into candidates) of the k nearest, sorted by distance; ties keep lower index."""
		d = dist[candidates]
		order = np.argsort(d, kind="stable")[: self.num_neighbours]
		return candidates[order]

	def _rank_weights(self, count: int) -> np.ndarray:
		if self.weight_by_distance:
			i = np.arange(count, dtype=np.float64)
			w = np.exp(-((i / float(self.sigma)) ** 2))
			s = float(np.sum(w))
			if s > 0:
				return w / s
			return w
		if count == 0:
			return np.zeros(0, dtype=np.float64)
		return np.full(count, 1.0 / float(count))

	# ----------------------------------------------------------------- build

	def build_evaluator(self, data: Instances) -> None:
		self.capabilities().test(data)
		self._data = data
		n = data.num_instances()
		m = data.num_attributes()
		ci = data.class_index
		numeric_class = data.class_attribute().is_numeric()
		X = data.X

		self._min = np.full(m, np.nan)
		self._max = np.full(m, np.nan)
		for j, a in enumerate(data.attributes):
			if a.is_numeric():
				col = X[:, j]
				ok = ~np.isnan(col)
				if np.any(ok):
					self._min[j] = float(np.min(col[ok]))
					self._max[j] = float(np.max(col[ok]))

		y = X[:, ci]
		has_class = ~np.isnan(y)
		num_classes = 1
		class_probs = np.ones(1, dtype=np.float64)
		if not numeric_class:
			num_classes = data.num_classes()
			class_probs = np.zeros(num_classes, dtype=np.float64)
			np.add.at(class_probs, y[has_class].astype(np.int64), 1.0)
			class_probs /= float(n)

		if self.sample_size == -1 or self.sample_size > n:
			total = n
			sample = np.arange(n, dtype=np.int64)
		else:
			total = self.sample_size
			sample = Utils.rng(self.seed).integers(0, n, size=total).astype(np.int64)

		weights = np.zeros(m, dtype=np.float64)
		ndc = 0.0
		nda = np.zeros(m, dtype=np.float64)
		ndcda = np.zeros(m, dtype=np.float64)
		att_mask = np.ones(m, dtype=bool)
		att_mask[ci] = False
		all_rows = np.arange(n, dtype=np.int64)

		for z in sample:
			z = int(z)
			if not has_class[z]:
				continue
			others = all_rows[(all_rows != z) & has_class]
			if others.shape[0] == 0:
				continue
			D = self._diff_matrix(z, others)
			dist = np.sum(D[:, att_mask], axis=1)
			if numeric_class:
				near = self._nearest(dist, np.arange(others.shape[0]))
				rw = self._rank_weights(near.shape[0])
				dc = D[near, ci]
				ndc += float(np.sum(dc * rw))
				nda += np.sum(D[near] * rw[:, None], axis=0)
				ndcda += np.sum(D[near] * (dc * rw)[:, None], axis=0)
				continue
			cl = int(y[z])
			other_classes = y[others].astype(np.int64)
			w_norm = 1.0
			if num_classes > 2:
				w_norm = 1.0 - class_probs[cl]
			hits = self._nearest(dist, np.nonzero(other_classes == cl)[0])
			if hits.shape[0] > 0:
				rw = self._rank_weights(hits.shape[0])
				weights -= np.sum(D[hits] * rw[:, None], axis=0)
			miss_total = np.zeros(m, dtype=np.float64)
			for k in range(num_classes):
				if k == cl:
					continue
				misses = self._nearest(dist, np.nonzero(other_classes == k)[0])
				if misses.shape[0] == 0:
					continue
				rw = self._rank_weights(misses.shape[0])
				contrib = np.sum(D[misses] * rw[:, None], axis=0)
				if num_classes > 2:
					miss_total += (class_probs[k] / w_norm) * contrib
				else:
					miss_total += contrib
			weights += miss_total

		if numeric_class:
			denom_other = float(total) - ndc
			if ndc == 0.0 or denom_other == 0.0:
				print(f"build_evaluator: degenerate class differences (ndc={ndc}); weights set to 0")
				weights = np.zeros(m, dtype=np.float64)
			else:
				weights = ndcda / ndc - (nda - ndcda) / denom_other
		else:
			weights *= 1.0 / float(total)
		weights[ci] = 0.0
		self.weights_ = weights

	def evaluate_attribute(self, attribute: int) -> float:
		if self.weights_ is None:
			raise RuntimeError(f"{type(self).__name__}: evaluator has not been built")
		return float(self.weights_[int(attribute)])

	def to_string(self) -> str:
		if self._data is None:
			return "ReliefF feature evaluator has not been built yet\n"
		lines = ["\tReliefF Ranking Filter"]
		if self.sample_size == -1:
			lines.append("\tInstances sampled: all")
		else:
			lines.append(f"\tInstances sampled: {self.sample_size}")
		lines.append(f"\tNumber of nearest neighbours (k): {self.num_neighbours}")
		if self.weight_by_distance:
			lines.append("\tExponentially decreasing (with distance) influence for")
			lines.append(f"\tnearest neighbours. Sigma: {self.sigma}")
		else:
			lines.append("\tEqual influence nearest neighbours")
		return "\n".join(lines) + "\n"
