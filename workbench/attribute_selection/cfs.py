"""
CfsSubsetEval
-------------
Correlation-based feature subset merit (Hall, 1998):

	merit(S) = sum_{i in S} r_ci / sqrt(k + 2 sum_{i<j in S} r_ij)

Correlations:
  • nominal class: all numeric attributes are MDL-discretized; every
    correlation is symmetrical uncertainty
  • numeric class: |Pearson r| for numeric pairs, prior-weighted indicator
    correlation for nominal-numeric pairs, SU for nominal pairs

Missing nominal values are an extra category; missing numeric values sit at
the column mean. Correlations are computed on first use and cached.
"""

from __future__ import annotations
from typing import Dict, List, Optional

import numpy as np

from workbench.core.capabilities import Capabilities
from workbench.core.contingency import ContingencyTables as CT
from workbench.core.instances import Instances
from workbench.filters.discretize import Discretize
from .base import SubsetEvaluator


class CfsSubsetEval(SubsetEvaluator):
	def __init__(self, locally_predictive: bool = True) -> None:
		self.locally_predictive = bool(locally_predictive)
		self._data: Optional[Instances] = None
		self._corr: Optional[np.ndarray] = None
		self._centered: List[Optional[np.ndarray]] = []
		self._codes: List[Optional[np.ndarray]] = []
		self._arity: List[int] = []

	def capabilities(self) -> Capabilities:
		return Capabilities(owner=type(self).__name__, nominal_class=True, numeric_class=True)

	def options(self) -> Dict[str, object]:
		return {"locally_predictive": self.locally_predictive}

	def build_evaluator(self, data: Instances) -> None:
		self.capabilities().test(data)
		data = data.delete_with_missing_class()
		if data.class_attribute().is_nominal():
			data = Discretize().fit_transform(data)
		self._data = data
		m = data.num_attributes()
		self._corr = np.full((m, m), np.nan, dtype=np.float64)
		np.fill_diagonal(self._corr, 1.0)
		w = data.weights
		sw = float(np.sum(w))
		self._centered = []
		self._codes = []
		self._arity = []
		for j, a in enumerate(data.attributes):
			col = data.X[:, j]
			if a.is_nominal():
				codes, k = CT.codes_with_missing(col, a.num_values())
				self._codes.append(codes)
				self._arity.append(k)
				self._centered.append(None)
			else:
				ok = ~np.isnan(col)
				mean = 0.0
				if np.any(ok) and sw > 0:
					mean = float(np.sum(col[ok] * w[ok]) / np.sum(w[ok]))
				self._centered.append(np.where(ok, col - mean, 0.0))
				self._codes.append(None)
				self._arity.append(0)

	# ----------------------------------------------------------------- correlations

	def _pearson(self, a: np.ndarray, b: np.ndarray) -> float:
		w = self._data.weights
		sxy = float(np.sum(w * a * b))
		sx = float(np.sum(w * a * a))
		sy = float(np.sum(w * b * b))
		if sx <= 0.0 or sy <= 0.0:
			if sx <= 0.0 and sy <= 0.0:
				return 1.0
			return 0.0
		return abs(sxy / np.sqrt(sx * sy))

	def _nominal_numeric(self, nom: int, num: int) -> float:
		w = self._data.weights
		codes = self._codes[nom]
		k = self._arity[nom]
		y = self._centered[num]
		prior = np.zeros(k, dtype=np.float64)
		np.add.at(prior, codes, w)
		total = float(np.sum(prior))
		if total <= 0.0:
			return 0.0
		r = 0.0
		for v in range(k):
			if prior[v] <= 0.0:
				continue
			p = prior[v] / total
			ind = (codes == v).astype(np.float64) - p
			r += p * self._pearson(ind, y)
		return r

	def _nominal_nominal(self, i: int, j: int) -> float:
		t = CT.table(self._codes[i], self._codes[j], self._arity[i], self._arity[j], self._data.weights)
		return CT.symmetrical_uncertainty(t)

	def correlation(self, i: int, j: int) -> float:
		"""Cached symmetric correlation between attributes i and j (class included)."""
		if self._corr is None:
			raise RuntimeError(f"{type(self).__name__}: evaluator has not been built")
		i = int(i)
		j = int(j)
		c = self._corr[i, j]
		if not np.isnan(c):
			return float(c)
		ni = self._codes[i] is not None
		nj = self._codes[j] is not None
		if ni and nj:
			c = self._nominal_nominal(i, j)
		elif ni:
			c = self._nominal_numeric(i, j)
		elif nj:
			c = self._nominal_numeric(j, i)
		else:
			c = self._pearson(self._centered[i], self._centered[j])
		self._corr[i, j] = c
		self._corr[j, i] = c
		return float(c)

	# ----------------------------------------------------------------- merit

	def evaluate_subset(self, subset: np.ndarray) -> float:
		if self._data is None:
			raise RuntimeError(f"{type(self).__name__}: evaluator has not been built")
		ci = self._data.class_index
		idx = [int(j) for j in np.nonzero(np.asarray(subset, dtype=bool))[0] if int(j) != ci]
		if len(idx) == 0:
			return 0.0
		num = 0.0
		denom = float(len(idx))
		for a, i in enumerate(idx):
			num += self.correlation(i, ci)
			for j in idx[a + 1:]:
				denom += 2.0 * self.correlation(i, j)
		if denom < 0.0:
			denom = -denom
		if denom == 0.0:
			return 0.0
		merit = num / np.sqrt(denom)
		return float(abs(merit))

	def post_process(self, selected: np.ndarray) -> np.ndarray:
		"""
		Add locally predictive attributes: repeatedly take the unselected
		attribute most correlated with the class and keep it if no selected
		attribute is more correlated with it than the class is.
		"""
		if not self.locally_predictive or self._data is None:
			return super().post_process(selected)
		ci = self._data.class_index
		chosen = [int(j) for j in selected]
		remaining = [j for j in range(self._data.num_attributes()) if j != ci and j not in chosen]
		while len(remaining) > 0:
			best = max(remaining, key=lambda j: (self.correlation(j, ci), -j))
			remaining.remove(best)
			rc = self.correlation(best, ci)
			if rc <= 0.0:
				break
			if all(self.correlation(best, j) < rc for j in chosen):
				chosen.append(best)
		return np.asarray(sorted(chosen), dtype=np.int64)

	def to_string(self) -> str:
		if self._data is None:
			return "\tCFS subset evaluator has not been built yet\n"
		s = "\tCFS Subset Evaluator\n"
		if self.locally_predictive:
			s += "\tIncluding locally predictive attributes\n"
		return s
