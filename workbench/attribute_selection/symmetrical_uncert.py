from __future__ import annotations
from typing import Dict, List, Optional

import numpy as np

from workbench.core.capabilities import Capabilities
from workbench.core.contingency import ContingencyTables as CT
from workbench.core.instances import Instances
from workbench.filters.discretize import Discretize
from .base import AttributeEvaluator


class SymmetricalUncertAttributeEval(AttributeEvaluator):
	"""
	Scores each attribute by its symmetrical uncertainty with the class,
	SU = 2 I(A;C) / (H(A) + H(C)). Numeric attributes are MDL-discretized
	against the class first; missing values count as an extra category
	unless missing_merge is False, in which case rows with a missing value
	are left out of the table.
	"""

	def __init__(self, missing_merge: bool = True) -> None:
		self.missing_merge = bool(missing_merge)
		self._codes: List[Optional[np.ndarray]] = []
		self._arity: List[int] = []
		self._weights: Optional[np.ndarray] = None
		self._class_index = -1

	def capabilities(self) -> Capabilities:
		return Capabilities(owner=type(self).__name__, nominal_class=True, missing_class_values=False)

	def options(self) -> Dict[str, object]:
		return {"missing_merge": self.missing_merge}

	def build_evaluator(self, data: Instances) -> None:
		self.capabilities().test(data)
		disc = Discretize().fit_transform(data)
		self._class_index = disc.class_index
		self._weights = disc.weights.copy()
		self._codes = []
		self._arity = []
		for j, a in enumerate(disc.attributes):
			col = disc.X[:, j]
			if self.missing_merge:
				codes, k = CT.codes_with_missing(col, a.num_values())
			else:
				codes = np.where(np.isnan(col), -1.0, col).astype(np.int64)
				k = a.num_values()
			self._codes.append(codes)
			self._arity.append(k)

	def _check_built(self) -> None:
		if self._weights is None:
			raise RuntimeError(f"{type(self).__name__}: evaluator has not been built")

	def _su(self, i: int, j: int) -> float:
		self._check_built()
		xi = self._codes[i]
		xj = self._codes[j]
		w = self._weights
		ok = (xi >= 0) & (xj >= 0)
		t = CT.table(xi[ok], xj[ok], self._arity[i], self._arity[j], w[ok])
		return CT.symmetrical_uncertainty(t)

	def evaluate_attribute(self, attribute: int) -> float:
		return self._su(int(attribute), self._class_index)

	def to_string(self) -> str:
		if self._weights is None:
			return "\tSymmetrical Uncertainty evaluator has not been built yet"
		s = "\tSymmetrical Uncertainty Ranking Filter"
		if not self.missing_merge:
			s += "\n\tMissing values treated as separate"
		return s + "\n"


class SymmetricalUncertAttributeSetEval(SymmetricalUncertAttributeEval):
	"""SU with the class plus attribute-attribute SU (used by FCBF)."""

	def attribute_correlation(self, i: int, j: int) -> float:
		return self._su(int(i), int(j))

	def to_string(self) -> str:
		if self._weights is None:
			return "\tSymmetrical Uncertainty attribute set evaluator has not been built yet"
		return "\tSymmetrical Uncertainty Attribute Set Evaluator\n"
