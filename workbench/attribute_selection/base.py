"""
Evaluator and search interfaces for attribute selection.

Subsets are passed to evaluators as boolean masks over all attributes
(the class column is never set). Unsupervised evaluators declare
`unsupervised = True`, which tells searches to ignore the class index.
"""

from __future__ import annotations
from typing import Dict, Iterable

import numpy as np

from workbench.core.capabilities import Capabilities
from workbench.core.instances import Instances


class ASEvaluation:
	unsupervised: bool = False

	def capabilities(self) -> Capabilities:
		return Capabilities(owner=type(self).__name__, nominal_class=True, numeric_class=True)

	def build_evaluator(self, data: Instances) -> None:
		raise NotImplementedError

	def post_process(self, selected: np.ndarray) -> np.ndarray:
		"""Hook applied to a subset search's result; identity by default."""
		return np.asarray(selected, dtype=np.int64)

	def options(self) -> Dict[str, object]:
		return {}

	def to_string(self) -> str:
		return type(self).__name__

	def __str__(self) -> str:
		return self.to_string()


class SubsetEvaluator(ASEvaluation):
	def evaluate_subset(self, subset: np.ndarray) -> float:
		raise NotImplementedError


class AttributeEvaluator(ASEvaluation):
	def evaluate_attribute(self, attribute: int) -> float:
		raise NotImplementedError


class ASSearch:
	def search(self, evaluator: ASEvaluation, data: Instances) -> np.ndarray:
		raise NotImplementedError

	def options(self) -> Dict[str, object]:
		return {}

	def to_string(self) -> str:
		return type(self).__name__

	def __str__(self) -> str:
		return self.to_string()


class RankedOutputSearch(ASSearch):
	"""
	A search that can also report a ranked list of attributes.

	num_to_select (-1 = all) takes precedence over threshold; a threshold of
	-inf means no attribute is discarded.
	"""

	def __init__(self, threshold: float = -np.inf, num_to_select: int = -1, generate_ranking: bool = True) -> None:
		if int(num_to_select) < -1:
			raise ValueError("num_to_select must be -1 or non-negative")
		self.threshold = float(threshold)
		self.num_to_select = int(num_to_select)
		self.generate_ranking = bool(generate_ranking)
		self._ranked: np.ndarray | None = None

	def ranked_attributes(self) -> np.ndarray:
		"""(k, 2) array of [attribute index, merit], best first."""
		if self._ranked is None:
			raise RuntimeError(f"{type(self).__name__}: search has not been run")
		return self._ranked.copy()

	def calculated_num_to_select(self) -> int:
		"""Attributes retained from the ranking under num_to_select / threshold."""
		ranked = self.ranked_attributes()
		if self.num_to_select >= 0:
			return min(self.num_to_select, ranked.shape[0])
		return int(np.sum(ranked[:, 1] > self.threshold))


def subset_mask(indices: Iterable[int], num_attributes: int) -> np.ndarray:
	m = np.zeros(int(num_attributes), dtype=bool)
	for j in indices:
		m[int(j)] = True
	return m
