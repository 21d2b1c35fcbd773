from __future__ import annotations
from typing import Dict

import numpy as np

from workbench.core.contingency import ContingencyTables as CT
from workbench.core.instances import Instances
from workbench.core.ranges import Range
from workbench.core.utils import Utils
from .base import ASEvaluation, AttributeEvaluator, RankedOutputSearch


class Ranker(RankedOutputSearch):
	"""
	Ranks every non-class attribute by an attribute evaluator.

	start_set lists (1-based range) attributes to leave out of the ranking.
	search() returns the retained attributes in rank order.
	"""

	def __init__(self, threshold: float = -np.inf, num_to_select: int = -1, start_set: str = "") -> None:
		super().__init__(threshold=threshold, num_to_select=num_to_select, generate_ranking=True)
		self.start_set = str(start_set)
		Range(self.start_set)

	def options(self) -> Dict[str, object]:
		return {"threshold": self.threshold, "num_to_select": self.num_to_select, "start_set": self.start_set}

	def search(self, evaluator: ASEvaluation, data: Instances) -> np.ndarray:
		if not isinstance(evaluator, AttributeEvaluator):
			raise TypeError(f"{type(evaluator).__name__} is not an attribute evaluator")
		m = data.num_attributes()
		ci = -1
		if not evaluator.unsupervised:
			ci = data.class_index
		ignore = set()
		if self.start_set != "":
			ignore = set(int(j) for j in Range(self.start_set).selection(m - 1))
		scores = []
		for j in range(m):
			if j == ci or j in ignore:
				continue
			scores.append((j, evaluator.evaluate_attribute(j)))
		ranked = CT.rank_with_ties(scores)
		self._ranked = np.asarray([[it.index, it.score] for it in ranked], dtype=np.float64).reshape(-1, 2)
		keep = self.calculated_num_to_select()
		return self._ranked[:keep, 0].astype(np.int64)

	def to_string(self) -> str:
		lines = ["\tAttribute ranking."]
		if self.start_set != "":
			lines.append(f"\tIgnored attributes: {self.start_set}")
		if self.threshold != -np.inf:
			lines.append(f"\tThreshold for discarding attributes: {Utils.double_to_string(self.threshold, 8, 4)}")
		return "\n".join(lines) + "\n"
