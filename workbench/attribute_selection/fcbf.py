"""
FCBFSearch
----------
Fast correlation-based filter (Yu & Liu, 2003). Attributes whose SU with
the class exceeds `threshold` are ranked; walking the ranking, every later
attribute that is at least as correlated with an earlier kept attribute as
it is with the class is treated as redundant and dropped.
"""

from __future__ import annotations
from typing import Dict, List

import numpy as np

from workbench.core.contingency import ContingencyTables as CT
from workbench.core.instances import Instances
from workbench.core.utils import Utils
from .base import ASEvaluation, RankedOutputSearch
from .symmetrical_uncert import SymmetricalUncertAttributeSetEval


class FCBFSearch(RankedOutputSearch):
	def __init__(self, threshold: float = -np.inf, num_to_select: int = -1) -> None:
		super().__init__(threshold=threshold, num_to_select=num_to_select, generate_ranking=True)
		self.num_redundant = 0

	def options(self) -> Dict[str, object]:
		return {"threshold": self.threshold, "num_to_select": self.num_to_select}

	def search(self, evaluator: ASEvaluation, data: Instances) -> np.ndarray:
		if not isinstance(evaluator, SymmetricalUncertAttributeSetEval):
			raise TypeError(f"FCBFSearch needs SymmetricalUncertAttributeSetEval, got {type(evaluator).__name__}")
		ci = data.class_index
		scores = []
		for j in range(data.num_attributes()):
			if j == ci:
				continue
			su = evaluator.evaluate_attribute(j)
			if su > self.threshold:
				scores.append((j, su))
		ranked = CT.rank_with_ties(scores)
		kept: List[int] = []
		merits: List[float] = []
		for it in ranked:
			redundant = False
			for p in kept:
				if evaluator.attribute_correlation(p, it.index) >= it.score:
					redundant = True
					break
			if not redundant:
				kept.append(it.index)
				merits.append(it.score)
		self.num_redundant = len(ranked) - len(kept)
		self._ranked = np.asarray(list(zip(kept, merits)), dtype=np.float64).reshape(-1, 2)
		keep = self.calculated_num_to_select()
		return self._ranked[:keep, 0].astype(np.int64)

	def to_string(self) -> str:
		lines = ["\tFCBF search."]
		if self.threshold != -np.inf:
			lines.append(f"\tThreshold for SU with the class: {Utils.double_to_string(self.threshold, 8, 4)}")
		lines.append(f"\tRedundant attributes removed: {self.num_redundant}")
		return "\n".join(lines) + "\n"
