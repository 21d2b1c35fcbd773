"""
BestFirst
---------
Best-first search over attribute subsets with backtracking.

The open list holds at most `search_termination` subsets ordered by merit
(ties keep insertion order). Each iteration pops the head and expands it by
adding (forward), deleting (backward) or both (bidirectional) single
attributes; every new subset is evaluated once, remembered in a lookup
table, and offered to the open list. The search stops after
`search_termination` consecutive expansions without improving the best
subset, or when the open list runs dry.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional

import numpy as np

from workbench.core.config import LogEvent
from workbench.core.instances import Instances
from workbench.core.ranges import Range
from workbench.core.utils import Utils
from .base import ASEvaluation, ASSearch, SubsetEvaluator, subset_mask


BACKWARD = "backward"
FORWARD = "forward"
BIDIRECTIONAL = "bidirectional"
DIRECTIONS = (BACKWARD, FORWARD, BIDIRECTIONAL)


@dataclass(frozen=True)
class Link:
	group: FrozenSet[int]
	merit: float


class BoundedOpenList:
	"""Merit-sorted list (best first) capped at max_size entries."""

	def __init__(self, max_size: int) -> None:
		self.max_size = int(max_size)
		self.items: List[Link] = []

	def __len__(self) -> int:
		return len(self.items)

	def add(self, group: FrozenSet[int], merit: float) -> None:
		link = Link(group, float(merit))
		if len(self.items) == 0:
			self.items.append(link)
			return
		full = len(self.items) >= self.max_size
		if full and merit <= self.items[-1].merit:
			return
		pos = len(self.items)
		for i, it in enumerate(self.items):
			if merit > it.merit:
				pos = i
				break
		if full:
			self.items.pop()
		self.items.insert(pos, link)

	def pop_head(self) -> Link:
		if len(self.items) == 0:
			raise IndexError("pop_head: open list is empty")
		return self.items.pop(0)


class BestFirst(ASSearch):
	def __init__(
		self,
		direction: str = FORWARD,
		search_termination: int = 5,
		start_set: str = "",
		debug: bool = False,
	) -> None:
		if direction not in DIRECTIONS:
			raise ValueError(f"direction must be one of {DIRECTIONS}, got {direction!r}")
		if int(search_termination) < 1:
			raise ValueError("search_termination must be > 0")
		self.direction = direction
		self.search_termination = int(search_termination)
		self.start_set = str(start_set)
		Range(self.start_set)
		self.debug = bool(debug)
		self.total_evals = 0
		self.best_merit = -np.inf
		self.trace: List[LogEvent] = []
		self._starting: Optional[np.ndarray] = None
		self._class_index = -1

	def options(self) -> Dict[str, object]:
		return {
			"direction": self.direction,
			"search_termination": self.search_termination,
			"start_set": self.start_set,
		}

	def _start_set_to_string(self) -> str:
		if self._starting is None:
			return self.start_set
		return ",".join(str(int(j) + 1) for j in self._starting if int(j) != self._class_index)

	def to_string(self) -> str:
		lines = ["\tBest first.", "\tStart set: "]
		if self._starting is None or len(self._starting) == 0:
			lines[-1] += "no attributes"
		else:
			lines[-1] += self._start_set_to_string()
		lines.append(f"\tSearch direction: {self.direction}")
		lines.append(f"\tStale search after {self.search_termination} node expansions")
		lines.append(f"\tTotal number of subsets evaluated: {self.total_evals}")
		lines.append(f"\tMerit of best subset found: {Utils.double_to_string(abs(self.best_merit), 8, 3)}")
		return "\n".join(lines) + "\n"

	def _evaluate(self, evaluator: SubsetEvaluator, group: FrozenSet[int], m: int) -> float:
		merit = float(evaluator.evaluate_subset(subset_mask(group, m)))
		self.total_evals += 1
		if self.debug:
			self.trace.append(LogEvent("evaluate", {"group": sorted(int(j) + 1 for j in group), "merit": merit}))
		return merit

	def search(self, evaluator: ASEvaluation, data: Instances) -> np.ndarray:
		"""
		Search the subset space; return the selected attribute indices (sorted).
		"""
		if not isinstance(evaluator, SubsetEvaluator):
			raise TypeError(f"{type(evaluator).__name__} is not a subset evaluator")
		m = data.num_attributes()
		ci = -1
		if not evaluator.unsupervised:
			ci = data.class_index
		self._class_index = ci
		self.total_evals = 0
		self.trace = []

		best_group: FrozenSet[int] = frozenset()
		self._starting = None
		if self.start_set != "":
			self._starting = Range(self.start_set).selection(m - 1)
			best_group = frozenset(int(j) for j in self._starting if int(j) != ci)
		elif self.direction == BACKWARD:
			self._starting = np.asarray([j for j in range(m) if j != ci], dtype=np.int64)
			best_group = frozenset(int(j) for j in self._starting)
		best_size = len(best_group)

		best_merit = self._evaluate(evaluator, best_group, m)
		open_list = BoundedOpenList(self.search_termination)
		open_list.add(best_group, best_merit)
		lookup = {best_group}
		stale = 0

		if self.direction == BIDIRECTIONAL:
			passes = (FORWARD, BACKWARD)
		else:
			passes = (self.direction,)

		while stale < self.search_termination:
			if len(open_list) == 0:
				break
			head = open_list.pop_head().group
			added = False
			for sd in passes:
				for i in range(m):
					if i == ci:
						continue
					if sd == FORWARD:
						if i in head:
							continue
						cand = head | {i}
					else:
						if i not in head:
							continue
						cand = head - {i}
					if cand in lookup:
						continue
					merit = self._evaluate(evaluator, cand, m)
					if sd == FORWARD:
						better = (merit - best_merit) > 0.00001
					else:
						better = (merit >= best_merit) and (len(cand) < best_size)
					if better:
						added = True
						stale = 0
						best_merit = merit
						best_size = len(cand)
						best_group = cand
					open_list.add(cand, merit)
					lookup.add(cand)
			if not added:
				stale += 1
			if self.debug:
				self.trace.append(LogEvent("expand", {"stale": stale, "open": len(open_list), "best_merit": best_merit}))

		self.best_merit = best_merit
		return np.asarray(sorted(best_group), dtype=np.int64)
