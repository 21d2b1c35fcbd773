"""
AttributeSelection
------------------
Runs an evaluator + search pair over a dataset and reports the outcome.

  • select_attributes(data): build the evaluator, search, post-process; the
    class index (when supervised) is appended to the selection
  • reduce_dimensionality(data): keep only the selected columns
  • cross_validate_attributes(data, folds, seed): repeat the selection on
    each training fold and summarise how stable it is
"""

from __future__ import annotations
import copy
from typing import List, Optional

import numpy as np
import pandas as pd

from workbench.core.instances import Instances
from workbench.core.utils import Utils
from workbench.evaluation.splits import cross_validation_splits
from .base import ASEvaluation, ASSearch, RankedOutputSearch, SubsetEvaluator


class AttributeSelection:
	def __init__(self, evaluator: ASEvaluation, search: ASSearch) -> None:
		if not isinstance(evaluator, ASEvaluation):
			raise TypeError(f"evaluator must be an ASEvaluation, got {type(evaluator).__name__}")
		if not isinstance(search, ASSearch):
			raise TypeError(f"search must be an ASSearch, got {type(search).__name__}")
		self.evaluator = evaluator
		self.search = search
		self.selected_: Optional[np.ndarray] = None
		self.ranked_: Optional[np.ndarray] = None
		self.cv_results_: Optional[pd.DataFrame] = None
		self._header: Optional[Instances] = None
		self._cv_folds = 0
		self._cv_seed = 0

	def _is_ranking(self) -> bool:
		return isinstance(self.search, RankedOutputSearch) and not isinstance(self.evaluator, SubsetEvaluator)

	@staticmethod
	def _run(evaluator: ASEvaluation, search: ASSearch, data: Instances) -> tuple[np.ndarray, Optional[np.ndarray]]:
		evaluator.build_evaluator(data)
		found = search.search(evaluator, data)
		ranked = None
		if isinstance(search, RankedOutputSearch) and not isinstance(evaluator, SubsetEvaluator):
			ranked = search.ranked_attributes()
		else:
			found = np.sort(evaluator.post_process(found))
		return np.asarray(found, dtype=np.int64), ranked

	def select_attributes(self, data: Instances) -> np.ndarray:
		found, ranked = self._run(self.evaluator, self.search, data)
		self._header = data.empty_copy()
		self.ranked_ = ranked
		sel = [int(j) for j in found]
		if not self.evaluator.unsupervised and data.class_index >= 0:
			sel.append(int(data.class_index))
		self.selected_ = np.asarray(sel, dtype=np.int64)
		return self.selected_.copy()

	def _check_selected(self) -> None:
		if self.selected_ is None:
			raise RuntimeError("AttributeSelection: select_attributes has not been run")

	def selected_attributes(self) -> np.ndarray:
		self._check_selected()
		return self.selected_.copy()

	def number_attributes_selected(self) -> int:
		"""Selected attributes excluding the class."""
		self._check_selected()
		n = int(self.selected_.shape[0])
		if not self.evaluator.unsupervised and self._header.class_index >= 0:
			n -= 1
		return n

	def ranked_attributes(self) -> np.ndarray:
		self._check_selected()
		if self.ranked_ is None:
			raise RuntimeError("AttributeSelection: the search did not produce a ranking")
		return self.ranked_.copy()

	def reduce_dimensionality(self, data: Instances) -> Instances:
		self._check_selected()
		return data.select_attributes(self.selected_)

	# ----------------------------------------------------------------- reporting

	def _evaluator_heading(self) -> str:
		kind = "Attribute Subset Evaluator" if isinstance(self.evaluator, SubsetEvaluator) else "Attribute Evaluator"
		h = self._header
		if self.evaluator.unsupervised or h.class_index < 0:
			return f"{kind} (unsupervised):"
		catt = h.class_attribute()
		if catt.is_nominal():
			return f"{kind} (supervised, Class (nominal): {h.class_index + 1} {catt.name}):"
		return f"{kind} (supervised, Class (numeric): {h.class_index + 1} {catt.name}):"

	def to_results_string(self) -> str:
		self._check_selected()
		h = self._header
		lines = ["", "=== Attribute Selection on all input data ===", "", "Search Method:"]
		lines.append(self.search.to_string().rstrip("\n"))
		lines.append(self._evaluator_heading())
		lines.append(self.evaluator.to_string().rstrip("\n"))
		lines.append("")
		if self.ranked_ is not None:
			lines.append("Ranked attributes:")
			for idx, merit in self.ranked_:
				j = int(idx)
				lines.append(f"{Utils.double_to_string(merit, 8, 4)} {j + 1:>4} {h.attribute(j).name}")
			lines.append("")
		names: List[int] = [int(j) for j in self.selected_ if int(j) != h.class_index or self.evaluator.unsupervised]
		lines.append(f"Selected attributes: {','.join(str(j + 1) for j in names)} : {len(names)}")
		for j in names:
			lines.append(f"                     {h.attribute(j).name}")
		return "\n".join(lines) + "\n"

	# ----------------------------------------------------------------- cross-validation

	def cross_validate_attributes(self, data: Instances, folds: int = 10, seed: int = 1) -> pd.DataFrame:
		"""
		Repeat the selection on each training fold.

		Subset searches: per attribute, how many folds selected it.
		Ranking searches: per attribute, mean and std of merit and 1-based rank.
		"""
		ci = data.class_index
		atts = [j for j in range(data.num_attributes()) if j != ci or self.evaluator.unsupervised]
		splits = cross_validation_splits(data, folds, seed)
		counts = np.zeros(data.num_attributes(), dtype=np.float64)
		merit_sum = np.zeros(data.num_attributes(), dtype=np.float64)
		merit_sq = np.zeros(data.num_attributes(), dtype=np.float64)
		rank_sum = np.zeros(data.num_attributes(), dtype=np.float64)
		rank_sq = np.zeros(data.num_attributes(), dtype=np.float64)
		ranking = self._is_ranking()
		for tr, _ in splits:
			ev = copy.deepcopy(self.evaluator)
			se = copy.deepcopy(self.search)
			found, ranked = self._run(ev, se, data.subset(tr))
			if ranking and ranked is not None:
				for pos, (idx, merit) in enumerate(ranked):
					j = int(idx)
					merit_sum[j] += merit
					merit_sq[j] += merit * merit
					rank_sum[j] += pos + 1
					rank_sq[j] += (pos + 1) * (pos + 1)
			else:
				for j in found:
					counts[int(j)] += 1.0
		k = float(len(splits))
		self._cv_folds = len(splits)
		self._cv_seed = int(seed)
		rows = []
		for j in atts:
			row = {"att_index": j + 1, "attribute": data.attribute(j).name}
			if ranking:
				mm = merit_sum[j] / k
				rm = rank_sum[j] / k
				row["merit_mean"] = mm
				row["merit_std"] = float(np.sqrt(max(0.0, merit_sq[j] / k - mm * mm)))
				row["rank_mean"] = rm
				row["rank_std"] = float(np.sqrt(max(0.0, rank_sq[j] / k - rm * rm)))
			else:
				row["folds_selected"] = int(counts[j])
				row["percent"] = 100.0 * counts[j] / k
			rows.append(row)
		df = pd.DataFrame(rows)
		if ranking and len(rows) > 0:
			df = df.sort_values(["rank_mean", "att_index"], kind="mergesort").reset_index(drop=True)
		self.cv_results_ = df
		return df

	def cv_results_string(self) -> str:
		if self.cv_results_ is None:
			raise RuntimeError("AttributeSelection: cross_validate_attributes has not been run")
		df = self.cv_results_
		lines = ["", f"=== Attribute selection {self._cv_folds} fold cross-validation seed: {self._cv_seed} ===", ""]
		if "folds_selected" in df.columns:
			lines.append("number of folds (%)  attribute")
			for r in df.itertuples(index=False):
				lines.append(f"{r.folds_selected:>14}({int(round(r.percent)):>3} %) {r.att_index:>4} {r.attribute}")
		else:
			lines.append("average merit      average rank  attribute")
			for r in df.itertuples(index=False):
				lines.append(
					f"{Utils.double_to_string(r.merit_mean, 6, 3)} +-{Utils.double_to_string(r.merit_std, 6, 3)}"
					f"   {Utils.double_to_string(r.rank_mean, 4, 1)} +-{Utils.double_to_string(r.rank_std, 4, 2)}"
					f"   {r.att_index:>4} {r.attribute}"
				)
		return "\n".join(lines) + "\n"
