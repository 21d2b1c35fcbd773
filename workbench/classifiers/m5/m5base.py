"""
M5Base / M5P / M5Rules
----------------------
Shared driver for M5 model trees and rules (numeric class).

Pre-processing: rows with a missing class are dropped, missing values are
replaced by means / modes and nominal attributes are binarized with the
supervised NominalToBinary filter.

  • M5P: one Rule with use_tree=True (the whole pruned tree)
  • M5Rules: separate-and-conquer; each round grows a tree on the
    instances not yet covered, keeps the rule for its best-coverage leaf,
    and stops when every training instance is covered. Prediction uses the
    first rule whose conditions hold (the last rule when none does).
"""

from __future__ import annotations
from typing import Dict, List, Optional

import numpy as np

from workbench.core.capabilities import Capabilities
from workbench.core.instances import Instances
from workbench.filters.missing import ReplaceMissingValues
from workbench.filters.nominal_to_binary import NominalToBinary
from ..base import Classifier
from .rule import Rule


class M5Base(Classifier):
	def __init__(
		self,
		unpruned: bool = False,
		use_unsmoothed: bool = False,
		build_regression_tree: bool = False,
		min_num_instances: int = 4,
		save_instances: bool = False,
		generate_rules: bool = False,
	) -> None:
		super().__init__()
		if int(min_num_instances) < 1:
			raise ValueError("min_num_instances must be >= 1")
		self.unpruned = bool(unpruned)
		self.use_unsmoothed = bool(use_unsmoothed)
		self.build_regression_tree = bool(build_regression_tree)
		self.min_num_instances = int(min_num_instances)
		self.save_instances = bool(save_instances)
		self.generate_rules = bool(generate_rules)
		self.rule_set: List[Rule] = []
		self._missing: Optional[ReplaceMissingValues] = None
		self._binary: Optional[NominalToBinary] = None

	def capabilities(self) -> Capabilities:
		return Capabilities(owner=type(self).__name__, numeric_class=True)

	def options(self) -> Dict[str, object]:
		return {
			"unpruned": self.unpruned,
			"use_unsmoothed": self.use_unsmoothed,
			"build_regression_tree": self.build_regression_tree,
			"min_num_instances": self.min_num_instances,
		}

	def _new_rule(self, use_tree: bool) -> Rule:
		return Rule(
			use_tree=use_tree,
			grow_full_tree=True,
			smoothing=not self.use_unsmoothed,
			regression_tree=self.build_regression_tree,
			min_num_instances=self.min_num_instances,
			unpruned=self.unpruned,
			save_instances=self.save_instances,
		)

	def build_classifier(self, data: Instances) -> None:
		self.capabilities().test(data)
		header = data.empty_copy()
		data = data.delete_with_missing_class()
		if data.num_instances() == 0:
			raise ValueError(f"{type(self).__name__}: no training instances with a class value")
		self._missing = ReplaceMissingValues()
		data = self._missing.fit_transform(data)
		self._binary = NominalToBinary(supervised=True)
		data = self._binary.fit_transform(data)
		self.rule_set = []
		if self.generate_rules:
			remaining = data
			while remaining.num_instances() > 0:
				rule = self._new_rule(use_tree=False)
				rule.build_classifier(remaining)
				self.rule_set.append(rule)
				remaining = rule.not_covered_instances()
		else:
			rule = self._new_rule(use_tree=True)
			rule.build_classifier(data)
			self.rule_set.append(rule)
		self._header = header

	def _prepare(self, X: np.ndarray) -> np.ndarray:
		X = np.asarray(X, dtype=np.float64)
		if X.ndim == 1:
			X = X.reshape(1, -1)
		return self._binary.transform_matrix(self._missing.transform_matrix(X))

	def predict(self, X: np.ndarray) -> np.ndarray:
		self._check_built()
		Z = self._prepare(X)
		out = np.full(Z.shape[0], np.nan, dtype=np.float64)
		todo = np.ones(Z.shape[0], dtype=bool)
		for k, rule in enumerate(self.rule_set):
			if not np.any(todo):
				break
			if k == len(self.rule_set) - 1:
				mask = todo.copy()
			else:
				mask = todo & (rule.covers_matrix(Z) if not rule.use_tree else np.ones(Z.shape[0], dtype=bool))
			if np.any(mask):
				out[mask] = rule.predict_matrix(Z[mask])
				todo &= ~mask
		return out

	def classify_instance(self, row: np.ndarray) -> float:
		return float(self.predict(np.asarray(row, dtype=np.float64).reshape(1, -1))[0])

	def measure_num_rules(self) -> float:
		self._check_built()
		if self.generate_rules:
			return float(len(self.rule_set))
		return float(self.rule_set[0].top_of_tree.number_of_linear_models())

	def _kind(self) -> str:
		pruned = "unpruned " if self.unpruned else "pruned "
		model = "regression " if self.build_regression_tree else "model "
		return pruned + model

	def to_string(self) -> str:
		if self._header is None:
			return "Classifier hasn't been built yet!"
		if self.generate_rules:
			text = f"M5 {self._kind()}rules "
			if not self.use_unsmoothed:
				text += "\n(using smoothed linear models) "
			text += f":\nNumber of Rules : {len(self.rule_set)}\n\n"
			for j, rule in enumerate(self.rule_set):
				text += f"Rule: {j + 1}\n{rule.to_string()}"
			return text
		top = self.rule_set[0].top_of_tree
		text = f"M5 {self._kind()}tree:\n"
		if not self.use_unsmoothed:
			text += "(using smoothed linear models)\n"
		text += top.tree_to_string(0)
		text += top.print_leaf_models()
		text += f"\nNumber of Rules : {top.number_of_linear_models()}"
		return text


class M5P(M5Base):
	"""M5' model tree."""

	def __init__(
		self,
		unpruned: bool = False,
		use_unsmoothed: bool = False,
		build_regression_tree: bool = False,
		min_num_instances: int = 4,
		save_instances: bool = False,
	) -> None:
		super().__init__(unpruned, use_unsmoothed, build_regression_tree, min_num_instances, save_instances, False)

	def graph(self) -> str:
		"""GraphViz digraph of the tree."""
		self._check_built()
		return "digraph M5Tree {\n" + self.rule_set[0].top_of_tree.graph() + "}\n"


class M5Rules(M5Base):
	"""Decision list of M5 rules built by separate-and-conquer."""

	def __init__(
		self,
		unpruned: bool = False,
		use_unsmoothed: bool = False,
		build_regression_tree: bool = False,
		min_num_instances: int = 4,
	) -> None:
		super().__init__(unpruned, use_unsmoothed, build_regression_tree, min_num_instances, False, True)
