"""
Rule
----
Grows and prunes an M5 tree on the given data. With use_tree the tree itself
is the model; otherwise a single rule is read off the leaf covering the most
instances: its conditions are the splits on the path to the root and its
consequent is that leaf's linear model. Instances failing the conditions
are kept as not_covered_instances() for the next round of
separate-and-conquer.
"""

from __future__ import annotations
from typing import List, Optional

import numpy as np

from workbench.core.instances import Instances
from workbench.core.utils import Utils
from .rule_node import RuleNode
from .split import abs_dev, std_dev


LEFT = 0
RIGHT = 1


class Rule:
	def __init__(
		self,
		use_tree: bool = False,
		grow_full_tree: bool = True,
		smoothing: bool = False,
		regression_tree: bool = False,
		min_num_instances: int = 4,
		unpruned: bool = False,
		save_instances: bool = False,
	) -> None:
		self.use_tree = bool(use_tree)
		self.grow_full_tree = bool(grow_full_tree)
		self.smoothing = bool(smoothing)
		self.regression_tree = bool(regression_tree)
		self.min_num_instances = int(min_num_instances)
		self.unpruned = bool(unpruned)
		self.save_instances = bool(save_instances)
		self.top_of_tree: Optional[RuleNode] = None
		self.rule_model: Optional[RuleNode] = None
		self.split_atts = np.zeros(0, dtype=np.int64)
		self.split_vals = np.zeros(0, dtype=np.float64)
		self.rel_ops = np.zeros(0, dtype=np.int64)
		self.internal_nodes: List[RuleNode] = []
		self.num_covered = 0
		self.global_std_dev = 0.0
		self.global_abs_dev = 0.0
		self._header: Optional[Instances] = None
		self._not_covered: Optional[Instances] = None

	def build_classifier(self, data: Instances) -> None:
		self._header = data.empty_copy()
		y = data.class_values()
		self.global_std_dev = std_dev(y)
		self.global_abs_dev = abs_dev(y)
		self.top_of_tree = RuleNode(
			self.global_std_dev,
			self.global_abs_dev,
			None,
			self.min_num_instances,
			self.regression_tree,
			self.smoothing,
			self.save_instances,
			self.unpruned,
		)
		self.top_of_tree.build_classifier(data)
		if self.grow_full_tree:
			self.top_of_tree.prune()
			self.top_of_tree.num_leaves(0)
		if not self.use_tree:
			self._make_rule(data)

	def _make_rule(self, data: Instances) -> None:
		best: List[object] = [-1, None]
		self.top_of_tree.find_best_leaf(best)
		leaf = best[1]
		if leaf is None:
			raise RuntimeError("Rule: unable to generate rule")
		self.rule_model = leaf
		atts: List[int] = []
		vals: List[float] = []
		ops: List[int] = []
		internal: List[RuleNode] = []
		node = leaf
		while node.parent is not None:
			p = node.parent
			atts.append(p.split_att)
			vals.append(p.split_value)
			ops.append(LEFT if p.left is node else RIGHT)
			internal.append(p)
			node = p
		self.split_atts = np.asarray(atts, dtype=np.int64)
		self.split_vals = np.asarray(vals, dtype=np.float64)
		self.rel_ops = np.asarray(ops, dtype=np.int64)
		self.internal_nodes = internal if self.smoothing else []
		covered = self.covers_matrix(data.X)
		self.num_covered = int(np.sum(covered))
		self._not_covered = data.subset(~covered)

	def covers_matrix(self, X: np.ndarray) -> np.ndarray:
		X = np.asarray(X, dtype=np.float64)
		ok = np.ones(X.shape[0], dtype=bool)
		for a, v, op in zip(self.split_atts, self.split_vals, self.rel_ops):
			col = X[:, int(a)]
			if op == LEFT:
				ok &= ~(col > v)
			else:
				ok &= ~(col <= v)
		return ok

	def covers(self, row: np.ndarray) -> bool:
		if self.use_tree:
			return True
		return bool(self.covers_matrix(np.asarray(row, dtype=np.float64).reshape(1, -1))[0])

	def predict_matrix(self, X: np.ndarray) -> np.ndarray:
		"""Predictions for rows the rule covers (coverage is not re-checked)."""
		if self.use_tree:
			return self.top_of_tree.predict_matrix(X)
		pred = self.rule_model.node_model_predict(X)
		if self.smoothing:
			n = float(self.rule_model.num_instances)
			for node in self.internal_nodes:
				pred = RuleNode.smoothing_original(n, pred, node.node_model_predict(X))
				n = float(node.num_instances)
		return pred

	def classify_instance(self, row: np.ndarray) -> float:
		if not self.covers(row):
			raise ValueError("Rule does not classify instance")
		return float(self.predict_matrix(np.asarray(row, dtype=np.float64).reshape(1, -1))[0])

	def not_covered_instances(self) -> Instances:
		if self._not_covered is None:
			return self._header.empty_copy()
		return self._not_covered

	# ----------------------------------------------------------------- text

	def _tree_to_string(self) -> str:
		if self.top_of_tree is None:
			return "Tree/Rule has not been built yet!"
		kind = "regression " if self.regression_tree else "model "
		pruned = "Unpruned" if self.unpruned else "Pruned"
		text = f"{pruned} training {kind}tree:\n"
		if self.smoothing:
			text += "(using smoothed predictions)\n"
		text += self.top_of_tree.tree_to_string(0)
		text += self.top_of_tree.print_leaf_models()
		text += f"\nNumber of Rules : {self.top_of_tree.number_of_linear_models()}"
		return text

	def _rule_to_string(self) -> str:
		text = ""
		if self.split_atts.shape[0] > 0:
			text += "IF\n"
			for i in range(self.split_atts.shape[0] - 1, -1, -1):
				name = self._header.attribute(int(self.split_atts[i])).name
				op = "<= " if self.rel_ops[i] == LEFT else "> "
				text += f"\t{name} {op}{Utils.double_to_string(self.split_vals[i], 0, 3)}\n"
			text += "THEN\n"
		if self.rule_model is not None:
			text += self.rule_model.print_node_linear_model()
			text += f" [{self.num_covered}"
			if self.global_abs_dev > 0.0:
				pct = Utils.double_to_string(100.0 * self.rule_model.root_mean_squared_error / self.global_abs_dev, 0, 3)
				text += f"/{pct}%]\n\n"
			else:
				text += "]\n\n"
		return text

	def to_string(self) -> str:
		if self.use_tree:
			return self._tree_to_string()
		return self._rule_to_string()

	def __str__(self) -> str:
		return self.to_string()
