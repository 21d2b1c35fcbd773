"""
RuleNode
--------
One node of an M5 model tree.

Growing: a node is a leaf when it holds fewer than `min_num_instances`
instances or its class std dev is below 5% of the global std dev; otherwise
the split maximizing standard-deviation reduction is taken and both
children are grown recursively. An internal node's linear model uses the
attributes tested anywhere below it (a regression tree keeps the constant
model only); a leaf's model is the constant.

Pruning (bottom-up): the node's linear model replaces the subtree when

	rmse_model * pf(n, params_model + 1) <= rmse_subtree * pf(n, l + r + 1)

with pf(n, v) = (n + 2v) / (n - v), or 10 when n <= v.

Smoothing (after num_leaves() has run): each internal node on the way back
up blends p' = (n p + 15 q) / (n + 15), where n is the child's instance
count and q the node model's prediction.
"""

from __future__ import annotations
from typing import List, Optional

import numpy as np

from workbench.core.instances import Instances
from workbench.core.utils import Utils
from ..linear_regression import LinearRegression
from .split import SplitInfo, std_dev


class RuleNode:
	SMOOTHING_CONSTANT = 15.0
	DEV_FRACTION = 0.05
	PRUNING_MULTIPLIER = 2.0

	def __init__(
		self,
		global_dev: float,
		global_abs_dev: float,
		parent: Optional["RuleNode"] = None,
		min_num_instances: int = 4,
		regression_tree: bool = False,
		smoothing: bool = False,
		save_instances: bool = False,
		unpruned: bool = False,
	) -> None:
		self.global_dev = float(global_dev)
		self.global_abs_dev = float(global_abs_dev)
		self.parent = parent
		self.min_num_instances = int(min_num_instances)
		self.regression_tree = bool(regression_tree)
		self.smoothing = bool(smoothing)
		self.save_instances = bool(save_instances)
		self.unpruned = bool(unpruned)
		self.left: Optional[RuleNode] = None
		self.right: Optional[RuleNode] = None
		self.model: Optional[LinearRegression] = None
		self.instances: Optional[Instances] = None
		self.header: Optional[Instances] = None
		self.num_instances = 0
		self.is_leaf = True
		self.split_att = -1
		self.split_value = 0.0
		self.indices = np.zeros(0, dtype=np.int64)
		self.num_parameters = 1
		self.root_mean_squared_error = float(np.finfo(np.float64).max)
		self.leaf_model_num = 0
		self.smoothing_on = False
		self.node_id = 0

	def _child(self) -> "RuleNode":
		return RuleNode(
			self.global_dev,
			self.global_abs_dev,
			self,
			self.min_num_instances,
			self.regression_tree,
			self.smoothing,
			self.save_instances,
			self.unpruned,
		)

	# ----------------------------------------------------------------- growing

	def build_classifier(self, data: Instances) -> None:
		self.smoothing_on = False
		self.root_mean_squared_error = float(np.finfo(np.float64).max)
		self.instances = data
		self.header = data.empty_copy()
		self.num_instances = data.num_instances()
		self.model = None
		self.left = None
		self.right = None
		y = data.class_values()
		self.is_leaf = (self.num_instances < self.min_num_instances) or (
			std_dev(y) < self.global_dev * self.DEV_FRACTION
		)
		self.split()

	def split(self) -> None:
		data = self.instances
		ci = data.class_index
		n = self.num_instances
		if not self.is_leaf:
			best = SplitInfo()
			y = data.class_values()
			for j in range(data.num_attributes()):
				if j == ci:
					continue
				col = data.X[:, j]
				order = np.argsort(col, kind="stable")
				cur = SplitInfo.attr_split(j, col[order], y[order])
				if abs(cur.max_impurity - best.max_impurity) > 1.0e-6 and cur.max_impurity > best.max_impurity + 1.0e-6:
					best = cur.copy()
			if best.split_attr < 0 or best.position < 1 or best.position > n - 1:
				self.is_leaf = True
			else:
				self.split_att = best.split_attr
				self.split_value = best.split_value
				go_left = data.X[:, self.split_att] <= self.split_value
				self.left = self._child()
				self.left.build_classifier(data.subset(go_left))
				self.right = self._child()
				self.right.build_classifier(data.subset(~go_left))
				if not self.regression_tree:
					below = self.atts_tested_below()
					idx = [j for j in range(data.num_attributes()) if below[j] and j != ci]
					self.indices = np.asarray(idx + [ci], dtype=np.int64)
				else:
					self.indices = np.asarray([ci], dtype=np.int64)
					self.num_parameters = 1
		if self.is_leaf:
			self.indices = np.asarray([ci], dtype=np.int64)
			self.num_parameters = 1

	def atts_tested_below(self) -> np.ndarray:
		m = self.header.num_attributes()
		below = np.zeros(m, dtype=bool)
		if self.left is not None:
			below |= self.left.atts_tested_below()
		if self.right is not None:
			below |= self.right.atts_tested_below()
		if not self.is_leaf:
			below[self.split_att] = True
		return below

	def atts_tested_above(self) -> np.ndarray:
		m = self.header.num_attributes()
		above = np.zeros(m, dtype=bool)
		if self.parent is not None:
			above |= self.parent.atts_tested_above()
		if self.split_att >= 0:
			above[self.split_att] = True
		return above

	# ----------------------------------------------------------------- models

	def _build_linear_model(self) -> np.ndarray:
		reduced = self.instances.select_attributes(self.indices)
		lr = LinearRegression()
		lr.turn_checks_off()
		lr.build_classifier(reduced)
		self.model = lr
		return lr.predict(reduced.X)

	def _rmse(self, pred: np.ndarray) -> float:
		y = self.instances.class_values()
		w = self.instances.weights
		sw = float(np.sum(w))
		if sw <= 0:
			return 0.0
		return float(np.sqrt(np.sum(w * (y - pred) ** 2) / sw))

	def node_model_predict(self, X: np.ndarray) -> np.ndarray:
		if self.model is None:
			raise RuntimeError("RuleNode: classifier has not been built correctly")
		return self.model.predict(X[:, self.indices])

	@staticmethod
	def smoothing_original(n: float, pred, support_pred):
		return (n * pred + RuleNode.SMOOTHING_CONSTANT * support_pred) / (n + RuleNode.SMOOTHING_CONSTANT)

	def predict_matrix(self, X: np.ndarray) -> np.ndarray:
		"""Predictions for the rows of X (training header layout)."""
		X = np.asarray(X, dtype=np.float64)
		if self.is_leaf:
			return self.node_model_predict(X)
		out = np.empty(X.shape[0], dtype=np.float64)
		go_left = X[:, self.split_att] <= self.split_value
		for child, mask in ((self.left, go_left), (self.right, ~go_left)):
			if not np.any(mask):
				continue
			part = X[mask]
			if child is None:
				out[mask] = self.node_model_predict(part)
				continue
			pred = child.predict_matrix(part)
			if self.smoothing_on and self.smoothing:
				pred = self.smoothing_original(child.num_instances, pred, self.node_model_predict(part))
			out[mask] = pred
		return out

	def classify_instance(self, row: np.ndarray) -> float:
		return float(self.predict_matrix(np.asarray(row, dtype=np.float64).reshape(1, -1))[0])

	# ----------------------------------------------------------------- pruning

	def pruning_factor(self, num_instances: int, num_params: int) -> float:
		if num_instances <= num_params:
			return 10.0
		return (num_instances + self.PRUNING_MULTIPLIER * num_params) / float(num_instances - num_params)

	def prune(self) -> None:
		if self.is_leaf:
			pred = self._build_linear_model()
			self.root_mean_squared_error = self._rmse(pred)
		else:
			if self.left is not None:
				self.left.prune()
			if self.right is not None:
				self.right.prune()
			rms_model = self._rmse(self._build_linear_model())
			adjusted_model = rms_model * self.pruning_factor(self.num_instances, self.model.num_parameters() + 1)
			rms_subtree = self._rmse(self.predict_matrix(self.instances.X))
			l_params = self.left.num_parameters if self.left is not None else 0
			r_params = self.right.num_parameters if self.right is not None else 0
			adjusted_node = rms_subtree * self.pruning_factor(self.num_instances, l_params + r_params + 1)
			replace = (adjusted_model <= adjusted_node) or (adjusted_model < self.global_dev * 0.00001)
			if replace and not self.unpruned:
				self.is_leaf = True
				self.left = None
				self.right = None
				self.num_parameters = self.model.num_parameters() + 1
				self.root_mean_squared_error = rms_model
			else:
				self.num_parameters = l_params + r_params + 1
				self.root_mean_squared_error = rms_subtree
		if not self.save_instances:
			self.instances = self.instances.empty_copy()

	# ----------------------------------------------------------------- structure

	def num_leaves(self, leaf_counter: int) -> int:
		"""Number the leaves left to right; also switches smoothing on."""
		if self.smoothing:
			self.smoothing_on = True
		if not self.is_leaf:
			self.leaf_model_num = 0
			if self.left is not None:
				leaf_counter = self.left.num_leaves(leaf_counter)
			if self.right is not None:
				leaf_counter = self.right.num_leaves(leaf_counter)
		else:
			leaf_counter += 1
			self.leaf_model_num = leaf_counter
		return leaf_counter

	def number_of_linear_models(self) -> int:
		if self.is_leaf:
			return 1
		return self.left.number_of_linear_models() + self.right.number_of_linear_models()

	def find_best_leaf(self, best: List[object]) -> None:
		"""best = [max coverage, leaf]; updated in place with the most populous leaf."""
		if not self.is_leaf:
			if self.left is not None:
				self.left.find_best_leaf(best)
			if self.right is not None:
				self.right.find_best_leaf(best)
		elif self.num_instances > best[0]:
			best[0] = self.num_instances
			best[1] = self

	def return_leaves(self, out: List["RuleNode"]) -> None:
		if self.is_leaf:
			out.append(self)
			return
		if self.left is not None:
			self.left.return_leaves(out)
		if self.right is not None:
			self.right.return_leaves(out)

	def assign_ids(self, last_id: int) -> int:
		current = last_id + 1
		self.node_id = current
		if self.left is not None:
			current = self.left.assign_ids(current)
		if self.right is not None:
			current = self.right.assign_ids(current)
		return current

	# ----------------------------------------------------------------- text

	def _coverage(self) -> str:
		if self.global_dev > 0.0:
			pct = Utils.double_to_string(100.0 * self.root_mean_squared_error / self.global_abs_dev, 0, 3)
			return f"{self.num_instances}/{pct}%"
		return f"{self.num_instances}"

	def print_node_linear_model(self) -> str:
		if self.model is None:
			raise RuntimeError("RuleNode: classifier has not been built correctly")
		return self.model.model_string()

	def print_leaf_models(self) -> str:
		if self.is_leaf:
			return f"\nLM num: {self.leaf_model_num}\n{self.print_node_linear_model()}\n"
		return self.left.print_leaf_models() + self.right.print_leaf_models()

	def tree_to_string(self, level: int) -> str:
		if self.is_leaf:
			return f"LM{self.leaf_model_num} ({self._coverage()})\n"
		name = self.header.attribute(self.split_att).name
		value = Utils.double_to_string(self.split_value, 0, 3)
		bars = "|   " * level
		text = "\n" + bars + f"{name} <= {value} : "
		text += self.left.tree_to_string(level + 1) if self.left is not None else "NULL\n"
		text += bars + f"{name} >  {value} : "
		text += self.right.tree_to_string(level + 1) if self.right is not None else "NULL\n"
		return text

	def graph(self) -> str:
		self.assign_ids(-1)
		return self._graph_tree()

	def _graph_tree(self) -> str:
		if self.is_leaf:
			label = f'LM {self.leaf_model_num} ({self._coverage()})" shape=box style=filled '
		else:
			label = f'{self.header.attribute(self.split_att).name}"'
		text = f'N{self.node_id} [label="{label}]\n'
		value = Utils.double_to_string(self.split_value, 0, 3)
		if self.left is not None:
			text += f'N{self.node_id}->N{self.left.node_id} [label="<={value}"]\n'
			text += self.left._graph_tree()
		if self.right is not None:
			text += f'N{self.node_id}->N{self.right.node_id} [label=">{value}"]\n'
			text += self.right._graph_tree()
		return text
