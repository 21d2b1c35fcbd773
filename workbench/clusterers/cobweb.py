"""
Cobweb / Classit
----------------
Incremental conceptual clustering. Each instance is sorted down a concept
hierarchy; at every internal node four operators are scored by category
utility (CU) and the best one is applied:

  • host the instance in the best existing child
  • create a new singleton leaf for it
  • merge the two best children and host it in the merged node
  • split the best child (promote its children) and retry at this node

CU for nominal attributes is sum_v P(v|C)^2 - P(v)^2; numeric attributes
use the Classit form (1 / (2 sqrt(pi))) * (1/sigma_C - 1/sigma_P) with
sigma floored by `acuity`. Children of a node whose best CU falls below
`cutoff` are pruned, so that node becomes a leaf.
"""

from __future__ import annotations
import math
from typing import Dict, List, Optional

import numpy as np

from workbench.core.attribute import Attribute
from workbench.core.instances import Instances
from workbench.core.stats import Stats
from workbench.core.utils import Utils
from workbench.io.arff import ArffSaver
from .base import Clusterer


NORMAL = 1.0 / (2.0 * math.sqrt(math.pi))


class CNode:
	"""
	One concept of the hierarchy.

	Sufficient statistics cover every instance stored at or below the node:
	weighted value counts for nominal attributes and a Stats for numeric
	ones. `children` is None for a leaf.
	"""

	def __init__(self, tree: "Cobweb", row: Optional[np.ndarray] = None, weight: float = 1.0) -> None:
		self.tree = tree
		self.attributes: List[Attribute] = tree._header.attributes
		self.counts: List[Optional[np.ndarray]] = []
		self.numeric: List[Optional[Stats]] = []
		for att in self.attributes:
			if att.is_nominal():
				self.counts.append(np.zeros(att.num_values(), dtype=np.float64))
				self.numeric.append(None)
			else:
				self.counts.append(None)
				self.numeric.append(Stats())
		self.totals = np.zeros(len(self.attributes), dtype=np.float64)
		self.rows: List[np.ndarray] = []
		self.row_weights: List[float] = []
		self.children: Optional[List["CNode"]] = None
		self.total_instances = 0.0
		self.cluster_num = -1
		if row is not None:
			self.rows.append(row)
			self.row_weights.append(float(weight))
			self.update_stats(row, weight, False)

	def num_stored(self) -> int:
		return len(self.rows)

	# ------------------------------------------------------------- statistics

	def update_stats(self, row: np.ndarray, weight: float, delete: bool) -> None:
		"""Add (or remove) one weighted instance; missing values are skipped."""
		w = -float(weight) if delete else float(weight)
		for j, counts in enumerate(self.counts):
			v = row[j]
			if np.isnan(v):
				continue
			if counts is not None:
				counts[int(v)] += w
				self.totals[j] += w
			elif delete:
				self.numeric[j].subtract(v, weight)
			else:
				self.numeric[j].add(v, weight)
		self.total_instances += w

	def probabilities(self, j: int) -> np.ndarray:
		counts = self.counts[j]
		if self.totals[j] <= 0:
			return np.zeros(counts.shape[0], dtype=np.float64)
		return counts / self.totals[j]

	def std_dev(self, j: int) -> float:
		st = self.numeric[j]
		st.calculate_derived()
		sd = st.std_dev
		if math.isnan(sd) or math.isinf(sd):
			return self.tree.acuity
		return max(self.tree.acuity, sd)

	def category_utility_child(self, child: "CNode") -> float:
		total = 0.0
		for j, counts in enumerate(self.counts):
			if counts is not None:
				x = child.probabilities(j)
				y = self.probabilities(j)
				total += float(np.sum(x * x - y * y))
			else:
				total += NORMAL / child.std_dev(j) - NORMAL / self.std_dev(j)
		return (child.total_instances / self.total_instances) * total

	def category_utility(self) -> float:
		if self.children is None:
			raise RuntimeError("category_utility: node has no children")
		cu = 0.0
		for child in self.children:
			cu += self.category_utility_child(child)
		return cu / float(len(self.children))

	# ------------------------------------------------------------- structure

	def add_child_node(self, child: "CNode") -> None:
		for row, w in zip(child.rows, child.row_weights):
			self.rows.append(row)
			self.row_weights.append(w)
			self.update_stats(row, w, False)
		if self.children is None:
			self.children = []
		self.children.append(child)

	def add_instance(self, row: np.ndarray, weight: float) -> None:
		if len(self.rows) == 0:
			self.rows.append(row)
			self.row_weights.append(float(weight))
			self.update_stats(row, weight, False)
			return
		if self.children is None:
			# a leaf: its instances become one child, the new instance another
			old = CNode(self.tree, self.rows[0], self.row_weights[0])
			for r, w in zip(self.rows[1:], self.row_weights[1:]):
				old.rows.append(r)
				old.row_weights.append(w)
				old.update_stats(r, w, False)
			self.children = [old, CNode(self.tree, row, weight)]
			self.rows.append(row)
			self.row_weights.append(float(weight))
			self.update_stats(row, weight, False)
			if self.category_utility() < self.tree.cutoff:
				self.children = None
			return
		host = self.find_host(row, weight, False)
		if host is not None:
			host.add_instance(row, weight)

	def find_host(self, row: np.ndarray, weight: float, structure_frozen: bool) -> Optional["CNode"]:
		"""
		Choose where `row` goes below this node.

		Returns the child to recurse into, `self` after a split (the caller
		retries here), or None when the instance stops at this level. With
		structure_frozen only existing children and a new leaf are scored and
		nothing is modified; None then means "a new leaf would win".
		"""
		tree = self.tree
		if not structure_frozen:
			self.update_stats(row, weight, False)

		children = self.children
		cus = np.zeros(len(children), dtype=np.float64)
		for i, child in enumerate(children):
			child.update_stats(row, weight, False)
			cus[i] = self.category_utility()
			child.update_stats(row, weight, True)

		new_leaf = CNode(tree, row, weight)
		children.append(new_leaf)
		best_cu = self.category_utility()
		host: Optional[CNode] = new_leaf
		children.pop()

		best = 0
		second = 0
		for i in range(cus.shape[0]):
			if cus[i] > cus[second]:
				if cus[i] > cus[best]:
					second = best
					best = i
				else:
					second = i
		a = children[best]
		b = children[second]
		if cus[best] > best_cu:
			best_cu = float(cus[best])
			host = a

		if structure_frozen:
			if host is new_leaf:
				return None
			return host

		merged = CNode(tree)
		if a is not b:
			merged.add_child_node(a)
			merged.add_child_node(b)
			merged.update_stats(row, weight, False)
			saved = list(children)
			self.children = [c for c in children if c is not a and c is not b] + [merged]
			merged_cu = self.category_utility()
			self.children = [c for c in saved if c is not a and c is not b] + [a, b]
			children = self.children
			if merged_cu > best_cu:
				merged.update_stats(row, weight, True)
				best_cu = merged_cu
				host = merged

		if a.children is not None:
			status_quo = self.children
			trial = [c for c in status_quo if c is not a] + list(a.children) + [new_leaf]
			self.children = trial
			split_cu = self.category_utility()
			if split_cu > best_cu:
				best_cu = split_cu
				host = self
				trial.pop()
			else:
				self.children = status_quo

		if host is not self:
			self.rows.append(row)
			self.row_weights.append(float(weight))
		else:
			tree.number_splits += 1

		if host is merged:
			tree.number_merges += 1
			self.children = [c for c in self.children if c is not a and c is not b] + [merged]

		if host is new_leaf:
			host = CNode(tree)
			self.children.append(host)

		if best_cu < tree.cutoff:
			if host is self:
				self.rows.append(row)
				self.row_weights.append(float(weight))
			self.children = None
			host = None

		if host is self:
			self.update_stats(row, weight, True)
		return host

	def assign_cluster_nums(self, counter: List[int]) -> None:
		if self.children is not None and len(self.children) < 2:
			raise RuntimeError("assign_cluster_nums: tree not built correctly")
		self.cluster_num = counter[0]
		counter[0] += 1
		if self.children is not None:
			for child in self.children:
				child.assign_cluster_nums(counter)

	# ------------------------------------------------------------------ text

	def dump_tree(self, depth: int, text: List[str]) -> None:
		bars = "|   " * depth
		if self.children is None:
			text.append(f"\n{bars}leaf {self.cluster_num} [{self.num_stored()}]")
			return
		for child in self.children:
			text.append(f"\n{bars}node {self.cluster_num} [{self.num_stored()}]")
			child.dump_tree(depth + 1, text)

	def dump_data(self) -> str:
		"""ARFF text of the stored instances; internal nodes add a 'Cluster' column naming the child."""
		header = self.tree._header
		if self.children is None:
			X = np.vstack(self.rows) if self.rows else np.zeros((0, header.num_attributes()))
			data = Instances(header.relation, header.attributes, X, np.asarray(self.row_weights), -1)
			return ArffSaver.dumps(data)
		labels = [f"C{c.cluster_num}" for c in self.children]
		atts = list(header.attributes) + [Attribute.nominal("Cluster", labels)]
		blocks: List[np.ndarray] = []
		weights: List[float] = []
		for k, child in enumerate(self.children):
			for r, w in zip(child.rows, child.row_weights):
				blocks.append(np.append(r, float(k)))
				weights.append(w)
		X = np.vstack(blocks) if blocks else np.zeros((0, len(atts)))
		data = Instances(f"Cluster {self.cluster_num}", atts, X, np.asarray(weights), -1)
		return ArffSaver.dumps(data)

	def graph_tree(self, text: List[str]) -> None:
		leaf = self.children is None
		label = ("leaf " if leaf else "node ") + f"{self.cluster_num}  ({self.num_stored()})"
		line = f'N{self.cluster_num} [label="{label}" '
		if leaf:
			line += "shape=box style=filled "
		if self.tree.save_instance_data:
			line += "data =\n" + self.dump_data() + "\n,\n"
		text.append(line + "]\n")
		if not leaf:
			for child in self.children:
				text.append(f"N{self.cluster_num}->N{child.cluster_num}\n")
			for child in self.children:
				child.graph_tree(text)


class Cobweb(Clusterer):
	"""
	Cobweb/Classit clusterer.

	Every node of the hierarchy is a cluster; numbers are assigned in
	depth-first pre-order (root = 0). seed >= 0 shuffles the training order,
	the default -1 keeps it.
	"""

	def __init__(
		self,
		acuity: float = 1.0,
		cutoff: float = 0.01 * NORMAL,
		save_instance_data: bool = False,
		seed: int = -1,
	) -> None:
		super().__init__()
		if not float(acuity) > 0.0:
			raise ValueError("acuity must be > 0")
		self.acuity = float(acuity)
		self.cutoff = float(cutoff)
		self.save_instance_data = bool(save_instance_data)
		self.seed = int(seed)
		self.tree: Optional[CNode] = None
		self.number_splits = 0
		self.number_merges = 0
		self._num_clusters = -1

	def options(self) -> Dict[str, object]:
		return {"acuity": self.acuity, "cutoff": self.cutoff, "save_instance_data": self.save_instance_data, "seed": self.seed}

	def init_clusterer(self, header: Instances) -> None:
		"""Reset the hierarchy for incremental updates against `header`."""
		self._header = header.empty_copy()
		self.tree = None
		self.number_splits = 0
		self.number_merges = 0
		self._num_clusters = -1

	def build_clusterer(self, data: Instances) -> None:
		self.capabilities().test(data)
		self.init_clusterer(data)
		order = np.arange(data.num_instances())
		if self.seed >= 0:
			order = Utils.rng(self.seed).permutation(order)
		for i in order:
			self.update_clusterer(data.X[i], float(data.weights[i]))
		self.update_finished()

	def update_clusterer(self, row: np.ndarray, weight: float = 1.0) -> None:
		"""Sort one instance into the hierarchy."""
		h = self._check_built()
		r = np.asarray(row, dtype=np.float64).ravel().copy()
		if r.shape[0] != h.num_attributes():
			raise ValueError(f"Cobweb: row has {r.shape[0]} values, header has {h.num_attributes()} attributes")
		if self.tree is None:
			self.tree = CNode(self, r, weight)
		else:
			self.tree.add_instance(r, weight)
		self._num_clusters = -1

	def update_finished(self) -> None:
		"""Number the clusters after a batch of updates."""
		self._check_built()
		if self.tree is None:
			self._num_clusters = 0
			return
		counter = [0]
		self.tree.assign_cluster_nums(counter)
		self._num_clusters = counter[0]

	def _check_tree(self) -> CNode:
		self._check_built()
		if self.tree is None:
			raise RuntimeError("Cobweb: no instances have been added")
		if self._num_clusters < 0:
			self.update_finished()
		return self.tree

	def number_of_clusters(self) -> int:
		self._check_built()
		if self._num_clusters < 0:
			self.update_finished()
		return self._num_clusters

	def cluster_instance(self, row: np.ndarray) -> int:
		"""Descend with the structure frozen until a leaf or a new leaf would win."""
		host = self._check_tree()
		r = np.asarray(row, dtype=np.float64).ravel()
		while host.children is not None:
			host.update_stats(r, 1.0, False)
			nxt = host.find_host(r, 1.0, True)
			host.update_stats(r, 1.0, True)
			if nxt is None:
				break
			host = nxt
		return host.cluster_num

	def graph(self) -> str:
		"""GraphViz digraph of the hierarchy."""
		tree = self._check_tree()
		text: List[str] = ["digraph CobwebTree {\n"]
		tree.graph_tree(text)
		text.append("}\n")
		return "".join(text)

	def to_string(self) -> str:
		if self.tree is None:
			return "Cobweb hasn't been built yet!"
		self._check_tree()
		text: List[str] = []
		self.tree.dump_tree(0, text)
		return (
			f"Number of merges: {self.number_merges}\n"
			f"Number of splits: {self.number_splits}\n"
			f"Number of clusters: {self._num_clusters}\n"
			+ "".join(text) + "\n\n"
		)
