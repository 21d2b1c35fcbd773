from __future__ import annotations
from typing import List, Tuple

import numpy as np

from workbench.core.attribute import Attribute
from workbench.core.instances import Instances
from .base import Filter


class NominalToBinary(Filter):
	"""
	Replace nominal (non-class) attributes by numeric 0/1 attributes.

	Unsupervised: a two-valued attribute becomes a single attribute holding the
	value index; k > 2 values become k indicators named 'att=value'.

	Supervised (numeric class only): values are ordered by their weighted mean
	class value and k-1 cumulative indicators are produced, the i-th named
	'att=v_i,...,v_k' and set to 1 when the value ranks at position i or later.
	"""

	def __init__(self, supervised: bool = False) -> None:
		super().__init__()
		self.supervised = bool(supervised)
		self._plan: List[Tuple[int, np.ndarray]] = []

	def _value_order(self, data: Instances, j: int) -> np.ndarray:
		att = data.attribute(j)
		k = att.num_values()
		y = data.class_values()
		col = data.X[:, j]
		ok = ~np.isnan(col) & ~np.isnan(y)
		sums = np.zeros(k, dtype=np.float64)
		cnts = np.zeros(k, dtype=np.float64)
		np.add.at(sums, col[ok].astype(np.int64), y[ok] * data.weights[ok])
		np.add.at(cnts, col[ok].astype(np.int64), data.weights[ok])
		means = np.zeros(k, dtype=np.float64)
		nz = cnts > 0
		means[nz] = sums[nz] / cnts[nz]
		return np.argsort(means, kind="stable").astype(np.int64)

	def _determine_output_format(self, data: Instances) -> Instances:
		ci = data.class_index
		sup = self.supervised and ci >= 0 and data.class_attribute().is_numeric()
		atts: List[Attribute] = []
		plan: List[Tuple[int, np.ndarray]] = []
		out_ci = -1
		for j, a in enumerate(data.attributes):
			if j == ci or a.is_numeric():
				if j == ci:
					out_ci = len(atts)
				atts.append(a)
				plan.append((j, np.zeros(0, dtype=np.int64)))
				continue
			k = a.num_values()
			if sup:
				order = self._value_order(data, j)
				rank = np.empty(k, dtype=np.int64)
				rank[order] = np.arange(k, dtype=np.int64)
				for i in range(1, k):
					name = a.name + "=" + ",".join(a.values[int(v)] for v in order[i:])
					atts.append(Attribute.numeric(name))
					members = np.nonzero(rank >= i)[0].astype(np.int64)
					plan.append((j, members))
			elif k <= 2:
				atts.append(Attribute.numeric(a.name))
				plan.append((j, np.array([1], dtype=np.int64)))
			else:
				for v in range(k):
					atts.append(Attribute.numeric(f"{a.name}={a.values[v]}"))
					plan.append((j, np.array([v], dtype=np.int64)))
		self._plan = plan
		return Instances(data.relation, atts, None, None, out_ci)

	def transform_matrix(self, X: np.ndarray) -> np.ndarray:
		X = np.asarray(X, dtype=np.float64)
		out = np.empty((X.shape[0], len(self._plan)), dtype=np.float64)
		for o, (j, members) in enumerate(self._plan):
			col = X[:, j]
			if members.size == 0:
				out[:, o] = col
				continue
			v = np.isin(col, members.astype(np.float64)).astype(np.float64)
			v[np.isnan(col)] = np.nan
			out[:, o] = v
		return out
