"""
Instances
---------
Dense, NumPy-backed dataset container shared by every scheme.

  • X: (n, m) float64 matrix; nominal values are label indices; NaN = missing
  • weights: (n,) float64 row weights (default 1.0)
  • class_index: column holding the class, -1 when unset

All row/column selections return new containers; the attribute list is
shared (attributes are immutable).
"""

from __future__ import annotations
from typing import Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd

from .attribute import Attribute


class Instances:
	def __init__(
		self,
		relation: str,
		attributes: Sequence[Attribute],
		X: Optional[np.ndarray] = None,
		weights: Optional[np.ndarray] = None,
		class_index: int = -1,
	) -> None:
		self.relation = str(relation)
		self.attributes: List[Attribute] = list(attributes)
		m = len(self.attributes)
		if X is None:
			X = np.zeros((0, m), dtype=np.float64)
		X = np.asarray(X, dtype=np.float64)
		if X.ndim == 1:
			X = X.reshape(-1, m) if m > 0 else X.reshape(0, 0)
		if X.shape[1] != m:
			raise ValueError(f"Data has {X.shape[1]} columns but {m} attributes were declared")
		self.X = X
		if weights is None:
			weights = np.ones(X.shape[0], dtype=np.float64)
		weights = np.asarray(weights, dtype=np.float64).ravel()
		if weights.shape[0] != X.shape[0]:
			raise ValueError("weights length does not match number of rows")
		self.weights = weights
		self.class_index = -1
		self.set_class_index(class_index)

	# ----------------------------------------------------------------- shape

	def num_instances(self) -> int:
		return int(self.X.shape[0])

	def num_attributes(self) -> int:
		return len(self.attributes)

	def __len__(self) -> int:
		return self.num_instances()

	def attribute(self, j: int) -> Attribute:
		return self.attributes[int(j)]

	def attribute_index(self, name: str) -> int:
		"""Index of the attribute called `name`, or -1."""
		for j, a in enumerate(self.attributes):
			if a.name == name:
				return j
		return -1

	# ----------------------------------------------------------------- class

	def set_class_index(self, class_index: int) -> None:
		ci = int(class_index)
		if ci < -1 or ci >= len(self.attributes):
			raise ValueError(f"Class index {ci} out of range")
		self.class_index = ci

	def has_class(self) -> bool:
		return self.class_index >= 0

	def class_attribute(self) -> Attribute:
		if self.class_index < 0:
			raise ValueError("Class index is not set")
		return self.attributes[self.class_index]

	def num_classes(self) -> int:
		"""Number of class labels (1 for a numeric class)."""
		att = self.class_attribute()
		if att.is_nominal():
			return att.num_values()
		return 1

	def class_values(self) -> np.ndarray:
		if self.class_index < 0:
			raise ValueError("Class index is not set")
		return self.X[:, self.class_index]

	def non_class_indices(self) -> np.ndarray:
		idx = np.arange(self.num_attributes(), dtype=np.int64)
		if self.class_index >= 0:
			idx = idx[idx != self.class_index]
		return idx

	# ----------------------------------------------------------------- values

	def column(self, j: int) -> np.ndarray:
		return self.X[:, int(j)]

	def row(self, i: int) -> np.ndarray:
		return self.X[int(i)]

	def is_missing(self, i: int, j: int) -> bool:
		return bool(np.isnan(self.X[int(i), int(j)]))

	def sum_of_weights(self) -> float:
		return float(np.sum(self.weights))

	def check_for_string_attributes(self) -> bool:
		"""String attributes are rejected at load time, so none can be present."""
		return False

	def has_missing(self) -> bool:
		return bool(np.isnan(self.X).any())

	# ----------------------------------------------------------------- copies

	def copy(self) -> "Instances":
		return Instances(self.relation, self.attributes, self.X.copy(), self.weights.copy(), self.class_index)

	def empty_copy(self) -> "Instances":
		"""Header-only copy (same attributes and class, no rows)."""
		return Instances(
			self.relation,
			self.attributes,
			np.zeros((0, self.num_attributes()), dtype=np.float64),
			np.zeros(0, dtype=np.float64),
			self.class_index,
		)

	def subset(self, rows) -> "Instances":
		"""Rows selected by an index array or boolean mask (copied)."""
		r = np.asarray(rows)
		if r.dtype == bool:
			r = np.nonzero(r)[0]
		r = r.astype(np.int64, copy=False)
		return Instances(self.relation, self.attributes, self.X[r].copy(), self.weights[r].copy(), self.class_index)

	def sorted_by(self, j: int) -> "Instances":
		"""Stable sort on attribute j with missing values last."""
		col = self.X[:, int(j)]
		key = np.where(np.isnan(col), np.inf, col)
		miss = np.isnan(col).astype(np.int64)
		order = np.lexsort((np.arange(col.shape[0]), key, miss))
		return self.subset(order)

	def select_attributes(self, indices: Iterable[int]) -> "Instances":
		"""Keep the given columns in the given order; the class index follows its column."""
		idx = [int(j) for j in indices]
		atts = [self.attributes[j] for j in idx]
		ci = -1
		if self.class_index >= 0 and self.class_index in idx:
			ci = idx.index(self.class_index)
		return Instances(self.relation, atts, self.X[:, idx].copy(), self.weights.copy(), ci)

	def append(self, other: "Instances") -> "Instances":
		if other.num_attributes() != self.num_attributes():
			raise ValueError("Cannot append data with a different number of attributes")
		X = np.concatenate([self.X, other.X], axis=0)
		w = np.concatenate([self.weights, other.weights], axis=0)
		return Instances(self.relation, self.attributes, X, w, self.class_index)

	def delete_with_missing_class(self) -> "Instances":
		if self.class_index < 0:
			return self.copy()
		keep = ~np.isnan(self.X[:, self.class_index])
		return self.subset(keep)

	def delete_with_missing(self, j: int) -> "Instances":
		return self.subset(~np.isnan(self.X[:, int(j)]))

	# ----------------------------------------------------------------- pandas

	def to_frame(self) -> pd.DataFrame:
		"""Decoded view: nominal columns hold their labels, missing values are None/NaN."""
		cols = {}
		for j, a in enumerate(self.attributes):
			v = self.X[:, j]
			if a.is_nominal():
				lab: List[Optional[str]] = []
				for x in v:
					if np.isnan(x):
						lab.append(None)
					else:
						lab.append(a.values[int(x)])
				cols[a.name] = pd.Series(lab, dtype=object)
			else:
				cols[a.name] = pd.Series(v, dtype=np.float64)
		return pd.DataFrame(cols)

	@staticmethod
	def from_frame(
		df: pd.DataFrame,
		relation: str = "frame",
		class_column: Optional[str] = None,
		nominal: Optional[Sequence[str]] = None,
	) -> "Instances":
		"""
		Build Instances from a DataFrame.

		Numeric dtypes become numeric attributes unless listed in `nominal`;
		everything else becomes nominal with labels in order of first appearance.
		"""
		forced = set(nominal or [])
		atts: List[Attribute] = []
		cols: List[np.ndarray] = []
		for name in df.columns:
			s = df[name]
			if pd.api.types.is_numeric_dtype(s) and str(name) not in forced and not pd.api.types.is_bool_dtype(s):
				atts.append(Attribute.numeric(str(name)))
				cols.append(s.to_numpy(dtype=np.float64, na_value=np.nan))
				continue
			labels: List[str] = []
			seen = {}
			codes = np.full(len(s), np.nan, dtype=np.float64)
			for i, v in enumerate(s.tolist()):
				if v is None or (isinstance(v, float) and np.isnan(v)):
					continue
				key = str(v)
				if key == "?":
					continue
				if key not in seen:
					seen[key] = len(labels)
					labels.append(key)
				codes[i] = float(seen[key])
			if len(labels) == 0:
				labels = ["?missing"]
			atts.append(Attribute.nominal(str(name), labels))
			cols.append(codes)
		if len(cols) > 0:
			X = np.column_stack(cols)
		else:
			X = np.zeros((len(df), 0), dtype=np.float64)
		ci = -1
		if class_column is not None:
			ci = [a.name for a in atts].index(str(class_column))
		return Instances(relation, atts, X, None, ci)

	def __repr__(self) -> str:
		return f"Instances(relation={self.relation!r}, n={self.num_instances()}, m={self.num_attributes()}, class_index={self.class_index})"
