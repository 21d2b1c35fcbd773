from __future__ import annotations
from typing import Sequence, Union

import numpy as np

from workbench.core.attribute import Attribute
from workbench.core.instances import Instances
from workbench.core.ranges import Range
from .base import Filter


class MakeIndicatorFilter(Filter):
	"""
	Replace one nominal attribute by an indicator of a set of its values.

	attribute_index: 0-based column (-1 = last)
	value_indices:   1-based Range string ("last", "1,3") or 0-based list
	numeric:         True -> numeric 0/1, False -> nominal {neg, pos}
	"""

	def __init__(self, attribute_index: int = -1, value_indices: Union[str, Sequence[int]] = "last", numeric: bool = True) -> None:
		super().__init__()
		self.attribute_index = int(attribute_index)
		self.value_indices = value_indices
		self.numeric = bool(numeric)
		self._col = -1
		self._members = np.zeros(0, dtype=np.int64)

	def _determine_output_format(self, data: Instances) -> Instances:
		j = self.attribute_index
		if j < 0:
			j = data.num_attributes() + j
		if j < 0 or j >= data.num_attributes():
			raise ValueError(f"MakeIndicatorFilter: attribute index {self.attribute_index} out of range")
		att = data.attribute(j)
		if not att.is_nominal():
			raise ValueError(f"MakeIndicatorFilter: attribute '{att.name}' is not nominal")
		if j == data.class_index:
			raise ValueError("MakeIndicatorFilter: cannot replace the class attribute")
		if isinstance(self.value_indices, str):
			members = Range(self.value_indices).selection(att.num_values() - 1)
		else:
			members = np.asarray(list(self.value_indices), dtype=np.int64)
			if members.size and (members.min() < 0 or members.max() >= att.num_values()):
				raise ValueError("MakeIndicatorFilter: value index out of range")
		self._col = j
		self._members = members
		if self.numeric:
			new = Attribute.numeric(att.name)
		else:
			new = Attribute.nominal(att.name, ["neg", "pos"])
		atts = list(data.attributes)
		atts[j] = new
		return Instances(data.relation, atts, None, None, data.class_index)

	def transform_matrix(self, X: np.ndarray) -> np.ndarray:
		X = np.array(X, dtype=np.float64, copy=True)
		col = X[:, self._col]
		v = np.isin(col, self._members.astype(np.float64)).astype(np.float64)
		v[np.isnan(col)] = np.nan
		X[:, self._col] = v
		return X
