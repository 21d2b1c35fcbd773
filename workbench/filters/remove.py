from __future__ import annotations
from typing import Sequence

import numpy as np

from workbench.core.instances import Instances
from .base import Filter


class Remove(Filter):
	"""Delete the given 0-based columns, or keep only them when invert_selection is set."""

	def __init__(self, attribute_indices: Sequence[int] = (), invert_selection: bool = False) -> None:
		super().__init__()
		self.attribute_indices = [int(j) for j in attribute_indices]
		self.invert_selection = bool(invert_selection)
		self._keep = np.zeros(0, dtype=np.int64)

	def _determine_output_format(self, data: Instances) -> Instances:
		m = data.num_attributes()
		for j in self.attribute_indices:
			if j < 0 or j >= m:
				raise ValueError(f"Remove: attribute index {j} out of range")
		chosen = set(self.attribute_indices)
		if self.invert_selection:
			keep = [j for j in range(m) if j in chosen]
		else:
			keep = [j for j in range(m) if j not in chosen]
		self._keep = np.asarray(keep, dtype=np.int64)
		return data.select_attributes(keep).empty_copy()

	def transform_matrix(self, X: np.ndarray) -> np.ndarray:
		return np.asarray(X, dtype=np.float64)[:, self._keep]
