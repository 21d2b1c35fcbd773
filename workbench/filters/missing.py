from __future__ import annotations

import numpy as np

from workbench.core.instances import Instances
from .base import Filter


class ReplaceMissingValues(Filter):
	"""
	Train-only missing value replacement.

	• set_input_format(data): weighted means (numeric) and modes (nominal),
	  ignoring NaN; an all-missing column falls back to 0.0
	• transform(data): replace NaN with the stored values; the class column is left alone
	"""

	def __init__(self) -> None:
		super().__init__()
		self.fill_: np.ndarray | None = None

	def _determine_output_format(self, data: Instances) -> Instances:
		m = data.num_attributes()
		fill = np.zeros(m, dtype=np.float64)
		w = data.weights
		for j, a in enumerate(data.attributes):
			col = data.X[:, j]
			ok = ~np.isnan(col)
			if not np.any(ok):
				continue
			if a.is_nominal():
				counts = np.zeros(a.num_values(), dtype=np.float64)
				np.add.at(counts, col[ok].astype(np.int64), w[ok])
				fill[j] = float(np.argmax(counts))
			else:
				sw = float(np.sum(w[ok]))
				if sw > 0:
					fill[j] = float(np.sum(col[ok] * w[ok]) / sw)
		self.fill_ = fill
		return data.empty_copy()

	def transform_matrix(self, X: np.ndarray) -> np.ndarray:
		assert self.fill_ is not None
		X = np.asarray(X, dtype=np.float64)
		F = np.broadcast_to(self.fill_, X.shape)
		out = np.where(np.isnan(X), F, X)
		ci = self._input.class_index
		if ci >= 0:
			out[:, ci] = X[:, ci]
		return out
