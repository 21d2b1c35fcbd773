from __future__ import annotations

import numpy as np

from workbench.core.instances import Instances
from .base import Classifier


class ZeroR(Classifier):
	"""Majority class (Laplace-corrected counts) or weighted class mean."""

	def __init__(self) -> None:
		super().__init__()
		self.counts_: np.ndarray | None = None
		self.mean_ = float("nan")

	def build_classifier(self, data: Instances) -> None:
		self.capabilities().test(data)
		y = data.class_values()
		ok = ~np.isnan(y)
		w = data.weights[ok]
		if data.class_attribute().is_nominal():
			counts = np.ones(data.num_classes(), dtype=np.float64)
			np.add.at(counts, y[ok].astype(np.int64), w)
			self.counts_ = counts
		else:
			sw = float(np.sum(w))
			if sw > 0:
				self.mean_ = float(np.sum(y[ok] * w) / sw)
			else:
				print("ZeroR.build_classifier: no class values; predicting 0")
				self.mean_ = 0.0
		self._header = data.empty_copy()

	def distribution_for_instance(self, row: np.ndarray) -> np.ndarray:
		h = self._check_built()
		if h.class_attribute().is_numeric():
			return np.asarray([self.mean_], dtype=np.float64)
		return self.counts_ / float(np.sum(self.counts_))

	def to_string(self) -> str:
		if self._header is None:
			return "ZeroR: No model built yet."
		if self._header.class_attribute().is_numeric():
			return f"ZeroR predicts class value: {self.label(self._header, self.mean_)}"
		return f"ZeroR predicts class value: {self.label(self._header, float(np.argmax(self.counts_)))}"
