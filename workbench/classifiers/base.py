from __future__ import annotations
from typing import Dict, Optional

import numpy as np

from workbench.core.capabilities import Capabilities
from workbench.core.instances import Instances
from workbench.core.utils import Utils


class Classifier:
	"""
	Base learner interface.

	build_classifier(data) trains on an Instances with its class set;
	rows passed to classify_instance / distribution_for_instance are full
	float64 vectors in the training header's layout (class value ignored).
	For a numeric class the 'distribution' is the one-element prediction.
	"""

	def __init__(self) -> None:
		self._header: Optional[Instances] = None

	def capabilities(self) -> Capabilities:
		return Capabilities(owner=type(self).__name__, nominal_class=True, numeric_class=True)

	def build_classifier(self, data: Instances) -> None:
		raise NotImplementedError

	def _check_built(self) -> Instances:
		if self._header is None:
			raise RuntimeError(f"{type(self).__name__}: classifier has not been built")
		return self._header

	def classify_instance(self, row: np.ndarray) -> float:
		"""Predicted value (numeric class) or label index; NaN when undecided."""
		h = self._check_built()
		dist = self.distribution_for_instance(row)
		if h.class_attribute().is_numeric():
			return float(dist[0])
		if dist.size == 0 or float(np.sum(dist)) <= 0.0:
			return float("nan")
		return float(np.argmax(dist))

	def distribution_for_instance(self, row: np.ndarray) -> np.ndarray:
		h = self._check_built()
		pred = self.classify_instance(row)
		if h.class_attribute().is_numeric():
			return np.asarray([pred], dtype=np.float64)
		dist = np.zeros(h.num_classes(), dtype=np.float64)
		if not np.isnan(pred):
			dist[int(pred)] = 1.0
		return dist

	def predict(self, X: np.ndarray) -> np.ndarray:
		"""classify_instance over the rows of X."""
		X = np.asarray(X, dtype=np.float64)
		if X.ndim == 1:
			X = X.reshape(1, -1)
		out = np.empty(X.shape[0], dtype=np.float64)
		for i in range(X.shape[0]):
			out[i] = self.classify_instance(X[i])
		return out

	def options(self) -> Dict[str, object]:
		return {}

	def to_string(self) -> str:
		return type(self).__name__

	def __str__(self) -> str:
		return self.to_string()

	@staticmethod
	def label(header: Instances, value: float) -> str:
		"""Readable class value for reports."""
		att = header.class_attribute()
		if np.isnan(value):
			return "?"
		if att.is_nominal():
			return att.value(int(value))
		return Utils.double_to_string(value, 0, 4)
