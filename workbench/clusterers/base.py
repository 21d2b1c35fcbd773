from __future__ import annotations
from typing import Dict, Optional

import numpy as np

from workbench.core.capabilities import Capabilities
from workbench.core.instances import Instances


class Clusterer:
	"""
	Base clusterer interface.

	build_clusterer(data) learns from every column of `data` (callers strip
	the class first when it should be ignored). Rows passed to
	cluster_instance are float64 vectors in the training header's layout.
	"""

	def __init__(self) -> None:
		self._header: Optional[Instances] = None

	def capabilities(self) -> Capabilities:
		return Capabilities(owner=type(self).__name__, nominal_class=True, numeric_class=True, no_class=True)

	def build_clusterer(self, data: Instances) -> None:
		raise NotImplementedError

	def _check_built(self) -> Instances:
		if self._header is None:
			raise RuntimeError(f"{type(self).__name__}: clusterer has not been built")
		return self._header

	def number_of_clusters(self) -> int:
		raise NotImplementedError

	def cluster_instance(self, row: np.ndarray) -> int:
		"""Index of the most probable cluster."""
		dist = self.distribution_for_instance(row)
		return int(np.argmax(dist))

	def distribution_for_instance(self, row: np.ndarray) -> np.ndarray:
		"""One-hot membership for hard clusterers."""
		self._check_built()
		dist = np.zeros(self.number_of_clusters(), dtype=np.float64)
		dist[self.cluster_instance(row)] = 1.0
		return dist

	def options(self) -> Dict[str, object]:
		return {}

	def to_string(self) -> str:
		return type(self).__name__

	def __str__(self) -> str:
		return self.to_string()
