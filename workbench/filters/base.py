from __future__ import annotations
from typing import Optional

import numpy as np

from workbench.core.instances import Instances


class Filter:
	"""
	Batch filter: set_input_format(train) learns whatever the filter needs and
	fixes the output header; transform() then applies the same mapping to any
	data sharing the input header.
	"""

	def __init__(self) -> None:
		self._input: Optional[Instances] = None
		self._output: Optional[Instances] = None

	def set_input_format(self, data: Instances) -> "Filter":
		self._input = data.empty_copy()
		self._output = self._determine_output_format(data)
		return self

	def _determine_output_format(self, data: Instances) -> Instances:
		raise NotImplementedError

	def _check_ready(self) -> None:
		if self._input is None or self._output is None:
			raise RuntimeError(f"{type(self).__name__}: input format has not been set")

	def input_format(self) -> Instances:
		self._check_ready()
		return self._input

	def output_format(self) -> Instances:
		self._check_ready()
		return self._output.empty_copy()

	def transform_matrix(self, X: np.ndarray) -> np.ndarray:
		raise NotImplementedError

	def transform(self, data: Instances) -> Instances:
		self._check_ready()
		if data.num_attributes() != self._input.num_attributes():
			raise ValueError(f"{type(self).__name__}: data does not match the input format")
		Xo = self.transform_matrix(data.X)
		out = self._output
		return Instances(data.relation, out.attributes, Xo, data.weights.copy(), out.class_index)

	def transform_row(self, row: np.ndarray) -> np.ndarray:
		self._check_ready()
		return self.transform_matrix(np.asarray(row, dtype=np.float64).reshape(1, -1))[0]

	@staticmethod
	def use_filter(data: Instances, f: "Filter") -> Instances:
		"""Apply an already-configured filter to `data`."""
		return f.transform(data)

	def fit_transform(self, data: Instances) -> Instances:
		return self.set_input_format(data).transform(data)
