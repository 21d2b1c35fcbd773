"""
Capabilities
------------
Declarative description of the data a scheme can handle. Every build_*
entry point calls `capabilities().test(data)` first; the first violated
requirement is raised as a ValueError naming the scheme.
"""

from __future__ import annotations
from dataclasses import dataclass

import numpy as np

from .instances import Instances


@dataclass(frozen=True)
class Capabilities:
	owner: str = "scheme"
	nominal_attributes: bool = True
	numeric_attributes: bool = True
	missing_values: bool = True
	nominal_class: bool = False
	numeric_class: bool = False
	no_class: bool = False
	missing_class_values: bool = True
	min_instances: int = 1

	def handles_class(self, data: Instances) -> bool:
		if data.class_index < 0:
			return self.no_class
		if data.class_attribute().is_nominal():
			return self.nominal_class
		return self.numeric_class

	def test(self, data: Instances) -> None:
		"""Raise ValueError if `data` violates any declared capability."""
		if not isinstance(data, Instances):
			raise TypeError(f"{self.owner}: expected Instances, got {type(data).__name__}")
		if data.check_for_string_attributes():
			raise ValueError(f"{self.owner}: cannot handle string attributes")
		ci = data.class_index
		if ci < 0 and not self.no_class:
			raise ValueError(f"{self.owner}: class index is not set")
		if ci >= 0:
			catt = data.class_attribute()
			if catt.is_nominal() and not self.nominal_class:
				raise ValueError(f"{self.owner}: cannot handle nominal class '{catt.name}'")
			if catt.is_numeric() and not self.numeric_class:
				raise ValueError(f"{self.owner}: cannot handle numeric class '{catt.name}'")
			if not self.missing_class_values and bool(np.isnan(data.class_values()).any()):
				raise ValueError(f"{self.owner}: cannot handle missing class values")
		for j, att in enumerate(data.attributes):
			if j == ci:
				continue
			if att.is_nominal() and not self.nominal_attributes:
				raise ValueError(f"{self.owner}: cannot handle nominal attribute '{att.name}'")
			if att.is_numeric() and not self.numeric_attributes:
				raise ValueError(f"{self.owner}: cannot handle numeric attribute '{att.name}'")
			if not self.missing_values and bool(np.isnan(data.X[:, j]).any()):
				raise ValueError(f"{self.owner}: cannot handle missing values in '{att.name}'")
		if data.num_instances() < int(self.min_instances):
			raise ValueError(
				f"{self.owner}: needs at least {self.min_instances} instances, got {data.num_instances()}"
			)
