from __future__ import annotations
from dataclasses import dataclass, field
from typing import Sequence, Tuple


NUMERIC = "numeric"
NOMINAL = "nominal"


@dataclass(frozen=True)
class Attribute:
	"""
	Immutable attribute descriptor.

	Nominal values are stored in the data matrix as their index into `values`.
	"""
	name: str
	kind: str = NUMERIC
	values: Tuple[str, ...] = field(default_factory=tuple)

	def __post_init__(self) -> None:
		if self.kind not in (NUMERIC, NOMINAL):
			raise ValueError(f"Unsupported attribute kind: {self.kind}")
		if self.kind == NOMINAL and len(self.values) == 0:
			raise ValueError(f"Nominal attribute '{self.name}' needs at least one value")
		if self.kind == NOMINAL and len(set(self.values)) != len(self.values):
			raise ValueError(f"Nominal attribute '{self.name}' has duplicate values")

	@staticmethod
	def numeric(name: str) -> "Attribute":
		return Attribute(str(name), NUMERIC, ())

	@staticmethod
	def nominal(name: str, values: Sequence[str]) -> "Attribute":
		return Attribute(str(name), NOMINAL, tuple(str(v) for v in values))

	def is_numeric(self) -> bool:
		return self.kind == NUMERIC

	def is_nominal(self) -> bool:
		return self.kind == NOMINAL

	def num_values(self) -> int:
		"""Number of labels for a nominal attribute, 0 for numeric ones."""
		return len(self.values)

	def index_of_value(self, label: str) -> int:
		"""Return the index of `label`, or -1 if it is not a value of this attribute."""
		try:
			return self.values.index(str(label))
		except ValueError:
			return -1

	def value(self, i: int) -> str:
		return self.values[int(i)]

	def renamed(self, name: str) -> "Attribute":
		return Attribute(str(name), self.kind, self.values)

	def __str__(self) -> str:
		if self.is_nominal():
			return f"@attribute {self.name} {{{','.join(self.values)}}}"
		return f"@attribute {self.name} numeric"
