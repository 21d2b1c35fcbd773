from __future__ import annotations
from dataclasses import dataclass
import math


@dataclass
class Stats:
	"""
	Weighted running statistics for a single numeric quantity.

	add/subtract update the raw sums; calculate_derived() refreshes mean and
	std_dev (n-1 divisor; NaN when count <= 1).
	"""
	count: float = 0.0
	sum: float = 0.0
	sum_sq: float = 0.0
	min: float = math.nan
	max: float = math.nan
	mean: float = math.nan
	std_dev: float = math.nan

	def add(self, value: float, weight: float = 1.0) -> None:
		v = float(value)
		w = float(weight)
		self.sum += v * w
		self.sum_sq += v * v * w
		self.count += w
		if math.isnan(self.min):
			self.min = v
			self.max = v
		elif v < self.min:
			self.min = v
		elif v > self.max:
			self.max = v

	def subtract(self, value: float, weight: float = 1.0) -> None:
		"""Remove a previously added value; min/max are not restored."""
		v = float(value)
		w = float(weight)
		self.sum -= v * w
		self.sum_sq -= v * v * w
		self.count -= w

	def calculate_derived(self) -> None:
		self.mean = math.nan
		self.std_dev = math.nan
		if self.count > 0:
			self.mean = self.sum / self.count
		if self.count > 1:
			var = (self.sum_sq - (self.sum * self.sum) / self.count) / (self.count - 1.0)
			if var < 0.0:
				var = 0.0
			self.std_dev = math.sqrt(var)

	def copy(self) -> "Stats":
		return Stats(self.count, self.sum, self.sum_sq, self.min, self.max, self.mean, self.std_dev)
