from __future__ import annotations
import math

import numpy as np


SMALL = 1e-6


class Utils:
	"""Shared numeric helpers (tolerant comparisons, formatting, seeded PRNG)."""

	@staticmethod
	def rng(seed: int) -> np.random.Generator:
		"""
		Return a deterministic NumPy Generator seeded with PCG64.
		"""
		return np.random.Generator(np.random.PCG64(int(seed)))

	@staticmethod
	def eq(a: float, b: float) -> bool:
		return (a == b) or ((a - b < SMALL) and (b - a < SMALL))

	@staticmethod
	def gr(a: float, b: float) -> bool:
		return a - b > SMALL

	@staticmethod
	def sm(a: float, b: float) -> bool:
		return b - a > SMALL

	@staticmethod
	def log2(x: float) -> float:
		return math.log(x) / math.log(2.0)

	@staticmethod
	def normalize(v: np.ndarray) -> np.ndarray:
		"""Scale a non-negative vector to sum 1; all-zero input returns uniform."""
		a = np.asarray(v, dtype=np.float64)
		s = float(np.sum(a))
		if a.size == 0:
			return a
		if not np.isfinite(s) or s <= 0.0:
			return np.full(a.shape, 1.0 / float(a.size))
		return a / s

	@staticmethod
	def double_to_string(value: float, width: int = 0, after: int = 3) -> str:
		"""
		Fixed-point rendering right-aligned to `width`; NaN renders as 'NaN'.
		Trailing zeros after the decimal point are dropped when width == 0.
		"""
		v = float(value)
		if math.isnan(v):
			s = "NaN"
		elif math.isinf(v):
			s = "Infinity" if v > 0 else "-Infinity"
		else:
			s = f"{v:.{int(after)}f}"
			if int(width) <= 0 and "." in s:
				s = s.rstrip("0").rstrip(".")
			if s == "-0":
				s = "0"
		if int(width) > 0:
			return s.rjust(int(width))
		return s
