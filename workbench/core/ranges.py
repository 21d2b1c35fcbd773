"""
Range
-----
1-based attribute range strings as used on the command line:

	"1,3,5-7"      explicit indices and spans
	"first-last"   every attribute
	"2-last"       open-ended span
	"!1,2"         inverted selection

selection(upper) resolves the string against the highest 0-based index.
"""

from __future__ import annotations
from typing import List

import numpy as np


class Range:
	def __init__(self, ranges: str = "", invert: bool = False) -> None:
		self._ranges = ""
		self.invert = bool(invert)
		self.set_ranges(ranges)

	def set_ranges(self, ranges: str) -> None:
		r = str(ranges).strip().replace(" ", "")
		if r.startswith("!"):
			self.invert = True
			r = r[1:]
		for part in [p for p in r.split(",") if p != ""]:
			for tok in part.split("-"):
				if tok not in ("first", "last") and not tok.isdigit():
					raise ValueError(f"Invalid range element: {part}")
			if part.count("-") > 1:
				raise ValueError(f"Invalid range element: {part}")
		self._ranges = r

	@property
	def ranges(self) -> str:
		if self.invert:
			return "!" + self._ranges
		return self._ranges

	def is_empty(self) -> bool:
		return self._ranges == ""

	@staticmethod
	def _resolve(tok: str, upper: int) -> int:
		if tok == "first":
			return 0
		if tok == "last":
			return upper
		return int(tok) - 1

	def selection(self, upper: int) -> np.ndarray:
		"""Sorted 0-based indices selected among 0..upper."""
		upper = int(upper)
		chosen = np.zeros(upper + 1, dtype=bool)
		for part in [p for p in self._ranges.split(",") if p != ""]:
			if "-" in part:
				a, b = part.split("-")
				lo = self._resolve(a, upper)
				hi = self._resolve(b, upper)
			else:
				lo = hi = self._resolve(part, upper)
			if lo > hi:
				lo, hi = hi, lo
			if lo < 0 or hi > upper:
				raise ValueError(f"Range element {part} is outside 1..{upper + 1}")
			chosen[lo:hi + 1] = True
		if self.invert:
			chosen = ~chosen
		return np.nonzero(chosen)[0].astype(np.int64)

	@staticmethod
	def indices_to_string(indices) -> str:
		"""Compact 1-based string for 0-based indices, e.g. [0,1,2,5] -> '1-3,6'."""
		idx = sorted(set(int(i) for i in indices))
		parts: List[str] = []
		i = 0
		while i < len(idx):
			j = i
			while j + 1 < len(idx) and idx[j + 1] == idx[j] + 1:
				j += 1
			if j > i:
				parts.append(f"{idx[i] + 1}-{idx[j] + 1}")
			else:
				parts.append(f"{idx[i] + 1}")
			i = j + 1
		return ",".join(parts)

	def __str__(self) -> str:
		return self.ranges
