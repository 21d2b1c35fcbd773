from __future__ import annotations
from dataclasses import dataclass

import numpy as np


def std_dev(values: np.ndarray) -> float:
	"""Population std dev |(sumsq - sum^2/n) / n|^0.5; 0 for fewer than two values."""
	v = np.asarray(values, dtype=np.float64)
	n = v.shape[0]
	if n <= 1:
		return 0.0
	s = float(np.sum(v))
	ss = float(np.sum(v * v))
	return float(np.sqrt(abs((ss - s * s / n) / n)))


def abs_dev(values: np.ndarray) -> float:
	"""Mean absolute deviation from the mean; 0 for fewer than two values."""
	v = np.asarray(values, dtype=np.float64)
	if v.shape[0] <= 1:
		return 0.0
	return float(np.mean(np.abs(v - np.mean(v))))


@dataclass
class SplitInfo:
	"""
	Best standard-deviation-reduction split of one attribute.

	position: number of instances on the left (<=) side of the sorted order;
	split_attr is -1 while no admissible split was found.
	"""
	split_attr: int = -1
	position: int = -1
	split_value: float = 0.0
	max_impurity: float = -np.inf

	def copy(self) -> "SplitInfo":
		return SplitInfo(self.split_attr, self.position, self.split_value, self.max_impurity)

	@staticmethod
	def attr_split(attr: int, values: np.ndarray, target: np.ndarray) -> "SplitInfo":
		"""
		values and target must already be sorted by values. Candidate cuts
		keep at least max(1, n // 5) instances on each side and lie between
		distinct values; SDR = sd(all) - nl/n sd(left) - nr/n sd(right).
		"""
		out = SplitInfo(split_attr=int(attr))
		v = np.asarray(values, dtype=np.float64)
		y = np.asarray(target, dtype=np.float64)
		n = v.shape[0]
		if n < 2:
			return out
		length = max(1, n // 5)
		cs = np.cumsum(y)
		css = np.cumsum(y * y)
		total_s = float(cs[-1])
		total_ss = float(css[-1])
		sd_all = std_dev(y)
		best = -np.inf
		best_i = -1
		for i in range(length - 1, n - length):
			if not (v[i + 1] > v[i] + 1.0e-6):
				continue
			nl = float(i + 1)
			nr = float(n) - nl
			ls = float(cs[i])
			lss = float(css[i])
			rs = total_s - ls
			rss = total_ss - lss
			sdl = np.sqrt(abs((lss - ls * ls / nl) / nl)) if nl > 1 else 0.0
			sdr = np.sqrt(abs((rss - rs * rs / nr) / nr)) if nr > 1 else 0.0
			red = sd_all - (nl / n) * sdl - (nr / n) * sdr
			if red > best:
				best = red
				best_i = i
		if best_i >= 0:
			out.position = best_i + 1
			out.split_value = float((v[best_i] + v[best_i + 1]) / 2.0)
			out.max_impurity = float(best)
		return out
