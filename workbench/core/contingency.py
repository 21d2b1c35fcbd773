from __future__ import annotations
from dataclasses import dataclass
from typing import Sequence, Tuple, List
import math
import numpy as np


@dataclass(frozen=True)
class RankItem:
	"""Container for an attribute ranking entry with a deterministic tie key."""
	index: int
	score: float


class ContingencyTables:
	"""
	Weighted contingency tables and the plug-in entropy family used by the
	attribute evaluators and the MDL discretizer. All entropies are in bits.
	"""

	@staticmethod
	def equal_width_bins(x: np.ndarray, b: int = 10) -> np.ndarray:
		"""
		Discretize a 1-D array into equal-width bins [b]; NaN stays NaN.
		"""
		x = np.asarray(x, dtype=float).ravel()
		b = int(b)
		out = np.full(x.shape, np.nan, dtype=float)
		ok = ~np.isnan(x)
		if x.size == 0 or not np.any(ok):
			return out
		if b < 1:
			out[ok] = 0.0
			return out

		mn = float(np.min(x[ok]))
		mx = float(np.max(x[ok]))
		if not np.isfinite(mn) or not np.isfinite(mx) or mx == mn:
			out[ok] = 0.0
			return out

		edges = np.linspace(mn, mx, b + 1)
		idx = np.searchsorted(edges, x[ok], side="right") - 1
		idx[idx < 0] = 0
		last = b - 1
		idx[idx > last] = last
		out[ok] = idx.astype(float)
		return out

	@staticmethod
	def codes_with_missing(x: np.ndarray, k: int) -> Tuple[np.ndarray, int]:
		"""
		Map NaN to an extra category k; return (int64 codes, alphabet size).
		The extra category is only counted when some value is missing.
		"""
		x = np.asarray(x, dtype=float).ravel()
		miss = np.isnan(x)
		codes = np.where(miss, float(k), x).astype(np.int64)
		if np.any(miss):
			return codes, int(k) + 1
		return codes, int(k)

	@staticmethod
	def table(xb: np.ndarray, yb: np.ndarray, kx: int, ky: int, weights: np.ndarray | None = None) -> np.ndarray:
		"""
		Weighted (kx, ky) count matrix for discrete codes xb, yb.
		"""
		xb = np.asarray(xb, dtype=np.int64).ravel()
		yb = np.asarray(yb, dtype=np.int64).ravel()
		if xb.size != yb.size:
			print(f"table: size mismatch xb={xb.size}, yb={yb.size}; returning zeros")
			return np.zeros((max(1, kx), max(1, ky)), dtype=float)
		if weights is None:
			w = np.ones(xb.size, dtype=float)
		else:
			w = np.asarray(weights, dtype=float).ravel()
		counts = np.zeros((max(1, int(kx)), max(1, int(ky))), dtype=float)
		np.add.at(counts, (xb, yb), w)
		return counts

	@staticmethod
	def entropy(counts: Sequence[float]) -> float:
		"""
		H = -sum p log2 p over the non-zero cells of a count vector.
		"""
		c = np.asarray(counts, dtype=float).ravel()
		c = c[c > 0]
		total = float(np.sum(c))
		if total <= 0:
			return 0.0
		p = c / total
		return float(-np.sum(p * np.log2(p)))

	@staticmethod
	def entropy_over_rows(table: np.ndarray) -> float:
		return ContingencyTables.entropy(np.sum(np.asarray(table, dtype=float), axis=1))

	@staticmethod
	def entropy_over_columns(table: np.ndarray) -> float:
		return ContingencyTables.entropy(np.sum(np.asarray(table, dtype=float), axis=0))

	@staticmethod
	def entropy_conditioned_on_rows(table: np.ndarray) -> float:
		"""
		H(columns | rows) = sum_i (n_i / n) H(row_i).
		"""
		t = np.asarray(table, dtype=float)
		total = float(np.sum(t))
		if total <= 0:
			return 0.0
		h = 0.0
		for i in range(t.shape[0]):
			ni = float(np.sum(t[i]))
			if ni > 0:
				h += (ni / total) * ContingencyTables.entropy(t[i])
		return h

	@staticmethod
	def mutual_information(table: np.ndarray) -> float:
		t = np.asarray(table, dtype=float)
		return ContingencyTables.entropy_over_columns(t) - ContingencyTables.entropy_conditioned_on_rows(t)

	@staticmethod
	def symmetrical_uncertainty(table: np.ndarray) -> float:
		"""
		SU = 2 * I(X;Y) / (H(X) + H(Y)); 0 when both marginals are constant.
		"""
		t = np.asarray(table, dtype=float)
		hx = ContingencyTables.entropy_over_rows(t)
		hy = ContingencyTables.entropy_over_columns(t)
		denom = hx + hy
		if denom <= 0.0:
			return 0.0
		mi = hy - ContingencyTables.entropy_conditioned_on_rows(t)
		su = 2.0 * mi / denom
		if su < 0.0:
			su = 0.0
		return float(su)

	@staticmethod
	def rank_with_ties(scores: Sequence[Tuple[int, float]]) -> List[RankItem]:
		"""
		Rank (index, score) pairs by score descending; ties keep the lower index first.
		"""
		items = [RankItem(int(i), float(s)) for (i, s) in scores]
		items.sort(key=lambda it: (-it.score, it.index))
		return items

	@staticmethod
	def log2_safe(x: float) -> float:
		if x <= 0:
			return 0.0
		return math.log2(x)
