from __future__ import annotations
import numpy as np

from workbench.core.utils import Utils

"""
BaseSplitUtils
--------------
Deterministic, NumPy-only helpers shared by the fold and holdout splitters:

  • Seeded PRNG construction (PCG64) for reproducible shuffles
  • Class-code coercion (missing class → its own bin, code -1)
  • Per-class binning (sorted labels → index arrays)
  • Row shuffling via a provided Generator (no hidden global state)
  • Fractional rounding of per-class targets with deterministic tie policy

All helpers return new arrays; callers own ordering and concatenation.
"""


class BaseSplitUtils:
	@staticmethod
	def rng(seed: int) -> np.random.Generator:
		return Utils.rng(seed)

	@staticmethod
	def class_codes(y) -> np.ndarray:
		"""
		Coerce class values to 1-D int64 codes; NaN (missing class) becomes -1.
		"""
		a = np.asarray(y, dtype=np.float64).reshape(-1)
		return np.where(np.isnan(a), -1.0, a).astype(np.int64)

	@staticmethod
	def class_bins(y: np.ndarray) -> tuple[np.ndarray, dict[int, np.ndarray]]:
		"""
		Bin sample indices by class label with a deterministic label order.
		"""
		labels = np.unique(y)
		bins: dict[int, np.ndarray] = {}
		for i in range(labels.shape[0]):
			lb = int(labels[i])
			bins[lb] = np.nonzero(y == lb)[0].astype(np.int64, copy=False)
		return labels, bins

	@staticmethod
	def shuffle_rows(idx: np.ndarray, r: np.random.Generator) -> np.ndarray:
		j = np.arange(idx.shape[0], dtype=np.int64)
		r.shuffle(j)
		return idx[j]

	@staticmethod
	def rounded_targets_per_class(bins: dict[int, np.ndarray], frac: float) -> dict[int, int]:
		"""
		Per-class integer targets via fractional rounding; the largest remainders
		(then the lower label) receive the leftover units.
		"""
		target: dict[int, int] = {}
		rems: list[tuple[int, float]] = []
		total_raw = 0.0
		for lb, idx in bins.items():
			raw = float(idx.shape[0]) * float(frac)
			k = int(np.floor(raw))
			target[int(lb)] = k
			rems.append((int(lb), raw - float(k)))
			total_raw += raw
		rems.sort(key=lambda t: (-t[1], t[0]))
		need = int(round(total_raw)) - int(sum(target.values()))
		for j in range(need):
			lb = rems[j][0]
			target[lb] = target[lb] + 1
		return target

	@staticmethod
	def check_folds(n: int, k: int) -> int:
		k = int(k)
		if k < 2:
			raise ValueError(f"Number of folds must be >= 2, got {k}")
		if k > int(n):
			raise ValueError(f"Cannot have {k} folds with only {n} instances")
		return k

	@staticmethod
	def check_fraction(test_size: float) -> float:
		f = float(test_size)
		if not (0.0 < f < 1.0):
			raise ValueError(f"test_size must lie in (0, 1), got {f}")
		return f

	@staticmethod
	def folds_from_order(order: np.ndarray, k: int) -> list[tuple[np.ndarray, np.ndarray]]:
		"""
		Deal an ordered index vector round-robin into k folds; return
		(train, test) pairs with each side sorted ascending.
		"""
		pos = np.arange(order.shape[0], dtype=np.int64) % int(k)
		out: list[tuple[np.ndarray, np.ndarray]] = []
		for f in range(int(k)):
			te = np.sort(order[pos == f]).astype(np.int64, copy=False)
			tr = np.sort(order[pos != f]).astype(np.int64, copy=False)
			out.append((tr, te))
		return out
