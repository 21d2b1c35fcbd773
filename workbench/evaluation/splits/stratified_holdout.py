"""StratifiedHoldout
Deterministic, NumPy-only p/1-p stratified holdout splitter.

  • Coerces class values to int64 codes and builds per-class bins
  • Shuffles each bin with a seeded PCG64 Generator
  • Allocates per-class test counts by fractional rounding with a stable tie policy
  • Returns disjoint, sorted int64 train/test index arrays covering the dataset
"""

from __future__ import annotations
import numpy as np
from .base import BaseSplitUtils as U


class StratifiedHoldout:
	@staticmethod
	def split(y, test_size: float = 0.2, seed: int = 0) -> tuple[np.ndarray, np.ndarray]:
		frac = U.check_fraction(test_size)
		labels, shuf = StratifiedHoldout._prepare(y, seed)
		target = U.rounded_targets_per_class(shuf, frac)
		train_parts: list[np.ndarray] = []
		test_parts: list[np.ndarray] = []
		for i in range(labels.shape[0]):
			lb = int(labels[i])
			k = int(target[lb])
			test_parts.append(shuf[lb][:k])
			train_parts.append(shuf[lb][k:])
		return StratifiedHoldout._assemble(train_parts, test_parts)

	@staticmethod
	def _prepare(y, seed: int) -> tuple[np.ndarray, dict[int, np.ndarray]]:
		ya = U.class_codes(y)
		r = U.rng(int(seed))
		labels, bins = U.class_bins(ya)
		shuf: dict[int, np.ndarray] = {}
		for i in range(labels.shape[0]):
			lb = int(labels[i])
			shuf[lb] = U.shuffle_rows(bins[lb], r)
		return labels, shuf

	@staticmethod
	def _assemble(train_parts: list[np.ndarray], test_parts: list[np.ndarray]) -> tuple[np.ndarray, np.ndarray]:
		if len(train_parts) > 0:
			tr = np.concatenate(train_parts, axis=0)
		else:
			tr = np.zeros(0, dtype=np.int64)
		if len(test_parts) > 0:
			te = np.concatenate(test_parts, axis=0)
		else:
			te = np.zeros(0, dtype=np.int64)
		return np.sort(tr).astype(np.int64, copy=False), np.sort(te).astype(np.int64, copy=False)
