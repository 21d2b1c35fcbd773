from __future__ import annotations
import numpy as np

from workbench.core.instances import Instances
from .kfold import KFold
from .stratified_kfold import StratifiedKFold


def cross_validation_splits(data: Instances, folds: int = 10, seed: int = 1) -> list[tuple[np.ndarray, np.ndarray]]:
	"""Stratified folds for a nominal class, plain shuffled folds otherwise."""
	if data.class_index >= 0 and data.class_attribute().is_nominal():
		return StratifiedKFold.splits(data.class_values(), folds, seed)
	return KFold.splits(data.num_instances(), folds, seed)
