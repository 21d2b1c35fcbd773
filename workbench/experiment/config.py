"""
Experiment configuration.
"""

from __future__ import annotations
from dataclasses import asdict, dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class ExperimentConfig:
	"""
	Run-level settings.

	folds > 0 selects cross-validation with that many folds per run;
	folds == 0 selects a random train/test split holding train_percent of
	the rows for training. Run r uses seed + r.
	"""
	runs: int = 1
	folds: int = 10
	train_percent: float = 66.0
	seed: int = 1
	sig_level: float = 0.05
	corrected: bool = True
	metric: Optional[str] = None
	out_dir: Optional[str] = None

	def __post_init__(self) -> None:
		if int(self.runs) < 1:
			raise ValueError("runs must be >= 1")
		if int(self.folds) < 0 or int(self.folds) == 1:
			raise ValueError("folds must be 0 (train/test split) or >= 2")
		if not 0.0 < float(self.train_percent) < 100.0:
			raise ValueError("train_percent must lie in (0, 100)")
		if not 0.0 < float(self.sig_level) < 1.0:
			raise ValueError("sig_level must lie in (0, 1)")

	def uses_cross_validation(self) -> bool:
		return int(self.folds) > 0

	def test_train_ratio(self) -> float:
		"""n_test / n_train of one evaluation, used by the corrected t-test."""
		if self.uses_cross_validation():
			return 1.0 / (float(self.folds) - 1.0)
		return (100.0 - float(self.train_percent)) / float(self.train_percent)

	def to_dict(self) -> Dict[str, object]:
		return asdict(self)
