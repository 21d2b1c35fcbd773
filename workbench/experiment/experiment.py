"""
Experiment
----------
Runs every scheme on every dataset for `runs` repetitions of either k-fold
cross-validation or a random train/test split, collecting one result row
per (dataset, run, fold, scheme) into a pandas DataFrame.

When an output directory is configured the run leaves three artifacts:
results.csv, manifest.json (canonical, hashed) and events.jsonl (start,
one result event per row, stop; logical timestamps).
"""

from __future__ import annotations
import math
import time
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from workbench.classifiers.base import Classifier
from workbench.core.instances import Instances
from workbench.evaluation.splits import RandomHoldout, StratifiedHoldout, cross_validation_splits
from .config import ExperimentConfig
from .runlog import EventStream, RunLog
from .split_evaluator import ClassifierSplitEvaluator, RegressionSplitEvaluator, SplitEvaluator


SchemeSpec = Union[Classifier, str, Tuple[str, Mapping[str, object]]]


class ETATimer:
	"""
	Progress over the (dataset, run, fold, scheme) evaluations of one experiment.

	step() is called once per finished evaluation; the remaining time is the
	mean seconds per evaluation so far times the evaluations still to go.
	Seconds are also accumulated per scheme label so that slow schemes show
	up in the verbose log.
	"""
	def __init__(self, total: int, clock: Callable[[], float] = time.perf_counter) -> None:
		if int(total) < 0:
			raise ValueError("ETATimer: total must be >= 0")
		self.total = int(total)
		self.done = 0
		self.clock = clock
		self.started = float(clock())
		self.last = self.started
		self.per_scheme: Dict[str, float] = {}

	@staticmethod
	def hms(seconds: float) -> str:
		s = max(0, int(seconds))
		return f"{s // 3600:02d}:{(s % 3600) // 60:02d}:{s % 60:02d}"

	def step(self, scheme: str) -> float:
		"""Record one finished evaluation of `scheme`; returns its duration."""
		now = float(self.clock())
		took = now - self.last
		self.last = now
		self.done += 1
		self.per_scheme[scheme] = self.per_scheme.get(scheme, 0.0) + took
		return took

	def elapsed_seconds(self) -> float:
		return self.last - self.started

	def remaining_seconds(self) -> float:
		if self.done == 0:
			return 0.0
		return self.elapsed_seconds() / self.done * max(0, self.total - self.done)

	def line(self, dataset: str, scheme: str) -> str:
		return (
			f"[ETA] {self.done}/{self.total} {dataset} {scheme} "
			f"elapsed={self.hms(self.elapsed_seconds())} remaining={self.hms(self.remaining_seconds())}"
		)


class Experiment:
	def __init__(
		self,
		datasets: Sequence[Instances],
		schemes: Sequence[SchemeSpec],
		config: Optional[ExperimentConfig] = None,
	) -> None:
		if len(datasets) == 0:
			raise ValueError("Experiment needs at least one dataset")
		if len(schemes) == 0:
			raise ValueError("Experiment needs at least one scheme")
		for d in datasets:
			if not isinstance(d, Instances):
				raise TypeError(f"datasets must be Instances, got {type(d).__name__}")
			if d.class_index < 0:
				raise ValueError(f"Dataset '{d.relation}' has no class attribute set")
		self.datasets = list(datasets)
		self.schemes = list(schemes)
		self.config = config if config is not None else ExperimentConfig()
		self.results_: Optional[pd.DataFrame] = None
		self.manifest_: Optional[Dict[str, object]] = None
		self.events_ = EventStream()

	@staticmethod
	def make_split_evaluator(scheme: SchemeSpec, data: Instances) -> SplitEvaluator:
		"""Classifier or regression evaluator, chosen by the class type of `data`."""
		options: Mapping[str, object] = {}
		if isinstance(scheme, tuple):
			scheme, options = scheme
		if data.class_attribute().is_nominal():
			return ClassifierSplitEvaluator(scheme, dict(options))
		return RegressionSplitEvaluator(scheme, dict(options))

	@staticmethod
	def dataset_keys(datasets: Sequence[Instances]) -> List[str]:
		"""Relation names, with repeats suffixed #2, #3, ... so every dataset keys its own rows."""
		keys: List[str] = []
		for d in datasets:
			key = d.relation
			n = 1
			while key in keys:
				n += 1
				key = f"{d.relation}#{n}"
			keys.append(key)
		return keys

	def _splits(self, data: Instances, run: int) -> List[Tuple[np.ndarray, np.ndarray]]:
		cfg = self.config
		seed = int(cfg.seed) + int(run)
		if cfg.uses_cross_validation():
			return cross_validation_splits(data, int(cfg.folds), seed)
		test_size = 1.0 - float(cfg.train_percent) / 100.0
		if data.class_attribute().is_nominal():
			return [StratifiedHoldout.split(data.class_values(), test_size, seed)]
		return [RandomHoldout.split(data.num_instances(), test_size, seed)]

	@staticmethod
	def _json_safe(v: object) -> object:
		if isinstance(v, float) and (math.isnan(v) or math.isinf(v)):
			return None
		return v

	def run(self, verbose: bool = False) -> pd.DataFrame:
		cfg = self.config
		self.events_ = EventStream()
		keys = [self.make_split_evaluator(s, self.datasets[0]).key() for s in self.schemes]
		self.manifest_ = RunLog.build_manifest(cfg.to_dict(), self.datasets, keys)
		self.events_.emit("start", {"manifest_hash": self.manifest_["manifest_hash"], "datasets": len(self.datasets), "schemes": len(self.schemes)})
		folds = int(cfg.folds) if cfg.uses_cross_validation() else 1
		total = len(self.datasets) * int(cfg.runs) * folds * len(self.schemes)
		timer = ETATimer(total)
		rows: List[Dict[str, object]] = []
		for name, data in zip(self.dataset_keys(self.datasets), self.datasets):
			evaluators = [self.make_split_evaluator(s, data) for s in self.schemes]
			for run in range(int(cfg.runs)):
				for fold, (tr, te) in enumerate(self._splits(data, run)):
					train = data.subset(tr)
					test = data.subset(te)
					for se in evaluators:
						row: Dict[str, object] = {"Key_Dataset": name, "Key_Run": run + 1, "Key_Fold": fold + 1}
						row.update(dict(zip(se.key_names(), se.key())))
						row.update(se.get_result(train, test))
						rows.append(row)
						# timings stay out of the event stream so that it is reproducible
						self.events_.emit("result", {k: self._json_safe(v) for k, v in row.items() if not k.startswith("Time_")})
						timer.step(str(row["Scheme"]))
						if verbose:
							print(timer.line(name, str(row["Scheme"])))
		if verbose:
			for scheme, secs in sorted(timer.per_scheme.items(), key=lambda kv: -kv[1]):
				print(f"[time] {scheme}: {timer.hms(secs)}")
		self.events_.emit("stop", {"rows": len(rows)})
		self.results_ = pd.DataFrame(rows)
		if cfg.out_dir is not None:
			self.write(Path(cfg.out_dir))
		return self.results_

	def write(self, out_dir: Path) -> None:
		"""Write results.csv, manifest.json and events.jsonl into `out_dir`."""
		if self.results_ is None or self.manifest_ is None:
			raise RuntimeError("Experiment has not been run")
		out_dir.mkdir(parents=True, exist_ok=True)
		self.results_.to_csv(out_dir / "results.csv", index=False)
		(out_dir / "manifest.json").write_text(RunLog.canonical_json(self.manifest_), encoding="utf-8")
		(out_dir / "events.jsonl").write_text(self.events_.to_jsonl(), encoding="utf-8")
