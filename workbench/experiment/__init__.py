from .config import ExperimentConfig
from .paired_stats import PairedStats, PairedStatsCorrected
from .split_evaluator import ClassifierSplitEvaluator, RegressionSplitEvaluator, SplitEvaluator, measure_names
from .runlog import RunLog, EventStream
from .experiment import Experiment, ETATimer
from .tester import PairedTTester

__all__ = [
	"ExperimentConfig",
	"PairedStats",
	"PairedStatsCorrected",
	"SplitEvaluator",
	"ClassifierSplitEvaluator",
	"RegressionSplitEvaluator",
	"measure_names",
	"RunLog",
	"EventStream",
	"Experiment",
	"ETATimer",
	"PairedTTester",
]
