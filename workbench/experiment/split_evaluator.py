"""
Split evaluators
----------------
Train a copy of a classifier on one split and score it on the other. Each
result row is keyed by (Scheme, Scheme_options, Scheme_version_ID).
Besides the evaluation measures, a row carries training / testing times
and every `measure_*` value the trained scheme exposes (e.g. M5P's
measure_num_rules).
"""

from __future__ import annotations
import copy
import json
import time
from typing import Dict, List, Optional, Union

from workbench.classifiers.base import Classifier
from workbench.classifiers.zero_r import ZeroR
from workbench.core.instances import Instances
from workbench.evaluation.evaluation import Evaluation


KEY_NAMES = ["Scheme", "Scheme_options", "Scheme_version_ID"]


def measure_names(scheme: object) -> List[str]:
	"""Names of the scheme's zero-argument measure_* methods, sorted."""
	out: List[str] = []
	for name in dir(scheme):
		if name.startswith("measure_") and callable(getattr(scheme, name, None)):
			out.append(name)
	return sorted(out)


class SplitEvaluator:
	"""Shared keying, timing and measure collection."""

	RESULT_NAMES: List[str] = []

	def __init__(self, classifier: Union[Classifier, str, None] = None, classifier_options: Optional[Dict[str, object]] = None) -> None:
		if classifier is None:
			classifier = ZeroR()
		elif isinstance(classifier, str):
			from workbench.registry import CLASSIFIERS, make_scheme
			classifier = make_scheme(classifier, classifier_options or {}, CLASSIFIERS)
		if not isinstance(classifier, Classifier):
			raise TypeError(f"classifier must be a Classifier, got {type(classifier).__name__}")
		self.classifier = classifier
		self.model_: Optional[Classifier] = None
		self.summary_: Optional[str] = None

	def key_names(self) -> List[str]:
		return list(KEY_NAMES)

	def key(self) -> List[str]:
		from workbench import __version__
		opts = json.dumps(self.classifier.options(), sort_keys=True, default=str, separators=(",", ":"))
		return [type(self.classifier).__name__, opts, __version__]

	def result_names(self) -> List[str]:
		return list(self.RESULT_NAMES) + ["Time_training", "Time_testing"] + measure_names(self.classifier)

	def _check_class(self, train: Instances) -> None:
		raise NotImplementedError

	def _measures(self, ev: Evaluation) -> Dict[str, object]:
		raise NotImplementedError

	def get_result(self, train: Instances, test: Instances) -> Dict[str, object]:
		"""Build on `train`, evaluate on `test`; returns result_names() -> value."""
		self._check_class(train)
		ev = Evaluation(train)
		model = copy.deepcopy(self.classifier)
		t0 = time.perf_counter()
		model.build_classifier(train)
		t_train = time.perf_counter() - t0
		t0 = time.perf_counter()
		ev.evaluate_model(model, test)
		t_test = time.perf_counter() - t0
		self.model_ = model
		self.summary_ = ev.to_summary_string()
		out = self._measures(ev)
		out["Time_training"] = float(t_train)
		out["Time_testing"] = float(t_test)
		for name in measure_names(model):
			out[name] = float(getattr(model, name)())
		return out

	def raw_result_output(self) -> str:
		if self.model_ is None:
			return "<not evaluated>"
		return f"Classifier model: \n{self.model_.to_string()}\n{self.summary_}"


class ClassifierSplitEvaluator(SplitEvaluator):
	"""Results for a nominal class; IR statistics refer to class `ir_class`."""

	RESULT_NAMES = [
		"Number_of_instances",
		"Number_correct",
		"Number_incorrect",
		"Number_unclassified",
		"Percent_correct",
		"Percent_incorrect",
		"Percent_unclassified",
		"Kappa_statistic",
		"Mean_absolute_error",
		"Root_mean_squared_error",
		"Relative_absolute_error",
		"Root_relative_squared_error",
		"SF_prior_entropy",
		"SF_scheme_entropy",
		"SF_entropy_gain",
		"SF_mean_prior_entropy",
		"SF_mean_scheme_entropy",
		"SF_mean_entropy_gain",
		"KB_information",
		"KB_mean_information",
		"KB_relative_information",
		"True_positive_rate",
		"Num_true_positives",
		"False_positive_rate",
		"Num_false_positives",
		"True_negative_rate",
		"Num_true_negatives",
		"False_negative_rate",
		"Num_false_negatives",
		"IR_precision",
		"IR_recall",
		"F_measure",
	]

	def __init__(self, classifier: Union[Classifier, str, None] = None, classifier_options: Optional[Dict[str, object]] = None, ir_class: int = 0) -> None:
		super().__init__(classifier, classifier_options)
		if int(ir_class) < 0:
			raise ValueError("ir_class must be >= 0")
		self.ir_class = int(ir_class)

	def _check_class(self, train: Instances) -> None:
		if train.class_index < 0 or not train.class_attribute().is_nominal():
			raise ValueError("ClassifierSplitEvaluator: class attribute is not nominal")
		if self.ir_class >= train.num_classes():
			raise ValueError(f"ClassifierSplitEvaluator: ir_class {self.ir_class} out of range")

	def _measures(self, ev: Evaluation) -> Dict[str, object]:
		c = self.ir_class
		values = [
			ev.num_instances(),
			ev.correct,
			ev.incorrect,
			ev.unclassified,
			ev.pct_correct(),
			ev.pct_incorrect(),
			ev.pct_unclassified(),
			ev.kappa(),
			ev.mean_absolute_error(),
			ev.root_mean_squared_error(),
			ev.relative_absolute_error(),
			ev.root_relative_squared_error(),
			ev.sf_prior_entropy(),
			ev.sf_scheme_entropy(),
			ev.sf_entropy_gain(),
			ev.sf_mean_prior_entropy(),
			ev.sf_mean_scheme_entropy(),
			ev.sf_mean_entropy_gain(),
			ev.kb_information(),
			ev.kb_mean_information(),
			ev.kb_relative_information(),
			ev.true_positive_rate(c),
			ev.num_true_positives(c),
			ev.false_positive_rate(c),
			ev.num_false_positives(c),
			ev.true_negative_rate(c),
			ev.num_true_negatives(c),
			ev.false_negative_rate(c),
			ev.num_false_negatives(c),
			ev.precision(c),
			ev.recall(c),
			ev.f_measure(c),
		]
		return {name: float(v) for name, v in zip(self.RESULT_NAMES, values)}


class RegressionSplitEvaluator(SplitEvaluator):
	"""Results for a numeric class."""

	RESULT_NAMES = [
		"Number_of_instances",
		"Number_unpredicted",
		"Mean_absolute_error",
		"Root_mean_squared_error",
		"Relative_absolute_error",
		"Root_relative_squared_error",
		"Correlation_coefficient",
	]

	def _check_class(self, train: Instances) -> None:
		if train.class_index < 0 or not train.class_attribute().is_numeric():
			raise ValueError("RegressionSplitEvaluator: class attribute is not numeric")

	def _measures(self, ev: Evaluation) -> Dict[str, object]:
		values = [
			ev.num_instances(),
			ev.unclassified,
			ev.mean_absolute_error(),
			ev.root_mean_squared_error(),
			ev.relative_absolute_error(),
			ev.root_relative_squared_error(),
			ev.correlation_coefficient(),
		]
		return {name: float(v) for name, v in zip(self.RESULT_NAMES, values)}
