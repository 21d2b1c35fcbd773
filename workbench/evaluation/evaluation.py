"""
Evaluation
----------
Accumulates predictive-performance statistics for a classifier over test
instances (weighted). Priors come from training data: Laplace-corrected
class counts for a nominal class, the weighted mean for a numeric one.
Relative errors (RAE, RRSE) compare against predicting those priors.

Nominal class:
  • correct / incorrect / unclassified (no positive probability)
  • confusion matrix, kappa, per-class TP / FP rate, precision, recall,
    F-measure
  • Kononenko & Bratko information score and the order-0 / scheme class
    complexities (SF entropies), in bits
Numeric class:
  • correlation coefficient
Both:
  • MAE, RMSE, RAE, RRSE (for a nominal class over the probability vector)
"""

from __future__ import annotations
import copy
import math
from typing import List

import numpy as np

from workbench.core.instances import Instances
from workbench.core.utils import Utils
from .splits import cross_validation_splits


MIN_SF_PROB = float(np.finfo(np.float64).tiny)
MARGIN_RESOLUTION = 500
ID_CHARS = "abcdefghijklmnopqrstuvwxyz"


class Evaluation:
	def __init__(self, train_header: Instances) -> None:
		if not isinstance(train_header, Instances):
			raise TypeError(f"expected Instances, got {type(train_header).__name__}")
		if train_header.class_index < 0:
			raise ValueError("Evaluation: class index is not set")
		catt = train_header.class_attribute()
		self.class_is_nominal = catt.is_nominal()
		self.num_classes = catt.num_values() if self.class_is_nominal else 1
		self.class_names: List[str] = list(catt.values) if self.class_is_nominal else []
		self.confusion = np.zeros((self.num_classes, self.num_classes), dtype=np.float64)
		self.margin_counts = np.zeros(MARGIN_RESOLUTION + 1, dtype=np.float64)
		self.num_folds = 1
		self.with_class = 0.0
		self.missing_class = 0.0
		self.correct = 0.0
		self.incorrect = 0.0
		self.unclassified = 0.0
		self.sum_err = 0.0
		self.sum_abs_err = 0.0
		self.sum_sqr_err = 0.0
		self.sum_class = 0.0
		self.sum_sqr_class = 0.0
		self.sum_predicted = 0.0
		self.sum_sqr_predicted = 0.0
		self.sum_class_predicted = 0.0
		self.sum_prior_abs_err = 0.0
		self.sum_prior_sqr_err = 0.0
		self.sum_kb_info = 0.0
		self.sum_prior_entropy = 0.0
		self.sum_scheme_entropy = 0.0
		self.class_priors = np.zeros(self.num_classes, dtype=np.float64)
		self.class_priors_sum = 0.0
		self.set_priors(train_header)

	# ----------------------------------------------------------------- priors

	def set_priors(self, train: Instances) -> None:
		y = train.class_values()
		w = train.weights
		ok = ~np.isnan(y)
		if self.class_is_nominal:
			self.class_priors = np.ones(self.num_classes, dtype=np.float64)
			np.add.at(self.class_priors, y[ok].astype(np.int64), w[ok])
			self.class_priors_sum = float(self.num_classes) + float(np.sum(w[ok]))
		else:
			self.class_priors = np.asarray([float(np.sum(w[ok] * y[ok]))], dtype=np.float64)
			self.class_priors_sum = float(np.sum(w[ok]))

	def update_priors(self, row: np.ndarray, class_index: int, weight: float = 1.0) -> None:
		v = float(row[class_index])
		if np.isnan(v):
			return
		if self.class_is_nominal:
			self.class_priors[int(v)] += weight
		else:
			self.class_priors[0] += weight * v
		self.class_priors_sum += weight

	def _prior_distribution(self) -> np.ndarray:
		if self.class_priors_sum <= 0:
			return np.zeros(self.num_classes, dtype=np.float64)
		return self.class_priors / self.class_priors_sum

	# ------------------------------------------------------------- evaluating

	def evaluate_model(self, classifier, data: Instances) -> np.ndarray:
		"""Test `classifier` on every row of `data`; returns the predictions."""
		out = np.empty(data.num_instances(), dtype=np.float64)
		for i in range(data.num_instances()):
			out[i] = self.evaluate_model_once(classifier, data.X[i], data.class_index, float(data.weights[i]))
		return out

	def evaluate_model_once(self, classifier, row: np.ndarray, class_index: int, weight: float = 1.0) -> float:
		"""Score one row; the classifier sees it with the class value hidden."""
		r = np.asarray(row, dtype=np.float64).ravel()
		actual = float(r[class_index])
		hidden = r.copy()
		hidden[class_index] = np.nan
		if self.class_is_nominal:
			dist = np.asarray(classifier.distribution_for_instance(hidden), dtype=np.float64)
			self._update_nominal(dist, actual, weight)
			if dist.size == 0 or float(np.max(dist)) <= 0.0:
				return float("nan")
			return float(np.argmax(dist))
		pred = float(classifier.classify_instance(hidden))
		self._update_numeric(pred, actual, weight)
		return pred

	def evaluate_prediction(self, prediction: float, actual: float, weight: float = 1.0) -> None:
		"""Score a precomputed prediction (label index or numeric value)."""
		if self.class_is_nominal:
			self._update_nominal(self._make_distribution(prediction), actual, weight)
		else:
			self._update_numeric(prediction, actual, weight)

	def cross_validate_model(self, classifier, data: Instances, folds: int = 10, seed: int = 1) -> None:
		"""
		k-fold cross-validation (stratified for a nominal class). A fresh copy
		of `classifier` is trained per fold and priors are reset from each
		training fold.
		"""
		for train_idx, test_idx in cross_validation_splits(data, folds, seed):
			train = data.subset(train_idx)
			test = data.subset(test_idx)
			self.set_priors(train)
			model = copy.deepcopy(classifier)
			model.build_classifier(train)
			self.evaluate_model(model, test)
		self.num_folds = int(folds)

	def _make_distribution(self, pred: float) -> np.ndarray:
		out = np.zeros(self.num_classes, dtype=np.float64)
		if np.isnan(pred):
			return out
		if self.class_is_nominal:
			out[int(pred)] = 1.0
		else:
			out[0] = pred
		return out

	def _update_margins(self, dist: np.ndarray, actual: int, weight: float) -> None:
		p_actual = float(dist[actual])
		others = np.delete(dist, actual)
		p_next = float(np.max(others)) if others.size else 0.0
		p_next = max(0.0, p_next)
		margin = p_actual - p_next
		b = int((margin + 1.0) / 2.0 * MARGIN_RESOLUTION)
		self.margin_counts[min(max(b, 0), MARGIN_RESOLUTION)] += weight

	def _update_nominal(self, dist: np.ndarray, actual: float, weight: float) -> None:
		if np.isnan(actual):
			self.missing_class += weight
			return
		a = int(actual)
		self.with_class += weight
		self._update_margins(dist, a, weight)
		predicted = -1
		best = 0.0
		for i in range(self.num_classes):
			if dist[i] > best:
				predicted = i
				best = float(dist[i])
		if predicted < 0:
			self.unclassified += weight
			return
		p_pred = max(MIN_SF_PROB, float(dist[a]))
		p_prior = max(MIN_SF_PROB, float(self.class_priors[a] / self.class_priors_sum))
		if p_pred >= p_prior:
			self.sum_kb_info += (Utils.log2(p_pred) - Utils.log2(p_prior)) * weight
		else:
			self.sum_kb_info -= (Utils.log2(max(MIN_SF_PROB, 1.0 - p_pred)) - Utils.log2(max(MIN_SF_PROB, 1.0 - p_prior))) * weight
		self.sum_scheme_entropy -= Utils.log2(p_pred) * weight
		self.sum_prior_entropy -= Utils.log2(p_prior) * weight
		self._update_numeric_scores(dist, self._make_distribution(actual), weight)
		self.confusion[a, predicted] += weight
		if predicted != a:
			self.incorrect += weight
		else:
			self.correct += weight

	def _update_numeric(self, pred: float, actual: float, weight: float) -> None:
		if np.isnan(actual):
			self.missing_class += weight
			return
		self.with_class += weight
		if np.isnan(pred):
			self.unclassified += weight
			return
		self.sum_class += weight * actual
		self.sum_sqr_class += weight * actual * actual
		self.sum_class_predicted += weight * actual * pred
		self.sum_predicted += weight * pred
		self.sum_sqr_predicted += weight * pred * pred
		self._update_numeric_scores(self._make_distribution(pred), self._make_distribution(actual), weight)

	def _update_numeric_scores(self, predicted: np.ndarray, actual: np.ndarray, weight: float) -> None:
		diff = predicted - actual
		prior_diff = self._prior_distribution() - actual
		k = float(self.num_classes)
		self.sum_err += weight * float(np.sum(diff)) / k
		self.sum_abs_err += weight * float(np.sum(np.abs(diff))) / k
		self.sum_sqr_err += weight * float(np.sum(diff * diff)) / k
		self.sum_prior_abs_err += weight * float(np.sum(np.abs(prior_diff))) / k
		self.sum_prior_sqr_err += weight * float(np.sum(prior_diff * prior_diff)) / k

	# --------------------------------------------------------------- measures

	def num_instances(self) -> float:
		return self.with_class

	def _pct(self, v: float) -> float:
		if self.with_class <= 0:
			return float("nan")
		return 100.0 * v / self.with_class

	def pct_correct(self) -> float:
		return self._pct(self.correct)

	def pct_incorrect(self) -> float:
		return self._pct(self.incorrect)

	def pct_unclassified(self) -> float:
		return self._pct(self.unclassified)

	def error_rate(self) -> float:
		if not self.class_is_nominal:
			return self.root_mean_squared_error()
		return self.incorrect / self.with_class if self.with_class > 0 else float("nan")

	def kappa(self) -> float:
		self._require_nominal("kappa")
		total = float(np.sum(self.confusion))
		if total <= 0:
			return float("nan")
		observed = float(np.trace(self.confusion)) / total
		chance = float(np.sum(self.confusion.sum(axis=1) * self.confusion.sum(axis=0))) / (total * total)
		if chance < 1.0:
			return (observed - chance) / (1.0 - chance)
		return 1.0

	def correlation_coefficient(self) -> float:
		if self.class_is_nominal:
			raise ValueError("Can't compute correlation coefficient: class is nominal")
		n = self.with_class - self.unclassified
		if n <= 0:
			return float("nan")
		var_actual = self.sum_sqr_class - self.sum_class * self.sum_class / n
		var_pred = self.sum_sqr_predicted - self.sum_predicted * self.sum_predicted / n
		var_prod = self.sum_class_predicted - self.sum_class * self.sum_predicted / n
		if var_actual * var_pred <= 0.0 or Utils.eq(var_actual * var_pred, 0.0):
			return 0.0
		return var_prod / math.sqrt(var_actual * var_pred)

	def _per_instance(self, v: float) -> float:
		n = self.with_class - self.unclassified
		if n <= 0:
			return float("nan")
		return v / n

	def mean_absolute_error(self) -> float:
		return self._per_instance(self.sum_abs_err)

	def mean_prior_absolute_error(self) -> float:
		return self._per_instance(self.sum_prior_abs_err)

	def root_mean_squared_error(self) -> float:
		return math.sqrt(self._per_instance(self.sum_sqr_err))

	def root_mean_prior_squared_error(self) -> float:
		return math.sqrt(self._per_instance(self.sum_prior_sqr_err))

	def relative_absolute_error(self) -> float:
		prior = self.mean_prior_absolute_error()
		if not prior > 0:
			return float("nan")
		return 100.0 * self.mean_absolute_error() / prior

	def root_relative_squared_error(self) -> float:
		prior = self.root_mean_prior_squared_error()
		if not prior > 0:
			return float("nan")
		return 100.0 * self.root_mean_squared_error() / prior

	def _require_nominal(self, what: str) -> None:
		if not self.class_is_nominal:
			raise ValueError(f"Can't compute {what}: class is numeric")

	def prior_entropy(self) -> float:
		self._require_nominal("entropy of class prior")
		p = self._prior_distribution()
		return -float(np.sum([x * Utils.log2(x) for x in p if x > 0]))

	def kb_information(self) -> float:
		self._require_nominal("K&B Info score")
		return self.sum_kb_info

	def kb_mean_information(self) -> float:
		return self._per_instance(self.kb_information())

	def kb_relative_information(self) -> float:
		h = self.prior_entropy()
		n = self.with_class - self.unclassified
		if h <= 0 or n <= 0:
			return float("nan")
		return 100.0 * self.kb_information() / (h * n)

	def sf_prior_entropy(self) -> float:
		return self.sum_prior_entropy

	def sf_mean_prior_entropy(self) -> float:
		return self._per_instance(self.sum_prior_entropy)

	def sf_scheme_entropy(self) -> float:
		return self.sum_scheme_entropy

	def sf_mean_scheme_entropy(self) -> float:
		return self._per_instance(self.sum_scheme_entropy)

	def sf_entropy_gain(self) -> float:
		return self.sum_prior_entropy - self.sum_scheme_entropy

	def sf_mean_entropy_gain(self) -> float:
		return self._per_instance(self.sf_entropy_gain())

	def confusion_matrix(self) -> np.ndarray:
		self._require_nominal("confusion matrix")
		return self.confusion.copy()

	def true_positive_rate(self, c: int) -> float:
		row = float(np.sum(self.confusion[c]))
		return float(self.confusion[c, c]) / row if row > 0 else 0.0

	def false_positive_rate(self, c: int) -> float:
		others = [r for r in range(self.num_classes) if r != c]
		total = float(np.sum(self.confusion[others])) if others else 0.0
		fp = float(np.sum(self.confusion[others, c])) if others else 0.0
		return fp / total if total > 0 else 0.0

	def num_true_positives(self, c: int) -> float:
		return float(self.confusion[c, c])

	def num_false_positives(self, c: int) -> float:
		return float(np.sum(self.confusion[:, c])) - float(self.confusion[c, c])

	def num_false_negatives(self, c: int) -> float:
		return float(np.sum(self.confusion[c])) - float(self.confusion[c, c])

	def num_true_negatives(self, c: int) -> float:
		return float(np.sum(self.confusion)) - float(np.sum(self.confusion[c])) - self.num_false_positives(c)

	def true_negative_rate(self, c: int) -> float:
		neg = self.num_true_negatives(c) + self.num_false_positives(c)
		return self.num_true_negatives(c) / neg if neg > 0 else 0.0

	def false_negative_rate(self, c: int) -> float:
		pos = float(np.sum(self.confusion[c]))
		return self.num_false_negatives(c) / pos if pos > 0 else 0.0

	def precision(self, c: int) -> float:
		col = float(np.sum(self.confusion[:, c]))
		return float(self.confusion[c, c]) / col if col > 0 else 0.0

	def recall(self, c: int) -> float:
		return self.true_positive_rate(c)

	def f_measure(self, c: int) -> float:
		p = self.precision(c)
		r = self.recall(c)
		if p + r <= 0:
			return 0.0
		return 2.0 * p * r / (p + r)

	# ------------------------------------------------------------------- text

	def to_summary_string(self, title: str = "=== Summary ===\n", complexity_statistics: bool = False) -> str:
		d = Utils.double_to_string
		lines: List[str] = [title]
		if self.with_class > 0:
			if self.class_is_nominal:
				lines.append(f"Correctly Classified Instances     {d(self.correct, 12, 4)}     {d(self.pct_correct(), 12, 4)} %")
				lines.append(f"Incorrectly Classified Instances   {d(self.incorrect, 12, 4)}     {d(self.pct_incorrect(), 12, 4)} %")
				lines.append(f"UnClassified Instances             {d(self.unclassified, 12, 4)}     {d(self.pct_unclassified(), 12, 4)} %")
				lines.append(f"Kappa statistic                    {d(self.kappa(), 12, 4)}")
				if complexity_statistics:
					lines.append(f"K&B Relative Info Score            {d(self.kb_relative_information(), 12, 4)} %")
					lines.append(
						f"K&B Information Score              {d(self.kb_information(), 12, 4)} bits"
						f"{d(self.kb_mean_information(), 12, 4)} bits/instance"
					)
					lines.append(
						f"Class complexity | order 0         {d(self.sf_prior_entropy(), 12, 4)} bits"
						f"{d(self.sf_mean_prior_entropy(), 12, 4)} bits/instance"
					)
					lines.append(
						f"Class complexity | scheme          {d(self.sf_scheme_entropy(), 12, 4)} bits"
						f"{d(self.sf_mean_scheme_entropy(), 12, 4)} bits/instance"
					)
					lines.append(
						f"Complexity improvement     (Sf)    {d(self.sf_entropy_gain(), 12, 4)} bits"
						f"{d(self.sf_mean_entropy_gain(), 12, 4)} bits/instance"
					)
			else:
				lines.append(f"Correlation coefficient            {d(self.correlation_coefficient(), 12, 4)}")
			lines.append(f"Mean absolute error                {d(self.mean_absolute_error(), 12, 4)}")
			lines.append(f"Root mean squared error            {d(self.root_mean_squared_error(), 12, 4)}")
			lines.append(f"Relative absolute error            {d(self.relative_absolute_error(), 12, 4)} %")
			lines.append(f"Root relative squared error        {d(self.root_relative_squared_error(), 12, 4)} %")
		lines.append(f"Total Number of Instances          {d(self.with_class, 12, 4)}")
		if self.missing_class > 0:
			lines.append(f"Ignored Class Unknown Instances            {d(self.missing_class, 12, 4)}")
		return "\n".join(lines) + "\n"

	@staticmethod
	def _short_id(num: int, width: int) -> str:
		chars = [" "] * width
		i = width - 1
		while i >= 0:
			chars[i] = ID_CHARS[num % len(ID_CHARS)]
			num = num // len(ID_CHARS) - 1
			if num < 0:
				break
			i -= 1
		return "".join(chars)

	def to_matrix_string(self, title: str = "=== Confusion Matrix ===\n") -> str:
		self._require_nominal("confusion matrix")
		conf = self.confusion
		maxval = float(np.max(conf)) if conf.size else 0.0
		fractional = bool(np.any(np.abs(conf - np.rint(conf)) >= 0.01))
		digits = int(math.log10(maxval)) if maxval > 0 else 0
		width = 1 + max(digits + (3 if fractional else 0), int(math.log(max(1, self.num_classes)) / math.log(len(ID_CHARS))))
		text = title + "\n"
		for i in range(self.num_classes):
			if fractional:
				text += " " + self._short_id(i, width - 3) + "   "
			else:
				text += " " + self._short_id(i, width)
		text += "   <-- classified as\n"
		rows = []
		for i in range(self.num_classes):
			row = "".join(" " + Utils.double_to_string(conf[i, j], width, 2 if fractional else 0) for j in range(self.num_classes))
			rows.append(f"{row} | {self._short_id(i, width)} = {self.class_names[i]}")
		return text + "\n".join(rows) + "\n"

	def to_class_details_string(self, title: str = "=== Detailed Accuracy By Class ===\n") -> str:
		self._require_nominal("class details")
		d = Utils.double_to_string
		lines = [title, "TP Rate   FP Rate   Precision   Recall  F-Measure   Class"]
		for c in range(self.num_classes):
			lines.append(
				f"  {d(self.true_positive_rate(c), 7, 3)}   {d(self.false_positive_rate(c), 7, 3)}"
				f"    {d(self.precision(c), 7, 3)}   {d(self.recall(c), 7, 3)}"
				f"    {d(self.f_measure(c), 7, 3)}    {self.class_names[c]}"
			)
		return "\n".join(lines) + "\n"

	def to_cumulative_margin_distribution_string(self) -> str:
		self._require_nominal("margin distribution")
		out = []
		cumulative = 0.0
		for i in range(MARGIN_RESOLUTION + 1):
			if self.margin_counts[i] != 0:
				cumulative += self.margin_counts[i]
				margin = i * 2.0 / MARGIN_RESOLUTION - 1.0
				out.append(f"{Utils.double_to_string(margin, 7, 3)} {Utils.double_to_string(cumulative * 100.0 / self.with_class, 7, 3)}")
			elif i == 0:
				out.append(f"{Utils.double_to_string(-1.0, 7, 3)} {Utils.double_to_string(0.0, 7, 3)}")
		return "\n".join(out) + "\n"
