"""
Paired comparison statistics for two columns of results.

PairedStats runs the standard two-sided paired t-test on the differences.
PairedStatsCorrected replaces the variance of the mean difference with the
Nadeau & Bengio correction (1/k + n_test/n_train) * s^2, which accounts for
the overlap between training sets in repeated resampling.
"""

from __future__ import annotations
import math

from scipy import stats as sps

from workbench.core.stats import Stats
from workbench.core.utils import Utils


class PairedStats:
	def __init__(self, sig_level: float = 0.05) -> None:
		self.sig_level = float(sig_level)
		self.x_stats = Stats()
		self.y_stats = Stats()
		self.differences_stats = Stats()
		self.xy_sum = 0.0
		self.count = 0.0
		self.correlation = float("nan")
		self.differences_probability = float("nan")
		self.differences_significance = 0

	def add(self, value1: float, value2: float) -> None:
		self.x_stats.add(value1)
		self.y_stats.add(value2)
		self.differences_stats.add(value1 - value2)
		self.xy_sum += value1 * value2
		self.count += 1

	def subtract(self, value1: float, value2: float) -> None:
		self.x_stats.subtract(value1)
		self.y_stats.subtract(value2)
		self.differences_stats.subtract(value1 - value2)
		self.xy_sum -= value1 * value2
		self.count -= 1

	def _variance_of_mean_difference(self) -> float:
		sd = self.differences_stats.std_dev
		return sd * sd / self.count

	def calculate_derived(self) -> None:
		self.x_stats.calculate_derived()
		self.y_stats.calculate_derived()
		self.differences_stats.calculate_derived()
		xs = self.x_stats
		ys = self.y_stats
		self.correlation = float("nan")
		if not math.isnan(xs.std_dev) and not math.isnan(ys.std_dev) and not Utils.eq(xs.std_dev, 0.0):
			slope = (self.xy_sum - xs.sum * ys.sum / self.count) / (xs.sum_sq - xs.sum * xs.mean)
			if not Utils.eq(ys.std_dev, 0.0):
				self.correlation = slope * xs.std_dev / ys.std_dev
			else:
				self.correlation = 1.0

		d = self.differences_stats
		if not math.isnan(d.std_dev) and Utils.gr(d.std_dev, 0.0):
			tval = d.mean / math.sqrt(self._variance_of_mean_difference())
			self.differences_probability = float(2.0 * sps.t.sf(abs(tval), self.count - 1.0))
		elif d.sum_sq == 0:
			self.differences_probability = 1.0
		else:
			self.differences_probability = 0.0

		self.differences_significance = 0
		if self.differences_probability <= self.sig_level:
			if xs.mean > ys.mean:
				self.differences_significance = 1
			else:
				self.differences_significance = -1

	def to_string(self) -> str:
		def row(name: str, a: float, b: float, c: float) -> str:
			return name + "".join(Utils.double_to_string(v, 17, 4) for v in (a, b, c)) + "\n"

		x, y, d = self.x_stats, self.y_stats, self.differences_stats
		return (
			f"Analysis for {Utils.double_to_string(self.count, 0, 0)} points:\n"
			"                         Column 1         Column 2       Difference\n"
			+ row("Minimums        ", x.min, y.min, d.min)
			+ row("Maximums        ", x.max, y.max, d.max)
			+ row("Sums            ", x.sum, y.sum, d.sum)
			+ row("SumSquares      ", x.sum_sq, y.sum_sq, d.sum_sq)
			+ row("Means           ", x.mean, y.mean, d.mean)
			+ row("SDs             ", x.std_dev, y.std_dev, d.std_dev)
			+ f"Prob(differences) {Utils.double_to_string(self.differences_probability, 0, 4)}"
			+ f" (sigflag {self.differences_significance})\n"
			+ f"Correlation       {Utils.double_to_string(self.correlation, 0, 4)}\n"
		)

	def __str__(self) -> str:
		return self.to_string()


class PairedStatsCorrected(PairedStats):
	def __init__(self, sig_level: float = 0.05, test_train_ratio: float = 1.0 / 9.0) -> None:
		super().__init__(sig_level)
		if not float(test_train_ratio) > 0.0:
			raise ValueError("test_train_ratio must be > 0")
		self.test_train_ratio = float(test_train_ratio)

	def _variance_of_mean_difference(self) -> float:
		sd = self.differences_stats.std_dev
		return (1.0 / self.count + self.test_train_ratio) * sd * sd
