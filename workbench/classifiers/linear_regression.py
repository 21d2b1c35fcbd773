"""
LinearRegression
----------------
Weighted ridge least squares on numeric attributes with optional attribute
selection.

Fitting: attributes are centred and scaled by their weighted std devs; the
ridge system [sqrt(w) Z; sqrt(ridge) I] b = [sqrt(w) yc; 0] is solved with
scipy.linalg.lstsq and the coefficients are mapped back to raw units (the
intercept restores the class mean).

Selection methods:
  • "m5": repeatedly drop the attribute with the smallest standardized
    coefficient while the Akaike estimate
      sse / full_sse * (n - k_full) + 2 k
    improves on (n - k_full) + 2 k_full
  • "greedy": try dropping every attribute in turn, keep the best drop
  • "none"
Colinear elimination repeatedly drops the largest standardized coefficient
above 1.5 before selection starts.

Used stand-alone, nominal attributes are binarized (supervised
NominalToBinary) and missing values replaced first; M5 nodes pass
already-prepared data and switch these checks off.
"""

from __future__ import annotations
from typing import Dict, List, Optional

import numpy as np
from scipy import linalg

from workbench.core.capabilities import Capabilities
from workbench.core.instances import Instances
from workbench.core.utils import Utils
from workbench.filters.missing import ReplaceMissingValues
from workbench.filters.nominal_to_binary import NominalToBinary
from .base import Classifier


SELECTION_METHODS = ("m5", "greedy", "none")


class LinearRegression(Classifier):
	def __init__(
		self,
		attribute_selection: str = "m5",
		eliminate_colinear_attributes: bool = True,
		ridge: float = 1.0e-8,
	) -> None:
		super().__init__()
		if attribute_selection not in SELECTION_METHODS:
			raise ValueError(f"attribute_selection must be one of {SELECTION_METHODS}, got {attribute_selection!r}")
		if float(ridge) < 0.0:
			raise ValueError("ridge must be >= 0")
		self.attribute_selection = attribute_selection
		self.eliminate_colinear_attributes = bool(eliminate_colinear_attributes)
		self.ridge = float(ridge)
		self.checks_turned_off = False
		self.coefficients_: Optional[np.ndarray] = None
		self.intercept_ = 0.0
		self.selected_: Optional[np.ndarray] = None
		self._missing: Optional[ReplaceMissingValues] = None
		self._binary: Optional[NominalToBinary] = None
		self._data_header: Optional[Instances] = None

	def capabilities(self) -> Capabilities:
		return Capabilities(owner=type(self).__name__, numeric_class=True)

	def options(self) -> Dict[str, object]:
		return {
			"attribute_selection": self.attribute_selection,
			"eliminate_colinear_attributes": self.eliminate_colinear_attributes,
			"ridge": self.ridge,
		}

	def turn_checks_off(self) -> None:
		"""Skip capability checks and pre-processing (data already numeric and complete)."""
		self.checks_turned_off = True

	# ----------------------------------------------------------------- fitting

	def _solve(self, X: np.ndarray, y: np.ndarray, w: np.ndarray, sel: np.ndarray) -> np.ndarray:
		"""Raw-unit coefficients (length m, zero where unselected)."""
		coef = np.zeros(X.shape[1], dtype=np.float64)
		cols = np.nonzero(sel)[0]
		if cols.size == 0:
			return coef
		Z = (X[:, cols] - self._means[cols]) / self._stds[cols]
		sw = np.sqrt(w)
		A = np.vstack([Z * sw[:, None], np.sqrt(self.ridge) * np.eye(cols.size)])
		b = np.concatenate([(y - self._class_mean) * sw, np.zeros(cols.size)])
		sol = linalg.lstsq(A, b)[0]
		coef[cols] = sol / self._stds[cols]
		return coef

	def _sse(self, X: np.ndarray, y: np.ndarray, w: np.ndarray, coef: np.ndarray) -> float:
		intercept = self._class_mean - float(np.dot(coef, self._means))
		r = y - (X @ coef + intercept)
		return float(np.sum(w * r * r))

	def _standardized(self, coef: np.ndarray) -> np.ndarray:
		if self._class_std <= 0.0:
			return np.abs(coef * self._stds)
		return np.abs(coef * self._stds / self._class_std)

	def _find_best_model(self, X: np.ndarray, y: np.ndarray, w: np.ndarray, sel: np.ndarray) -> np.ndarray:
		coef = self._solve(X, y, w, sel)
		if self.eliminate_colinear_attributes:
			while True:
				std_coef = np.where(sel, self._standardized(coef), -np.inf)
				j = int(np.argmax(std_coef)) if std_coef.size > 0 else -1
				if j < 0 or not (std_coef[j] > 1.5):
					break
				sel[j] = False
				coef = self._solve(X, y, w, sel)
		n = float(X.shape[0])
		k_full = int(np.sum(sel)) + 1
		full_sse = self._sse(X, y, w, coef)
		if self.attribute_selection == "none" or full_sse <= 0.0:
			self.selected_ = sel
			return coef
		akaike = (n - k_full) + 2.0 * k_full

		if self.attribute_selection == "greedy":
			improved = True
			while improved:
				improved = False
				k_current = int(np.sum(sel))
				best_sel = None
				best_coef = None
				for j in np.nonzero(sel)[0]:
					trial = sel.copy()
					trial[j] = False
					tc = self._solve(X, y, w, trial)
					cur = self._sse(X, y, w, tc) / full_sse * (n - k_full) + 2.0 * k_current
					if cur < akaike:
						improved = True
						akaike = cur
						best_sel = trial
						best_coef = tc
				if improved:
					sel = best_sel
					coef = best_coef
		else:
			while int(np.sum(sel)) > 0:
				std_coef = np.where(sel, self._standardized(coef), np.inf)
				j = int(np.argmin(std_coef))
				trial = sel.copy()
				trial[j] = False
				tc = self._solve(X, y, w, trial)
				k_current = int(np.sum(trial)) + 1
				cur = self._sse(X, y, w, tc) / full_sse * (n - k_full) + 2.0 * k_current
				if cur < akaike:
					akaike = cur
					sel = trial
					coef = tc
				else:
					break
		self.selected_ = sel
		return coef

	def build_classifier(self, data: Instances) -> None:
		if not self.checks_turned_off:
			self.capabilities().test(data)
			self._header = data.empty_copy()
			data = data.delete_with_missing_class()
			self._missing = ReplaceMissingValues()
			data = self._missing.fit_transform(data)
			self._binary = NominalToBinary(supervised=True)
			data = self._binary.fit_transform(data)
		else:
			self._header = data.empty_copy()
			self._missing = None
			self._binary = None
		self._data_header = data.empty_copy()
		ci = data.class_index
		X = data.X.copy()
		y = X[:, ci].copy()
		X[:, ci] = 0.0
		w = data.weights
		sw = float(np.sum(w))
		m = data.num_attributes()

		self._means = np.zeros(m, dtype=np.float64)
		self._stds = np.ones(m, dtype=np.float64)
		sel = np.zeros(m, dtype=bool)
		if sw > 0:
			self._class_mean = float(np.sum(w * y) / sw)
			self._class_std = float(np.sqrt(max(0.0, np.sum(w * (y - self._class_mean) ** 2) / sw)))
		else:
			print("LinearRegression.build_classifier: zero total weight; predicting 0")
			self._class_mean = 0.0
			self._class_std = 0.0
		for j in range(m):
			if j == ci or not data.attribute(j).is_numeric() or sw <= 0:
				continue
			mu = float(np.sum(w * X[:, j]) / sw)
			sd = float(np.sqrt(max(0.0, np.sum(w * (X[:, j] - mu) ** 2) / sw)))
			self._means[j] = mu
			if sd > 0.0:
				self._stds[j] = sd
				sel[j] = True
		coef = self._find_best_model(X, y, w, sel)
		coef[~self.selected_] = 0.0
		self.coefficients_ = coef
		self.intercept_ = self._class_mean - float(np.dot(coef, self._means))

	# ----------------------------------------------------------------- prediction

	def _prepare_row(self, row: np.ndarray) -> np.ndarray:
		r = np.asarray(row, dtype=np.float64)
		if self._missing is not None:
			r = self._missing.transform_row(r)
		if self._binary is not None:
			r = self._binary.transform_row(r)
		return r

	def classify_instance(self, row: np.ndarray) -> float:
		self._check_built()
		r = self._prepare_row(row)
		ci = self._data_header.class_index
		r = np.where(np.isnan(r), self._means, r)
		r[ci] = 0.0
		return float(np.dot(self.coefficients_, r) + self.intercept_)

	def predict(self, X: np.ndarray) -> np.ndarray:
		X = np.asarray(X, dtype=np.float64)
		if X.ndim == 1:
			X = X.reshape(1, -1)
		self._check_built()
		if self._missing is None and self._binary is None:
			ci = self._data_header.class_index
			Z = np.where(np.isnan(X), self._means, X)
			Z[:, ci] = 0.0
			return Z @ self.coefficients_ + self.intercept_
		return super().predict(X)

	def num_parameters(self) -> int:
		"""Number of non-zero coefficients (intercept excluded)."""
		self._check_built()
		return int(np.count_nonzero(self.coefficients_))

	def model_string(self) -> str:
		"""The fitted equation, one term per line."""
		self._check_built()
		h = self._data_header
		lines: List[str] = [f"{h.class_attribute().name} = "]
		first = True
		for j in np.nonzero(self.coefficients_)[0]:
			c = float(self.coefficients_[j])
			prefix = "\t" if first else "\t+ "
			lines.append(f"{prefix}{Utils.double_to_string(c, 0, 4)} * {h.attribute(j).name}")
			first = False
		prefix = "\t" if first else "\t+ "
		lines.append(f"{prefix}{Utils.double_to_string(self.intercept_, 0, 4)}")
		return "\n".join(lines) + "\n"

	def to_string(self) -> str:
		if self.coefficients_ is None:
			return "Linear Regression: No model built yet."
		return "\nLinear Regression Model\n\n" + self.model_string()
