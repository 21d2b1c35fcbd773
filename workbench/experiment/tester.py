"""
PairedTTester
-------------
Compares every scheme in an experiment's results against a base scheme,
per dataset, on one metric. Rows are paired on (Key_Dataset, Key_Run,
Key_Fold). A comparison scheme is marked 'v' when its mean is
significantly higher than the base scheme's and '*' when it is
significantly lower; for error metrics 'v' therefore flags a worse scheme.
"""

from __future__ import annotations
from typing import Dict, List, Optional, Union

import numpy as np
import pandas as pd

from workbench.core.utils import Utils
from .paired_stats import PairedStats, PairedStatsCorrected


PAIR_KEYS = ["Key_Dataset", "Key_Run", "Key_Fold"]


class PairedTTester:
	def __init__(
		self,
		results: pd.DataFrame,
		metric: str = "Percent_correct",
		base_scheme: Union[int, str] = 0,
		sig_level: float = 0.05,
		corrected: bool = True,
		test_train_ratio: float = 1.0 / 9.0,
	) -> None:
		if metric not in results.columns:
			raise ValueError(f"PairedTTester: unknown metric '{metric}'")
		for k in PAIR_KEYS + ["Scheme", "Scheme_options"]:
			if k not in results.columns:
				raise ValueError(f"PairedTTester: results lack column '{k}'")
		self.results = results.copy()
		self.results["_label"] = self.results["Scheme"].astype(str) + " " + self.results["Scheme_options"].astype(str)
		self.metric = str(metric)
		self.sig_level = float(sig_level)
		self.corrected = bool(corrected)
		self.test_train_ratio = float(test_train_ratio)
		self.labels: List[str] = list(dict.fromkeys(self.results["_label"].tolist()))
		if isinstance(base_scheme, str):
			names = [lab.split(" ", 1)[0] for lab in self.labels]
			if base_scheme in self.labels:
				self.base = self.labels.index(base_scheme)
			elif base_scheme in names:
				self.base = names.index(base_scheme)
			else:
				raise ValueError(f"PairedTTester: unknown base scheme '{base_scheme}'")
		else:
			self.base = int(base_scheme)
			if not 0 <= self.base < len(self.labels):
				raise ValueError(f"PairedTTester: base scheme index {self.base} out of range")
		self.datasets: List[str] = list(dict.fromkeys(self.results["Key_Dataset"].tolist()))
		self.comparison_: Optional[pd.DataFrame] = None

	def _new_stats(self) -> PairedStats:
		if self.corrected:
			return PairedStatsCorrected(self.sig_level, self.test_train_ratio)
		return PairedStats(self.sig_level)

	def _series(self, dataset: str, label: str) -> pd.Series:
		sel = self.results[(self.results["Key_Dataset"] == dataset) & (self.results["_label"] == label)]
		return sel.set_index(PAIR_KEYS)[self.metric].astype(np.float64)

	def compare(self) -> pd.DataFrame:
		"""One row per (dataset, scheme): n, mean, std, p_value, sig in {'v', '*', ''}."""
		rows: List[Dict[str, object]] = []
		base_label = self.labels[self.base]
		for ds in self.datasets:
			base = self._series(ds, base_label)
			for i, label in enumerate(self.labels):
				comp = self._series(ds, label)
				joined = pd.concat([base.rename("base"), comp.rename("comp")], axis=1, join="inner").dropna()
				ps = self._new_stats()
				for b, c in zip(joined["base"].tolist(), joined["comp"].tolist()):
					ps.add(b, c)
				ps.calculate_derived()
				sig = ""
				if i != self.base and joined.shape[0] > 1:
					if ps.differences_significance < 0:
						sig = "v"
					elif ps.differences_significance > 0:
						sig = "*"
				rows.append({
					"dataset": ds,
					"scheme": label,
					"n": int(joined.shape[0]),
					"mean": float(ps.y_stats.mean),
					"std": float(ps.y_stats.std_dev),
					"p_value": float(ps.differences_probability) if i != self.base else float("nan"),
					"sig": sig,
				})
		self.comparison_ = pd.DataFrame(rows)
		return self.comparison_

	def wins_losses(self) -> Dict[str, List[int]]:
		"""Per scheme: [#v, #ties, #*] over datasets."""
		cmp_ = self.comparison_ if self.comparison_ is not None else self.compare()
		out: Dict[str, List[int]] = {}
		for label in self.labels:
			sub = cmp_[cmp_["scheme"] == label]
			v = int((sub["sig"] == "v").sum())
			s = int((sub["sig"] == "*").sum())
			out[label] = [v, int(sub.shape[0]) - v - s, s]
		return out

	def to_string(self, show_std: bool = True) -> str:
		cmp_ = self.comparison_ if self.comparison_ is not None else self.compare()
		kind = "Paired T-Tester (corrected)" if self.corrected else "Paired T-Tester"
		lines = [
			f"Tester:     {kind}",
			f"Analysing:  {self.metric}",
			f"Datasets:   {len(self.datasets)}",
			f"Resultsets: {len(self.labels)}",
			f"Confidence: {Utils.double_to_string(self.sig_level, 0, 2)} (two tailed)",
			"",
		]
		name_w = max([len("Dataset")] + [len(d) for d in self.datasets]) + 8
		col_w = 22 if show_std else 12
		order = [self.base] + [i for i in range(len(self.labels)) if i != self.base]
		head = "Dataset".ljust(name_w)
		for pos, i in enumerate(order):
			head += f"({i + 1})".rjust(col_w)
			if pos == 0:
				head += " |"
		lines.append(head)
		rule = "-" * len(head)
		lines.append(rule)
		for ds in self.datasets:
			sub = cmp_[cmp_["dataset"] == ds]
			n = int(sub["n"].max()) if sub.shape[0] else 0
			line = f"{ds} ({n})".ljust(name_w)
			for pos, i in enumerate(order):
				r = sub[sub["scheme"] == self.labels[i]].iloc[0]
				cell = Utils.double_to_string(r["mean"], 0, 2)
				if show_std:
					cell += f"({Utils.double_to_string(r['std'], 0, 2)})"
				cell += f" {r['sig']}" if r["sig"] else "  "
				line += cell.rjust(col_w)
				if pos == 0:
					line += " |"
			lines.append(line)
		lines.append(rule)
		wl = self.wins_losses()
		tally = "(v/ /*)".ljust(name_w) + "".rjust(col_w) + " |"
		for i in order[1:]:
			v, t, s = wl[self.labels[i]]
			tally += f"({v}/{t}/{s})".rjust(col_w)
		lines.append(tally)
		lines.append("")
		lines.append("Key:")
		for i, label in enumerate(self.labels):
			lines.append(f"({i + 1}) {label}")
		return "\n".join(lines) + "\n"
