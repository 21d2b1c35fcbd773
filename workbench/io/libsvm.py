"""
LibSVM sparse format reader: one `label idx:val idx:val ...` record per line.

Indices are 1-based; absent values are 0. Attributes are named att_1..att_k
(k = largest index seen) and the label becomes the last attribute, a numeric
attribute called `class`, which is also set as the class.
"""

from __future__ import annotations
from pathlib import Path
from typing import Dict, List, Tuple, Union

import numpy as np

from workbench.core.attribute import Attribute
from workbench.core.instances import Instances


class LibSVMLoader:
	@staticmethod
	def _parse_line(line: str, line_no: int) -> Tuple[float, Dict[int, float]]:
		body = line.split("#", 1)[0].strip()
		toks = body.split()
		try:
			label = float(toks[0])
		except ValueError:
			raise ValueError(f"line {line_no}: label '{toks[0]}' is not numeric")
		vals: Dict[int, float] = {}
		for t in toks[1:]:
			if ":" not in t:
				raise ValueError(f"line {line_no}: malformed entry '{t}'")
			k, v = t.split(":", 1)
			idx = int(k)
			if idx < 1:
				raise ValueError(f"line {line_no}: index {idx} must be >= 1")
			vals[idx] = float(v)
		return label, vals

	@staticmethod
	def loads(text: str, relation: str = "libsvm") -> Instances:
		records: List[Tuple[float, Dict[int, float]]] = []
		max_idx = 0
		for line_no, raw in enumerate(text.splitlines(), start=1):
			if raw.split("#", 1)[0].strip() == "":
				continue
			label, vals = LibSVMLoader._parse_line(raw, line_no)
			if len(vals) > 0:
				max_idx = max(max_idx, max(vals.keys()))
			records.append((label, vals))
		atts = [Attribute.numeric(f"att_{i + 1}") for i in range(max_idx)]
		atts.append(Attribute.numeric("class"))
		X = np.zeros((len(records), max_idx + 1), dtype=np.float64)
		for i, (label, vals) in enumerate(records):
			for k, v in vals.items():
				X[i, k - 1] = v
			X[i, max_idx] = label
		return Instances(relation, atts, X, None, max_idx)

	@staticmethod
	def load(path: Union[str, Path]) -> Instances:
		p = Path(path)
		with p.open("r", encoding="utf-8") as f:
			return LibSVMLoader.loads(f.read(), relation=p.stem)
