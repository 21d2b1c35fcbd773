"""
ARFF reader/writer.

Supported: % comments, @relation, @attribute with numeric|real|integer or a
{nominal,list}, quoted names and values, '?' for missing, dense and sparse
rows, and an optional trailing {weight} per row. string, date and relational
attributes are rejected.
"""

from __future__ import annotations
from pathlib import Path
from typing import List, Optional, Tuple, Union

import numpy as np

from workbench.core.attribute import Attribute
from workbench.core.instances import Instances
from workbench.core.utils import Utils


class ArffLoader:
	@staticmethod
	def _unquote(tok: str) -> str:
		t = tok.strip()
		if len(t) >= 2 and t[0] == t[-1] and t[0] in ("'", '"'):
			t = t[1:-1]
			t = t.replace("\\'", "'").replace('\\"', '"').replace("\\\\", "\\")
		return t

	@staticmethod
	def _split(text: str, sep: str = ",") -> List[str]:
		"""Split on `sep` outside quotes; tokens keep their quotes."""
		out: List[str] = []
		cur: List[str] = []
		quote: Optional[str] = None
		i = 0
		while i < len(text):
			c = text[i]
			if quote is not None:
				cur.append(c)
				if c == "\\" and i + 1 < len(text):
					cur.append(text[i + 1])
					i += 2
					continue
				if c == quote:
					quote = None
			elif c in ("'", '"'):
				quote = c
				cur.append(c)
			elif c == sep:
				out.append("".join(cur).strip())
				cur = []
			else:
				cur.append(c)
			i += 1
		if quote is not None:
			raise ValueError(f"Unterminated quote in: {text}")
		out.append("".join(cur).strip())
		return out

	@staticmethod
	def _name_and_rest(text: str) -> Tuple[str, str]:
		t = text.strip()
		if t and t[0] in ("'", '"'):
			q = t[0]
			i = 1
			while i < len(t):
				if t[i] == "\\":
					i += 2
					continue
				if t[i] == q:
					break
				i += 1
			if i >= len(t):
				raise ValueError(f"Unterminated quoted name: {text}")
			return ArffLoader._unquote(t[:i + 1]), t[i + 1:].strip()
		parts = t.split(None, 1)
		if len(parts) == 1:
			return parts[0], ""
		return parts[0], parts[1].strip()

	@staticmethod
	def _parse_attribute(line: str) -> Attribute:
		name, rest = ArffLoader._name_and_rest(line[len("@attribute"):])
		if rest == "":
			raise ValueError(f"Attribute '{name}' has no type")
		if rest.startswith("{"):
			if not rest.endswith("}"):
				raise ValueError(f"Nominal specification for '{name}' is not closed")
			inner = rest[1:-1]
			vals = [ArffLoader._unquote(v) for v in ArffLoader._split(inner) if v.strip() != ""]
			return Attribute.nominal(name, vals)
		kind = rest.split()[0].lower()
		if kind in ("numeric", "real", "integer"):
			return Attribute.numeric(name)
		raise ValueError(f"Attribute '{name}': type '{kind}' is not supported")

	@staticmethod
	def _encode(att: Attribute, tok: str, line_no: int) -> float:
		t = tok.strip()
		if t == "?" or t == "":
			return np.nan
		v = ArffLoader._unquote(t)
		if att.is_nominal():
			k = att.index_of_value(v)
			if k < 0:
				raise ValueError(f"line {line_no}: '{v}' is not a value of nominal attribute '{att.name}'")
			return float(k)
		try:
			return float(v)
		except ValueError:
			raise ValueError(f"line {line_no}: '{v}' is not numeric for attribute '{att.name}'")

	@staticmethod
	def _parse_row(atts: List[Attribute], line: str, line_no: int) -> Tuple[np.ndarray, float]:
		m = len(atts)
		weight = 1.0
		s = line.strip()
		if s.startswith("{"):
			close = s.index("}")
			body = s[1:close]
			tail = s[close + 1:].strip()
			if tail.startswith(","):
				tail = tail[1:].strip()
			if tail.startswith("{") and tail.endswith("}"):
				weight = float(tail[1:-1])
			row = np.zeros(m, dtype=np.float64)
			for item in ArffLoader._split(body):
				if item == "":
					continue
				parts = item.split(None, 1)
				if len(parts) != 2:
					raise ValueError(f"line {line_no}: malformed sparse entry '{item}'")
				j = int(parts[0])
				if j < 0 or j >= m:
					raise ValueError(f"line {line_no}: sparse index {j} out of range")
				row[j] = ArffLoader._encode(atts[j], parts[1], line_no)
			return row, weight
		toks = ArffLoader._split(s)
		if len(toks) == m + 1 and toks[-1].startswith("{") and toks[-1].endswith("}"):
			weight = float(toks[-1][1:-1])
			toks = toks[:-1]
		if len(toks) != m:
			raise ValueError(f"line {line_no}: expected {m} values, found {len(toks)}")
		row = np.empty(m, dtype=np.float64)
		for j in range(m):
			row[j] = ArffLoader._encode(atts[j], toks[j], line_no)
		return row, weight

	@staticmethod
	def loads(text: str, class_index: Optional[int] = None) -> Instances:
		"""
		Parse ARFF text. `class_index` may be given explicitly; -1 means "last".
		"""
		relation = "unnamed"
		atts: List[Attribute] = []
		rows: List[np.ndarray] = []
		weights: List[float] = []
		in_data = False
		for line_no, raw in enumerate(text.splitlines(), start=1):
			line = raw.strip()
			if line == "" or line.startswith("%"):
				continue
			low = line.lower()
			if not in_data:
				if low.startswith("@relation"):
					relation, _ = ArffLoader._name_and_rest(line[len("@relation"):])
				elif low.startswith("@attribute"):
					atts.append(ArffLoader._parse_attribute(line))
				elif low.startswith("@data"):
					if len(atts) == 0:
						raise ValueError("@data section found before any @attribute")
					in_data = True
				else:
					raise ValueError(f"line {line_no}: unexpected header line '{line}'")
				continue
			row, w = ArffLoader._parse_row(atts, line, line_no)
			rows.append(row)
			weights.append(w)
		if not in_data:
			raise ValueError("No @data section found")
		if len(rows) > 0:
			X = np.vstack(rows)
		else:
			X = np.zeros((0, len(atts)), dtype=np.float64)
		ci = -1
		if class_index is not None:
			ci = int(class_index)
			if ci < 0:
				ci = len(atts) - 1
		return Instances(relation, atts, X, np.asarray(weights, dtype=np.float64), ci)

	@staticmethod
	def load(path: Union[str, Path], class_index: Optional[int] = None) -> Instances:
		p = Path(path)
		with p.open("r", encoding="utf-8") as f:
			return ArffLoader.loads(f.read(), class_index=class_index)


class ArffSaver:
	@staticmethod
	def _quote(s: str) -> str:
		if s == "" or any(c in s for c in " ,{}%'\"\t?"):
			return "'" + s.replace("\\", "\\\\").replace("'", "\\'") + "'"
		return s

	@staticmethod
	def _value(att: Attribute, v: float) -> str:
		if np.isnan(v):
			return "?"
		if att.is_nominal():
			return ArffSaver._quote(att.value(int(v)))
		return Utils.double_to_string(v, 0, 6)

	@staticmethod
	def dumps(data: Instances) -> str:
		lines: List[str] = [f"@relation {ArffSaver._quote(data.relation)}", ""]
		for a in data.attributes:
			if a.is_nominal():
				vals = ",".join(ArffSaver._quote(v) for v in a.values)
				lines.append(f"@attribute {ArffSaver._quote(a.name)} {{{vals}}}")
			else:
				lines.append(f"@attribute {ArffSaver._quote(a.name)} numeric")
		lines.append("")
		lines.append("@data")
		for i in range(data.num_instances()):
			vals = [ArffSaver._value(a, data.X[i, j]) for j, a in enumerate(data.attributes)]
			s = ",".join(vals)
			w = float(data.weights[i])
			if w != 1.0:
				s = s + ",{" + Utils.double_to_string(w, 0, 6) + "}"
			lines.append(s)
		return "\n".join(lines) + "\n"

	@staticmethod
	def save(data: Instances, path: Union[str, Path]) -> None:
		p = Path(path)
		p.parent.mkdir(parents=True, exist_ok=True)
		with p.open("w", encoding="utf-8") as f:
			f.write(ArffSaver.dumps(data))
