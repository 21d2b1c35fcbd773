"""
Shared typed containers: structured log events and option parsing for
schemes configured from the command line.
"""

from __future__ import annotations
import ast
from dataclasses import dataclass
from typing import Dict, Iterable


@dataclass
class LogEvent:
	"""
	Structured event for run-time logging.
	"""
	kind: str
	payload: Dict[str, object]


class OptionParser:
	"""Turns repeated 'key=value' command-line tokens into constructor kwargs."""

	@staticmethod
	def parse_value(text: str) -> object:
		"""Python literal when it parses as one, otherwise the raw string."""
		t = str(text).strip()
		if t.lower() in ("true", "false"):
			return t.lower() == "true"
		try:
			return ast.literal_eval(t)
		except (ValueError, SyntaxError):
			return t

	@staticmethod
	def parse(pairs: Iterable[str]) -> Dict[str, object]:
		out: Dict[str, object] = {}
		for p in pairs:
			if "=" not in p:
				raise ValueError(f"Option '{p}' is not of the form key=value")
			k, v = p.split("=", 1)
			k = k.strip().replace("-", "_")
			if k == "":
				raise ValueError(f"Option '{p}' has an empty key")
			out[k] = OptionParser.parse_value(v)
		return out
