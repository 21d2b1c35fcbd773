"""Persistence helpers for trained models (class-based)."""

from __future__ import annotations
import hashlib
import json
import pickle
from pathlib import Path
from typing import Dict, List, Tuple, Union

from workbench.core.instances import Instances


class SerializedModelSaver:
	"""Writes a pickled model next to a canonical JSON sidecar describing it."""

	def __init__(self) -> None:
		"""Initialize stateless saver."""

	def _write_json(self, path: Path, payload: Dict[str, object]) -> None:
		"""Write a compact, stable JSON payload to 'path'."""
		with path.open("w", encoding="utf-8") as f:
			f.write(json.dumps(payload, sort_keys=True, ensure_ascii=False, separators=(",", ":")))

	@staticmethod
	def sidecar_path(path: Path) -> Path:
		return path.with_suffix(path.suffix + ".json")

	def save(self, model: object, header: Instances, path: Union[str, Path]) -> Dict[str, object]:
		"""
		Pickle `model` to `path` and write `<path>.json` holding the scheme name,
		its options, the training header's attribute names and class index, and
		the SHA-256 of the pickle bytes.
		"""
		p = Path(path)
		p.parent.mkdir(parents=True, exist_ok=True)
		blob = pickle.dumps(model, protocol=pickle.HIGHEST_PROTOCOL)
		with p.open("wb") as f:
			f.write(blob)
		options: Dict[str, object] = {}
		if hasattr(model, "options"):
			options = {str(k): v for k, v in model.options().items()}
		payload: Dict[str, object] = {
			"scheme": type(model).__name__,
			"options": options,
			"relation": header.relation,
			"attributes": [a.name for a in header.attributes],
			"class_index": int(header.class_index),
			"sha256": hashlib.sha256(blob).hexdigest(),
		}
		self._write_json(self.sidecar_path(p), payload)
		return payload

	def load(self, path: Union[str, Path]) -> Tuple[object, List[str]]:
		"""Return (model, attribute_names); raise ValueError if the pickle does not match its sidecar hash."""
		p = Path(path)
		with p.open("rb") as f:
			blob = f.read()
		with self.sidecar_path(p).open("r", encoding="utf-8") as f:
			meta = json.load(f)
		if hashlib.sha256(blob).hexdigest() != meta.get("sha256"):
			raise ValueError(f"Model file {p} does not match its recorded hash")
		model = pickle.loads(blob)
		return model, list(meta.get("attributes", []))
