"""
This module builds a deterministic experiment manifest and canonical JSONL
event streams. Determinism comes from canonical JSON serialization (sorted
keys, fixed separators), content hashes of the input datasets and logical
timestamps on events. The manifest hash is the SHA-256 of the canonicalized
core, excluding the environment block and the hash itself.
"""

from __future__ import annotations
import hashlib
import json
import platform
import sys
from typing import Dict, List, Sequence

import numpy as np
import pandas as pd
import scipy

from workbench.core.instances import Instances


class RunLog:
	"""
	Class facade for manifests, event emission and JSONL canonicalization.
	"""

	@staticmethod
	def canonical_json(o: dict) -> str:
		"""
		Return a canonical JSON string with sorted keys and fixed separators.
		"""
		return json.dumps(o, sort_keys=True, ensure_ascii=False, separators=(",", ":"), default=str)

	@staticmethod
	def sha256_hex(b: bytes) -> str:
		"""
		Return the hexadecimal SHA-256 digest of a bytes buffer.
		"""
		h = hashlib.sha256()
		h.update(b)
		return h.hexdigest()

	@staticmethod
	def env_block() -> Dict[str, str]:
		"""
		Return a stable environment descriptor with fixed keys and string values.
		"""
		return {
			"python_version": ".".join(str(x) for x in sys.version_info[:3]),
			"numpy_version": np.__version__,
			"scipy_version": scipy.__version__,
			"pandas_version": pd.__version__,
			"system": platform.system(),
			"machine": platform.machine(),
			"python_impl": platform.python_implementation(),
		}

	@staticmethod
	def dataset_digest(data: Instances) -> str:
		"""
		SHA-256 over the attribute declarations, class index, values and weights.
		"""
		head = RunLog.canonical_json({
			"relation": data.relation,
			"attributes": [[a.name, a.kind, list(a.values)] for a in data.attributes],
			"class_index": int(data.class_index),
		})
		h = hashlib.sha256()
		h.update(head.encode("utf-8"))
		h.update(np.ascontiguousarray(data.X, dtype=np.float64).tobytes())
		h.update(np.ascontiguousarray(data.weights, dtype=np.float64).tobytes())
		return h.hexdigest()

	@staticmethod
	def build_manifest(config: Dict[str, object], datasets: Sequence[Instances], scheme_keys: Sequence[Sequence[str]]) -> Dict[str, object]:
		"""
		Build a run manifest dict with a stable manifest hash.
		"""
		core = {
			"config": dict(config),
			"datasets": [{"relation": d.relation, "n": d.num_instances(), "sha256": RunLog.dataset_digest(d)} for d in datasets],
			"schemes": [list(k) for k in scheme_keys],
		}
		out = dict(core)
		out["manifest_hash"] = RunLog.sha256_hex(RunLog.canonical_json(core).encode("utf-8"))
		out["env"] = RunLog.env_block()
		return out

	@staticmethod
	def verify_manifest(man: Dict[str, object]) -> bool:
		"""
		Return True iff the manifest's recorded hash matches its core.
		"""
		if "manifest_hash" not in man:
			return False
		core = {k: v for k, v in man.items() if k not in ("manifest_hash", "env")}
		return RunLog.sha256_hex(RunLog.canonical_json(core).encode("utf-8")) == man["manifest_hash"]

	@staticmethod
	def to_jsonl(events: List[Dict[str, object]]) -> str:
		"""
		Serialize events to canonical JSONL (one canonical object per line).
		"""
		lines: List[str] = []
		for e in events:
			lines.append(RunLog.canonical_json(e))
		return "\n".join(lines)

	@staticmethod
	def validate_event_shape(event: Dict[str, object]) -> bool:
		"""
		Return True iff event has exactly {ts:int, kind:str, payload:dict}.
		"""
		if not isinstance(event, dict):
			return False
		if set(event.keys()) != {"ts", "kind", "payload"}:
			return False
		if not isinstance(event["ts"], int) or isinstance(event["ts"], bool):
			return False
		if not isinstance(event["kind"], str):
			return False
		if not isinstance(event["payload"], dict):
			return False
		return True


class EventStream:
	"""
	Logical-time event recorder: each emit() stamps the next counter value.
	"""

	def __init__(self) -> None:
		self.ts = 0
		self.events: List[Dict[str, object]] = []

	def emit(self, kind: str, payload: Dict[str, object]) -> Dict[str, object]:
		ev = {"ts": int(self.ts), "kind": str(kind), "payload": dict(payload)}
		self.events.append(ev)
		self.ts += 1
		return ev

	def to_jsonl(self) -> str:
		return RunLog.to_jsonl(self.events)
