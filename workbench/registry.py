"""
Scheme registry: short names used on the command line and in experiment
configs mapped to the classes implementing them.
"""

from __future__ import annotations
from typing import Dict, Mapping, Optional

from workbench.attribute_selection import (
	BestFirst,
	CfsSubsetEval,
	FCBFSearch,
	Ranker,
	ReliefFAttributeEval,
	SymmetricalUncertAttributeEval,
	SymmetricalUncertAttributeSetEval,
)
from workbench.classifiers import ClassificationViaRegression, LinearRegression, M5P, M5Rules, ZeroR
from workbench.clusterers import Cobweb, MakeDensityBasedClusterer


CLASSIFIERS: Dict[str, type] = {
	"ZeroR": ZeroR,
	"LinearRegression": LinearRegression,
	"M5P": M5P,
	"M5Rules": M5Rules,
	"ClassificationViaRegression": ClassificationViaRegression,
}

EVALUATORS: Dict[str, type] = {
	"CfsSubsetEval": CfsSubsetEval,
	"ReliefFAttributeEval": ReliefFAttributeEval,
	"SymmetricalUncertAttributeEval": SymmetricalUncertAttributeEval,
	"SymmetricalUncertAttributeSetEval": SymmetricalUncertAttributeSetEval,
}

SEARCHES: Dict[str, type] = {
	"BestFirst": BestFirst,
	"Ranker": Ranker,
	"FCBFSearch": FCBFSearch,
}

CLUSTERERS: Dict[str, type] = {
	"Cobweb": Cobweb,
	"MakeDensityBasedClusterer": MakeDensityBasedClusterer,
}

SCHEMES: Dict[str, type] = {}
for _table in (CLASSIFIERS, EVALUATORS, SEARCHES, CLUSTERERS):
	SCHEMES.update(_table)


def make_scheme(name: str, options: Optional[Mapping[str, object]] = None, kind: Optional[Dict[str, type]] = None) -> object:
	"""
	Instantiate the scheme registered as `name` with keyword `options`.

	`kind` restricts the lookup to one table (e.g. CLASSIFIERS); an unknown
	name or an unknown option raises ValueError.
	"""
	table = SCHEMES if kind is None else kind
	if name not in table:
		known = ", ".join(sorted(table))
		raise ValueError(f"Unknown scheme '{name}' (known: {known})")
	cls = table[name]
	try:
		return cls(**dict(options or {}))
	except TypeError as e:
		raise ValueError(f"Bad options for {name}: {e}") from e
