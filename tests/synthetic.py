"""Small deterministic datasets shared by the test modules."""

from __future__ import annotations

import numpy as np

from workbench.core.attribute import Attribute
from workbench.core.instances import Instances
from workbench.core.utils import Utils


def weather() -> Instances:
	"""The 14-row weather data (nominal class 'play', last)."""
	atts = [
		Attribute.nominal("outlook", ["sunny", "overcast", "rainy"]),
		Attribute.numeric("temperature"),
		Attribute.numeric("humidity"),
		Attribute.nominal("windy", ["TRUE", "FALSE"]),
		Attribute.nominal("play", ["yes", "no"]),
	]
	rows = [
		[0, 85, 85, 1, 1],
		[0, 80, 90, 0, 1],
		[1, 83, 86, 1, 0],
		[2, 70, 96, 1, 0],
		[2, 68, 80, 1, 0],
		[2, 65, 70, 0, 1],
		[1, 64, 65, 0, 0],
		[0, 72, 95, 1, 1],
		[0, 69, 70, 1, 0],
		[2, 75, 80, 1, 0],
		[0, 75, 70, 0, 0],
		[1, 72, 90, 0, 0],
		[1, 81, 75, 1, 0],
		[2, 71, 91, 0, 1],
	]
	return Instances("weather", atts, np.asarray(rows, dtype=np.float64), None, 4)


def blobs(n_per: int = 20, seed: int = 0) -> Instances:
	"""Three well separated Gaussian classes over two numeric attributes."""
	r = Utils.rng(seed)
	centres = [(0.0, 0.0), (10.0, 10.0), (0.0, 10.0)]
	rows = []
	for c, (mx, my) in enumerate(centres):
		for _ in range(n_per):
			rows.append([mx + r.normal(0.0, 0.5), my + r.normal(0.0, 0.5), float(c)])
	atts = [Attribute.numeric("x"), Attribute.numeric("y"), Attribute.nominal("class", ["a", "b", "c"])]
	return Instances("blobs", atts, np.asarray(rows, dtype=np.float64), None, 2)


def threshold_class(n: int = 60, seed: int = 1) -> Instances:
	"""x0 decides the class, x1 duplicates x0, x2 is noise."""
	r = Utils.rng(seed)
	x0 = r.random(n)
	x2 = r.random(n)
	y = (x0 > 0.5).astype(np.float64)
	X = np.column_stack([x0, x0.copy(), x2, y])
	atts = [
		Attribute.numeric("x0"),
		Attribute.numeric("x1"),
		Attribute.numeric("noise"),
		Attribute.nominal("class", ["lo", "hi"]),
	]
	return Instances("threshold", atts, X, None, 3)


def linear(n: int = 80, seed: int = 2, noise: float = 0.01) -> Instances:
	"""y = 3 x0 - 2 x1 + 1 (+ small noise); x2 is irrelevant."""
	r = Utils.rng(seed)
	X = r.random((n, 3))
	y = 3.0 * X[:, 0] - 2.0 * X[:, 1] + 1.0 + r.normal(0.0, noise, n)
	atts = [Attribute.numeric("x0"), Attribute.numeric("x1"), Attribute.numeric("x2"), Attribute.numeric("y")]
	return Instances("linear", atts, np.column_stack([X, y]), None, 3)


def piecewise(n: int = 200, seed: int = 3) -> Instances:
	"""Two linear regimes split at x0 = 0.5."""
	r = Utils.rng(seed)
	x0 = r.random(n)
	x1 = r.random(n)
	y = np.where(x0 <= 0.5, 2.0 * x1, 10.0 - 4.0 * x1) + r.normal(0.0, 0.01, n)
	atts = [Attribute.numeric("x0"), Attribute.numeric("x1"), Attribute.numeric("y")]
	return Instances("piecewise", atts, np.column_stack([x0, x1, y]), None, 2)
