from __future__ import annotations
import copy
from typing import Dict, List, Optional, Union

import numpy as np

from workbench.core.attribute import Attribute
from workbench.core.capabilities import Capabilities
from workbench.core.instances import Instances
from workbench.core.utils import Utils
from .base import Classifier
from .m5 import M5P


class ClassificationViaRegression(Classifier):
	"""
	One regression model per class value, each trained on a 0/1 indicator of
	that value. The class distribution is the vector of predictions clipped
	to [0, 1] and normalized (uniform when every prediction is 0).
	"""

	def __init__(self, classifier: Union[Classifier, str, None] = None, classifier_options: Optional[Dict[str, object]] = None) -> None:
		super().__init__()
		if classifier is None:
			classifier = M5P()
		elif isinstance(classifier, str):
			from workbench.registry import make_scheme
			classifier = make_scheme(classifier, classifier_options or {})
		if not isinstance(classifier, Classifier):
			raise TypeError(f"classifier must be a Classifier, got {type(classifier).__name__}")
		self.classifier = classifier
		self.models_: List[Classifier] = []

	def capabilities(self) -> Capabilities:
		return Capabilities(owner=type(self).__name__, nominal_class=True)

	def options(self) -> Dict[str, object]:
		return {"classifier": type(self.classifier).__name__, "classifier_options": self.classifier.options()}

	def build_classifier(self, data: Instances) -> None:
		self.capabilities().test(data)
		data = data.delete_with_missing_class()
		ci = data.class_index
		catt = data.class_attribute()
		atts = list(data.attributes)
		atts[ci] = Attribute.numeric(catt.name)
		y = data.class_values()
		self.models_ = []
		for k in range(data.num_classes()):
			X = data.X.copy()
			X[:, ci] = (y == float(k)).astype(np.float64)
			target = Instances(data.relation, atts, X, data.weights.copy(), ci)
			model = copy.deepcopy(self.classifier)
			model.build_classifier(target)
			self.models_.append(model)
		self._header = data.empty_copy()

	def distribution_for_instance(self, row: np.ndarray) -> np.ndarray:
		self._check_built()
		r = np.asarray(row, dtype=np.float64)
		probs = np.zeros(len(self.models_), dtype=np.float64)
		for k, model in enumerate(self.models_):
			probs[k] = min(1.0, max(0.0, model.classify_instance(r)))
		return Utils.normalize(probs)

	def to_string(self) -> str:
		if self._header is None:
			return "Classification via Regression: No model built yet."
		catt = self._header.class_attribute()
		text = "Classification via Regression\n\n"
		for k, model in enumerate(self.models_):
			text += f"Classifier for class with index {k} ({catt.value(k)}):\n\n{model.to_string()}\n\n"
		return text
