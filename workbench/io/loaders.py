from __future__ import annotations
from pathlib import Path
from typing import Optional, Union

from workbench.core.instances import Instances
from .arff import ArffLoader
from .csv_loader import CSVLoader
from .libsvm import LibSVMLoader


def load_dataset(path: Union[str, Path], class_spec: Optional[str] = "last") -> Instances:
	"""
	Load a dataset by file extension (.arff, .csv, .libsvm/.svm) and set its class.

	class_spec: "last", "first", a 1-based index, an attribute name, or None
	for no class. LibSVM files always use their label as the class.
	"""
	p = Path(path)
	ext = p.suffix.lower()
	if ext == ".arff":
		data = ArffLoader.load(p)
	elif ext == ".csv":
		data = CSVLoader.load(p)
	elif ext in (".libsvm", ".svm"):
		return LibSVMLoader.load(p)
	else:
		raise ValueError(f"Unrecognised data file extension: {ext}")
	if class_spec is None or str(class_spec) == "":
		return data
	spec = str(class_spec)
	if spec == "last":
		data.set_class_index(data.num_attributes() - 1)
	elif spec == "first":
		data.set_class_index(0)
	elif spec.isdigit():
		data.set_class_index(int(spec) - 1)
	else:
		j = data.attribute_index(spec)
		if j < 0:
			raise ValueError(f"No attribute named '{spec}' in {p.name}")
		data.set_class_index(j)
	return data
