from .arff import ArffLoader, ArffSaver
from .libsvm import LibSVMLoader
from .csv_loader import CSVLoader
from .model_store import SerializedModelSaver
from .loaders import load_dataset

__all__ = [
	"ArffLoader", "ArffSaver",
	"LibSVMLoader",
	"CSVLoader",
	"SerializedModelSaver",
	"load_dataset",
]
