from .base import Filter
from .missing import ReplaceMissingValues
from .nominal_to_binary import NominalToBinary
from .indicator import MakeIndicatorFilter
from .remove import Remove
from .discretize import Discretize

__all__ = [
	"Filter",
	"ReplaceMissingValues",
	"NominalToBinary",
	"MakeIndicatorFilter",
	"Remove",
	"Discretize",
]
