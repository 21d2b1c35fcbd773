from .base import Classifier
from .zero_r import ZeroR
from .linear_regression import LinearRegression
from .m5 import M5Base, M5P, M5Rules, Rule, RuleNode, SplitInfo
from .classification_via_regression import ClassificationViaRegression

__all__ = [
	"Classifier",
	"ZeroR",
	"LinearRegression",
	"M5Base",
	"M5P",
	"M5Rules",
	"Rule",
	"RuleNode",
	"SplitInfo",
	"ClassificationViaRegression",
]
