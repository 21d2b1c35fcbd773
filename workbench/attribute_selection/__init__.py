from .base import ASEvaluation, SubsetEvaluator, AttributeEvaluator, ASSearch, RankedOutputSearch
from .cfs import CfsSubsetEval
from .symmetrical_uncert import SymmetricalUncertAttributeEval, SymmetricalUncertAttributeSetEval
from .relieff import ReliefFAttributeEval
from .best_first import BestFirst
from .ranker import Ranker
from .fcbf import FCBFSearch
from .attribute_selection import AttributeSelection

__all__ = [
	"ASEvaluation",
	"SubsetEvaluator",
	"AttributeEvaluator",
	"ASSearch",
	"RankedOutputSearch",
	"CfsSubsetEval",
	"SymmetricalUncertAttributeEval",
	"SymmetricalUncertAttributeSetEval",
	"ReliefFAttributeEval",
	"BestFirst",
	"Ranker",
	"FCBFSearch",
	"AttributeSelection",
]
