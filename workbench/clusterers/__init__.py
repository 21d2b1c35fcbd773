from .base import Clusterer
from .cobweb import Cobweb, CNode, NORMAL
from .density import MakeDensityBasedClusterer
from .evaluation import ClusterEvaluation

__all__ = [
	"Clusterer",
	"Cobweb",
	"CNode",
	"NORMAL",
	"MakeDensityBasedClusterer",
	"ClusterEvaluation",
]
