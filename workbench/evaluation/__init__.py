from .evaluation import Evaluation
from .splits import (
	StratifiedHoldout,
	StratifiedKFold,
	KFold,
	RandomHoldout,
	cross_validation_splits,
)

__all__ = [
	"Evaluation",
	"StratifiedHoldout",
	"StratifiedKFold",
	"KFold",
	"RandomHoldout",
	"cross_validation_splits",
]
