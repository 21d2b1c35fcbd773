from .stratified_holdout import StratifiedHoldout
from .stratified_kfold import StratifiedKFold
from .kfold import KFold
from .random_holdout import RandomHoldout
from .folds import cross_validation_splits

__all__ = [
	"StratifiedHoldout",
	"StratifiedKFold",
	"KFold",
	"RandomHoldout",
	"cross_validation_splits",
]
