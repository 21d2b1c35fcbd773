from .split import SplitInfo, std_dev, abs_dev
from .rule_node import RuleNode
from .rule import Rule, LEFT, RIGHT
from .m5base import M5Base, M5P, M5Rules

__all__ = [
	"SplitInfo",
	"std_dev",
	"abs_dev",
	"RuleNode",
	"Rule",
	"LEFT",
	"RIGHT",
	"M5Base",
	"M5P",
	"M5Rules",
]
