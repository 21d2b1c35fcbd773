from .attribute import Attribute, NUMERIC, NOMINAL
from .instances import Instances
from .stats import Stats
from .ranges import Range
from .capabilities import Capabilities
from .utils import Utils
from .config import LogEvent, OptionParser

__all__ = [
	"Attribute", "NUMERIC", "NOMINAL",
	"Instances",
	"Stats",
	"Range",
	"Capabilities",
	"Utils",
	"LogEvent", "OptionParser",
]
