"""
Top-level re-exports for the most common entry points: datasets, loading,
the scheme registry and experiments. Sub-packages hold the full API.
"""

__version__ = "0.1.0"

from .core import Attribute, Instances, Utils
from .io import load_dataset
from .registry import make_scheme
from .evaluation import Evaluation
from .experiment import Experiment, ExperimentConfig, PairedTTester

__all__ = [
	"__version__",
	"Attribute", "Instances", "Utils",
	"load_dataset",
	"make_scheme",
	"Evaluation",
	"Experiment", "ExperimentConfig", "PairedTTester",
]
