from __future__ import annotations
from pathlib import Path
from typing import Optional, Sequence, Union

import pandas as pd

from workbench.core.instances import Instances


class CSVLoader:
	"""
	CSV -> Instances via pandas. Numeric columns stay numeric, all others become
	nominal (labels in order of first appearance). Empty cells and '?' are missing.
	"""

	@staticmethod
	def load(
		path: Union[str, Path],
		class_column: Optional[str] = None,
		nominal: Optional[Sequence[str]] = None,
	) -> Instances:
		p = Path(path)
		df = pd.read_csv(p, na_values=["?"], keep_default_na=True, skipinitialspace=True)
		return Instances.from_frame(df, relation=p.stem, class_column=class_column, nominal=nominal)
