"""
Figures for experiment results.

Both functions take the results DataFrame produced by Experiment.run (or a
results.csv read back with pandas) and write one figure file; the format
follows the file suffix (.pdf, .png, ...).
"""

from __future__ import annotations
from pathlib import Path
from typing import Dict, List, Union

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns


def _style() -> None:
	sns.set_style("whitegrid")
	plt.rcParams['figure.dpi'] = 150
	plt.rcParams['savefig.dpi'] = 300
	plt.rcParams['font.size'] = 10
	plt.rcParams['axes.labelsize'] = 11
	plt.rcParams['axes.titlesize'] = 12
	plt.rcParams['xtick.labelsize'] = 9
	plt.rcParams['ytick.labelsize'] = 9
	plt.rcParams['legend.fontsize'] = 9


def plot_metric_by_scheme(results: pd.DataFrame, metric: str, out_path: Union[str, Path]) -> Path:
	"""
	Box plot of `metric` over runs and folds, one box per scheme, grouped by dataset.
	"""
	if metric not in results.columns:
		raise ValueError(f"plot_metric_by_scheme: unknown metric '{metric}'")
	for k in ("Key_Dataset", "Scheme"):
		if k not in results.columns:
			raise ValueError(f"plot_metric_by_scheme: results lack column '{k}'")
	_style()
	df = results[["Key_Dataset", "Scheme", metric]].copy()
	df[metric] = pd.to_numeric(df[metric], errors="coerce")
	df = df.dropna(subset=[metric])
	out = Path(out_path)
	out.parent.mkdir(parents=True, exist_ok=True)

	n_ds = max(1, df["Key_Dataset"].nunique())
	fig, ax = plt.subplots(figsize=(max(6.0, 2.5 * n_ds), 5))
	sns.boxplot(data=df, x="Key_Dataset", y=metric, hue="Scheme", ax=ax)
	ax.set_xlabel('Dataset', fontweight='bold')
	ax.set_ylabel(metric.replace("_", " "), fontweight='bold')
	ax.set_title(f'{metric.replace("_", " ")} by scheme', fontweight='bold', pad=15)
	ax.grid(axis='y', alpha=0.3)
	if df["Scheme"].nunique() > 1:
		ax.legend(title="Scheme", framealpha=0.9)

	plt.tight_layout()
	plt.savefig(out, bbox_inches='tight')
	plt.close(fig)
	print(f"✓ Saved {out}")
	return out


def plot_wins_losses(wins_losses: Dict[str, List[int]], out_path: Union[str, Path], base: str = "") -> Path:
	"""
	Stacked bars of significant wins / ties / losses per scheme, as returned
	by PairedTTester.wins_losses(). The base scheme is left out.
	"""
	_style()
	labels = [k for k in wins_losses if k != base]
	wins = [wins_losses[k][0] for k in labels]
	ties = [wins_losses[k][1] for k in labels]
	losses = [wins_losses[k][2] for k in labels]
	out = Path(out_path)
	out.parent.mkdir(parents=True, exist_ok=True)

	fig, ax = plt.subplots(figsize=(max(6.0, 1.5 * len(labels)), 5))
	short = [lab.split(" ", 1)[0] for lab in labels]
	ax.bar(short, wins, color='#2ecc71', edgecolor='black', linewidth=1.2, label='v (higher)')
	ax.bar(short, ties, bottom=wins, color='#bdc3c7', edgecolor='black', linewidth=1.2, label='tie')
	bottom = [w + t for w, t in zip(wins, ties)]
	ax.bar(short, losses, bottom=bottom, color='#e74c3c', edgecolor='black', linewidth=1.2, label='* (lower)')
	ax.set_ylabel('Datasets', fontweight='bold')
	ax.set_xlabel('Scheme', fontweight='bold')
	title = 'Significance against base' if not base else f'Significance against {base.split(" ", 1)[0]}'
	ax.set_title(title, fontweight='bold', pad=15)
	ax.grid(axis='y', alpha=0.3)
	ax.legend(framealpha=0.9)

	plt.tight_layout()
	plt.savefig(out, bbox_inches='tight')
	plt.close(fig)
	print(f"✓ Saved {out}")
	return out
