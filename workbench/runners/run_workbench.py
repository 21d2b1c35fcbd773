"""
Command-line front end: attribute selection, classification, clustering and
experiments over data files (.arff, .csv, .libsvm).

  workbench select     --data iris.arff --evaluator CfsSubsetEval --search BestFirst -S direction=backward
  workbench classify   --data cpu.arff --scheme M5P -o unpruned=True --folds 10
  workbench cluster    --data iris.arff --scheme Cobweb -o acuity=0.5 --class last
  workbench experiment --data a.arff --data b.arff --scheme ZeroR --scheme M5P min_num_instances=8 --out runs/
"""

from __future__ import annotations
import argparse
import sys
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from workbench.attribute_selection import AttributeSelection
from workbench.classifiers.base import Classifier
from workbench.clusterers import ClusterEvaluation
from workbench.core.config import OptionParser
from workbench.core.instances import Instances
from workbench.evaluation import Evaluation
from workbench.experiment import Experiment, ExperimentConfig, PairedTTester
from workbench.io import ArffSaver, SerializedModelSaver, load_dataset
from workbench.registry import CLASSIFIERS, CLUSTERERS, EVALUATORS, SEARCHES, make_scheme


def parse_scheme_arg(tokens: Sequence[str]) -> Tuple[str, dict]:
	"""['M5P', 'unpruned=True'] -> ('M5P', {'unpruned': True})."""
	if len(tokens) == 0:
		raise ValueError("empty scheme specification")
	return str(tokens[0]), OptionParser.parse(tokens[1:])


def class_spec_arg(value: Optional[str]) -> Optional[str]:
	if value is None or value.lower() == "none":
		return None
	return value


def cmd_select(args: argparse.Namespace) -> int:
	data = load_dataset(args.data, class_spec_arg(args.class_spec))
	evaluator = make_scheme(args.evaluator, OptionParser.parse(args.evaluator_option), EVALUATORS)
	search = make_scheme(args.search, OptionParser.parse(args.search_option), SEARCHES)
	sel = AttributeSelection(evaluator, search)
	sel.select_attributes(data)
	print(sel.to_results_string())
	if int(args.cv_folds) > 1:
		sel.cross_validate_attributes(data, int(args.cv_folds), int(args.seed))
		print(sel.cv_results_string())
	if args.out:
		reduced = sel.reduce_dimensionality(data)
		Path(args.out).write_text(ArffSaver.dumps(reduced), encoding="utf-8")
		print(f"[select] Reduced data written to {args.out}")
	return 0


def _print_evaluation(ev: Evaluation, title: str) -> None:
	print(ev.to_summary_string(f"=== {title} ===\n", complexity_statistics=ev.class_is_nominal))
	if ev.class_is_nominal:
		print(ev.to_class_details_string())
		print(ev.to_matrix_string())


def cmd_classify(args: argparse.Namespace) -> int:
	data = load_dataset(args.data, class_spec_arg(args.class_spec) or "last")
	model = make_scheme(args.scheme, OptionParser.parse(args.option), CLASSIFIERS)
	if not isinstance(model, Classifier):
		raise TypeError(f"{args.scheme} is not a classifier")
	model.build_classifier(data)
	print(f"=== Classifier model (full training set) ===\n\n{model.to_string()}")
	if args.test:
		test = load_dataset(args.test, class_spec_arg(args.class_spec) or "last")
		ev = Evaluation(data)
		ev.evaluate_model(model, test)
		_print_evaluation(ev, "Evaluation on test set")
	elif int(args.folds) > 1:
		ev = Evaluation(data)
		proto = make_scheme(args.scheme, OptionParser.parse(args.option), CLASSIFIERS)
		ev.cross_validate_model(proto, data, int(args.folds), int(args.seed))
		_print_evaluation(ev, "Stratified cross-validation" if ev.class_is_nominal else "Cross-validation")
	else:
		ev = Evaluation(data)
		ev.evaluate_model(model, data)
		_print_evaluation(ev, "Error on training data")
	if args.save_model:
		meta = SerializedModelSaver().save(model, data.empty_copy(), args.save_model)
		print(f"[classify] Model saved to {args.save_model} sha256={meta['sha256']}")
	return 0


def cmd_cluster(args: argparse.Namespace) -> int:
	data = load_dataset(args.data, class_spec_arg(args.class_spec))
	clusterer = make_scheme(args.scheme, OptionParser.parse(args.option), CLUSTERERS)
	ev = ClusterEvaluation.build_and_evaluate(clusterer, data)
	print(clusterer.to_string())
	print(ev.cluster_results_to_string())
	if args.graph:
		if not hasattr(clusterer, "graph"):
			raise ValueError(f"{args.scheme} does not produce a graph")
		Path(args.graph).write_text(clusterer.graph(), encoding="utf-8")
		print(f"[cluster] Graph written to {args.graph}")
	return 0


def cmd_experiment(args: argparse.Namespace) -> int:
	datasets: List[Instances] = [load_dataset(p, class_spec_arg(args.class_spec) or "last") for p in args.data]
	schemes = [parse_scheme_arg(tokens) for tokens in args.scheme]
	cfg = ExperimentConfig(
		runs=int(args.runs),
		folds=int(args.folds),
		train_percent=float(args.train_percent),
		seed=int(args.seed),
		sig_level=float(args.sig_level),
		corrected=not bool(args.uncorrected),
		metric=args.metric,
		out_dir=args.out,
	)
	exp = Experiment(datasets, schemes, cfg)
	results = exp.run(verbose=bool(args.verbose))
	metric = args.metric
	if metric is None:
		metric = "Percent_correct" if "Percent_correct" in results.columns else "Root_mean_squared_error"
	tester = PairedTTester(
		results,
		metric=metric,
		base_scheme=int(args.base),
		sig_level=cfg.sig_level,
		corrected=cfg.corrected,
		test_train_ratio=cfg.test_train_ratio(),
	)
	print(tester.to_string())
	if args.plot:
		from workbench.reporting import plot_metric_by_scheme
		plot_metric_by_scheme(results, metric, args.plot)
	if args.out:
		print(f"[experiment] Completed into {Path(args.out).resolve()}")
	return 0


def build_parser() -> argparse.ArgumentParser:
	p = argparse.ArgumentParser(prog="workbench", description="Attribute selection, model trees, clustering and experiments")
	sub = p.add_subparsers(dest="command", required=True)

	s = sub.add_parser("select", help="attribute selection with an evaluator and a search")
	s.add_argument("--data", required=True)
	s.add_argument("--class", dest="class_spec", default="last", help="last, first, 1-based index, name or none")
	s.add_argument("--evaluator", default="CfsSubsetEval")
	s.add_argument("-E", "--evaluator-option", action="append", default=[], metavar="KEY=VALUE")
	s.add_argument("--search", default="BestFirst")
	s.add_argument("-S", "--search-option", action="append", default=[], metavar="KEY=VALUE")
	s.add_argument("--cv-folds", type=int, default=0, help="cross-validate the selection with this many folds")
	s.add_argument("--seed", type=int, default=1)
	s.add_argument("--out", type=str, default="", help="write the reduced data as ARFF")
	s.set_defaults(func=cmd_select)

	c = sub.add_parser("classify", help="train and evaluate a classifier")
	c.add_argument("--data", required=True)
	c.add_argument("--class", dest="class_spec", default="last")
	c.add_argument("--scheme", default="ZeroR")
	c.add_argument("-o", "--option", action="append", default=[], metavar="KEY=VALUE")
	c.add_argument("--folds", type=int, default=10, help="cross-validation folds; 1 evaluates on the training data")
	c.add_argument("--seed", type=int, default=1)
	c.add_argument("--test", type=str, default="", help="separate test file")
	c.add_argument("--save-model", type=str, default="")
	c.set_defaults(func=cmd_classify)

	k = sub.add_parser("cluster", help="build and evaluate a clusterer")
	k.add_argument("--data", required=True)
	k.add_argument("--class", dest="class_spec", default=None, help="class used for classes-to-clusters evaluation")
	k.add_argument("--scheme", default="Cobweb")
	k.add_argument("-o", "--option", action="append", default=[], metavar="KEY=VALUE")
	k.add_argument("--graph", type=str, default="", help="write the cluster tree in dot format")
	k.set_defaults(func=cmd_cluster)

	e = sub.add_parser("experiment", help="compare schemes over datasets with a paired t-test")
	e.add_argument("--data", action="append", required=True)
	e.add_argument("--class", dest="class_spec", default="last")
	e.add_argument("--scheme", nargs="+", action="append", required=True, metavar="NAME [KEY=VALUE ...]")
	e.add_argument("--runs", type=int, default=1)
	e.add_argument("--folds", type=int, default=10, help="0 uses a train/test split of --train-percent")
	e.add_argument("--train-percent", type=float, default=66.0)
	e.add_argument("--seed", type=int, default=1)
	e.add_argument("--sig-level", type=float, default=0.05)
	e.add_argument("--uncorrected", action="store_true")
	e.add_argument("--metric", type=str, default=None)
	e.add_argument("--base", type=int, default=0, help="0-based index of the base scheme")
	e.add_argument("--out", type=str, default=None)
	e.add_argument("--plot", type=str, default="")
	e.add_argument("--verbose", action="store_true")
	e.set_defaults(func=cmd_experiment)
	return p


def main(argv: Optional[Sequence[str]] = None) -> int:
	"""
	CLI entry point; returns the process exit status.
	"""
	p = build_parser()
	args = p.parse_args(argv)
	try:
		return int(args.func(args))
	except (ValueError, TypeError) as e:
		print(f"workbench {args.command}: {e}", file=sys.stderr)
		return 2


if __name__ == "__main__":
	sys.exit(main())
