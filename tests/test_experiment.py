import contextlib
import io
import json
import math
import tempfile
import unittest
from pathlib import Path

import numpy as np
import pandas as pd
from scipy import stats as sps

from workbench import __version__
from workbench.classifiers import M5P, ZeroR
from workbench.experiment import (
	ClassifierSplitEvaluator,
	ETATimer,
	EventStream,
	Experiment,
	ExperimentConfig,
	PairedStats,
	PairedStatsCorrected,
	PairedTTester,
	RegressionSplitEvaluator,
	RunLog,
	measure_names,
)
from workbench.io import ArffSaver
from workbench.registry import CLASSIFIERS, make_scheme
from workbench.reporting import plot_metric_by_scheme, plot_wins_losses
from workbench.runners.run_workbench import main, parse_scheme_arg
from tests.synthetic import blobs, linear, weather


class TestExperimentConfig(unittest.TestCase):
	def test_defaults(self):
		cfg = ExperimentConfig()
		self.assertTrue(cfg.uses_cross_validation())
		self.assertAlmostEqual(cfg.test_train_ratio(), 1.0 / 9.0)
		self.assertAlmostEqual(ExperimentConfig(folds=0, train_percent=66.0).test_train_ratio(), 34.0 / 66.0)

	def test_invalid(self):
		for kwargs in ({"runs": 0}, {"folds": 1}, {"folds": -2}, {"train_percent": 100.0}, {"sig_level": 0.0}):
			with self.assertRaises(ValueError):
				ExperimentConfig(**kwargs)


class TestPairedStats(unittest.TestCase):
	def test_plain_t_test(self):
		ps = PairedStats(0.05)
		for x in [1.0, 2.0, 3.0, 4.0]:
			ps.add(x, 0.0)
		ps.calculate_derived()
		t = 2.5 / (math.sqrt(5.0 / 3.0) / 2.0)
		self.assertAlmostEqual(ps.differences_probability, 2.0 * sps.t.sf(t, 3))
		self.assertEqual(ps.differences_significance, 1)
		self.assertAlmostEqual(ps.x_stats.mean, 2.5)
		self.assertIn("Analysis for 4 points:", ps.to_string())

	def test_corrected_is_more_conservative(self):
		plain = PairedStats()
		corrected = PairedStatsCorrected(test_train_ratio=1.0 / 9.0)
		for x, y in [(80.0, 78.0), (82.0, 79.5), (81.0, 80.0), (79.0, 76.0), (83.0, 80.5)]:
			plain.add(x, y)
			corrected.add(x, y)
		plain.calculate_derived()
		corrected.calculate_derived()
		self.assertGreater(corrected.differences_probability, plain.differences_probability)

	def test_identical_columns(self):
		ps = PairedStats()
		for v in [1.0, 2.0, 3.0]:
			ps.add(v, v)
		ps.calculate_derived()
		self.assertEqual(ps.differences_probability, 1.0)
		self.assertEqual(ps.differences_significance, 0)

	def test_subtract_undoes_add(self):
		ps = PairedStats()
		ps.add(1.0, 2.0)
		ps.add(5.0, 1.0)
		ps.subtract(5.0, 1.0)
		self.assertEqual(ps.count, 1)

	def test_bad_ratio(self):
		with self.assertRaises(ValueError):
			PairedStatsCorrected(test_train_ratio=0.0)


class TestSplitEvaluators(unittest.TestCase):
	def test_classifier_results(self):
		d = weather()
		se = ClassifierSplitEvaluator(ZeroR())
		res = se.get_result(d.subset(np.arange(10)), d.subset(np.arange(10, 14)))
		self.assertEqual(len(ClassifierSplitEvaluator.RESULT_NAMES), 32)
		self.assertEqual(set(res), set(se.result_names()))
		self.assertEqual(res["Number_of_instances"], 4.0)
		self.assertIn("Time_training", res)
		self.assertEqual(se.key(), ["ZeroR", "{}", __version__])
		self.assertIn("ZeroR predicts", se.raw_result_output())

	def test_regression_results_include_measures(self):
		d = linear()
		se = RegressionSplitEvaluator("M5P", {"min_num_instances": 8})
		res = se.get_result(d.subset(np.arange(60)), d.subset(np.arange(60, 80)))
		self.assertEqual(len(RegressionSplitEvaluator.RESULT_NAMES), 7)
		self.assertIn("measure_num_rules", res)
		self.assertGreater(res["Correlation_coefficient"], 0.9)
		self.assertIn('"min_num_instances":8', se.key()[1])
		self.assertEqual(measure_names(M5P()), ["measure_num_rules"])

	def test_class_type_checks(self):
		with self.assertRaises(ValueError):
			ClassifierSplitEvaluator().get_result(linear(), linear())
		with self.assertRaises(ValueError):
			RegressionSplitEvaluator().get_result(weather(), weather())
		with self.assertRaises(ValueError):
			ClassifierSplitEvaluator(ir_class=5).get_result(weather(), weather())
		with self.assertRaises(ValueError):
			ClassifierSplitEvaluator("Cobweb")


class TestRunLog(unittest.TestCase):
	def test_manifest_hash(self):
		man = RunLog.build_manifest({"runs": 1}, [weather()], [["ZeroR", "{}", "0.1.0"]])
		self.assertTrue(RunLog.verify_manifest(man))
		man["config"]["runs"] = 2
		self.assertFalse(RunLog.verify_manifest(man))

	def test_dataset_digest_tracks_values(self):
		a = weather()
		b = weather()
		self.assertEqual(RunLog.dataset_digest(a), RunLog.dataset_digest(b))
		b.X[0, 1] = 0.0
		self.assertNotEqual(RunLog.dataset_digest(a), RunLog.dataset_digest(b))

	def test_event_stream(self):
		es = EventStream()
		es.emit("start", {"b": 1, "a": 2})
		es.emit("stop", {})
		lines = es.to_jsonl().split("\n")
		self.assertEqual(lines[0], '{"kind":"start","payload":{"a":2,"b":1},"ts":0}')
		for e in es.events:
			self.assertTrue(RunLog.validate_event_shape(e))
		self.assertFalse(RunLog.validate_event_shape({"ts": True, "kind": "x", "payload": {}}))


class TestExperiment(unittest.TestCase):
	def setUp(self):
		self.tmp = tempfile.TemporaryDirectory()
		self.dir = Path(self.tmp.name)

	def tearDown(self):
		self.tmp.cleanup()

	def test_cross_validation_run(self):
		cfg = ExperimentConfig(runs=2, folds=3, seed=1, out_dir=str(self.dir / "out"))
		schemes = ["ZeroR", ("ClassificationViaRegression", {"classifier": "LinearRegression"})]
		exp = Experiment([weather(), blobs()], schemes, cfg)
		df = exp.run()
		self.assertEqual(df.shape[0], 2 * 2 * 3 * 2)
		for col in ["Key_Dataset", "Key_Run", "Key_Fold", "Scheme", "Scheme_options", "Scheme_version_ID", "Percent_correct"]:
			self.assertIn(col, df.columns)
		self.assertEqual(sorted(df["Key_Fold"].unique().tolist()), [1, 2, 3])
		blob_rows = df[(df["Key_Dataset"] == "blobs") & (df["Scheme"] == "ClassificationViaRegression")]
		self.assertGreater(float(blob_rows["Percent_correct"].mean()), 90.0)

		out = self.dir / "out"
		self.assertEqual(pd.read_csv(out / "results.csv").shape[0], df.shape[0])
		man = json.loads((out / "manifest.json").read_text(encoding="utf-8"))
		self.assertTrue(RunLog.verify_manifest(man))
		events = [json.loads(line) for line in (out / "events.jsonl").read_text(encoding="utf-8").split("\n")]
		self.assertEqual(len(events), df.shape[0] + 2)
		self.assertEqual(events[0]["kind"], "start")
		self.assertEqual(events[-1]["payload"], {"rows": df.shape[0]})
		self.assertNotIn("Time_training", events[1]["payload"])

	def test_runs_are_reproducible(self):
		cfg = ExperimentConfig(runs=1, folds=3, seed=4)
		a = Experiment([weather()], ["ZeroR"], cfg).run()
		b = Experiment([weather()], ["ZeroR"], cfg).run()
		pd.testing.assert_series_equal(a["Percent_correct"], b["Percent_correct"])

	def test_holdout_regression_and_tester(self):
		cfg = ExperimentConfig(runs=3, folds=0, train_percent=66.0, seed=1)
		df = Experiment([linear()], ["ZeroR", "LinearRegression"], cfg).run()
		self.assertEqual(df.shape[0], 6)
		self.assertIn("Root_mean_squared_error", df.columns)
		tester = PairedTTester(df, metric="Root_mean_squared_error", test_train_ratio=cfg.test_train_ratio())
		cmp_ = tester.compare()
		lr = cmp_[cmp_["scheme"].str.startswith("LinearRegression")].iloc[0]
		self.assertEqual(lr["sig"], "*")
		self.assertEqual(lr["n"], 3)

	def test_eta_timer(self):
		ticks = iter([0.0, 2.0, 3.0, 7.0])
		timer = ETATimer(4, clock=lambda: next(ticks))
		self.assertEqual(timer.remaining_seconds(), 0.0)
		self.assertEqual(timer.step("ZeroR"), 2.0)
		timer.step("M5P")
		timer.step("ZeroR")
		self.assertEqual(timer.per_scheme, {"ZeroR": 6.0, "M5P": 1.0})
		self.assertAlmostEqual(timer.remaining_seconds(), 7.0 / 3.0)
		self.assertEqual(timer.line("weather", "ZeroR"), "[ETA] 3/4 weather ZeroR elapsed=00:00:07 remaining=00:00:02")
		self.assertEqual(ETATimer.hms(3725.0), "01:02:05")
		with self.assertRaises(ValueError):
			ETATimer(-1)

	def test_verbose_run_reports_progress(self):
		buf = io.StringIO()
		with contextlib.redirect_stdout(buf):
			Experiment([weather()], ["ZeroR"], ExperimentConfig(runs=1, folds=2)).run(verbose=True)
		out = buf.getvalue()
		self.assertIn("[ETA] 2/2 weather ZeroR", out)
		self.assertIn("[time] ZeroR: ", out)

	def test_shared_relation_names_stay_apart(self):
		other = blobs()
		other.relation = "weather"
		cfg = ExperimentConfig(runs=1, folds=2, seed=1)
		df = Experiment([weather(), other], ["ZeroR", "ClassificationViaRegression"], cfg).run()
		self.assertEqual(list(dict.fromkeys(df["Key_Dataset"].tolist())), ["weather", "weather#2"])
		self.assertEqual(int((df["Key_Dataset"] == "weather#2").sum()), 2 * 2)
		tester = PairedTTester(df)
		text = tester.to_string()
		self.assertIn("weather#2 (2)", text)
		self.assertEqual(tester.comparison_.shape[0], 4)
		self.assertEqual(Experiment.dataset_keys([weather(), weather(), other]), ["weather", "weather#2", "weather#3"])

	def test_invalid_experiments(self):
		with self.assertRaises(ValueError):
			Experiment([], ["ZeroR"])
		with self.assertRaises(ValueError):
			Experiment([weather()], [])
		d = weather()
		d.set_class_index(-1)
		with self.assertRaises(ValueError):
			Experiment([d], ["ZeroR"])
		with self.assertRaises(RuntimeError):
			Experiment([weather()], ["ZeroR"]).write(self.dir)


def tester_frame():
	rows = []
	base = [80.0, 82.0, 81.0, 79.0, 80.0, 81.5]
	for fold, b in enumerate(base, start=1):
		for scheme, value in (("A", b), ("B", b + 6.0 + 0.1 * fold), ("C", b + (0.5 if fold % 2 else -0.5))):
			rows.append({
				"Key_Dataset": "toy",
				"Key_Run": 1,
				"Key_Fold": fold,
				"Scheme": scheme,
				"Scheme_options": "{}",
				"Percent_correct": value,
			})
	return pd.DataFrame(rows)


class TestPairedTTester(unittest.TestCase):
	def test_marks(self):
		tester = PairedTTester(tester_frame(), corrected=False)
		cmp_ = tester.compare().set_index("scheme")
		self.assertEqual(cmp_.loc["A {}", "sig"], "")
		self.assertTrue(math.isnan(cmp_.loc["A {}", "p_value"]))
		self.assertEqual(cmp_.loc["B {}", "sig"], "v")
		self.assertEqual(cmp_.loc["C {}", "sig"], "")
		self.assertEqual(tester.wins_losses()["B {}"], [1, 0, 0])

	def test_base_by_name(self):
		tester = PairedTTester(tester_frame(), base_scheme="B", corrected=False)
		cmp_ = tester.compare().set_index("scheme")
		self.assertEqual(cmp_.loc["A {}", "sig"], "*")

	def test_table(self):
		text = PairedTTester(tester_frame()).to_string()
		self.assertIn("Tester:     Paired T-Tester (corrected)", text)
		self.assertIn("Analysing:  Percent_correct", text)
		self.assertIn("toy (6)", text)
		self.assertIn("(v/ /*)", text)
		self.assertIn("(2) B {}", text)

	def test_rejects_bad_arguments(self):
		with self.assertRaises(ValueError):
			PairedTTester(tester_frame(), metric="nosuch")
		with self.assertRaises(ValueError):
			PairedTTester(tester_frame(), base_scheme="Z")
		with self.assertRaises(ValueError):
			PairedTTester(tester_frame(), base_scheme=3)
		with self.assertRaises(ValueError):
			PairedTTester(tester_frame().drop(columns=["Key_Fold"]))


class TestRegistry(unittest.TestCase):
	def test_make_scheme(self):
		m = make_scheme("M5P", {"unpruned": True})
		self.assertTrue(m.unpruned)
		with self.assertRaises(ValueError):
			make_scheme("NoSuch")
		with self.assertRaises(ValueError):
			make_scheme("M5P", {"bogus": 1})
		with self.assertRaises(ValueError):
			make_scheme("Cobweb", {}, CLASSIFIERS)


class TestReporting(unittest.TestCase):
	def setUp(self):
		self.tmp = tempfile.TemporaryDirectory()
		self.dir = Path(self.tmp.name)

	def tearDown(self):
		self.tmp.cleanup()

	def test_figures(self):
		df = tester_frame()
		with contextlib.redirect_stdout(io.StringIO()):
			p = plot_metric_by_scheme(df, "Percent_correct", self.dir / "box.png")
			q = plot_wins_losses(PairedTTester(df).wins_losses(), self.dir / "wl.png", base="A {}")
		self.assertTrue(p.exists())
		self.assertTrue(q.exists())
		with self.assertRaises(ValueError):
			plot_metric_by_scheme(df, "nosuch", self.dir / "x.png")


class TestCommandLine(unittest.TestCase):
	def setUp(self):
		self.tmp = tempfile.TemporaryDirectory()
		self.dir = Path(self.tmp.name)
		self.weather = self.dir / "weather.arff"
		ArffSaver.save(weather(), self.weather)

	def tearDown(self):
		self.tmp.cleanup()

	def run_cli(self, *argv):
		out = io.StringIO()
		err = io.StringIO()
		with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
			code = main([str(a) for a in argv])
		return code, out.getvalue(), err.getvalue()

	def test_parse_scheme_arg(self):
		self.assertEqual(parse_scheme_arg(["M5P", "unpruned=True"]), ("M5P", {"unpruned": True}))
		with self.assertRaises(ValueError):
			parse_scheme_arg([])

	def test_select(self):
		reduced = self.dir / "reduced.arff"
		code, out, _ = self.run_cli("select", "--data", self.weather, "--cv-folds", 3, "--out", reduced)
		self.assertEqual(code, 0)
		self.assertIn("Selected attributes: ", out)
		self.assertTrue(reduced.exists())

	def test_classify(self):
		model = self.dir / "zero.pkl"
		code, out, _ = self.run_cli("classify", "--data", self.weather, "--folds", 2, "--save-model", model)
		self.assertEqual(code, 0)
		self.assertIn("ZeroR predicts class value: yes", out)
		self.assertIn("=== Stratified cross-validation ===", out)
		self.assertTrue(model.exists())

	def test_cluster(self):
		graph = self.dir / "tree.dot"
		code, out, _ = self.run_cli("cluster", "--data", self.weather, "--class", "last", "--graph", graph)
		self.assertEqual(code, 0)
		self.assertIn("Clustered Instances", out)
		self.assertTrue(graph.read_text(encoding="utf-8").startswith("digraph CobwebTree {"))

	def test_experiment(self):
		code, out, _ = self.run_cli(
			"experiment", "--data", self.weather,
			"--scheme", "ZeroR",
			"--scheme", "ClassificationViaRegression", "classifier=LinearRegression",
			"--folds", 2, "--runs", 2, "--out", self.dir / "exp", "--plot", self.dir / "box.png",
		)
		self.assertEqual(code, 0)
		self.assertIn("Analysing:  Percent_correct", out)
		self.assertTrue((self.dir / "exp" / "results.csv").exists())
		self.assertTrue((self.dir / "box.png").exists())

	def test_configuration_errors_exit_with_status_2(self):
		code, _, err = self.run_cli("classify", "--data", self.weather, "--scheme", "NoSuch")
		self.assertEqual(code, 2)
		self.assertIn("workbench classify: Unknown scheme 'NoSuch'", err)
		code, _, err = self.run_cli("classify", "--data", self.weather, "--scheme", "M5P", "--folds", 1)
		self.assertEqual(code, 2)
		self.assertIn("cannot handle nominal class", err)


if __name__ == "__main__":
	unittest.main()
