"""End-to-end behaviour of get_best_levels / add_best_levels, including replay."""

import unittest

import numpy as np
import pandas as pd

from best_levels import (
    AugmentedFrame,
    InvalidLevelsArgument,
    InvalidParameter,
    MissingLevelSetKey,
    MissingOutcomeColumn,
    add_best_levels,
    get_best_levels,
)
from best_levels.level_scorer import score_classification
from best_levels.presence_joiner import build_analysis_table
from sample_data import RANKED_LEVELS, make_meds, make_patients, make_regression_tables


class GetBestLevelsTests(unittest.TestCase):

    def setUp(self):
        self.patients = make_patients()
        self.meds = make_meds()

    def _best(self, **kwargs):
        return get_best_levels(self.patients, self.meds, "patient", "drug", "survived", **kwargs)

    def test_three_levels_alternate_polarity(self):
        self.assertEqual(self._best(n_levels=3), ["Paclitaxel", "Vancomycin", "Dexamethasone"])

    def test_all_levels_when_fewer_than_requested(self):
        self.assertEqual(self._best(), RANKED_LEVELS)

    def test_deterministic(self):
        self.assertEqual(self._best(n_levels=4), self._best(n_levels=4))

    def test_balanced_by_polarity(self):
        tomodel = build_analysis_table(self.patients, self.meds, "patient", "drug", "survived")
        scores = score_classification(tomodel, "patient", "drug", "survived")
        polarity = dict(zip(scores["drug"], scores["polarity"]))
        picked = [polarity[d] for d in self._best(n_levels=4)]
        self.assertEqual(picked.count(0), 2)
        self.assertEqual(picked.count(1), 2)

    def test_min_obs_excludes_rare_levels(self):
        best = self._best(min_obs=2)
        self.assertEqual(set(best), {"Vancomycin", "Ibuprofen", "Paclitaxel"})
        for rare in ["Quinapril", "Epinephrine", "Dexamethasone"]:
            self.assertNotIn(rare, best)

    def test_no_qualifying_levels_warns_and_returns_empty(self):
        with self.assertLogs("best_levels.levels", level="WARNING") as logs:
            self.assertEqual(self._best(min_obs=3), [])
        self.assertIn("at least 3 observations", logs.output[0])

    def test_regression(self):
        wide, long = make_regression_tables()
        self.assertEqual(
            get_best_levels(wide, long, "id", "grp", "y"), ["G", "F", "A", "B", "C", "D", "E"]
        )
        self.assertEqual(get_best_levels(wide, long, "id", "grp", "y", n_levels=2), ["G", "F"])

    def test_regression_single_observations_only_fill_the_tail(self):
        wide, long = make_regression_tables()
        self.assertEqual(
            get_best_levels(wide, long, "id", "grp", "y", n_levels=5), ["G", "F", "A", "B", "C"]
        )
        self.assertEqual(
            get_best_levels(wide, long, "id", "grp", "y", n_levels=6), ["G", "F", "A", "B", "C", "D"]
        )

    def test_missing_outcomes_are_left_out(self):
        patients = self.patients.assign(survived=["Y", "Y", "N", None, "N"])
        best = get_best_levels(patients, self.meds, "patient", "drug", "survived")
        self.assertNotIn("Epinephrine", best)
        self.assertEqual(len(best), 5)

    def test_invalid_parameters(self):
        for kwargs in [{"n_levels": "5"}, {"min_obs": -1}, {"n_levels": True}, {"n_levels": float("nan")}]:
            with self.subTest(**{k: repr(v) for k, v in kwargs.items()}):
                with self.assertRaises(InvalidParameter):
                    self._best(**kwargs)

    def test_missing_outcome(self):
        with self.assertRaises(MissingOutcomeColumn):
            get_best_levels(self.patients, self.meds, "patient", "drug", "died")
        empty_outcome = self.patients.assign(survived=np.nan)
        with self.assertRaises(MissingOutcomeColumn) as ctx:
            get_best_levels(empty_outcome, self.meds, "patient", "drug", "survived")
        self.assertIn("survived", str(ctx.exception))


class AddBestLevelsTests(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.patients = make_patients()
        cls.meds = make_meds()
        cls.train = add_best_levels(
            cls.patients, cls.meds, "patient", "drug", "survived",
            n_levels=4, fill="dose", fun="sum", missing_fill=0,
        )

    def test_returns_augmented_frame(self):
        self.assertIsInstance(self.train, AugmentedFrame)
        self.assertEqual(
            self.train.registry.to_dict(),
            {"drug_levels": ["Paclitaxel", "Vancomycin", "Dexamethasone", "Epinephrine"]},
        )

    def test_new_columns_hold_summed_doses(self):
        frame = self.train.frame.set_index("patient")
        new_cols = sorted(set(frame.columns) - {"age", "survived"})
        self.assertEqual(
            new_cols,
            ["drug_Dexamethasone", "drug_Epinephrine", "drug_Paclitaxel", "drug_Vancomycin"],
        )
        self.assertEqual(frame.loc["p1", "drug_Vancomycin"], 350)
        self.assertEqual(frame.loc["p2", "drug_Vancomycin"], 100)
        self.assertEqual(frame.loc["p3", "drug_Paclitaxel"], 250)
        self.assertEqual(frame.loc["p5", "drug_Paclitaxel"], 100)
        self.assertEqual(frame.loc["p5", "drug_Dexamethasone"], 100)
        self.assertEqual(frame.loc["p4", "drug_Vancomycin"], 0)
        self.assertFalse(frame[new_cols].isna().any().any())

    def test_input_not_mutated(self):
        pd.testing.assert_frame_equal(self.patients, make_patients())
        pd.testing.assert_frame_equal(self.meds, make_meds())

    def test_counts_when_no_fill(self):
        out = add_best_levels(self.patients, self.meds, "patient", "drug", "survived", n_levels=2)
        frame = out.frame.set_index("patient")
        self.assertEqual(frame.loc["p1", "drug_Vancomycin"], 2)
        self.assertTrue(np.isnan(frame.loc["p4", "drug_Vancomycin"]))

    def test_entities_without_levels_get_missing_fill(self):
        patients = pd.concat(
            [self.patients, pd.DataFrame({"patient": ["p6"], "age": [20], "survived": ["N"]})],
            ignore_index=True,
        )
        out = add_best_levels(patients, self.meds, "patient", "drug", "survived",
                              n_levels=4, fill="dose", missing_fill=-1)
        row = out.frame.set_index("patient").loc["p6"]
        self.assertTrue((row.filter(like="drug_") == -1).all())

    def test_replay_on_deployment_data(self):
        deployment_df = pd.DataFrame({"patient": ["p6"], "age": [30]})
        deployment_meds = pd.DataFrame(
            {"patient": ["p6", "p6"], "drug": ["Vancomycin", "Vancomycin"], "dose": [100, 250]}
        )
        deploy = add_best_levels(
            deployment_df, deployment_meds, "patient", "drug",
            levels=self.train, fill="dose", missing_fill=0,
        )
        row = deploy.frame.set_index("patient").loc["p6"]
        self.assertEqual(row["drug_Vancomycin"], 350)
        for absent in ["drug_Paclitaxel", "drug_Dexamethasone", "drug_Epinephrine"]:
            self.assertEqual(row[absent], 0)
        self.assertEqual(deploy.registry.to_dict(), self.train.registry.to_dict())

    def test_replay_columns_match_training(self):
        deployment_meds = pd.DataFrame({"patient": ["p1"], "drug": ["Aspirin"], "dose": [5]})
        train_cols = set(self.train.frame.columns) - set(self.patients.columns)
        for levels in [self.train, self.train.registry, self.train.registry.to_dict(),
                       self.train.registry["drug_levels"]]:
            with self.subTest(levels=type(levels).__name__):
                deploy = add_best_levels(self.patients, deployment_meds, "patient", "drug",
                                         levels=levels, fill="dose", missing_fill=0)
                new_cols = set(deploy.frame.columns) - set(self.patients.columns)
                self.assertEqual(new_cols, train_cols)
                self.assertTrue((deploy.frame[sorted(new_cols)] == 0).all().all())

    def test_replay_from_trained_model(self):
        class Model:
            best_levels = {"drug_levels": ["Ibuprofen"]}

        out = add_best_levels(self.patients, self.meds, "patient", "drug", levels=Model())
        self.assertEqual([c for c in out.frame.columns if c.startswith("drug_")], ["drug_Ibuprofen"])
        self.assertEqual(out.frame.set_index("patient").loc["p3", "drug_Ibuprofen"], 1)

    def test_missing_registry_key(self):
        with self.assertRaises(MissingLevelSetKey) as ctx:
            add_best_levels(self.patients, self.meds, "patient", "diagnosis", levels=self.train)
        self.assertIn("diagnosis_levels", str(ctx.exception))

    def test_invalid_levels_argument(self):
        for bad in [42, "Vancomycin", self.patients]:
            with self.subTest(levels=type(bad).__name__):
                with self.assertRaises(InvalidLevelsArgument) as ctx:
                    add_best_levels(self.patients, self.meds, "patient", "drug", levels=bad)
                self.assertIn(type(bad).__name__, str(ctx.exception))

    def test_chaining_merges_registries(self):
        diagnoses = pd.DataFrame(
            {"patient": ["p1", "p2", "p3", "p5"], "dx": ["I10", "I10", "E11", "E11"]}
        )
        chained = add_best_levels(self.train, diagnoses, "patient", "dx", "survived")
        self.assertEqual(set(chained.registry), {"drug_levels", "dx_levels"})
        self.assertEqual(chained.registry["drug_levels"], self.train.registry["drug_levels"])
        self.assertIn("dx_I10", chained.frame.columns)
        self.assertIn("drug_Vancomycin", chained.frame.columns)

    def test_adding_same_group_again_replaces_its_columns(self):
        again = add_best_levels(self.train, self.meds, "patient", "drug", levels=["Ibuprofen"])
        self.assertEqual(
            [c for c in again.frame.columns if c.startswith("drug_")], ["drug_Ibuprofen"]
        )
        self.assertEqual(again.registry.to_dict(), {"drug_levels": ["Ibuprofen"]})
        self.assertIn("drug_Vancomycin", self.train.frame.columns)

    def test_long_table_with_duplicate_index_labels(self):
        meds = pd.concat([self.meds.iloc[:5], self.meds.iloc[5:].reset_index(drop=True)])
        selected = add_best_levels(self.patients, meds, "patient", "drug", "survived",
                                   n_levels=4, fill="dose", missing_fill=0)
        pd.testing.assert_frame_equal(selected.frame, self.train.frame)
        replayed = add_best_levels(self.patients, meds, "patient", "drug",
                                   levels=self.train, fill="dose", missing_fill=0)
        pd.testing.assert_frame_equal(replayed.frame, self.train.frame)

    def test_wide_table_index_is_kept(self):
        patients = self.patients.set_index(pd.Index([10, 11, 12, 13, 14]))
        out = add_best_levels(patients, self.meds, "patient", "drug",
                              levels=self.train, fill="dose", missing_fill=0)
        self.assertEqual(out.frame.index.tolist(), [10, 11, 12, 13, 14])
        self.assertEqual(out.frame.loc[10, "drug_Vancomycin"], 350)
        self.assertEqual(out.frame.loc[13, "drug_Epinephrine"], 250)

    def test_no_qualifying_levels_records_empty_entry(self):
        out = add_best_levels(self.patients, self.meds, "patient", "drug", "survived", min_obs=10)
        self.assertEqual(out.registry["drug_levels"], [])
        pd.testing.assert_frame_equal(out.frame, self.patients)


if __name__ == "__main__":
    unittest.main()
