#!/usr/bin/env python3
"""
Walk-through Example: selecting, adding and replaying medication features

Patients may receive zero, one or many drugs. This script picks the drugs most
likely to be useful predictors of survival, adds them as dose columns, and then
adds the very same columns to a deployment table where most of those drugs
never appear.
"""

import logging
import os
import sys

import numpy as np
import pandas as pd

# Add the parent directory to Python path to import best_levels
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from best_levels import (
    add_best_levels, build_analysis_table, get_best_levels, score_levels, summarize_selection
)


def create_demo_data():
    """Create a small patient table and a medication table for the walkthrough."""
    rng = np.random.RandomState(45796)
    patients = pd.DataFrame({
        'patient': [f"Z{i}" for i in rng.choice(10, 5, replace=False)],
        'age': rng.randint(20, 80, 5),
        'survived': rng.choice(['N', 'Y'], 5, p=[1 / 3, 2 / 3]),
    })
    meds = pd.DataFrame({
        'patient': rng.choice(patients['patient'], 10),
        'drug': rng.choice(['Quinapril', 'Vancomycin', 'Ibuprofen',
                            'Paclitaxel', 'Epinephrine', 'Dexamethasone'], 10),
        'dose': rng.choice([100, 250], 10),
    })
    return patients, meds


def main():
    patients, meds = create_demo_data()
    print("📊 Patients:")
    print(patients)
    print("\n💊 Medications:")
    print(meds)

    best = get_best_levels(patients, meds, 'patient', 'drug', 'survived', n_levels=3)
    tomodel = build_analysis_table(patients, meds, 'patient', 'drug', 'survived')
    print("\n🔍 Three drugs likely to be good predictors:")
    print(summarize_selection(score_levels(tomodel, 'patient', 'drug', 'survived'), best, 'drug'))

    train = add_best_levels(patients, meds, 'patient', 'drug', 'survived',
                            n_levels=4, fill='dose', fun='sum', missing_fill=0)
    print("\n🧱 Training table with total dose per selected drug:")
    print(train.frame)
    print(f"Registry: {train.registry.to_dict()}")

    deployment_df = pd.DataFrame({'patient': ['p6'], 'age': [30]})
    deployment_meds = pd.DataFrame({
        'patient': ['p6', 'p6'],
        'drug': ['Vancomycin', 'Vancomycin'],
        'dose': [100, 250],
    })
    deploy = add_best_levels(deployment_df, deployment_meds, 'patient', 'drug',
                             levels=train, fill='dose', missing_fill=0)
    print("\n🚀 Deployment table, same columns as training:")
    print(deploy.frame)


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    main()
