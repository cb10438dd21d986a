#!/usr/bin/env python3
"""
Command-line interface for best_levels.

    best-levels select --wide patients.csv --long meds.csv --id patient \
        --groups drug --outcome survived --n-levels 10 --registry levels.yaml

    best-levels add --wide deploy.csv --long deploy_meds.csv --id patient \
        --groups drug --levels levels.yaml --fill dose --missing-fill 0 \
        --output deploy_features.csv
"""

import argparse
import logging
import sys

import pandas as pd

from .errors import BestLevelsError
from .levels import add_best_levels, get_best_levels
from .registry import LevelSetRegistry
from .yaml_processor import get_level_settings, load_config

# Setup logging
logger = logging.getLogger(__name__)


def _parse_fill(value: str):
    """Numbers become floats, 'NA'/'nan' becomes NaN, anything else stays text."""
    if value.lower() in ('na', 'nan', 'none'):
        return float('nan')
    try:
        return float(value)
    except ValueError:
        return value


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('--wide', required=True, help='CSV at prediction grain (one row per id)')
    parser.add_argument('--long', required=True, help='CSV with zero or more rows per id')
    parser.add_argument('--id', required=True, help='Identifier column present in both files')
    parser.add_argument('--groups', required=True, help='Grouping column in the long file')
    parser.add_argument('--outcome', help='Outcome column in the wide file')
    parser.add_argument('--n-levels', type=int, help='Number of levels to select')
    parser.add_argument('--min-obs', type=int, help='Minimum observations per level')
    parser.add_argument('--positive-class', help='Positive class for classification outcomes')
    parser.add_argument('--config', help='YAML file with level settings')
    parser.add_argument('--registry', help='Write the level-set registry to this YAML file')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='best-levels',
        description='Select and add features for high-cardinality, multiple-membership factors'
    )
    parser.add_argument('--version', action='store_true', help='Show version information')
    subparsers = parser.add_subparsers(dest='command')

    select = subparsers.add_parser('select', help='Print the best levels of a grouping column')
    _add_common_arguments(select)

    add = subparsers.add_parser('add', help='Add columns for the best (or given) levels')
    _add_common_arguments(add)
    add.add_argument('--levels', help='Registry YAML from a previous run; replays its levels')
    add.add_argument('--fill', help='Long-file column aggregated into the new columns')
    add.add_argument('--fun', help='Aggregation name, e.g. sum, mean, max')
    add.add_argument('--missing-fill', type=_parse_fill, help='Value for entities without a level')
    add.add_argument('--output', required=True, help='Where to write the augmented CSV')
    return parser


def _resolve_settings(args):
    config = load_config(args.config) if args.config else None
    settings = get_level_settings(config, args.groups)
    for name in ('n_levels', 'min_obs', 'positive_class', 'fun'):
        value = getattr(args, name, None)
        if value is not None:
            setattr(settings, name, value)
    if getattr(args, 'missing_fill', None) is not None:
        settings.missing_fill = args.missing_fill
    return settings


def run_select(args) -> int:
    settings = _resolve_settings(args)
    wide = pd.read_csv(args.wide)
    long = pd.read_csv(args.long)
    best = get_best_levels(
        wide, long, args.id, args.groups, args.outcome,
        n_levels=settings.n_levels,
        min_obs=settings.min_obs,
        positive_class=settings.positive_class,
    )
    for level in best:
        print(level)
    if args.registry:
        LevelSetRegistry().with_levels(args.groups, best).save(args.registry)
    return 0


def run_add(args) -> int:
    settings = _resolve_settings(args)
    wide = pd.read_csv(args.wide)
    long = pd.read_csv(args.long)
    levels = LevelSetRegistry.load(args.levels) if args.levels else None
    result = add_best_levels(
        wide, long, args.id, args.groups, args.outcome,
        n_levels=settings.n_levels,
        min_obs=settings.min_obs,
        positive_class=settings.positive_class,
        levels=levels,
        fill=args.fill,
        fun=settings.fun,
        missing_fill=settings.fill_value,
    )
    result.frame.to_csv(args.output, index=False)
    logger.info(f"Wrote {result.frame.shape[0]} rows x {result.frame.shape[1]} columns to {args.output}")
    if args.registry:
        result.registry.save(args.registry)
    return 0


def main(argv=None):
    """
    CLI entry point.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    # Configure logging
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if args.version:
        from . import __version__
        print(f"best_levels version: {__version__}")
        return 0
    if args.command is None:
        parser.print_help()
        return 0

    try:
        if args.command == 'select':
            return run_select(args)
        return run_add(args)
    except BestLevelsError as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
