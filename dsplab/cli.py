"""
dsplab CLI

Usage:
    python -m dsplab eval "2*sin(pi*t)*rect(t/2)" --start -5 --end 5
    python -m dsplab eval "exp(-t)*u(t)" --finite --method simpson
    python -m dsplab catalog --method simpson --workers 4
    python -m dsplab plot x7 -o x7.csv
    python -m dsplab power x11 --start 0 --end 10
    python -m dsplab decompose x12
    python -m dsplab derive "tri(t)"
    python -m dsplab functions
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

import polars as pl

from dsplab.config.defaults import (
    CATALOG_INTERVAL,
    CATALOG_NUM_SAMPLES,
    DEFAULT_INTERVAL,
    DEFAULT_NUM_SAMPLES,
    DERIVATIVE_STEP,
    POWER_INTERVAL,
)
from dsplab.errors import DspError

logger = logging.getLogger("dsplab")


def _banner(title: str) -> None:
    print("=" * 70)
    print(title)
    print("=" * 70)


def _write_or_print(df: pl.DataFrame, output: Optional[str], rows: int = 20) -> None:
    if output:
        path = Path(output)
        if path.suffix == '.parquet':
            df.write_parquet(path)
        else:
            df.write_csv(path)
        print(f"Wrote {len(df)} rows → {path}")
        return
    with pl.Config(tbl_rows=rows):
        print(df)


# =============================================================================
# Commands
# =============================================================================

def cmd_eval(args) -> int:
    from dsplab.analysis import SignalDuration, analyze_formula, format_energy

    duration = SignalDuration.FINITE if args.finite else SignalDuration.INFINITE
    analysis = analyze_formula(
        args.formula,
        args.start,
        args.end,
        args.samples,
        method=args.method,
        duration=duration,
    )

    _banner(f"x(t) = {analysis.program.source}")
    print(f"Normalized:     {analysis.program.normalized}")
    print(f"Interval:       [{args.start}, {args.end}], {args.samples} samples")
    print(f"Duration:       {duration.value}")
    print(f"Window energy:  {format_energy(analysis.window_energy)}")
    print(f"Energy:         {format_energy(analysis.energy)}")
    print(f"Average power:  {format_energy(analysis.average_power)}")
    print(f"Classification: {analysis.label.label}")
    if args.heuristic:
        print(f"Heuristic (1e10 threshold, not a law): {analysis.heuristic_label().label}")
    plottable = analysis.series.finite_fraction
    if plottable < 1.0:
        print(f"Plottable:      {plottable:.1%} of samples")

    if args.points or args.output:
        print()
        _write_or_print(analysis.series.to_frame(), args.output)
    return 0


def cmd_catalog(args) -> int:
    from dsplab.analysis import analyze_all, format_energy
    from dsplab.catalog import load_catalog

    catalog = load_catalog(args.catalog) if args.catalog else None
    batch = analyze_all(
        catalog,
        method=args.method,
        t_start=args.start,
        t_end=args.end,
        num_points=args.samples,
        max_workers=args.workers,
    )

    _banner(f"ENERGY CLASSIFICATION ({batch.method.value})")
    _write_or_print(batch.to_frame(), args.output, rows=len(batch))
    print()
    print(f"Energy signals: {batch.energy_count}")
    print(f"Power signals:  {batch.power_count}")
    if batch.error_count:
        print(f"Errors:         {batch.error_count}")
    print(f"Min energy:     {format_energy(batch.min_energy)}")
    print(f"Max energy:     {format_energy(batch.max_energy)}")
    return 0


def cmd_power(args) -> int:
    from dsplab.analysis import format_energy, measure_signal

    m = measure_signal(args.name, args.start, args.end, args.samples, method=args.method)
    _banner(f"POWER CALCULATION: {m.signal_id} on [{m.t_start}, {m.t_end}]")
    print(f"Energy:         {format_energy(m.energy)}")
    print(f"Average power:  {format_energy(m.average_power)}")
    print(f"Method:         {m.method.value}, {args.samples} samples")
    if args.output:
        _write_or_print(pl.DataFrame([m.to_dict()]), args.output)
    return 0


def cmd_plot(args) -> int:
    from dsplab.catalog import get_signal

    signal = get_signal(args.name)
    series = signal.sample(args.start, args.end, args.samples)
    _banner(f"{signal.name} = {signal.display_formula} ({signal.duration.value})")
    _write_or_print(series.to_frame(), args.output)
    return 0


def cmd_decompose(args) -> int:
    from dsplab.catalog import decompose, get_signal

    signal = get_signal(args.name)
    _banner(f"{signal.name} = {signal.display_formula}")
    for i, step in enumerate(signal.steps):
        print(f"  step_{i}: {step.description}")
    if not signal.steps:
        print("  (no decomposition)")
    print()
    _write_or_print(decompose(signal, args.start, args.end, args.samples), args.output)
    return 0


def cmd_derive(args) -> int:
    from dsplab.analysis import derivative_table

    df = derivative_table(args.formula, args.start, args.end, args.samples, h=args.step)
    _banner(f"x(t) = {args.formula} with x'(t), x''(t)")
    _write_or_print(df, args.output)
    return 0


def cmd_functions(args) -> int:
    from dsplab.formula import FORMULA_EXAMPLES, available_functions

    for category, entries in available_functions().items():
        print(f"{category.capitalize()}:")
        for entry in entries:
            print(f"  {entry['name']:<10} {entry['description']}")
        print()
    print("Operators: + - * / ^ (or **), implicit multiplication (2t, 2(t+1), (t)(t))")
    print("Symbols:   π → pi, × → *, ÷ → /")
    print()
    print("Examples:")
    for example in FORMULA_EXAMPLES:
        print(f"  {example}")
    return 0


# =============================================================================
# Entry point
# =============================================================================

def _add_window(parser: argparse.ArgumentParser, interval, samples: int) -> None:
    parser.add_argument('--start', type=float, default=interval[0],
                        help=f'Window start (default: {interval[0]})')
    parser.add_argument('--end', type=float, default=interval[1],
                        help=f'Window end (default: {interval[1]})')
    parser.add_argument('-n', '--samples', type=int, default=samples,
                        help=f'Number of samples (default: {samples})')
    parser.add_argument('-o', '--output', help='Write the table to .csv or .parquet')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='dsplab',
        description="Signal formula evaluation and energy/power classification",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument('--log-level', default=os.environ.get('DSPLAB_LOG_LEVEL', 'WARNING'),
                        help='Logging level (default: WARNING, env DSPLAB_LOG_LEVEL)')
    sub = parser.add_subparsers(dest='command', required=True)

    p = sub.add_parser('eval', help='Sample and classify a formula')
    p.add_argument('formula', help='Signal formula in t, e.g. "2*rect(2t-1)"')
    _add_window(p, DEFAULT_INTERVAL, DEFAULT_NUM_SAMPLES)
    p.add_argument('-m', '--method', default='trapeze', choices=['trapeze', 'simpson'])
    p.add_argument('--finite', action='store_true', help='Declare the signal finite-duration')
    p.add_argument('--heuristic', action='store_true',
                   help='Also report the 1e10 magnitude heuristic')
    p.add_argument('--points', action='store_true', help='Print the sample table')
    p.set_defaults(func=cmd_eval)

    p = sub.add_parser('catalog', help='Classify every catalog signal')
    _add_window(p, CATALOG_INTERVAL, CATALOG_NUM_SAMPLES)
    p.add_argument('-m', '--method', default='trapeze', choices=['trapeze', 'simpson'])
    p.add_argument('-w', '--workers', type=int, default=None, help='Thread pool size')
    p.add_argument('--catalog', help='Alternative catalog YAML file')
    p.set_defaults(func=cmd_catalog)

    p = sub.add_parser('plot', help='Sample a catalog signal')
    p.add_argument('name', help='Catalog signal, e.g. x1 or "x1(t)"')
    _add_window(p, DEFAULT_INTERVAL, DEFAULT_NUM_SAMPLES)
    p.set_defaults(func=cmd_plot)

    p = sub.add_parser('power', help='Windowed energy and average power of a catalog signal')
    p.add_argument('name', help='Catalog signal, e.g. x11')
    _add_window(p, POWER_INTERVAL, CATALOG_NUM_SAMPLES)
    p.add_argument('-m', '--method', default='trapeze', choices=['trapeze', 'simpson'])
    p.set_defaults(func=cmd_power)

    p = sub.add_parser('decompose', help='Sample a catalog signal and its decomposition')
    p.add_argument('name', help='Catalog signal, e.g. x7')
    _add_window(p, DEFAULT_INTERVAL, DEFAULT_NUM_SAMPLES)
    p.set_defaults(func=cmd_decompose)

    p = sub.add_parser('derive', help='First and second numerical derivatives')
    p.add_argument('formula', help='Signal formula in t')
    _add_window(p, DEFAULT_INTERVAL, 1000)
    p.add_argument('--step', type=float, default=DERIVATIVE_STEP, help='Central difference step h')
    p.set_defaults(func=cmd_derive)

    p = sub.add_parser('functions', help='List functions, constants and examples')
    p.set_defaults(func=cmd_functions)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """dsplab CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    logger.debug(f"Command: {args.command}")
    try:
        return args.func(args)
    except DspError as e:
        print(f"Error: {e.user_message}", file=sys.stderr)
        return 2


if __name__ == '__main__':
    sys.exit(main())
