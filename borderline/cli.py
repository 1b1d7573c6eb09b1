"""
Borderline Command Line Interface

Usage:
    python -m borderline <command> [args]

Commands:
    analyze     Line length distributions for a trajectory or recurrence plot
    config      Show the effective analysis configuration

Examples:
    python -m borderline analyze roessler.npy --threshold 0.04 --method var -o lines.parquet
    python -m borderline analyze rp.npy --rp --border-mode semi --policies dibo kelo
    python -m borderline analyze x.csv --dim 2 --tau 1 --threshold 0.1 --tangential perp --w 0.258
    python -m borderline config --config my_analysis.yaml

Output safety:
    1. Input file validation (must exist)
    2. Output protection (can't overwrite the input)
    3. Overwrite confirmation for existing outputs (-y/--yes to skip)
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import yaml

from borderline.config.analysis import load_analysis_config
from borderline.dynamics.recurrence import METHODS, NORMS
from borderline.dynamics.tangential import CORRECTIONS
from borderline.engine import LineAnalysisEngine, build_recurrence_plot
from borderline.errors import BorderlineError
from borderline.io import read_recurrence_plot, read_trajectory, write_parquet_atomic
from borderline.lines.policies import POLICIES

logger = logging.getLogger(__name__)


# ============================================================
# OUTPUT SAFETY
# ============================================================

class CLIError(Exception):
    """Raised for invalid command line usage."""
    pass


def check_output(output: Optional[str], inputs: List[str], assume_yes: bool):
    """
    Refuse to overwrite an input, confirm before overwriting anything else.

    Raises:
        CLIError: If the output is an input, or an overwrite was declined
    """
    if not output:
        return

    target = Path(output).resolve()
    for path in inputs:
        if path and Path(path).resolve() == target:
            raise CLIError(
                f"Output '{output}' matches an input file!\n"
                f"       This would destroy your input data."
            )

    if target.exists() and not assume_yes:
        print(f"\nWARNING: Output file '{output}' already exists.")
        try:
            response = input("   Overwrite? [y/N]: ")
        except EOFError:
            raise CLIError(
                f"Output file '{output}' exists and running non-interactively.\n"
                f"       Use -y/--yes to overwrite, or choose a different output path."
            )
        if response.lower() != 'y':
            raise CLIError("Aborted.")


def _policy_name(value: str) -> str:
    """Canonical policy key, so 'window-masking' passes the choices check."""
    return value.lower().replace('-', '_')


def _config_from_args(args):
    overrides = {
        'recurrence': {
            'threshold': args.threshold,
            'method': args.method,
            'norm': args.norm,
            'dim': args.dim,
            'tau': args.tau,
        },
        'lines': {
            'border_mode': args.border_mode,
            'mask_width': args.mask_width,
            'policies': args.policies,
        },
        'tangential': {
            'correction': args.tangential,
            'w': args.w,
            'e2': args.e2,
            'tau_iso': args.tau_iso,
        },
        'engine': {
            'n_workers': args.workers,
        },
    }
    return load_analysis_config(args.config, overrides=overrides)


# ============================================================
# COMMANDS
# ============================================================

def cmd_analyze(args):
    """Compute corrected line length distributions."""
    input_path = Path(args.input)
    if not input_path.exists():
        raise CLIError(f"Input file not found: {input_path}")

    check_output(args.output, [args.input, args.config], args.yes)
    check_output(args.summary, [args.input, args.config, args.output], args.yes)

    config = _config_from_args(args)

    if args.rp:
        if config.tangential.correction != 'none':
            raise CLIError(
                f"Tangential correction '{config.tangential.correction}' needs a trajectory, "
                f"but --rp reads a finished recurrence plot.\n"
                f"       Pass the trajectory instead, or set the correction to 'none'."
            )
        R = read_recurrence_plot(input_path, csv_header=args.csv_header)
    else:
        Y = read_trajectory(input_path, csv_header=args.csv_header)
        R, threshold = build_recurrence_plot(Y, config)
        logger.info(f"Realized threshold: {threshold}")

    engine = LineAnalysisEngine.from_config(config)
    results = engine.run({input_path.stem: R})
    summary = engine.summary_frame(results)

    if not args.quiet:
        print(summary)

    if args.output:
        rows = write_parquet_atomic(engine.to_frame(results), args.output)
        logger.info(f"Wrote {rows:,} rows to {args.output}")
    if args.summary:
        write_parquet_atomic(summary, args.summary)
        logger.info(f"Wrote summary to {args.summary}")

    return 0


def cmd_config(args):
    """Print the effective configuration."""
    config = load_analysis_config(args.config)
    print(f"# source: {config.source or 'package defaults'}")
    print(yaml.safe_dump(config.to_dict(), sort_keys=False), end='')
    return 0


# ============================================================
# MAIN
# ============================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='borderline',
        description='Border effect corrected diagonal line analysis of recurrence plots',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python -m borderline analyze trajectory.npy --threshold 0.1 -o lines.parquet
    python -m borderline analyze rp.npy --rp --border-mode semi
    python -m borderline config
        """,
    )

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # analyze command
    analyze_parser = subparsers.add_parser(
        'analyze',
        help='Line length distributions for a trajectory or recurrence plot',
    )
    analyze_parser.add_argument(
        'input',
        help='[INPUT] Trajectory (.npy, .csv, .parquet), or recurrence plot with --rp',
    )
    analyze_parser.add_argument('--rp', action='store_true', help='Input is a recurrence plot')
    analyze_parser.add_argument('--config', metavar='FILE', help='[INPUT] Analysis config (YAML)')
    analyze_parser.add_argument(
        '--csv-header',
        action=argparse.BooleanOptionalAction,
        default=None,
        help='CSV input has a header row; detected from the first row when not given',
    )

    rec = analyze_parser.add_argument_group('recurrence plot')
    rec.add_argument('--threshold', '-e', type=float, help='Threshold / recurrence rate / neighbour fraction')
    rec.add_argument('--method', choices=METHODS, help='Threshold selection')
    rec.add_argument('--norm', choices=list(NORMS), help='Distance norm')
    rec.add_argument('--dim', type=int, help='Embedding dimension for scalar input')
    rec.add_argument('--tau', type=int, help='Embedding delay for scalar input')

    lines = analyze_parser.add_argument_group('line extraction')
    lines.add_argument('--border-mode', help="Border line counting: 'normal' or 'semi'")
    lines.add_argument('--mask-width', type=int, help='Band width for window masking')
    lines.add_argument(
        '--policies', nargs='+', type=_policy_name, choices=list(POLICIES), help='Policies to run',
    )

    tan = analyze_parser.add_argument_group('tangential motion correction')
    tan.add_argument('--tangential', choices=CORRECTIONS, help='Correction applied before extraction')
    tan.add_argument('--w', type=float, help='perp: cosine threshold')
    tan.add_argument('--e2', type=float, help='iso: direction threshold')
    tan.add_argument('--tau-iso', type=int, help='iso: direction step window')

    analyze_parser.add_argument('--workers', type=int, help='Worker processes')
    analyze_parser.add_argument('-o', '--output', metavar='FILE', help='[OUTPUT] Distributions parquet')
    analyze_parser.add_argument('--summary', metavar='FILE', help='[OUTPUT] Summary parquet')
    analyze_parser.add_argument('-y', '--yes', action='store_true', help='Overwrite outputs without asking')
    analyze_parser.add_argument('-q', '--quiet', action='store_true', help='Suppress output')

    # config command
    config_parser = subparsers.add_parser(
        'config',
        help='Show the effective analysis configuration',
    )
    config_parser.add_argument('--config', metavar='FILE', help='Analysis config (YAML)')

    return parser


def main(argv: Optional[List[str]] = None):
    """Borderline CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.WARNING if getattr(args, 'quiet', False) else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    handlers = {
        'analyze': cmd_analyze,
        'config': cmd_config,
    }

    try:
        return handlers[args.command](args)
    except (CLIError, BorderlineError, ValueError, KeyError, FileNotFoundError) as e:
        print(f"\nERROR: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
