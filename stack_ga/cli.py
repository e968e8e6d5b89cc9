"""
CLI module for the box stacking GA.

Handles argument parsing, run parameter validation, and turning errors into
messages and exit codes.
"""

import argparse
import sys
import traceback
from pathlib import Path
from typing import List, Optional

from .config import ConfigValidationError, GAConfig, load_config
from .io_utils import (
    load_boxes,
    format_stack,
    save_stack_to_csv,
    save_generation_log,
    save_run_metadata
)
from .orchestration import run_evolution
from .repair import StackAuditError


EXIT_OK = 0
EXIT_ERROR = 1
EXIT_AUDIT_FAILURE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stack-ga",
        description="Search for a tall stack of boxes with a genetic algorithm",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  stack-ga boxes.txt 100000                      # Default tunables
  stack-ga boxes.txt 100000 --seed 42            # Reproducible run
  stack-ga boxes.txt 100000 --workers 4          # Breed children on 4 processes
  stack-ga boxes.txt 100000 --csv out/best.csv   # Also export the winning stack
  stack-ga boxes.txt 100000 --config my.yaml     # Custom tunables
        """
    )

    parser.add_argument('boxes_file', help='Box file: one "width height length" per line')
    parser.add_argument('num_solutions', help='Total stack constructions to perform')

    parser.add_argument('--config', '-c', default=None,
                        help='GA configuration YAML (default: packaged stack_ga_config.yaml)')
    parser.add_argument('--seed', '-s', type=int, metavar='N',
                        help='Random seed (overrides config)')
    parser.add_argument('--workers', '-w', type=int, metavar='N',
                        help='Processes used to breed children (overrides config)')
    parser.add_argument('--csv', metavar='PATH',
                        help='Export the winning stack to CSV (plus a YAML metadata sidecar)')
    parser.add_argument('--history', metavar='PATH',
                        help='Write per-generation statistics to CSV')
    parser.add_argument('--plot', metavar='PATH',
                        help='Save a side view of the winning stack as PNG')
    parser.add_argument('--quiet', '-q', action='store_true',
                        help='Only print the winning stack')

    return parser


def parse_num_solutions(value: str) -> int:
    """
    Parse the solution budget argument.

    Raises:
        ConfigValidationError: If the value is not a positive integer
    """
    try:
        num_solutions = int(value)
    except (TypeError, ValueError):
        raise ConfigValidationError(f"Invalid number of solutions: {value}")

    if num_solutions <= 0:
        raise ConfigValidationError(f"Invalid number of solutions: {value}")

    return num_solutions


def resolve_config(args: argparse.Namespace) -> GAConfig:
    """Load the configuration file and apply command-line overrides."""
    config = load_config(args.config)
    return config.with_overrides(random_seed=args.seed, workers=args.workers)


def run(args: argparse.Namespace) -> int:
    """
    Execute a run from parsed arguments.

    Args:
        args: Parsed command-line arguments

    Returns:
        Process exit code
    """
    verbose = not args.quiet

    num_solutions = parse_num_solutions(args.num_solutions)
    config = resolve_config(args)

    # fail fast before reading boxes or searching
    config.epochs_for_budget(num_solutions)

    boxes = load_boxes(args.boxes_file)
    if not boxes:
        raise ConfigValidationError(f"No valid boxes found in {args.boxes_file}")

    result = run_evolution(boxes, config, num_solutions, verbose=verbose)

    if verbose:
        print()
        print("Winning stack (top to bottom: width length height running_height):")
    print(format_stack(result.best_stack))

    if args.csv:
        csv_path = save_stack_to_csv(result.best_stack, args.csv, overwrite=True)
        meta_path = save_run_metadata(
            result,
            Path(csv_path).with_suffix('.yaml'),
            extra={
                'boxes_file': str(args.boxes_file),
                'num_solutions': num_solutions,
                'config': config.to_dict(),
            }
        )
        if verbose:
            print(f"\nStack CSV: {csv_path}")
            print(f"Run metadata: {meta_path}")

    if args.history:
        history_path = save_generation_log(result.history, args.history)
        if verbose:
            print(f"Generation log: {history_path}")

    if args.plot:
        from .visualization_utils import plot_stack
        plot_path = plot_stack(result.best_stack, args.plot)
        if verbose:
            print(f"Stack plot: {plot_path}")

    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the box stacking CLI.

    Args:
        argv: Argument list (defaults to sys.argv[1:])

    Returns:
        Process exit code
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        return run(args)
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        return EXIT_ERROR
    except ConfigValidationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_ERROR
    except OSError as e:
        print(f"I/O error: {e}", file=sys.stderr)
        return EXIT_ERROR
    except StackAuditError as e:
        print(f"Stack audit failed: {e}", file=sys.stderr)
        traceback.print_exc()
        return EXIT_AUDIT_FAILURE
