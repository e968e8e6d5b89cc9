#!/usr/bin/env python3
"""
Box Stacking GA CLI - Minimal entry point.

Usage:
    python3 stack_cli.py <boxes-file> <num-solutions> [options]
    python3 stack_cli.py --help

Examples:
    # Search with the default tunables
    python3 stack_cli.py boxes.txt 100000

    # Reproducible run with custom tunables
    python3 stack_cli.py boxes.txt 100000 --config my_config.yaml --seed 7
"""

import sys
from pathlib import Path

# Add project root to path if needed
project_root = Path(__file__).parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


def main():
    """Main entry point for the stacking CLI."""
    from stack_ga.cli import main as cli_main
    sys.exit(cli_main())


if __name__ == '__main__':
    main()
