#!/usr/bin/env python3
"""
Test runner for the box stacking GA
"""

import unittest
import sys
from pathlib import Path

# Add current directory to path for imports
sys.path.append(str(Path(__file__).parent))

EXAMPLE_BOXES = Path(__file__).parent / "data" / "example_boxes.txt"


def run_all_tests():
    """Run all test modules"""
    loader = unittest.TestLoader()
    suite = loader.discover(
        start_dir=str(Path(__file__).parent / "tests" / "test_stack_ga"),
        top_level_dir=str(Path(__file__).parent / "tests" / "test_stack_ga")
    )

    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(suite)

    return result.wasSuccessful()


def run_integration_test():
    """Run a basic integration test"""
    print("\n" + "=" * 50)
    print("INTEGRATION TEST")
    print("=" * 50)

    try:
        from stack_ga.config import GAConfig
        from stack_ga.io_utils import load_boxes, format_stack
        from stack_ga.orchestration import run_evolution
        from stack_ga.repair import audit_stack

        print(f"Loading boxes from {EXAMPLE_BOXES}...")
        boxes = load_boxes(EXAMPLE_BOXES)

        print("Running evolution...")
        config = GAConfig(population_size=100, random_seed=0)
        result = run_evolution(boxes, config, 3000, verbose=False)

        print(format_stack(result.best_stack))
        audit_stack(result.best_stack)

        # Basic validation
        success = (
            result.best_stack.num_boxes > 0 and
            result.epochs_used <= result.epochs_budget
        )

        if success:
            print("✓ Integration test PASSED")
        else:
            print("✗ Integration test FAILED")

        return success

    except Exception as e:
        print(f"✗ Integration test FAILED: {e}")
        import traceback
        traceback.print_exc()
        return False


if __name__ == "__main__":
    print("Running Box Stacking GA Tests")
    print("=" * 60)

    # Run unit tests
    print("Running unit tests...")
    unit_success = run_all_tests()

    # Run integration test
    integration_success = run_integration_test()

    # Summary
    print("\n" + "=" * 60)
    print("TEST SUMMARY")
    print("=" * 60)
    print(f"Unit tests: {'PASSED' if unit_success else 'FAILED'}")
    print(f"Integration test: {'PASSED' if integration_success else 'FAILED'}")

    overall_success = unit_success and integration_success
    print(f"Overall: {'PASSED' if overall_success else 'FAILED'}")

    sys.exit(0 if overall_success else 1)
