"""
Box Stacking GA

This package searches for a tall stack of boxes, each strictly smaller than
the one beneath it on both footprint axes, using a genetic algorithm over
greedily constructed stacks.

Key Features:
- Free reorientation of boxes (sideways turn, roll-over) during fit tests
- Greedy, non-backtracking stack construction
- Split-point crossover re-validated through construction
- Gap-insertion mutation
- Elitism, biased parent selection, diversity resets and early settling
- Optional process-pool offspring production with seed-stable results

Modules:
- data_models: Box, GenerationStats, EvolutionResult
- stack_builder: BoxStack and greedy construction
- crossover: Split-point crossover
- mutation: Gap-insertion mutation
- repair: Duplicate removal and structural audit
- orchestration: Population manager and run loop
- config: GA tunables and YAML loading
- io_utils: Box file parsing, stack export, generation log
- visualization_utils: Side view of a stack
- cli: Command-line interface
"""

__version__ = "0.1.0"

from .data_models import Box, GenerationStats, EvolutionResult
from .stack_builder import BoxStack
from .config import GAConfig, ConfigValidationError
from .repair import StackAuditError
from .orchestration import PopulationManager

__all__ = [
    "Box",
    "BoxStack",
    "GenerationStats",
    "EvolutionResult",
    "GAConfig",
    "ConfigValidationError",
    "StackAuditError",
    "PopulationManager",
]
