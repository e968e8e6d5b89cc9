"""
Configuration for the box stacking GA.

Handles the immutable GA tunables, YAML loading and validation.
"""

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union
import yaml


DEFAULT_CONFIG_PATH = Path(__file__).parent / "stack_ga_config.yaml"


class ConfigValidationError(Exception):
    """Raised when the GA configuration or run parameters are invalid."""
    pass


@dataclass(frozen=True)
class GAConfig:
    """
    Tunables of the evolutionary search.

    Attributes:
        population_size: Stacks per generation (also the minimum solution budget)
        survival_rate: Fraction of top-ranked stacks carried over unchanged;
            parents are drawn from this elite range
        mutation_rate: Probability that a child is mutated
        mutation_decay: Multiplier applied to the mutation rate on each reset
        reset_population_removal_rate: Fraction of a converged population
            replaced by freshly built stacks
        selection_bias_exponent: Exponent of the biased parent index (> 1)
        settle_threshold: Consecutive same-peak resets before stopping early
        workers: Processes used to produce offspring (1 = in-process)
        random_seed: Seed for the run (None draws one)
    """
    population_size: int = 1000
    survival_rate: float = 0.2
    mutation_rate: float = 0.1
    mutation_decay: float = 0.9
    reset_population_removal_rate: float = 0.99
    selection_bias_exponent: float = 1.1
    settle_threshold: int = 200
    workers: int = 1
    random_seed: Optional[int] = None

    def __post_init__(self):
        """Validate tunables."""
        validate_config(self)

    @property
    def survivors(self) -> int:
        """Number of elites kept each generation."""
        return int(self.population_size * self.survival_rate)

    @property
    def offspring(self) -> int:
        """Number of children bred each generation."""
        return self.population_size - self.survivors

    @property
    def reset_replacements(self) -> int:
        """Number of stacks rebuilt on a diversity reset."""
        return int(self.population_size * self.reset_population_removal_rate)

    def epochs_for_budget(self, num_solutions: int) -> int:
        """
        Number of generations a solution budget pays for.

        Args:
            num_solutions: Total stack constructions allowed

        Returns:
            num_solutions // population_size

        Raises:
            ConfigValidationError: If the budget is below the population size
        """
        if isinstance(num_solutions, bool) or not isinstance(num_solutions, int):
            raise ConfigValidationError(
                f"Number of solutions must be an integer, got: {num_solutions!r}"
            )
        if num_solutions < self.population_size:
            raise ConfigValidationError(
                f"Number of solutions must be >= the population size "
                f"({self.population_size}), got: {num_solutions}"
            )
        return num_solutions // self.population_size

    def with_overrides(self, **overrides: Any) -> "GAConfig":
        """
        Create a copy with some fields replaced.

        None values are ignored so unset CLI options keep the file values.

        Returns:
            New validated GAConfig
        """
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def _require_int(name: str, value: Any, minimum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
        raise ConfigValidationError(
            f"'{name}' must be an integer >= {minimum}, got: {value!r}"
        )


def _require_fraction(name: str, value: Any, low: float, high: float) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) \
       or not low <= value <= high:
        raise ConfigValidationError(
            f"'{name}' must be a number in [{low}, {high}], got: {value!r}"
        )


def validate_config(config: GAConfig) -> None:
    """
    Validate GA tunables.

    Args:
        config: Configuration to check

    Raises:
        ConfigValidationError: If any tunable is out of range
    """
    _require_int('population_size', config.population_size, 2)
    _require_fraction('survival_rate', config.survival_rate, 0.0, 1.0)
    _require_fraction('mutation_rate', config.mutation_rate, 0.0, 1.0)
    _require_fraction('mutation_decay', config.mutation_decay, 0.0, 1.0)
    _require_fraction(
        'reset_population_removal_rate', config.reset_population_removal_rate, 0.0, 1.0
    )
    _require_int('settle_threshold', config.settle_threshold, 1)
    _require_int('workers', config.workers, 1)

    exponent = config.selection_bias_exponent
    if isinstance(exponent, bool) or not isinstance(exponent, (int, float)) or exponent <= 1:
        raise ConfigValidationError(
            f"'selection_bias_exponent' must be a number > 1, got: {exponent!r}"
        )

    survivors = int(config.population_size * config.survival_rate)
    if survivors < 2:
        raise ConfigValidationError(
            f"population_size * survival_rate must keep at least 2 parents, "
            f"got {survivors}"
        )
    if survivors >= config.population_size:
        raise ConfigValidationError(
            "survival_rate must leave room for at least one child per generation"
        )

    if config.random_seed is not None:
        _require_int('random_seed', config.random_seed, 0)


def config_from_dict(data: Dict[str, Any]) -> GAConfig:
    """
    Build a GAConfig from a parsed YAML mapping.

    Args:
        data: Mapping of tunable names to values

    Returns:
        Validated GAConfig

    Raises:
        ConfigValidationError: If the mapping has unknown keys or bad values
    """
    if not isinstance(data, dict):
        raise ConfigValidationError("Configuration must be a mapping of tunables")

    known = {f.name for f in fields(GAConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigValidationError(f"Unknown configuration keys: {', '.join(unknown)}")

    return GAConfig(**data)


def load_config(config_path: Union[str, Path, None] = None) -> GAConfig:
    """
    Load GA configuration from a YAML file.

    Args:
        config_path: Path to config YAML file (defaults to the packaged one)

    Returns:
        Validated GAConfig

    Raises:
        FileNotFoundError: If config file doesn't exist
        ConfigValidationError: If config is invalid
    """
    config_file = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH

    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_file}")

    try:
        with open(config_file, 'r') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigValidationError(f"Invalid YAML in configuration file: {e}")

    if data is None:
        return GAConfig()

    return config_from_dict(data)
