"""
Orchestration module for the box stacking GA.

Implements the population manager: initial generation, steady-state
transitions with elitism, diversity resets, settle detection and the
terminal audit of the winning stack.
"""

from concurrent.futures import ProcessPoolExecutor
from typing import List, Optional, Tuple
import numpy as np

from .config import GAConfig
from .crossover import breed
from .data_models import Box, GenerationStats, EvolutionResult
from .mutation import mutate
from .repair import remove_duplicates, audit_stack
from .stack_builder import BoxStack, clone_boxes, randomise_boxes, rank_generation


# Master box list of a worker process, set once by the pool initializer
_WORKER_BOXES: List[Box] = []


def biased_index(max_index: int, exponent: float, rng: np.random.Generator) -> int:
    """
    Draw an index in [0, max_index) skewed toward 0.

    Args:
        max_index: Number of candidates
        exponent: Skew exponent (> 1 favours low indices)
        rng: Random number generator

    Returns:
        floor(max_index * u ** exponent) for u uniform in [0, 1)
    """
    return int(max_index * rng.random() ** exponent)


def select_two_parents(
    num_candidates: int,
    exponent: float,
    rng: np.random.Generator
) -> Tuple[int, int]:
    """
    Select two distinct parent indices from a fitness-ranked range.

    Args:
        num_candidates: Size of the ranked range to draw from
        exponent: Selection bias exponent
        rng: Random number generator

    Returns:
        Tuple of (index_a, index_b), index_a != index_b

    Raises:
        ValueError: If fewer than 2 candidates available
    """
    if num_candidates < 2:
        raise ValueError(f"Need at least 2 parents for crossover, got {num_candidates}")

    idx_a = biased_index(num_candidates, exponent, rng)
    idx_b = biased_index(num_candidates, exponent, rng)
    while idx_b == idx_a:
        idx_b = biased_index(num_candidates, exponent, rng)

    return idx_a, idx_b


def produce_child(
    parent_a: BoxStack,
    parent_b: BoxStack,
    master_boxes: List[Box],
    apply_mutation: bool,
    seed: int
) -> BoxStack:
    """
    Breed one child and optionally mutate it.

    Each child uses its own generator seeded by the caller, so children are
    independent of each other and of the order they are produced in.

    Args:
        parent_a: First parent
        parent_b: Second parent
        master_boxes: Master box list; the mutation pool is a fresh clone of it
        apply_mutation: Whether to apply gap-insertion mutation
        seed: Seed for this child's generator

    Returns:
        New child BoxStack
    """
    rng = np.random.default_rng(seed)
    child = breed(parent_a, parent_b, rng)
    if apply_mutation:
        mutate(child, clone_boxes(master_boxes))
    return child


def _init_worker(master_boxes: List[Box]) -> None:
    global _WORKER_BOXES
    _WORKER_BOXES = master_boxes


def _produce_child_task(args: Tuple[BoxStack, BoxStack, bool, int]) -> BoxStack:
    parent_a, parent_b, apply_mutation, seed = args
    return produce_child(parent_a, parent_b, _WORKER_BOXES, apply_mutation, seed)


class PopulationManager:
    """
    Drives the evolutionary search over generations of box stacks.

    The manager owns the master box list (read-only after construction), the
    current ranked generation and the convergence bookkeeping. All randomness
    comes from the injected generator.
    """

    def __init__(
        self,
        boxes: List[Box],
        config: GAConfig,
        rng: np.random.Generator,
        verbose: bool = False,
        progress_interval: int = 10
    ):
        """
        Initialize the population manager.

        Args:
            boxes: Master box list (copied; never mutated)
            config: GA tunables
            rng: Random number generator
            verbose: Print progress while running
            progress_interval: Generations between progress lines
        """
        if not boxes:
            raise ValueError("Cannot evolve stacks without any boxes")

        self.boxes = clone_boxes(boxes)
        self.config = config
        self.rng = rng
        self.verbose = verbose
        self.progress_interval = progress_interval

        self.mutation_rate = config.mutation_rate
        self.generation: List[BoxStack] = []
        self.history: List[GenerationStats] = []
        self.peak: Optional[int] = None
        self.same_peak_count = 0
        self.resets = 0

        self._executor: Optional[ProcessPoolExecutor] = None

    @property
    def settled(self) -> bool:
        """True once enough converged generations have repeated the same peak."""
        return self.same_peak_count >= self.config.settle_threshold

    def build_population(self, size: int) -> List[BoxStack]:
        """
        Build fresh stacks from randomly oriented, shuffled box clones.

        Args:
            size: Number of stacks to build

        Returns:
            Ranked list of new stacks
        """
        stacks = [
            BoxStack.construct(randomise_boxes(self.boxes, self.rng), allow_rollover=False)
            for _ in range(size)
        ]
        return rank_generation(stacks)

    def initialise(self) -> GenerationStats:
        """
        Create and evaluate the initial generation.

        Returns:
            Statistics of generation 0
        """
        self.generation = self.build_population(self.config.population_size)
        return self.evaluate_generation(0)

    def evaluate_generation(self, index: int) -> GenerationStats:
        """
        Record statistics of the current generation and update settle counters.

        A generation has converged when its best and worst heights are equal.
        Consecutive converged generations with the same peak advance the settle
        counter; a new peak restarts it.

        Args:
            index: Generation index for the record

        Returns:
            GenerationStats for the current generation
        """
        heights = np.array([stack.height for stack in self.generation])
        counts = np.array([stack.num_boxes for stack in self.generation])

        best_height = int(self.generation[0].height)
        worst_height = int(self.generation[-1].height)
        converged = best_height == worst_height

        if converged:
            if self.peak == best_height:
                self.same_peak_count += 1
            else:
                self.peak = best_height
                self.same_peak_count = 0

        stats = GenerationStats(
            generation=index,
            best_height=best_height,
            worst_height=worst_height,
            average_height=float(heights.mean()),
            average_boxes=float(counts.mean()),
            converged=converged,
            mutation_rate=self.mutation_rate,
        )
        self.history.append(stats)
        return stats

    def plan_offspring(self) -> List[Tuple[BoxStack, BoxStack, bool, int]]:
        """
        Draw parents, mutation flags and seeds for every child slot.

        Returns:
            List of (parent_a, parent_b, apply_mutation, seed) tasks
        """
        survivors = self.config.survivors
        exponent = self.config.selection_bias_exponent

        tasks = []
        for _ in range(self.config.offspring):
            idx_a, idx_b = select_two_parents(survivors, exponent, self.rng)
            apply_mutation = bool(self.rng.random() < self.mutation_rate)
            seed = int(self.rng.integers(0, 2**32))
            tasks.append((self.generation[idx_a], self.generation[idx_b], apply_mutation, seed))

        return tasks

    def produce_offspring(self, tasks: List[Tuple[BoxStack, BoxStack, bool, int]]) -> List[BoxStack]:
        """
        Produce all children of a generation.

        Children come back in task order whether they were produced in-process
        or on the worker pool.
        """
        if self._executor is None:
            return [
                produce_child(parent_a, parent_b, self.boxes, apply_mutation, seed)
                for parent_a, parent_b, apply_mutation, seed in tasks
            ]

        chunksize = max(1, len(tasks) // (self.config.workers * 4))
        return list(self._executor.map(_produce_child_task, tasks, chunksize=chunksize))

    def evolve_generation(self) -> List[BoxStack]:
        """
        Replace the current generation with children plus elites.

        Returns:
            The new ranked generation
        """
        children = self.produce_offspring(self.plan_offspring())
        elites = self.generation[:self.config.survivors]

        self.generation = rank_generation(children + elites)
        return self.generation

    def reset_population(self) -> List[BoxStack]:
        """
        Replace most of a converged population with freshly built stacks.

        The top-ranked stacks that are not replaced survive, and the mutation
        rate decays.

        Returns:
            The new ranked generation
        """
        replacements = self.config.reset_replacements
        keep = self.config.population_size - replacements

        fresh = self.build_population(replacements)
        self.generation = rank_generation(fresh + self.generation[:keep])

        self.mutation_rate *= self.config.mutation_decay
        self.resets += 1
        return self.generation

    def finalise(self) -> Tuple[BoxStack, int]:
        """
        Take the best stack, drop duplicate boxes and audit it.

        Returns:
            Tuple of (best_stack, duplicates_removed)

        Raises:
            StackAuditError: If the winning stack breaks the strict-shrink rule
        """
        best = self.generation[0].copy()
        removed = remove_duplicates(best)
        audit_stack(best)
        return best, removed

    def run(self, num_solutions: int, seed: Optional[int] = None) -> EvolutionResult:
        """
        Run the full search for a solution budget.

        Args:
            num_solutions: Total stack constructions allowed
            seed: Seed recorded in the result (informational)

        Returns:
            EvolutionResult with the audited winning stack

        Raises:
            ConfigValidationError: If the budget is below the population size
            StackAuditError: If the winning stack fails the audit
        """
        epochs = self.config.epochs_for_budget(num_solutions)

        if self.config.workers > 1:
            self._executor = ProcessPoolExecutor(
                max_workers=self.config.workers,
                initializer=_init_worker,
                initargs=(self.boxes,)
            )

        try:
            stats = self.initialise()
            self._report(stats, epochs)
            epochs_used = 1
            generation = 1

            while epochs_used < epochs:
                self.evolve_generation()
                epochs_used += 1
                stats = self.evaluate_generation(generation)
                self._report(stats, epochs)

                if stats.converged and epochs_used < epochs:
                    self.reset_population()
                    epochs_used += 1

                if self.settled:
                    if self.verbose:
                        print(f"  Population settled at height {self.peak} "
                              f"after {epochs_used}/{epochs} epochs")
                    break

                generation += 1
        finally:
            if self._executor is not None:
                self._executor.shutdown()
                self._executor = None

        best, removed = self.finalise()

        return EvolutionResult(
            best_stack=best,
            history=self.history,
            epochs_budget=epochs,
            epochs_used=epochs_used,
            resets=self.resets,
            settled=self.settled,
            seed=seed,
            duplicates_removed=removed,
        )

    def _report(self, stats: GenerationStats, epochs: int) -> None:
        if not self.verbose:
            return
        if stats.generation % self.progress_interval != 0 and not stats.converged:
            return
        print(
            f"  Progress: generation {stats.generation}/{epochs - 1} "
            f"max height: {stats.best_height} min height: {stats.worst_height} "
            f"average height: {stats.average_height:.1f} "
            f"average boxes: {stats.average_boxes:.1f}"
        )


def run_evolution(
    boxes: List[Box],
    config: GAConfig,
    num_solutions: int,
    verbose: bool = True
) -> EvolutionResult:
    """
    Set up the generator and run the population manager.

    Args:
        boxes: Master box list
        config: GA tunables
        num_solutions: Solution budget
        verbose: Print banners and progress

    Returns:
        EvolutionResult of the run
    """
    epochs = config.epochs_for_budget(num_solutions)

    seed = config.random_seed
    if seed is None:
        seed = int(np.random.randint(0, 2**31))
    rng = np.random.default_rng(seed)

    if verbose:
        print("=" * 70)
        print("BOX STACKING GA")
        print("=" * 70)
        print(f"Boxes: {len(boxes)}")
        print(f"Population size: {config.population_size}")
        print(f"Epochs: {epochs}")
        print(f"Workers: {config.workers}")
        print(f"Random seed: {seed}")
        print()

    manager = PopulationManager(boxes, config, rng, verbose=verbose)
    result = manager.run(num_solutions, seed=seed)

    if verbose:
        print()
        print("=" * 70)
        print("SUMMARY")
        print("=" * 70)
        print(f"Epochs used: {result.epochs_used}/{result.epochs_budget}")
        print(f"Diversity resets: {result.resets}")
        print(f"Settled early: {'yes' if result.settled else 'no'}")
        print(f"Duplicates removed: {result.duplicates_removed}")

    return result
