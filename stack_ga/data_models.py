"""
Data models for the box stacking GA.

Core data structures representing boxes, per-generation statistics and the
final result of an evolution run.
"""

from dataclasses import dataclass, field
from typing import Optional, Any, TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from .stack_builder import BoxStack


@dataclass(eq=False)
class Box:
    """
    A rectangular box with a mutable orientation.

    The footprint (the face the box rests on) is width x length; height is the
    amount the box adds to a stack. Reorienting a box permutes which physical
    dimension plays which role, so boxes are always copied before they are
    placed into a stack or candidate pool.

    Attributes:
        width: Footprint dimension along the first axis
        length: Footprint dimension along the second axis
        height: Vertical dimension
    """
    width: int
    length: int
    height: int

    @classmethod
    def from_dimensions(cls, dimensions) -> "Box":
        """
        Create a box from an input triple.

        Args:
            dimensions: Sequence of (width, height, length), the box file order

        Returns:
            New Box
        """
        width, height, length = dimensions
        return cls(width=int(width), length=int(length), height=int(height))

    @property
    def area(self) -> int:
        """Top face area of the current orientation."""
        return self.width * self.length

    @property
    def volume(self) -> int:
        return self.width * self.length * self.height

    def copy(self) -> "Box":
        """
        Create an independent copy with the same orientation.

        Returns:
            New Box whose reorientation never affects this one
        """
        return Box(width=self.width, length=self.length, height=self.height)

    def roll_over(self) -> None:
        """Roll the box onto its side (swap width and height)."""
        self.width, self.height = self.height, self.width

    def turn_sideways(self) -> None:
        """Turn the box a quarter turn (swap width and length)."""
        self.width, self.length = self.length, self.width

    def randomly_orientate(self, rng: np.random.Generator) -> None:
        """
        Apply a roll-over and/or a sideways turn, each with probability 1/2.

        Args:
            rng: Random number generator
        """
        if rng.random() < 0.5:
            self.roll_over()
        if rng.random() < 0.5:
            self.turn_sideways()

    def can_fit(self, onto: "Box", try_roll_over: bool, try_rotate: bool) -> bool:
        """
        Check whether this box fits strictly inside the top face of another.

        The orientation that fits is committed. When no orientation fits the
        box is left in the last orientation tried, which may be rolled over.

        Args:
            onto: Box this one would rest on
            try_roll_over: Also try the box rolled onto its side (once)
            try_rotate: Also try the box turned sideways

        Returns:
            True if the box (possibly reoriented) fits on `onto`
        """
        if onto.width > self.width and onto.length > self.length:
            return True
        if try_rotate and onto.width > self.length and onto.length > self.width:
            self.turn_sideways()
            return True

        if try_roll_over:
            self.roll_over()
            return self.can_fit(onto, try_roll_over=False, try_rotate=True)

        return False

    def dimension_key(self) -> tuple[int, int, int]:
        """Orientation-independent identity of the box (sorted dimensions)."""
        return tuple(sorted((self.width, self.length, self.height)))

    def is_same_box(self, other: "Box") -> bool:
        """
        Check whether two boxes are the same physical box type.

        All three sorted dimensions must match, so reoriented copies of a box
        compare equal while boxes that merely share a volume do not.
        """
        return self.dimension_key() == other.dimension_key()

    def describe(self) -> str:
        return f"{self.width} {self.length} {self.height}"


def sort_by_area(boxes: list[Box]) -> list[Box]:
    """
    Sort boxes by descending top face area.

    The sort is stable, so boxes with equal area keep their relative order.

    Args:
        boxes: Boxes to sort

    Returns:
        New sorted list (the boxes themselves are not copied)
    """
    return sorted(boxes, key=lambda box: box.area, reverse=True)


@dataclass
class GenerationStats:
    """
    Summary of one ranked generation.

    Attributes:
        generation: Generation index (0 = initial population)
        best_height: Height of the top-ranked stack
        worst_height: Height of the bottom-ranked stack
        average_height: Mean stack height
        average_boxes: Mean number of boxes per stack
        converged: True when best and worst heights are equal
        mutation_rate: Mutation rate in effect when the generation was built
    """
    generation: int
    best_height: int
    worst_height: int
    average_height: float
    average_boxes: float
    converged: bool
    mutation_rate: float

    def to_dict(self) -> dict[str, Any]:
        """
        Convert stats to a dictionary for CSV export.

        Returns:
            Dictionary with string-serializable values
        """
        return {
            "generation": self.generation,
            "best_height": self.best_height,
            "worst_height": self.worst_height,
            "average_height": f"{self.average_height:.2f}",
            "average_boxes": f"{self.average_boxes:.2f}",
            "converged": int(self.converged),
            "mutation_rate": f"{self.mutation_rate:.6g}",
        }


@dataclass
class EvolutionResult:
    """
    Outcome of a complete evolution run.

    Attributes:
        best_stack: Audited, duplicate-free winning stack
        history: Statistics for every evaluated generation
        epochs_budget: Epochs allowed by the solution budget
        epochs_used: Epochs actually consumed (resets count as epochs)
        resets: Number of diversity resets performed
        settled: True if the run stopped early on a settled population
        seed: Random seed the run was started with
        duplicates_removed: Boxes dropped from the winner by duplicate removal
    """
    best_stack: "BoxStack"
    history: list[GenerationStats] = field(default_factory=list)
    epochs_budget: int = 0
    epochs_used: int = 0
    resets: int = 0
    settled: bool = False
    seed: Optional[int] = None
    duplicates_removed: int = 0

    def to_metadata(self) -> dict[str, Any]:
        """
        Summarise the run for a YAML metadata sidecar.

        Returns:
            Dictionary of plain Python values
        """
        return {
            "seed": self.seed,
            "epochs_budget": self.epochs_budget,
            "epochs_used": self.epochs_used,
            "resets": self.resets,
            "settled": self.settled,
            "duplicates_removed": self.duplicates_removed,
            "height": self.best_stack.height,
            "num_boxes": self.best_stack.num_boxes,
        }
