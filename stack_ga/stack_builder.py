"""
Stack construction for the box stacking GA.

A BoxStack is one individual of the population: an ordered list of boxes,
bottom to top, in which every box fits strictly inside the footprint of the
box beneath it.
"""

from typing import List, Optional

import numpy as np

from .data_models import Box, sort_by_area


class BoxStack:
    """
    Ordered stack of boxes, bottom to top, with its running height.

    Stacks own their boxes exclusively. Use `BoxStack.construct` to build a
    valid stack from candidates; the constructor itself trusts its input.
    """

    def __init__(self, boxes: Optional[List[Box]] = None):
        self.boxes: List[Box] = []
        self.height = 0
        for box in boxes or []:
            self._push(box)

    @classmethod
    def construct(cls, candidates: List[Box], allow_rollover: bool) -> "BoxStack":
        """
        Greedily build a stack from candidate boxes.

        Candidates are sorted by descending footprint area, the largest becomes
        the base, and each remaining candidate is placed on the current top if
        it can be made to fit. Candidates that do not fit are skipped and never
        reconsidered.

        Args:
            candidates: Boxes to stack (owned by the new stack; pass copies)
            allow_rollover: Also try rolling candidates onto their side

        Returns:
            New BoxStack (empty if there are no candidates)
        """
        stack = cls()
        ordered = sort_by_area(candidates)
        if not ordered:
            return stack

        top = ordered[0]
        stack._push(top)

        for box in ordered[1:]:
            if not box.can_fit(top, try_roll_over=allow_rollover, try_rotate=True):
                continue
            stack._push(box)
            top = box

        return stack

    def _push(self, box: Box) -> None:
        self.boxes.append(box)
        self.height += box.height

    def insert(self, index: int, box: Box) -> None:
        """Insert a box at `index` and account for its height."""
        self.boxes.insert(index, box)
        self.height += box.height

    def recompute_height(self) -> int:
        self.height = sum(box.height for box in self.boxes)
        return self.height

    @property
    def num_boxes(self) -> int:
        return len(self.boxes)

    def __len__(self) -> int:
        return len(self.boxes)

    @property
    def rank_key(self) -> tuple[int, int]:
        """Sort key: taller first, then more boxes first."""
        return (-self.height, -self.num_boxes)

    def ranks_ahead_of(self, other: "BoxStack") -> bool:
        return self.rank_key < other.rank_key

    def copy(self) -> "BoxStack":
        """
        Create a deep copy of this stack.

        Returns:
            New BoxStack holding copies of every box
        """
        return BoxStack(clone_boxes(self.boxes))

    def breed(self, partner: "BoxStack", rng: np.random.Generator) -> "BoxStack":
        """Crossover with `partner`; see `crossover.breed`."""
        from .crossover import breed
        return breed(self, partner, rng)

    def mutate(self, pool: List[Box]) -> int:
        """Gap-insertion mutation from `pool`; see `mutation.mutate`."""
        from .mutation import mutate
        return mutate(self, pool)

    def describe_lines(self) -> List[str]:
        """
        Render the stack top to bottom.

        Returns:
            One "width length height running_total" line per box
        """
        lines = []
        running_total = 0
        for box in reversed(self.boxes):
            running_total += box.height
            lines.append(f"{box.width} {box.length} {box.height} {running_total}")
        return lines

    def __repr__(self) -> str:
        return f"BoxStack(height={self.height}, num_boxes={self.num_boxes})"


def clone_boxes(boxes: List[Box]) -> List[Box]:
    """
    Deep copy a list of boxes.

    Args:
        boxes: Boxes to copy

    Returns:
        New list of independent Box copies, in the same order
    """
    return [box.copy() for box in boxes]


def randomise_boxes(boxes: List[Box], rng: np.random.Generator) -> List[Box]:
    """
    Clone boxes, randomly orient each clone and shuffle the result.

    Args:
        boxes: Master box list (left untouched)
        rng: Random number generator

    Returns:
        New list of randomly oriented copies in random order
    """
    randomised = clone_boxes(boxes)
    for box in randomised:
        box.randomly_orientate(rng)
    order = rng.permutation(len(randomised))
    return [randomised[i] for i in order]


def rank_generation(stacks: List[BoxStack]) -> List[BoxStack]:
    """
    Rank stacks by descending height, ties broken by descending box count.

    Args:
        stacks: Stacks to rank

    Returns:
        New stably sorted list, fittest first
    """
    return sorted(stacks, key=lambda stack: stack.rank_key)
