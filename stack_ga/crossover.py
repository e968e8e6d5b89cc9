"""
Crossover operator for the box stacking GA.

Implements single split-point crossover. The child is never a direct splice
of its parents: the combined boxes are rebuilt through greedy construction,
so every child satisfies the strict-shrink rule.
"""

from typing import List, Tuple

import numpy as np

from .data_models import Box
from .stack_builder import BoxStack, clone_boxes


def choose_split_index(short_len: int, rng: np.random.Generator) -> int:
    """
    Pick a crossover split index.

    Args:
        short_len: Number of boxes in the shorter parent
        rng: Random number generator

    Returns:
        Index drawn uniformly from [1, short_len - 1]; when the shorter parent
        has fewer than two boxes there is no interior split and `short_len`
        is returned, so the whole shorter parent is inherited
    """
    if short_len < 2:
        return short_len
    return int(rng.integers(1, short_len))


def combine_parents(
    first: BoxStack,
    second: BoxStack,
    rng: np.random.Generator
) -> Tuple[List[Box], int]:
    """
    Build the crossover candidate list for two parents.

    Takes clones of the first `split` boxes of the shorter parent followed by
    clones of boxes [split, long_len) of the longer parent. When both parents
    have the same length, `first` is treated as the shorter one.

    Args:
        first: Parent the crossover was requested on
        second: Partner parent
        rng: Random number generator

    Returns:
        Tuple of (candidate_boxes, split_index)
    """
    if first.num_boxes <= second.num_boxes:
        shorter, longer = first, second
    else:
        shorter, longer = second, first

    split = choose_split_index(shorter.num_boxes, rng)

    candidates = clone_boxes(shorter.boxes[:split])
    candidates.extend(clone_boxes(longer.boxes[split:]))

    return candidates, split


def breed(first: BoxStack, second: BoxStack, rng: np.random.Generator) -> BoxStack:
    """
    Combine two parent stacks into a child stack.

    Args:
        first: First parent
        second: Second parent
        rng: Random number generator

    Returns:
        New child BoxStack built with roll-over allowed

    Note:
        Parents are never modified; the child owns fresh copies of every box.
    """
    candidates, _ = combine_parents(first, second, rng)
    return BoxStack.construct(candidates, allow_rollover=True)
