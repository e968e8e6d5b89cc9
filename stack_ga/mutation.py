"""
Mutation operator for the box stacking GA.

Implements gap-insertion mutation: boxes from a pool are slotted into gaps
of an existing stack wherever a gap is wide enough on both axes.
"""

from typing import List

from .data_models import Box
from .stack_builder import BoxStack


def has_room_between(lower: Box, upper: Box) -> bool:
    """
    Check whether an intermediate box could fit between two stacked boxes.

    Args:
        lower: Box underneath
        upper: Box on top

    Returns:
        True if both footprint dimensions differ by more than one
    """
    return lower.width - upper.width > 1 and lower.length - upper.length > 1


def mutate(stack: BoxStack, pool: List[Box]) -> int:
    """
    Insert pool boxes into gaps of a stack.

    Walks adjacent pairs (prev, curr) bottom to top. For every gap with room,
    the pool is scanned for the first box that fits on `prev` (any
    orientation) and that `curr` fits on without being reoriented. That box
    is inserted and becomes the lower box of the next gap examined.

    Pool boxes whose area is at least the area of the box underneath the gap
    can never fit higher up, so they are removed from the pool for good.
    Inserted boxes are removed from the pool as well.

    Args:
        stack: Stack to mutate in place
        pool: Candidate boxes (a private clone; it shrinks as a side effect)

    Returns:
        Number of boxes inserted
    """
    if stack.num_boxes < 2:
        return 0

    inserted = 0
    prev = stack.boxes[0]
    i = 1

    while i < stack.num_boxes:
        curr = stack.boxes[i]

        if not has_room_between(prev, curr):
            prev = curr
            i += 1
            continue

        too_big = []
        chosen = None
        for box in pool:
            if box.area >= prev.area:
                too_big.append(box)
                continue

            if box.can_fit(prev, try_roll_over=True, try_rotate=True) and \
               curr.can_fit(box, try_roll_over=False, try_rotate=False):
                chosen = box
                break

        removed = {id(box) for box in too_big}
        if chosen is not None:
            removed.add(id(chosen))
            stack.insert(i, chosen)
            inserted += 1
            curr = chosen
        pool[:] = [box for box in pool if id(box) not in removed]

        prev = curr
        i += 1

    return inserted
