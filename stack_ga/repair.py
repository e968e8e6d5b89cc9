"""
Repair and validation for the box stacking GA.

Provides duplicate removal (one use per physical box) and the structural
audit run on the winning stack.
"""

from typing import List, Optional, Tuple

from .data_models import Box
from .stack_builder import BoxStack


class StackAuditError(Exception):
    """Raised when a stack breaks the strict-shrink rule."""

    def __init__(self, message: str, lower: Box, upper: Box, stack_lines: List[str]):
        super().__init__(message)
        self.lower = lower
        self.upper = upper
        self.stack_lines = stack_lines


def find_duplicates(stack: BoxStack) -> List[Box]:
    """
    Find the boxes that duplicate another box in the stack.

    For every pair with equal volume that is the same physical box, the
    shorter instance is marked (the upper one when heights tie), so the
    tallest use of each box survives.

    Args:
        stack: Stack to scan

    Returns:
        Boxes to remove, each listed once
    """
    marked = []
    marked_ids = set()
    volumes = [box.volume for box in stack.boxes]

    for i, box_one in enumerate(stack.boxes):
        for j in range(i):
            if volumes[j] != volumes[i]:
                continue
            box_two = stack.boxes[j]
            if not box_one.is_same_box(box_two):
                continue

            loser = box_two if box_one.height > box_two.height else box_one
            if id(loser) not in marked_ids:
                marked_ids.add(id(loser))
                marked.append(loser)

    return marked


def remove_duplicates(stack: BoxStack) -> int:
    """
    Remove duplicate uses of the same physical box from a stack.

    Removals are applied after the whole stack has been scanned. Removing a
    box never breaks the strict-shrink rule because fit is transitive.

    Args:
        stack: Stack to repair in place

    Returns:
        Number of boxes removed
    """
    duplicates = find_duplicates(stack)
    if not duplicates:
        return 0

    duplicate_ids = {id(box) for box in duplicates}
    stack.boxes = [box for box in stack.boxes if id(box) not in duplicate_ids]
    stack.recompute_height()

    return len(duplicates)


def find_violation(stack: BoxStack) -> Tuple[int, Optional[Box], Optional[Box]]:
    """
    Locate the first adjacent pair that breaks the strict-shrink rule.

    Returns:
        Tuple of (upper_index, lower_box, upper_box), or (-1, None, None)
    """
    for i in range(1, stack.num_boxes):
        lower = stack.boxes[i - 1]
        upper = stack.boxes[i]
        if upper.width >= lower.width or upper.length >= lower.length:
            return i, lower, upper
    return -1, None, None


def audit_stack(stack: BoxStack) -> None:
    """
    Assert the no-touching-faces rule on every adjacent pair.

    Args:
        stack: Stack to audit

    Raises:
        StackAuditError: If any box is not strictly smaller than the one below
    """
    index, lower, upper = find_violation(stack)
    if index < 0:
        return

    stack_lines = stack.describe_lines()
    message = (
        f"Box stack does not comply at position {index}: "
        f"box ({upper.describe()}) rests on ({lower.describe()})\n"
        "Full stack (top to bottom):\n  " + "\n  ".join(stack_lines)
    )
    raise StackAuditError(message, lower, upper, stack_lines)
