"""
Tests for GA operations: crossover and gap-insertion mutation.
"""

import unittest
import numpy as np

from stack_ga.data_models import Box
from stack_ga.crossover import breed, choose_split_index, combine_parents
from stack_ga.mutation import mutate, has_room_between
from stack_ga.repair import audit_stack
from stack_ga.stack_builder import BoxStack, clone_boxes


def random_boxes(rng, count=15, high=15):
    return [Box(*rng.integers(1, high, size=3).tolist()) for _ in range(count)]


def dims(stack):
    return [(box.width, box.length, box.height) for box in stack.boxes]


class TestCrossover(unittest.TestCase):
    """Test split-point crossover."""

    def setUp(self):
        """Set up test parents."""
        rng = np.random.default_rng(42)
        self.master = random_boxes(rng)
        self.parent_a = BoxStack.construct(clone_boxes(self.master), allow_rollover=True)
        self.parent_b = BoxStack.construct(
            [box.copy() for box in reversed(self.master)], allow_rollover=False
        )

    def test_split_index_range(self):
        rng = np.random.default_rng(0)
        splits = {choose_split_index(5, rng) for _ in range(500)}

        self.assertEqual(splits, {1, 2, 3, 4})

    def test_split_index_for_tiny_parents(self):
        rng = np.random.default_rng(0)

        self.assertEqual(choose_split_index(1, rng), 1)
        self.assertEqual(choose_split_index(0, rng), 0)
        self.assertEqual(choose_split_index(2, rng), 1)

    def test_combine_parents_layout(self):
        """Head of the shorter parent, tail of the longer parent."""
        short = BoxStack([Box(9, 9, 1), Box(8, 8, 2), Box(7, 7, 3)])
        long = BoxStack([Box(20, 20, 1), Box(19, 19, 2), Box(18, 18, 3),
                         Box(17, 17, 4), Box(16, 16, 5)])

        candidates, split = combine_parents(long, short, np.random.default_rng(1))

        self.assertGreaterEqual(split, 1)
        self.assertLessEqual(split, 2)
        expected = dims(short)[:split] + dims(long)[split:]
        self.assertEqual([(b.width, b.length, b.height) for b in candidates], expected)

        # candidates are clones
        for box in candidates:
            self.assertFalse(any(box is other for other in short.boxes + long.boxes))

    def test_equal_length_uses_first_as_shorter(self):
        first = BoxStack([Box(9, 9, 1), Box(8, 8, 1), Box(7, 7, 1)])
        second = BoxStack([Box(6, 6, 2), Box(5, 5, 2), Box(4, 4, 2)])

        candidates, split = combine_parents(first, second, np.random.default_rng(3))

        expected = dims(first)[:split] + dims(second)[split:]
        self.assertEqual([(b.width, b.length, b.height) for b in candidates], expected)

    def test_breed_is_deterministic(self):
        child_1 = breed(self.parent_a, self.parent_b, np.random.default_rng(7))
        child_2 = breed(self.parent_a, self.parent_b, np.random.default_rng(7))

        self.assertEqual(dims(child_1), dims(child_2))
        self.assertEqual(child_1.height, child_2.height)

    def test_breed_method_matches_function(self):
        child_1 = self.parent_a.breed(self.parent_b, np.random.default_rng(9))
        child_2 = breed(self.parent_a, self.parent_b, np.random.default_rng(9))

        self.assertEqual(dims(child_1), dims(child_2))

    def test_breed_leaves_parents_untouched(self):
        before_a = dims(self.parent_a)
        before_b = dims(self.parent_b)

        child = breed(self.parent_a, self.parent_b, np.random.default_rng(1))

        self.assertEqual(dims(self.parent_a), before_a)
        self.assertEqual(dims(self.parent_b), before_b)
        for box in child.boxes:
            self.assertFalse(any(box is other for other in self.parent_a.boxes))
            self.assertFalse(any(box is other for other in self.parent_b.boxes))

    def test_children_always_pass_audit(self):
        rng = np.random.default_rng(123)

        for _ in range(100):
            master = random_boxes(rng)
            parent_a = BoxStack.construct(clone_boxes(master), allow_rollover=False)
            parent_b = BoxStack.construct(clone_boxes(master[::-1]), allow_rollover=True)

            child = breed(parent_a, parent_b, rng)
            audit_stack(child)


class TestMutation(unittest.TestCase):
    """Test gap-insertion mutation."""

    def test_has_room_between(self):
        self.assertTrue(has_room_between(Box(10, 10, 1), Box(2, 2, 1)))
        self.assertFalse(has_room_between(Box(3, 10, 1), Box(2, 2, 1)))
        self.assertFalse(has_room_between(Box(10, 3, 1), Box(2, 2, 1)))

    def test_inserts_into_gap(self):
        stack = BoxStack([Box(10, 10, 1), Box(2, 2, 1)])
        pool = [Box(20, 20, 1), Box(5, 5, 3)]

        inserted = mutate(stack, pool)

        self.assertEqual(inserted, 1)
        self.assertEqual(dims(stack), [(10, 10, 1), (5, 5, 3), (2, 2, 1)])
        self.assertEqual(stack.height, 5)
        # oversized box dropped, inserted box consumed
        self.assertEqual(pool, [])
        audit_stack(stack)

    def test_no_room_leaves_stack_and_pool(self):
        stack = BoxStack([Box(3, 3, 1), Box(2, 2, 1)])
        pool = [Box(1, 1, 1)]

        self.assertEqual(mutate(stack, pool), 0)
        self.assertEqual(stack.num_boxes, 2)
        self.assertEqual(len(pool), 1)

    def test_upper_box_is_not_reoriented(self):
        """The box above the gap must fit on the insert as it is."""
        upper = Box(2, 6, 1)
        stack = BoxStack([Box(10, 10, 1), upper])
        pool = [Box(7, 5, 1)]

        self.assertEqual(mutate(stack, pool), 0)
        self.assertEqual((upper.width, upper.length), (2, 6))
        self.assertEqual(len(pool), 1)

    def test_inserted_box_becomes_next_lower_box(self):
        """Several inserts can chain down one gap."""
        stack = BoxStack([Box(20, 20, 1), Box(2, 2, 1)])
        pool = [Box(15, 15, 2), Box(10, 10, 3)]

        inserted = mutate(stack, pool)

        self.assertEqual(inserted, 2)
        self.assertEqual(dims(stack), [(20, 20, 1), (15, 15, 2), (10, 10, 3), (2, 2, 1)])
        self.assertEqual(stack.height, 7)

    def test_mutate_method(self):
        stack = BoxStack([Box(10, 10, 1), Box(2, 2, 1)])

        self.assertEqual(stack.mutate([Box(5, 5, 3)]), 1)
        self.assertEqual(stack.num_boxes, 3)

    def test_single_box_stack(self):
        stack = BoxStack([Box(10, 10, 1)])
        self.assertEqual(mutate(stack, [Box(5, 5, 1)]), 0)

    def test_mutated_stacks_pass_audit(self):
        rng = np.random.default_rng(77)

        for _ in range(100):
            master = random_boxes(rng, count=20, high=30)
            stack = BoxStack.construct(clone_boxes(master[:8]), allow_rollover=True)
            pool = clone_boxes(master)

            mutate(stack, pool)

            audit_stack(stack)
            self.assertEqual(stack.height, sum(box.height for box in stack.boxes))


if __name__ == '__main__':
    unittest.main()
