"""Tests for AssignmentSolver wrapper."""

import sys
import os
import pytest

# Add parent directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from logic.solvers import AssignmentSolver
from rng.random_number_generator import RandomNumberGenerator


def test_basic_permutation():
    """Every key gets one value and every value is used once."""
    solver = AssignmentSolver()

    keys = ["A", "B", "C"]
    values = [1, 2, 3]

    solver.add_permutation_problem(keys, values)
    solution = solver.solve(seed=42)

    assert solution is not None
    assert set(solution.keys()) == {"A", "B", "C"}
    assert sorted(solution.values()) == [1, 2, 3]
    assert solver.last_solution == solution


def test_duplicate_values_keep_counts():
    """Repeated values (two chests with the same item) are both handed out."""
    solver = AssignmentSolver()

    keys = [(4, 1, 0), (4, 2, 0), (4, 2, 1), (4, 3, 0)]
    values = ["bombs", "bombs", "key", "wand"]

    solver.add_permutation_problem(keys, values, shuffle_seed=7)
    solution = solver.solve(seed=7)

    assert solution is not None
    assert sorted(solution.values()) == sorted(values)


def test_require_constraint():
    """Test forcing a specific assignment."""
    solver = AssignmentSolver()

    solver.add_permutation_problem(["A", "B", "C"], [1, 2, 3], shuffle_seed=99)
    solver.require("A", 1)

    solution = solver.solve(seed=42)

    assert solution is not None
    assert solution["A"] == 1
    assert sorted(solution.values()) == [1, 2, 3]


def test_require_duplicated_value():
    """Requiring a repeated value accepts any of its copies."""
    solver = AssignmentSolver()

    solver.add_permutation_problem(["A", "B", "C"], [5, 5, 6], shuffle_seed=3)
    solver.require("C", 6)

    solution = solver.solve(seed=1)

    assert solution == {"A": 5, "B": 5, "C": 6}


def test_forbid_constraint():
    """Test preventing a specific assignment."""
    solver = AssignmentSolver()

    solver.add_permutation_problem(["A", "B"], [1, 2])
    solver.forbid("A", 1)

    solution = solver.solve(seed=42)

    assert solution == {"A": 2, "B": 1}


def test_forbid_every_copy():
    """Forbidding a repeated value keeps all of its copies away."""
    solver = AssignmentSolver()

    solver.add_permutation_problem(["A", "B", "C"], [7, 7, 8])
    solver.forbid("A", 7)

    solution = solver.solve(seed=5)

    assert solution is not None
    assert solution["A"] == 8


def test_contradictory_constraints():
    """Test that contradictory constraints return None."""
    solver = AssignmentSolver()

    solver.add_permutation_problem(["A"], [1])
    solver.require("A", 1)
    solver.forbid("A", 1)  # Contradiction!

    solution = solver.solve(seed=42)

    assert solution is None


def test_deterministic_solving():
    """Test that same seeds produce the same solution."""
    keys = ["A", "B", "C", "D", "E", "F"]
    values = [1, 2, 3, 4, 5, 6]

    solver1 = AssignmentSolver()
    solver1.add_permutation_problem(keys, values, shuffle_seed=12345)
    solution1 = solver1.solve(seed=12345)

    solver2 = AssignmentSolver()
    solver2.add_permutation_problem(keys, values, shuffle_seed=12345)
    solution2 = solver2.solve(seed=12345)

    assert solution1 == solution2


def test_shuffle_seed_from_rng():
    """Without a shuffle seed the solver draws one from its rng."""
    keys = ["A", "B", "C", "D"]
    values = [1, 2, 3, 4]

    solver1 = AssignmentSolver(RandomNumberGenerator(9))
    solver1.add_permutation_problem(keys, values)
    solver2 = AssignmentSolver(RandomNumberGenerator(9))
    solver2.add_permutation_problem(keys, values)

    assert solver1.permutation_keys == solver2.permutation_keys
    assert solver1.permutation_values == solver2.permutation_values
    assert solver1.solve(seed=3) == solver2.solve(seed=3)


def test_mismatched_lengths():
    """Test that mismatched key/value lengths raise error."""
    solver = AssignmentSolver()

    with pytest.raises(ValueError, match="must have same length"):
        solver.add_permutation_problem(["A", "B"], [1, 2, 3])


def test_duplicate_keys():
    solver = AssignmentSolver()

    with pytest.raises(ValueError, match="unique"):
        solver.add_permutation_problem(["A", "A"], [1, 2])


def test_unknown_key_or_value():
    solver = AssignmentSolver()
    solver.add_permutation_problem(["A", "B"], [1, 2])

    with pytest.raises(ValueError):
        solver.require("Z", 1)
    with pytest.raises(ValueError):
        solver.forbid("A", 9)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
