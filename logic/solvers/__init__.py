"""Constraint solvers used by the randomizers.

Example usage:
    from logic.solvers import AssignmentSolver

    solver = AssignmentSolver(rng)
    solver.add_permutation_problem(locations, chests)
    solver.require(book_location, book_chest)
    solution = solver.solve(seed=42)
"""

from .assignment_solver import AssignmentSolver

__all__ = [
    "AssignmentSolver",
]
