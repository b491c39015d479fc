"""OR-Tools wrapper for shuffling values between fixed keys.

A permutation problem hands each key exactly one of the given values; the
values may repeat (two chests holding the same item) and the solution keeps
their counts. Constraints pin a value to a key or keep it away from one.

Example usage for shuffling a crypt's chests:
    solver = AssignmentSolver(rng)
    solver.add_permutation_problem(keys=locations, values=chests, shuffle_seed=seed)
    solver.require(book_location, book_chest)
    solution = solver.solve(seed=seed)
"""

from typing import Any, Dict, List, Optional
import logging as log

from ortools.sat.python import cp_model

from rng.random_number_generator import RandomNumberGenerator


class AssignmentSolver:
    """Solves permutation problems with constraints using OR-Tools CP-SAT.

    Keys and values are handled by index inside the model, so duplicate
    values are fine and any hashable key works.
    """

    def __init__(self, rng: Optional[RandomNumberGenerator] = None):
        """Initialize the assignment solver.

        Args:
            rng: RandomNumberGenerator used to pick shuffle seeds when the
                caller doesn't provide one
        """
        self.rng = rng
        self.model = cp_model.CpModel()
        self.var_map: Dict[int, cp_model.IntVar] = {}  # key index -> value index
        self.permutation_keys: List[Any] = []
        self.permutation_values: List[Any] = []
        self.last_solution: Optional[Dict[Any, Any]] = None

    def add_permutation_problem(
        self,
        keys: List[Any],
        values: List[Any],
        shuffle_seed: Optional[int] = None
    ) -> None:
        """Define a problem where every key gets one of the values.

        Args:
            keys: Unique identifiers (e.g. chest locations)
            values: Things to hand out (e.g. chest contents), may repeat
            shuffle_seed: Optional seed to shuffle keys and values before
                building the model, which varies the solution found

        Raises:
            ValueError: If keys and values have different lengths
        """
        if len(keys) != len(values):
            raise ValueError(
                f"Keys and values must have same length. "
                f"Got {len(keys)} keys and {len(values)} values."
            )
        if len(set(keys)) != len(keys):
            raise ValueError("Keys must be unique")

        keys_copy = list(keys)
        values_copy = list(values)
        if shuffle_seed is None and self.rng is not None:
            shuffle_seed = self.rng.randint(1, 2**31 - 1)
        if shuffle_seed is not None:
            temp_rng = RandomNumberGenerator(shuffle_seed)
            temp_rng.shuffle(keys_copy)
            temp_rng.shuffle(values_copy)
        self.permutation_keys = keys_copy
        self.permutation_values = values_copy

        indices = list(range(len(keys_copy)))
        for key_idx in indices:
            self.var_map[key_idx] = self.model.NewIntVarFromDomain(
                cp_model.Domain.FromValues(indices), f"key_{key_idx}")

        # Each value index is used by exactly one key
        self.model.AddAllDifferent([self.var_map[i] for i in indices])

    def _key_index(self, key: Any) -> int:
        try:
            return self.permutation_keys.index(key)
        except ValueError:
            raise ValueError(f"{key} is not a key of the problem") from None

    def _value_indices(self, value: Any) -> List[int]:
        indices = [i for i, v in enumerate(self.permutation_values) if v == value]
        if not indices:
            raise ValueError(f"{value} is not a value of the problem")
        return indices

    def require(self, source: Any, target: Any) -> None:
        """Force key source to receive value target.

        Raises:
            ValueError: If source is not a key or target is not a value
        """
        key_idx = self._key_index(source)
        value_indices = self._value_indices(target)
        self.model.AddAllowedAssignments(
            [self.var_map[key_idx]], [[i] for i in value_indices])
        log.debug(f"Constraint: {source} MUST map to {target}")

    def forbid(self, source: Any, target: Any) -> None:
        """Prevent key source from receiving any copy of value target.

        Raises:
            ValueError: If source is not a key or target is not a value
        """
        key_idx = self._key_index(source)
        value_indices = self._value_indices(target)
        for value_idx in value_indices:
            self.model.Add(self.var_map[key_idx] != value_idx)
        log.debug(f"Constraint: {source} must NOT map to {target} "
                  f"({len(value_indices)} occurrences)")

    def solve(
        self,
        seed: Optional[int] = None,
        time_limit_seconds: float = 10.0
    ) -> Optional[Dict[Any, Any]]:
        """Solve the problem and return one valid solution.

        Args:
            seed: Random seed for deterministic solving (default: None)
            time_limit_seconds: Maximum time to spend solving (default: 10.0)

        Returns:
            Dictionary mapping key -> value if a solution was found, None
            otherwise.
        """
        solver = cp_model.CpSolver()
        solver.parameters.max_time_in_seconds = time_limit_seconds
        solver.parameters.random_seed = seed if seed is not None else 0
        # Single worker keeps the search reproducible.
        solver.parameters.num_search_workers = 1
        solver.parameters.randomize_search = True

        status = solver.Solve(self.model)
        if status == cp_model.OPTIMAL:
            log.debug("Found optimal solution")
        elif status == cp_model.FEASIBLE:
            log.debug("Found feasible solution")
        elif status == cp_model.INFEASIBLE:
            log.error("No solution exists - constraints are contradictory")
            return None
        else:
            log.error(f"Solver failed with status: {status}")
            return None

        solution = {}
        for key_idx, var in self.var_map.items():
            solution[self.permutation_keys[key_idx]] = self.permutation_values[solver.Value(var)]
        self.last_solution = dict(solution)
        return solution
