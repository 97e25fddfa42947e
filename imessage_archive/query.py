"""
Parameterized WHERE clause assembly.

Clauses are fixed SQL fragments written in this package; caller supplied
values only ever travel as bound parameters.
"""

from typing import Any, List, Tuple


class PredicateBuilder:
    """
    Accumulates AND-ed predicates and their bound parameters.

    Usage:
        predicates = PredicateBuilder()
        predicates.add("m.text LIKE ?", f"%{query}%")
        sql = f"SELECT ... FROM message m {predicates.where_clause()}"
        cursor.execute(sql, predicates.params)
    """

    def __init__(self):
        # Always-true base so an empty filter set still yields valid SQL
        self._clauses: List[str] = ["1=1"]
        self._params: List[Any] = []

    def add(self, clause: str, *params: Any) -> 'PredicateBuilder':
        """
        AND a predicate onto the set.

        Args:
            clause: SQL fragment using ? placeholders
            *params: One value per placeholder, in order

        Raises:
            ValueError: If the placeholder count does not match params
        """
        if clause.count("?") != len(params):
            raise ValueError(
                f"Predicate expects {clause.count('?')} parameters, got {len(params)}: {clause}"
            )
        self._clauses.append(clause)
        self._params.extend(params)
        return self

    def where_clause(self) -> str:
        return "WHERE " + " AND ".join(self._clauses)

    @property
    def params(self) -> Tuple[Any, ...]:
        return tuple(self._params)

    def __len__(self) -> int:
        """Number of predicates added on top of the base predicate."""
        return len(self._clauses) - 1
