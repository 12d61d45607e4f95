from __future__ import annotations

from typing import Dict, FrozenSet, Iterable, Iterator, Tuple

from .exceptions import ValidationFailed


class TransitionTable:
    """Static adjacency map of the statuses an entity may move to next."""

    def __init__(self, entity: str, graph: Dict[str, Iterable[str]]):
        self.entity = entity
        self._graph: Dict[str, FrozenSet[str]] = {str(state): frozenset(str(t) for t in targets) for state, targets in graph.items()}

    @property
    def statuses(self) -> Tuple[str, ...]:
        return tuple(self._graph)

    def allowed(self, from_status: str) -> FrozenSet[str]:
        return self._graph.get(str(from_status), frozenset())

    def can_transition(self, from_status: str, to_status: str) -> bool:
        return str(to_status) in self.allowed(from_status)

    def is_terminal(self, status: str) -> bool:
        return not self.allowed(status)

    def edges(self) -> Iterator[Tuple[str, str]]:
        for state, targets in self._graph.items():
            for target in sorted(targets):
                yield state, target

    def ensure(self, from_status: str, to_status: str) -> None:
        if str(to_status) not in self._graph:
            raise ValidationFailed(f"Unknown {self.entity} status: {to_status}")
        if not self.can_transition(from_status, to_status):
            raise ValidationFailed(f"Invalid status transition from {from_status} to {to_status}")
