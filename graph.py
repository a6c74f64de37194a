"""
Dependency graph between declarations.

An edge runs from a declaration to each declaration it references in its
attributes or names in ``depends_on``. Creation order puts dependencies
first; destruction runs the same order backwards.
"""
import heapq
from typing import Dict, List, Optional, Set

from declarations import Configuration
from logger_config import get_logger
from utils.exceptions import DependencyCycleError

logger = get_logger(__name__)


class DependencyGraph:
    """Directed graph of declaration addresses."""

    def __init__(self):
        self._edges: Dict[str, Set[str]] = {}

    def add_node(self, address: str) -> None:
        self._edges.setdefault(address, set())

    def add_edge(self, dependent: str, dependency: str) -> None:
        self.add_node(dependent)
        self.add_node(dependency)
        self._edges[dependent].add(dependency)

    @classmethod
    def from_configuration(cls, configuration: Configuration) -> 'DependencyGraph':
        """
        Build the graph for a configuration.

        References and ordering hints naming undeclared addresses are left
        out; validation reports them separately.
        """
        graph = cls()
        for node in configuration.nodes():
            graph.add_node(node.address)
        for node in configuration.nodes():
            targets = [r.address for r in node.references(strict=False)] + list(node.depends_on)
            for target in targets:
                if target in configuration and target != node.address:
                    graph.add_edge(node.address, target)
                elif target == node.address:
                    # A self reference is a cycle of length one
                    graph._edges[node.address].add(target)
        return graph

    @property
    def addresses(self) -> List[str]:
        return sorted(self._edges)

    def dependencies(self, address: str) -> List[str]:
        """Addresses the given declaration depends on directly."""
        return sorted(self._edges.get(address, ()))

    def dependents(self, address: str) -> List[str]:
        """Addresses depending directly on the given declaration."""
        return sorted(a for a, deps in self._edges.items() if address in deps)

    def find_cycle(self) -> Optional[List[str]]:
        """
        Find one dependency cycle.

        Returns:
            The cycle as addresses with the first one repeated at the end,
            or None when the graph is acyclic
        """
        visiting: List[str] = []
        on_path: Set[str] = set()
        done: Set[str] = set()

        def visit(address: str) -> Optional[List[str]]:
            visiting.append(address)
            on_path.add(address)
            for dependency in sorted(self._edges[address]):
                if dependency in on_path:
                    start = visiting.index(dependency)
                    return visiting[start:] + [dependency]
                if dependency not in done:
                    cycle = visit(dependency)
                    if cycle:
                        return cycle
            visiting.pop()
            on_path.discard(address)
            done.add(address)
            return None

        for address in self.addresses:
            if address not in done:
                cycle = visit(address)
                if cycle:
                    return cycle
        return None

    def topological_order(self) -> List[str]:
        """
        Return creation order: every address after all of its dependencies.

        Ties are broken alphabetically so the order is stable.

        Raises:
            DependencyCycleError: If the graph has a cycle
        """
        remaining = {a: len(deps) for a, deps in self._edges.items()}
        ready = [a for a, count in remaining.items() if count == 0]
        heapq.heapify(ready)
        order = []
        while ready:
            address = heapq.heappop(ready)
            order.append(address)
            for dependent in self.dependents(address):
                remaining[dependent] -= 1
                if remaining[dependent] == 0:
                    heapq.heappush(ready, dependent)

        if len(order) != len(self._edges):
            cycle = self.find_cycle() or []
            raise DependencyCycleError(
                'Dependency cycle: {}'.format(' -> '.join(cycle)), cycle
            )
        logger.debug(f'Resolved creation order for {len(order)} declarations')
        return order

    def destroy_order(self) -> List[str]:
        """Reverse of the creation order."""
        return list(reversed(self.topological_order()))
