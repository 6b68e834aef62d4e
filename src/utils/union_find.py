"""Union-Find data structure for the transitive grouping strategy.

This module provides a DisjointSet implementation with size tracking. The
``union_find`` grouping strategy uses it to merge every pair of records that
share a field key, producing full transitive-closure groups.
"""

import logging
from collections.abc import Hashable, Iterator

logger = logging.getLogger(__name__)


class DisjointSet:
    """Union-Find data structure with size tracking.

    Union by rank and path compression keep ``find`` and ``union`` at
    O(α(n)) amortized, where α is the inverse Ackermann function.
    """

    def __init__(self) -> None:
        """Initialize an empty disjoint set."""
        self.parent: dict[Hashable, Hashable] = {}
        self.rank: dict[Hashable, int] = {}
        self.size: dict[Hashable, int] = {}
        self._count = 0

    def make_set(self, x: Hashable) -> None:
        """Create a new set containing element x (no-op if x is known).

        Args:
            x: Element to add to the disjoint set

        """
        if x not in self.parent:
            self.parent[x] = x
            self.rank[x] = 0
            self.size[x] = 1
            self._count += 1

    def find(self, x: Hashable) -> Hashable:
        """Find the representative (root) of the set containing x.

        Args:
            x: Element to find

        Returns:
            Representative element of the set containing x

        Raises:
            ValueError: If x was never added

        """
        if x not in self.parent:
            raise ValueError(f"Element {x!r} not found in disjoint set")

        root = x
        while self.parent[root] != root:
            root = self.parent[root]

        # Path compression
        while self.parent[x] != root:
            self.parent[x], x = root, self.parent[x]

        return root

    def union(self, x: Hashable, y: Hashable) -> bool:
        """Merge the sets containing x and y.

        Args:
            x: First element
            y: Second element

        Returns:
            True if the sets were merged, False if they were already in the same set

        """
        root_x = self.find(x)
        root_y = self.find(y)

        if root_x == root_y:
            return False

        # Union by rank
        if self.rank[root_x] < self.rank[root_y]:
            root_x, root_y = root_y, root_x

        self.parent[root_y] = root_x
        self.size[root_x] += self.size[root_y]

        if self.rank[root_x] == self.rank[root_y]:
            self.rank[root_x] += 1

        self._count -= 1
        return True

    def get_size(self, x: Hashable) -> int:
        """Get the size of the set containing x."""
        return self.size[self.find(x)]

    def is_same_set(self, x: Hashable, y: Hashable) -> bool:
        """Check if x and y are in the same set."""
        return bool(self.find(x) == self.find(y))

    def get_set_count(self) -> int:
        """Get the total number of disjoint sets."""
        return self._count

    def iter_sets(self) -> Iterator[list[Hashable]]:
        """Yield each set as a list of members.

        Sets come out in the order their first-added member was added, and
        members keep their insertion order.
        """
        members: dict[Hashable, list[Hashable]] = {}
        for x in self.parent:
            members.setdefault(self.find(x), []).append(x)
        yield from members.values()

    def __len__(self) -> int:
        """Get the total number of elements."""
        return len(self.parent)

    def __contains__(self, x: Hashable) -> bool:
        """Check if element x is in the disjoint set."""
        return x in self.parent
