'''
author: zyx
date: 2026-10-16
last_modified: 2026-10-16
description:
    Disjoint-set forest (equivalence table) used to merge region labels
'''
from typing import List

import numpy as np


class DisjointSet:
    '''
    Union-find over the integers 0..len-1.

    The root of every set is its smallest member: union always makes the
    smaller root the parent of the larger one, so a given set of unions
    yields the same roots regardless of the order they were applied in.

    Parameters
    ----------
    size : int
        Number of elements to start with, each in its own set
    '''

    def __init__(self, size: int = 0):
        self._parent: List[int] = list(range(size))

    def __len__(self) -> int:
        return len(self._parent)

    def add(self) -> int:
        '''Add a new singleton set and return its element id.'''
        self._parent.append(len(self._parent))
        return len(self._parent) - 1

    def grow(self, size: int) -> None:
        '''Extend with singleton sets up to `size` elements.'''
        self._parent.extend(range(len(self._parent), size))

    def find(self, item: int) -> int:
        parent = self._parent
        root = item
        steps = 0
        while parent[root] != root:
            root = parent[root]
            steps += 1
            assert steps <= len(parent), f"cycle in equivalence table at {item}"
        # path compression
        while parent[item] != root:
            parent[item], item = root, parent[item]
        return root

    def union(self, a: int, b: int) -> int:
        '''Merge the sets holding a and b. Returns the surviving root.'''
        root_a = self.find(a)
        root_b = self.find(b)
        if root_a == root_b:
            return root_a
        if root_a < root_b:
            self._parent[root_b] = root_a
            return root_a
        self._parent[root_a] = root_b
        return root_b

    def connected(self, a: int, b: int) -> bool:
        return self.find(a) == self.find(b)

    def roots(self) -> np.ndarray:
        '''Root of every element, usable as a lookup table: roots()[labels].'''
        return np.array([self.find(i) for i in range(len(self._parent))], dtype=np.int64)
