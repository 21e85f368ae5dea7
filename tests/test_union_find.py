import numpy as np
import pytest

from lmseg.compute import DisjointSet


def test_union_makes_smaller_root_the_parent():
    sets = DisjointSet(6)
    assert sets.union(4, 2) == 2
    assert sets.union(5, 4) == 2
    assert sets.find(5) == 2
    assert sets.connected(4, 5)
    assert not sets.connected(1, 5)


def test_roots_do_not_depend_on_union_order():
    pairs = [(3, 7), (7, 1), (5, 6), (6, 3), (8, 9)]
    forward = DisjointSet(10)
    backward = DisjointSet(10)
    for a, b in pairs:
        forward.union(a, b)
    for a, b in reversed(pairs):
        backward.union(b, a)
    np.testing.assert_array_equal(forward.roots(), backward.roots())
    np.testing.assert_array_equal(forward.roots(), [0, 1, 2, 1, 4, 1, 1, 1, 8, 8])


def test_add_and_grow():
    sets = DisjointSet()
    assert len(sets) == 0
    assert sets.add() == 0
    assert sets.add() == 1
    sets.grow(5)
    assert len(sets) == 5
    assert sets.find(4) == 4


def test_find_compresses_paths():
    sets = DisjointSet(5)
    sets.union(3, 4)
    sets.union(2, 3)
    sets.union(1, 2)
    assert sets.find(4) == 1
    assert sets._parent[4] == 1


def test_cycle_is_an_assertion_failure():
    sets = DisjointSet(2)
    sets._parent = [1, 0]
    with pytest.raises(AssertionError):
        sets.find(0)
