'''
author: zyx
date: 2026-10-16
last_modified: 2026-10-16
description:
    Connected-component labeling with a provisional pass and an equivalence
    table, consecutive relabeling and post-hoc merging of touching labels

Functions:
    label_2d: 8-connected labeling of every (y, x) plane
    label_3d: 6-connected labeling of a (z, y, x) volume
    label: Pick label_2d / label_3d from the dimensionality
    relabel: Compact labels to 1..N in first-seen raster order
    merge: Union 8-adjacent distinct labels
'''
import logging
from typing import List, Sequence, Tuple, Union

import numpy as np

from lmseg.compute.union_find import DisjointSet
from lmseg.image.pixel_grid import LabelMap, PixelGrid, as_grid, as_label_map

logger = logging.getLogger(__name__)

# neighbours already visited in raster order, first match wins
BACKWARD_2D = ((0, -1), (-1, -1), (-1, 0), (-1, 1))   # W, NW, N, NE
BACKWARD_3D = ((0, 0, -1), (0, -1, 0), (-1, 0, 0))
# one offset per undirected neighbour pair
FORWARD_2D = ((0, 1), (1, -1), (1, 0), (1, 1))
FORWARD_3D = ((0, 0, 1), (0, 1, 0), (1, 0, 0))


def _foreground(mask: Union[PixelGrid, np.ndarray]) -> np.ndarray:
    data = as_grid(mask).data
    if data.dtype == bool:
        return data
    # positive after truncation toward zero
    return data >= 1


def _pad_offsets(offsets: Sequence[Tuple[int, ...]], ndim: int) -> List[Tuple[int, ...]]:
    '''Prefix in-plane offsets with zeros for the leading axes.'''
    return [(0,) * (ndim - len(o)) + tuple(o) for o in offsets]


def _provisional_labels(
    foreground: np.ndarray,
    backward: Sequence[Tuple[int, ...]],
    equivalences: DisjointSet
) -> np.ndarray:
    labels = np.zeros(foreground.shape, dtype=np.int64)
    shape = foreground.shape
    for index in map(tuple, np.argwhere(foreground)):
        current = 0
        for offset in backward:
            neighbour = tuple(i + o for i, o in zip(index, offset))
            if all(0 <= n < s for n, s in zip(neighbour, shape)):
                current = labels[neighbour]
                if current:
                    break
        if not current:
            current = equivalences.add()
        labels[index] = current
    return labels


def adjacent_label_pairs(
    labels: np.ndarray,
    forward: Sequence[Tuple[int, ...]]
) -> np.ndarray:
    '''
    Distinct pairs of different positive labels that touch along any of the
    given offsets.

    Returns
    -------
    numpy.ndarray
        (n, 2) array of label pairs, unique rows
    '''
    pairs = []
    for offset in forward:
        here = tuple(slice(max(0, -o), n - max(0, o)) for o, n in zip(offset, labels.shape))
        there = tuple(slice(max(0, o), n - max(0, -o)) for o, n in zip(offset, labels.shape))
        a = labels[here]
        b = labels[there]
        touching = (a > 0) & (b > 0) & (a != b)
        pairs.append(np.stack([a[touching], b[touching]], axis=1))
    if not pairs:
        return np.zeros((0, 2), dtype=np.int64)
    return np.unique(np.concatenate(pairs), axis=0)


def _union_pairs(equivalences: DisjointSet, pairs: np.ndarray) -> None:
    for a, b in pairs.tolist():
        equivalences.union(a, b)


def _label(
    mask: Union[PixelGrid, np.ndarray],
    backward: Sequence[Tuple[int, ...]],
    forward: Sequence[Tuple[int, ...]]
) -> LabelMap:
    foreground = _foreground(mask)
    backward = _pad_offsets(backward, foreground.ndim)
    forward = _pad_offsets(forward, foreground.ndim)

    # element 0 is the background
    equivalences = DisjointSet(1)
    provisional = _provisional_labels(foreground, backward, equivalences)
    _union_pairs(equivalences, adjacent_label_pairs(provisional, forward))
    resolved = equivalences.roots()[provisional]
    labels = relabel(resolved)
    logger.debug(f"Labeled {labels.num_regions} regions "
                 f"from {len(equivalences) - 1} provisional labels")
    return labels


def label_2d(mask: Union[PixelGrid, np.ndarray]) -> LabelMap:
    '''
    Label 8-connected components of positive pixels.

    Every (y, x) plane is labeled on its own; planes along leading axes
    (z, c, t) never connect but share one label sequence.

    Parameters
    ----------
    mask : PixelGrid or numpy.ndarray
        Foreground is any value >= 1 (positive after truncation), or True

    Returns
    -------
    LabelMap
        Labels 1..N in first-seen raster order, 0 for background
    '''
    return _label(mask, BACKWARD_2D, FORWARD_2D)


def label_3d(mask: Union[PixelGrid, np.ndarray]) -> LabelMap:
    '''
    Label 6-connected (face-adjacent) components of a (z, y, x) volume.
    '''
    if as_grid(mask).ndim != 3:
        raise ValueError(f"label_3d needs a 3D (z, y, x) grid, got shape {as_grid(mask).shape}")
    return _label(mask, BACKWARD_3D, FORWARD_3D)


def label(mask: Union[PixelGrid, np.ndarray]) -> LabelMap:
    '''Label a 2D mask with 8-connectivity or a 3D mask with 6-connectivity.'''
    ndim = as_grid(mask).ndim
    if ndim == 2:
        return label_2d(mask)
    if ndim == 3:
        return label_3d(mask)
    raise ValueError(f"label expects a 2D or 3D mask, got {ndim}D; use label_2d for stacks of planes")


def relabel(labels: Union[PixelGrid, np.ndarray]) -> LabelMap:
    '''
    Renumber labels to 1..N in the order they are first met in raster order.

    0 stays 0. Pixel partition is unchanged.
    '''
    data = np.asarray(as_grid(labels).data)
    if data.dtype == bool:
        data = data.astype(np.int64)
    elif not np.issubdtype(data.dtype, np.integer):
        data = np.trunc(data).astype(np.int64)
    if data.size == 0:
        return LabelMap(np.zeros(data.shape, dtype=np.int64))
    if data.min() < 0:
        raise ValueError("Labels must be non-negative")

    values, first_seen = np.unique(data.ravel(), return_index=True)
    positive = values > 0
    values, first_seen = values[positive], first_seen[positive]

    lookup = np.zeros(int(data.max()) + 1, dtype=np.int64)
    lookup[values[np.argsort(first_seen)]] = np.arange(1, values.size + 1)
    return LabelMap(lookup[data])


def merge(labels: Union[PixelGrid, np.ndarray]) -> LabelMap:
    '''
    Merge labels that touch within a plane (8-adjacency).

    Every group of touching labels takes the smallest label of the group.
    Label numbers are not compacted; call relabel afterwards if needed.
    '''
    data = as_label_map(labels).data.astype(np.int64)
    if data.size == 0:
        return LabelMap(data)
    equivalences = DisjointSet(int(data.max()) + 1)
    pairs = adjacent_label_pairs(data, _pad_offsets(FORWARD_2D, data.ndim))
    _union_pairs(equivalences, pairs)
    logger.debug(f"Merge: {len(pairs)} touching label pairs")
    return LabelMap(equivalences.roots()[data])

