'''
author: zyx
date: 2026-10-16
last_modified: 2026-10-16
description:
    Flood-fill watershed segmentation, unseeded or from externally supplied
    seed labels, and one-to-one relabeling of regions by seed
'''
import logging
from dataclasses import dataclass
from typing import Optional, Union

import numpy as np

from lmseg.compute.union_find import DisjointSet
from lmseg.errors import MissingReferenceError
from lmseg.image.histogram import Histogram
from lmseg.image.pixel_grid import LabelMap, PixelGrid, as_grid, as_label_map
from lmseg.seg.labeling import label_2d, relabel
from lmseg.seg.thresholding import invert as invert_grid

logger = logging.getLogger(__name__)

# the 8 in-plane neighbours as (dy, dx)
NEIGHBOURS = ((-1, -1), (-1, 0), (-1, 1), (0, -1), (0, 1), (1, -1), (1, 0), (1, 1))


@dataclass(frozen=True)
class Unseeded:
    '''Flood from the lowest intensity level of the grid.'''


@dataclass(frozen=True, eq=False)
class Seeded:
    '''
    Flood from externally supplied seed labels.

    Labels up to `max_seed_label` are seed regions: two of them never merge,
    and where they would meet a barrier is placed. Basins born during the
    flood may merge with each other or with one seed region.
    '''
    seeds: np.ndarray
    max_seed_label: int

    def __post_init__(self):
        if self.seeds is None:
            raise MissingReferenceError("Seeded watershed requires a seed label grid")

    @classmethod
    def from_seeds(cls, seeds: Optional[Union[PixelGrid, np.ndarray]]) -> 'Seeded':
        if seeds is None:
            raise MissingReferenceError("Seeded watershed requires a seed label grid")
        data = as_label_map(seeds).data
        max_seed_label = int(data.max()) if data.size else 0
        return cls(data, max_seed_label)


Strategy = Union[Unseeded, Seeded]


def watershed(
    image: Union[PixelGrid, np.ndarray],
    strategy: Optional[Strategy] = None,
    invert: Optional[bool] = None
) -> LabelMap:
    '''
    Segment a grid by flooding intensity levels in increasing order.

    Seeds are either the 8-connected components of the lowest level
    (Unseeded) or the supplied seed labels (Seeded). Every level strictly
    between the lowest and the highest is then visited in increasing order,
    pixels of one level in raster order. An unlabeled pixel looks at its 8
    in-plane neighbours:

    - no labeled neighbour: a new basin is born
    - one label among the neighbours: the pixel joins it
    - several labels: the pixel becomes a barrier (0). With Seeded, only
      two distinct seed labels force a barrier; otherwise the labels are
      merged (smallest label wins) and the pixel joins the merged region.

    Pixels on the highest level are never flooded and stay 0.

    Seeded input is flooded as given (not inverted unless invert=True), and
    the lowest level is not added to the seeds; only the supplied labels
    seed the flood.

    Parameters
    ----------
    image : PixelGrid or numpy.ndarray
        Intensities; truncated to integer levels. Not modified.
    strategy : Unseeded or Seeded, optional
        Seeding strategy, Unseeded() by default
    invert : bool, optional
        Flood the inverted image (max - value) so bright blobs become basins.
        Defaults to True for Unseeded and False for Seeded.

    Returns
    -------
    LabelMap
        Consecutive region labels, 0 for barriers and unflooded pixels
    '''
    if strategy is None:
        strategy = Unseeded()
    seeded = isinstance(strategy, Seeded)
    if invert is None:
        invert = not seeded

    grid = as_grid(image, copy=True)
    if seeded and strategy.seeds.shape != grid.shape:
        raise ValueError(f"Seed shape {strategy.seeds.shape} does not match grid shape {grid.shape}")
    if invert:
        invert_grid(grid)

    levels = np.trunc(grid.data.astype(np.float64)).astype(np.int64)
    if levels.size == 0:
        return LabelMap(np.zeros(levels.shape, dtype=np.int64))
    hist = Histogram.build(levels)
    lowest, highest = hist.min_value, hist.max_value

    if seeded:
        processing = strategy.seeds.astype(np.int64).copy()
        max_seed_label = strategy.max_seed_label
    else:
        processing = label_2d(levels == lowest).data.copy()
        max_seed_label = 0
    next_label = int(processing.max()) + 1
    merges = DisjointSet(next_label)

    rows, cols = levels.shape[-2:]
    flat_levels = levels.ravel()
    candidates = np.flatnonzero((flat_levels > lowest) & (flat_levels < highest))
    order = candidates[np.argsort(flat_levels[candidates], kind='stable')]
    labels = processing.ravel().tolist()
    logger.debug(f"Watershed: levels {lowest}..{highest}, {next_label - 1} seed labels, "
                 f"{order.size} pixels to flood")

    barriers = 0
    for index in order.tolist():
        if labels[index] > 0:
            continue
        y = (index // cols) % rows
        x = index % cols
        found = set()
        for dy, dx in NEIGHBOURS:
            ny = y + dy
            nx = x + dx
            if 0 <= ny < rows and 0 <= nx < cols:
                neighbour = labels[index + dy * cols + dx]
                if neighbour > 0:
                    found.add(merges.find(neighbour) if seeded else neighbour)

        if not found:
            labels[index] = next_label
            merges.add()
            next_label += 1
        elif len(found) == 1:
            labels[index] = found.pop()
        elif not seeded or sum(1 for f in found if f <= max_seed_label) > 1:
            labels[index] = 0
            barriers += 1
        else:
            root = min(found)
            for other in found:
                root = merges.union(root, other)
            labels[index] = root

    processing = np.asarray(labels, dtype=np.int64).reshape(levels.shape)
    if seeded:
        processing = merges.roots()[processing]
    result = relabel(processing)
    logger.info(f"Watershed found {result.num_regions} regions ({barriers} barrier pixels)")
    return result


def label_by_seed(
    labels: Union[PixelGrid, np.ndarray],
    seeds: Optional[Union[PixelGrid, np.ndarray]]
) -> LabelMap:
    '''
    Give every region that contains a seed the label of that seed.

    A region touching several seeds takes the last one in raster order.
    Seed pixels whose seed claimed a region are also set to that seed label.
    Regions without a seed keep their label.

    Parameters
    ----------
    labels : PixelGrid or numpy.ndarray
        Region labels to renumber
    seeds : PixelGrid or numpy.ndarray
        Seed labels of the same shape

    Returns
    -------
    LabelMap
        Renumbered labels
    '''
    if seeds is None:
        raise MissingReferenceError("label_by_seed requires a seed label grid")
    data = as_label_map(labels).data.astype(np.int64)
    seed_data = as_label_map(seeds).data.astype(np.int64)
    if seed_data.shape != data.shape:
        raise ValueError(f"Seed shape {seed_data.shape} does not match label shape {data.shape}")

    both = (data > 0) & (seed_data > 0)
    # later pairs overwrite earlier ones, so the last seed in raster order wins
    seed_of_region = dict(zip(data[both].tolist(), seed_data[both].tolist()))
    if not seed_of_region:
        return LabelMap(data)

    lookup = np.arange(int(data.max()) + 1, dtype=np.int64)
    lookup[list(seed_of_region)] = list(seed_of_region.values())
    result = lookup[data]

    mapped_seeds = np.isin(seed_data, list(set(seed_of_region.values())))
    result[mapped_seeds] = seed_data[mapped_seeds]
    logger.debug(f"Assigned {len(seed_of_region)} regions to seeds")
    return LabelMap(result)
