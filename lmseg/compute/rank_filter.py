'''
author: zyx
date: 2026-10-16
last_modified: 2026-10-16
description:
    Streaming rank (median) filter over square / cubic windows and local
    background subtraction built on it
'''
import logging
from typing import Tuple, Union

import numpy as np

from lmseg.image.pixel_grid import PixelGrid, as_grid

logger = logging.getLogger(__name__)

# padding value; anything negative is left out of the window histograms
SENTINEL = -1


def _row_histogram(values: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    '''Sparse histogram (values, counts) of the non-negative entries.'''
    values = values[values >= 0]
    return np.unique(values, return_counts=True)


def sliding_rank_filter(
    image: Union[PixelGrid, np.ndarray],
    box_radius: int,
    rank_fraction: float = 0.5,
    shrink_edge_windows: bool = False
) -> PixelGrid:
    '''
    Rank filter with a (2b+1)-wide square (2D) or cubic (3D) window.

    For every line of pixels along y the window slides one row at a time.
    A circular buffer keeps the histogram of each of the 2b+1 rows in the
    window and an overall histogram is updated by subtracting the row that
    leaves and adding the row that enters. The output value m is tracked
    incrementally together with the count of window pixels below it, so that

        count(< m) <= target < count(<= m)

    where target = min(int(n * rank_fraction), n - 1).

    Parameters
    ----------
    image : PixelGrid or numpy.ndarray
        2D (y, x) or 3D (z, y, x) intensities; truncated to integers
    box_radius : int
        Half-width b of the window
    rank_fraction : float
        Rank to report as a fraction of the window size; 0.5 is the median
    shrink_edge_windows : bool
        If False, n is always the full window size (2b+1)^d, so windows that
        hang over the edge are biased upward. If True, n is the number of
        real pixels in the window.

    Returns
    -------
    PixelGrid
        Filtered float64 grid of the same shape
    '''
    grid = as_grid(image)
    if grid.ndim not in (2, 3):
        raise ValueError(f"Rank filter supports 2D or 3D grids, got {grid.ndim}D")
    if box_radius < 0:
        raise ValueError(f"box_radius must be non-negative, got {box_radius}")
    if not 0.0 <= rank_fraction <= 1.0:
        raise ValueError(f"rank_fraction must be in [0, 1], got {rank_fraction}")

    b = int(box_radius)
    width = 2 * b + 1
    values = np.trunc(np.asarray(grid.data, dtype=np.float64)).astype(np.int64)
    values[values < 0] = SENTINEL
    num_buckets = max(int(values.max()) + 1, 1) if values.size else 1

    # y first, the remaining axes describe which line of pixels is filtered
    lines = np.moveaxis(values, -2, 0)
    padded = np.pad(lines, b, mode='constant', constant_values=SENTINEL)
    num_rows = lines.shape[0]
    full_window = width ** grid.ndim
    output = np.zeros(lines.shape, dtype=np.float64)

    logger.debug(f"Rank filter: box radius {b}, rank {rank_fraction}, shape {grid.shape}")

    for position in np.ndindex(*lines.shape[1:]):
        # window extent across the other axes, in padded coordinates
        across = tuple(slice(p, p + width) for p in position)

        overall = np.zeros(num_buckets, dtype=np.int64)
        buffer = [None] * width
        for i in range(width):
            buffer[i] = _row_histogram(padded[(i,) + across])
            overall[buffer[i][0]] += buffer[i][1]
        real = int(overall.sum())
        median = 0
        below = 0

        for y in range(num_rows):
            if y > 0:
                # row y - 1 leaves (padded index y - 1), row y + b enters
                slot = (y - 1) % width
                old_values, old_counts = buffer[slot]
                overall[old_values] -= old_counts
                below -= int(old_counts[old_values < median].sum())
                real -= int(old_counts.sum())

                new_values, new_counts = _row_histogram(padded[(y - 1 + width,) + across])
                buffer[slot] = (new_values, new_counts)
                overall[new_values] += new_counts
                below += int(new_counts[new_values < median].sum())
                real += int(new_counts.sum())

            n = real if shrink_edge_windows else full_window
            if real == 0:
                output[(y,) + position] = 0.0
                continue
            target = min(int(n * rank_fraction), n - 1)

            while median > 0 and below > target:
                median -= 1
                below -= overall[median]
            while median < num_buckets - 1 and below + overall[median] <= target:
                below += overall[median]
                median += 1
            output[(y,) + position] = median

    return PixelGrid(np.moveaxis(output, 0, -2))


def local_median(
    image: Union[PixelGrid, np.ndarray],
    box_radius: int,
    shrink_edge_windows: bool = False
) -> PixelGrid:
    '''Median filter, see sliding_rank_filter.'''
    return sliding_rank_filter(image, box_radius, 0.5, shrink_edge_windows)


def subtract_local_background(
    image: Union[PixelGrid, np.ndarray],
    box_radius: int,
    shrink_edge_windows: bool = False
) -> PixelGrid:
    '''
    Remove slowly varying background by subtracting the local median.

    Parameters
    ----------
    image : PixelGrid or numpy.ndarray
        2D or 3D intensities
    box_radius : int
        Half-width of the median window
    shrink_edge_windows : bool
        Passed to sliding_rank_filter

    Returns
    -------
    PixelGrid
        max(image - local median, 0) as float64
    '''
    grid = as_grid(image)
    background = local_median(grid, box_radius, shrink_edge_windows)
    corrected = np.clip(grid.data.astype(np.float64) - background.data, 0, None)
    logger.info(f"Subtracted local median background (box radius {box_radius})")
    return PixelGrid(corrected)
