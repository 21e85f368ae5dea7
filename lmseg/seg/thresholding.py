'''
author: zyx
date: 2026-10-16
last_modified: 2026-10-16
description:
    Thresholding filters on grids and label maps: global maximum
    separability, its local-maximum variant, recursive per-region
    re-thresholding bounded by region size, and region-level filters

Functions:
    apply_maximum_separability: Zero pixels below the maximum separability threshold
    apply_local_maximum_separability: Same with the local-maximum threshold
    recursive_maximum_separability: Split over-size regions by re-thresholding them
    mask: Zero pixels where a reference is 0
    invert: Replace every value v by max - v
    size_filter: Drop regions outside a size range
    region_threshold: Drop regions whose mean reference intensity is below threshold
    region_maximum_separability: Threshold regions by their mean intensities
'''
import logging
from typing import Callable, Optional, Union

import numpy as np
from scipy import ndimage

from lmseg.compute.intensity_threshold import (
    maximum_separability_threshold,
    local_maximum_separability_threshold
)
from lmseg.errors import MissingReferenceError
from lmseg.image.histogram import Histogram
from lmseg.image.pixel_grid import LabelMap, PixelGrid, as_grid, as_label_map
from lmseg.seg.labeling import label_2d, label_3d, relabel

logger = logging.getLogger(__name__)

# region_maximum_separability only acts when foreground / background is below this
FOREGROUND_RATIO = 5.0


def _apply_threshold(
    image: Union[PixelGrid, np.ndarray],
    select: Callable[..., int],
    adaptive_increment: bool,
    increment: int
) -> int:
    grid = as_grid(image)
    threshold = select(Histogram.build(grid), adaptive_increment, increment)
    active = grid.active
    active[active < threshold] = 0
    return threshold


def apply_maximum_separability(
    image: Union[PixelGrid, np.ndarray],
    adaptive_increment: bool = False,
    increment: int = 1
) -> int:
    '''
    Zero, in place, every pixel of the active region below the maximum
    separability threshold.

    Parameters
    ----------
    image : PixelGrid or numpy.ndarray
        Grid to threshold; arrays are modified in place
    adaptive_increment : bool
        Subsample candidate thresholds for large dynamic ranges
    increment : int
        Candidate step when not adaptive

    Returns
    -------
    int
        The threshold used
    '''
    threshold = _apply_threshold(image, maximum_separability_threshold,
                                 adaptive_increment, increment)
    logger.info(f"Maximum separability threshold: {threshold}")
    return threshold


def apply_local_maximum_separability(
    image: Union[PixelGrid, np.ndarray],
    adaptive_increment: bool = False,
    increment: int = 1
) -> int:
    '''
    Zero, in place, every pixel below the local-maximum separability threshold.
    '''
    threshold = _apply_threshold(image, local_maximum_separability_threshold,
                                 adaptive_increment, increment)
    logger.info(f"Local maximum separability threshold: {threshold}")
    return threshold


def _remove_small(labels: np.ndarray, min_size: int) -> np.ndarray:
    sizes = np.bincount(labels.ravel())
    small = sizes < min_size
    small[0] = False
    labels[small[labels]] = 0
    return sizes


def recursive_maximum_separability(
    mask: Union[PixelGrid, np.ndarray],
    reference: Optional[Union[PixelGrid, np.ndarray]],
    min_size: int = 25,
    max_size: int = 1000,
    max_recursions: int = 3,
    adaptive_increment: bool = False,
    increment: int = 1
) -> LabelMap:
    '''
    Refine a global threshold into per-region thresholds.

    The mask is labeled; regions smaller than `min_size` are removed and
    regions larger than `max_size` are re-thresholded using only the
    reference intensities inside them (within their bounding box). Region
    pixels that do not survive are cleared, the mask is labeled again and the
    process repeats until no region is too large, nothing changes, or
    `max_recursions` rounds have run.

    Parameters
    ----------
    mask : PixelGrid or numpy.ndarray
        Foreground mask (positive pixels), 2D or 3D
    reference : PixelGrid or numpy.ndarray
        Intensity grid of the same shape
    min_size : int
        Smallest region kept, in pixels
    max_size : int
        Largest region not re-thresholded
    max_recursions : int
        Maximum number of re-thresholding rounds
    adaptive_increment : bool
        Passed to the threshold selection
    increment : int
        Passed to the threshold selection

    Returns
    -------
    LabelMap
        Consecutive labels of the surviving regions

    Raises
    ------
    MissingReferenceError
        If no reference grid is given
    '''
    if reference is None:
        raise MissingReferenceError("recursive_maximum_separability requires a reference intensity grid")
    mask_grid = as_grid(mask)
    ref = as_grid(reference).data
    if ref.shape != mask_grid.shape:
        raise ValueError(f"Reference shape {ref.shape} does not match mask shape {mask_grid.shape}")

    labeler = label_3d if mask_grid.ndim == 3 else label_2d
    labels = labeler(mask_grid).data
    depth = 0

    while True:
        sizes = _remove_small(labels, min_size)
        large = np.flatnonzero(sizes > max_size)
        large = large[large > 0]
        if large.size == 0 or depth >= max_recursions:
            break

        boxes = ndimage.find_objects(labels)
        divided = False
        for region in large:
            box = boxes[region - 1]
            if box is None:
                continue
            inside = labels[box] == region
            local = PixelGrid(np.where(inside, ref[box], 0).astype(np.float64))
            threshold = maximum_separability_threshold(
                Histogram.build(local), adaptive_increment, increment)
            local.data[local.data < threshold] = 0
            dropped = inside & (local.data == 0)
            if dropped.any():
                labels[box][dropped] = 0
                divided = True
            logger.debug(f"Region {region} ({sizes[region]} px): threshold {threshold}, "
                         f"dropped {int(dropped.sum())} px")

        depth += 1
        labels = labeler(labels).data
        logger.info(f"Recursive thresholding depth {depth}: {int(labels.max())} regions, "
                    f"{large.size} over {max_size} px")
        if not divided:
            break

    return relabel(labels)


def mask(
    image: Union[PixelGrid, np.ndarray],
    reference: Optional[Union[PixelGrid, np.ndarray]]
) -> PixelGrid:
    '''Zero, in place, every pixel whose reference value is 0.'''
    if reference is None:
        raise MissingReferenceError("mask requires a reference grid")
    grid = as_grid(image)
    ref = as_grid(reference).data
    if ref.shape != grid.shape:
        raise ValueError(f"Reference shape {ref.shape} does not match grid shape {grid.shape}")
    grid.data[ref == 0] = 0
    return grid


def invert(image: Union[PixelGrid, np.ndarray]) -> PixelGrid:
    '''
    Replace, in place, every value v by max_value - v, where max_value is
    the largest value truncated to an integer.
    '''
    grid = as_grid(image)
    max_value = Histogram.find_max_value(grid)
    grid.data[...] = max_value - grid.data
    return grid


def size_filter(
    labels: Union[PixelGrid, np.ndarray],
    min_size: int = 25,
    max_size: int = 1000
) -> LabelMap:
    '''
    Remove regions with fewer than `min_size` or more than `max_size` pixels.

    Label numbers of the remaining regions are not changed.
    '''
    if min_size > max_size:
        raise ValueError(f"min_size ({min_size}) is larger than max_size ({max_size})")
    data = as_label_map(labels).data.copy()
    sizes = np.bincount(data.ravel())
    outside = (sizes < min_size) | (sizes > max_size)
    outside[0] = False
    data[outside[data]] = 0
    logger.info(f"Size filter [{min_size}, {max_size}]: removed {int(np.count_nonzero(outside))} regions")
    return LabelMap(data)


def _region_means(labels: np.ndarray, reference: np.ndarray) -> np.ndarray:
    '''Mean reference value per label, indexed by label; 0 for absent labels.'''
    counts = np.bincount(labels.ravel())
    sums = np.bincount(labels.ravel(), weights=reference.ravel().astype(np.float64),
                       minlength=counts.size)
    means = np.zeros(counts.size, dtype=np.float64)
    present = counts > 0
    means[present] = sums[present] / counts[present]
    return means


def region_threshold(
    labels: Union[PixelGrid, np.ndarray],
    reference: Optional[Union[PixelGrid, np.ndarray]],
    adaptive_increment: bool = False,
    increment: int = 1
) -> LabelMap:
    '''
    Remove regions whose mean reference intensity is below the maximum
    separability threshold of the reference restricted to all regions.

    Parameters
    ----------
    labels : PixelGrid or numpy.ndarray
        Region labels
    reference : PixelGrid or numpy.ndarray
        Intensity grid of the same shape

    Returns
    -------
    LabelMap
        Labels with the dim regions set to 0
    '''
    if reference is None:
        raise MissingReferenceError("region_threshold requires a reference intensity grid")
    data = as_label_map(labels).data.copy()
    ref = as_grid(reference).data
    if ref.shape != data.shape:
        raise ValueError(f"Reference shape {ref.shape} does not match label shape {data.shape}")
    if not data.any():
        return LabelMap(data)

    masked = PixelGrid(np.where(data > 0, ref, 0).astype(np.float64))
    threshold = maximum_separability_threshold(Histogram.build(masked), adaptive_increment, increment)
    means = _region_means(data, ref)
    dim = (means < threshold) & (np.bincount(data.ravel()) > 0)
    dim[0] = False
    data[dim[data]] = 0
    logger.info(f"Region threshold {threshold}: removed {int(dim.sum())} regions")
    return LabelMap(data)


def region_maximum_separability(
    labels: Union[PixelGrid, np.ndarray],
    reference: Optional[Union[PixelGrid, np.ndarray]]
) -> LabelMap:
    '''
    Split regions into a dim and a bright class by thresholding their mean
    intensities, and drop the dim class.

    Only applied when the mean intensity inside regions is less than
    FOREGROUND_RATIO times the mean intensity outside them, i.e. when the
    segmentation picked up a lot of background; otherwise labels are
    returned unchanged.
    '''
    if reference is None:
        raise MissingReferenceError("region_maximum_separability requires a reference intensity grid")
    data = as_label_map(labels).data.copy()
    ref = as_grid(reference).data.astype(np.float64)
    if ref.shape != data.shape:
        raise ValueError(f"Reference shape {ref.shape} does not match label shape {data.shape}")

    foreground = data > 0
    if not foreground.any() or foreground.all():
        return LabelMap(data)
    fg_mean = float(ref[foreground].mean())
    bg_mean = float(ref[~foreground].mean())
    logger.debug(f"Region mean thresholding: foreground mean {fg_mean}, background mean {bg_mean}")
    if fg_mean >= FOREGROUND_RATIO * bg_mean:
        return LabelMap(data)

    means = _region_means(data, ref)
    present = np.flatnonzero(np.bincount(data.ravel()))
    present = present[present > 0]
    # one pixel per region holding its mean intensity
    mean_values = PixelGrid(means[present][np.newaxis, :].copy())
    apply_maximum_separability(mean_values)
    dim = np.zeros(means.size, dtype=bool)
    dim[present[mean_values.data[0] == 0]] = True
    data[dim[data]] = 0
    logger.info(f"Region mean thresholding removed {int(dim.sum())} of {present.size} regions")
    return LabelMap(data)
