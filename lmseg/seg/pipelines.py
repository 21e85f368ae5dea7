'''
author: zyx
date: 2026-10-16
last_modified: 2026-10-16
description:
    Segmentation methods chaining thresholding, labeling, watershed and
    size filtering, selectable by name

Functions:
    recursive_thresholding_method: Global threshold refined per region
    spot_finding_method: Local-maximum threshold for small, bright foci
    watershed_method: Watershed (seeded or not) with merge and size filter
    background_subtracted: Local median background subtraction
'''
import logging
from typing import Callable, Dict, Optional, Union

import numpy as np

from lmseg.compute.rank_filter import subtract_local_background
from lmseg.image.pixel_grid import LabelMap, PixelGrid, as_grid
from lmseg.io.metadata_tracking import RunMetadata
from lmseg.io.parameters import SegmentationParameters
from lmseg.seg.labeling import label, merge, relabel
from lmseg.seg.thresholding import (
    apply_local_maximum_separability,
    apply_maximum_separability,
    recursive_maximum_separability,
    size_filter
)
from lmseg.seg.watershed import Seeded, Unseeded, watershed

logger = logging.getLogger(__name__)


def _record(metadata: Optional[RunMetadata], step_name: str, **parameters) -> None:
    if metadata is not None:
        metadata.add_step(step_name, parameters=parameters)


def _thresholded_regions(
    image: Union[PixelGrid, np.ndarray],
    params: SegmentationParameters,
    select: Callable[..., int],
    metadata: Optional[RunMetadata]
) -> LabelMap:
    '''Threshold a copy of the image, label it, then re-threshold large regions.'''
    reference = as_grid(image)
    thresholded = as_grid(image, copy=True)
    threshold = select(thresholded, params.adaptive_increment, params.threshold_increment)
    _record(metadata, select.__name__, threshold=threshold,
            adaptive_increment=params.adaptive_increment,
            threshold_increment=params.threshold_increment)

    initial = label(thresholded)
    _record(metadata, 'label', regions=initial.num_regions)

    labels = recursive_maximum_separability(
        initial, reference,
        min_size=params.min_size,
        max_size=params.max_size,
        max_recursions=params.max_thresh_recursions,
        adaptive_increment=params.adaptive_increment,
        increment=params.threshold_increment
    )
    _record(metadata, 'recursive_maximum_separability', regions=labels.num_regions,
            min_size=params.min_size, max_size=params.max_size,
            max_recursions=params.max_thresh_recursions)
    return labels


def recursive_thresholding_method(
    image: Union[PixelGrid, np.ndarray],
    params: Optional[SegmentationParameters] = None,
    metadata: Optional[RunMetadata] = None
) -> LabelMap:
    '''
    Segment bright regions: maximum separability threshold, label, recursive
    re-thresholding of over-size regions, relabel.

    Parameters
    ----------
    image : PixelGrid or numpy.ndarray
        2D or 3D intensities; not modified
    params : SegmentationParameters, optional
        Defaults when omitted
    metadata : RunMetadata, optional
        Steps are appended when given

    Returns
    -------
    LabelMap
        Consecutive region labels
    '''
    params = params or SegmentationParameters()
    labels = relabel(_thresholded_regions(image, params, apply_maximum_separability, metadata))
    logger.info(f"Recursive thresholding method: {labels.num_regions} regions")
    return labels


def spot_finding_method(
    image: Union[PixelGrid, np.ndarray],
    params: Optional[SegmentationParameters] = None,
    metadata: Optional[RunMetadata] = None
) -> LabelMap:
    '''
    Segment small bright foci: local-maximum separability threshold, label,
    recursive re-thresholding, then drop regions outside the size range.
    '''
    params = params or SegmentationParameters()
    labels = _thresholded_regions(image, params, apply_local_maximum_separability, metadata)
    labels = relabel(size_filter(relabel(labels), params.min_size, params.max_size))
    _record(metadata, 'size_filter', regions=labels.num_regions,
            min_size=params.min_size, max_size=params.max_size)
    logger.info(f"Spot finding method: {labels.num_regions} regions")
    return labels


def watershed_method(
    image: Union[PixelGrid, np.ndarray],
    params: Optional[SegmentationParameters] = None,
    seeds: Optional[Union[PixelGrid, np.ndarray]] = None,
    metadata: Optional[RunMetadata] = None
) -> LabelMap:
    '''
    Watershed segmentation followed by merging of touching regions and a
    size filter.

    Parameters
    ----------
    image : PixelGrid or numpy.ndarray
        Intensities; not modified
    params : SegmentationParameters, optional
        Size range for the final filter
    seeds : PixelGrid or numpy.ndarray, optional
        Seed labels; unseeded watershed from the brightest level without them
    metadata : RunMetadata, optional
        Steps are appended when given

    Returns
    -------
    LabelMap
        Consecutive region labels
    '''
    params = params or SegmentationParameters()
    strategy = Seeded.from_seeds(seeds) if seeds is not None else Unseeded()
    labels = watershed(image, strategy)
    _record(metadata, 'watershed', seeded=seeds is not None, regions=labels.num_regions)

    labels = relabel(merge(labels))
    _record(metadata, 'merge', regions=labels.num_regions)

    labels = relabel(size_filter(labels, params.min_size, params.max_size))
    _record(metadata, 'size_filter', regions=labels.num_regions,
            min_size=params.min_size, max_size=params.max_size)
    logger.info(f"Watershed method: {labels.num_regions} regions")
    return labels


def background_subtracted(
    image: Union[PixelGrid, np.ndarray],
    params: Optional[SegmentationParameters] = None,
    metadata: Optional[RunMetadata] = None
) -> PixelGrid:
    '''Subtract the local median (box radius params.box_size) from the image.'''
    params = params or SegmentationParameters()
    corrected = subtract_local_background(image, params.box_size, params.shrink_edge_windows)
    _record(metadata, 'subtract_local_background', box_size=params.box_size,
            shrink_edge_windows=params.shrink_edge_windows)
    return corrected


METHODS: Dict[str, Callable[..., LabelMap]] = {
    'recursive_thresholding': recursive_thresholding_method,
    'spot_finding': spot_finding_method,
    'watershed': watershed_method,
}


def get_method(name: str) -> Callable[..., LabelMap]:
    '''Look up a segmentation method by name.'''
    try:
        return METHODS[name]
    except KeyError:
        raise ValueError(f"Unknown segmentation method '{name}'; choose from {sorted(METHODS)}") from None
