"""
LMSeg - Region labeling, thresholding, watershed and background estimation for light microscopy images.
"""

__version__ = "0.1.0"

# Import main functionality for easier access
from lmseg.errors import MissingReferenceError, ParameterError
from lmseg.image import Coordinate, PixelGrid, LabelMap, Histogram, build_histogram
from lmseg.compute import (
    DisjointSet,
    maximum_separability_threshold,
    local_maximum_separability_threshold,
    sliding_rank_filter,
    local_median,
    subtract_local_background
)
from lmseg.seg import (
    label,
    label_2d,
    label_3d,
    relabel,
    merge,
    recursive_maximum_separability,
    Unseeded,
    Seeded,
    watershed,
    recursive_thresholding_method,
    spot_finding_method,
    watershed_method,
    measure_regions,
)
from lmseg.io import SegmentationParameters, load_parameters

__all__ = [
    'MissingReferenceError',
    'ParameterError',
    'Coordinate',
    'PixelGrid',
    'LabelMap',
    'Histogram',
    'build_histogram',
    'DisjointSet',
    'maximum_separability_threshold',
    'local_maximum_separability_threshold',
    'sliding_rank_filter',
    'local_median',
    'subtract_local_background',
    'label',
    'label_2d',
    'label_3d',
    'relabel',
    'merge',
    'recursive_maximum_separability',
    'Unseeded',
    'Seeded',
    'watershed',
    'recursive_thresholding_method',
    'spot_finding_method',
    'watershed_method',
    'measure_regions',
    'SegmentationParameters',
    'load_parameters',
]
