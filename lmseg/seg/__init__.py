from .labeling import label, label_2d, label_3d, relabel, merge, adjacent_label_pairs
from .thresholding import (
    apply_maximum_separability,
    apply_local_maximum_separability,
    recursive_maximum_separability,
    mask,
    invert,
    size_filter,
    region_threshold,
    region_maximum_separability
)
from .watershed import Unseeded, Seeded, watershed, label_by_seed
from .pipelines import (
    recursive_thresholding_method,
    spot_finding_method,
    watershed_method,
    background_subtracted,
    METHODS,
    get_method
)
from .quantify import measure_regions

__all__ = [
    'label',
    'label_2d',
    'label_3d',
    'relabel',
    'merge',
    'adjacent_label_pairs',
    'apply_maximum_separability',
    'apply_local_maximum_separability',
    'recursive_maximum_separability',
    'mask',
    'invert',
    'size_filter',
    'region_threshold',
    'region_maximum_separability',
    'Unseeded',
    'Seeded',
    'watershed',
    'label_by_seed',
    'recursive_thresholding_method',
    'spot_finding_method',
    'watershed_method',
    'background_subtracted',
    'METHODS',
    'get_method',
    'measure_regions',
]
