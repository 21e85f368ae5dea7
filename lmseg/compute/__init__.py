'''
Compute module for lmseg.
Contains the equivalence table, separability threshold math and the sliding rank filter.
'''

from .union_find import DisjointSet

from .intensity_threshold import (
    threshold_candidates,
    separability_curve,
    maximum_separability_threshold,
    find_local_maxima,
    double_gaussian,
    fit_double_gaussian,
    fit_seed_positions,
    local_maximum_separability_threshold
)

from .rank_filter import (
    sliding_rank_filter,
    local_median,
    subtract_local_background
)

__all__ = [
    # Equivalence table
    'DisjointSet',
    # Intensity threshold functions
    'threshold_candidates',
    'separability_curve',
    'maximum_separability_threshold',
    'find_local_maxima',
    'double_gaussian',
    'fit_double_gaussian',
    'fit_seed_positions',
    'local_maximum_separability_threshold',
    # Rank filter functions
    'sliding_rank_filter',
    'local_median',
    'subtract_local_background'
]
