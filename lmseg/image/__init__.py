'''
Image model for lmseg: coordinates, pixel grids, label maps and histograms.
'''

from .pixel_grid import (
    Coordinate,
    PixelGrid,
    LabelMap,
    as_grid,
    as_label_map
)

from .histogram import (
    Histogram,
    build_histogram
)

__all__ = [
    'Coordinate',
    'PixelGrid',
    'LabelMap',
    'as_grid',
    'as_label_map',
    'Histogram',
    'build_histogram'
]
