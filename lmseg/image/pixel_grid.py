'''
author: zyx
date: 2026-10-16
last_modified: 2026-10-16
description:
    Addressable intensity grids and label maps

Classes:
    Coordinate: Immutable (x, y, z, c, t) pixel address
    PixelGrid: numpy-backed 2D-5D grid with an optional box of interest
    LabelMap: PixelGrid of non-negative integer region labels

Functions:
    as_grid: Wrap an array (or pass through a grid)
    as_label_map: Wrap an array (or grid) as a LabelMap
'''
import logging
from typing import Iterator, NamedTuple, Optional, Tuple, Union

import numpy as np

logger = logging.getLogger(__name__)

# numpy axis order, right-aligned: a 2D array is (y, x), a 3D array (z, y, x)
AXES = ('t', 'c', 'z', 'y', 'x')


class Coordinate(NamedTuple):
    '''Pixel address over named dimensions. Unused dimensions stay 0.'''
    x: int
    y: int
    z: int = 0
    c: int = 0
    t: int = 0


class PixelGrid:
    '''
    Dense grid of scalar intensities addressed by Coordinate.

    Parameters
    ----------
    data : numpy.ndarray
        Array with 2 to 5 dimensions in (t, c, z, y, x) order, right-aligned
    copy : bool
        Copy the array instead of wrapping it

    Notes
    -----
    get/set do not check bounds. Call in_bounds first when the coordinate
    can fall outside the grid.
    '''

    def __init__(self, data: np.ndarray, copy: bool = False):
        data = np.array(data, copy=True) if copy else np.asarray(data)
        if not 2 <= data.ndim <= len(AXES):
            raise ValueError(f"PixelGrid needs 2 to {len(AXES)} dimensions, got shape {data.shape}")
        self.data = data
        self._box: Optional[Tuple[slice, ...]] = None

    @classmethod
    def zeros(cls, shape: Tuple[int, ...], dtype=np.float64) -> 'PixelGrid':
        '''Create a zero-filled grid.'''
        return cls(np.zeros(shape, dtype=dtype))

    @property
    def shape(self) -> Tuple[int, ...]:
        return self.data.shape

    @property
    def ndim(self) -> int:
        return self.data.ndim

    @property
    def axes(self) -> Tuple[str, ...]:
        return AXES[-self.ndim:]

    @property
    def dimension_sizes(self) -> Coordinate:
        sizes = dict(zip(self.axes, self.shape))
        return Coordinate(**{a: sizes.get(a, 1) for a in Coordinate._fields})

    def _index(self, coord: Coordinate) -> Tuple[int, ...]:
        return tuple(getattr(coord, a) for a in self.axes)

    def get(self, coord: Coordinate):
        return self.data[self._index(coord)]

    def set(self, coord: Coordinate, value) -> None:
        self.data[self._index(coord)] = value

    def in_bounds(self, coord: Coordinate) -> bool:
        '''True if every used axis is inside the grid and unused axes are 0.'''
        for axis in Coordinate._fields:
            value = getattr(coord, axis)
            if axis in self.axes:
                if value < 0 or value >= self.shape[self.axes.index(axis)]:
                    return False
            elif value != 0:
                return False
        return True

    # box of interest

    def set_box_of_interest(self, lower: Coordinate, upper: Coordinate) -> None:
        '''
        Restrict iteration to [lower, upper) along every used axis.
        '''
        box = []
        for axis, size in zip(self.axes, self.shape):
            lo, hi = getattr(lower, axis), getattr(upper, axis)
            if not 0 <= lo < hi <= size:
                raise ValueError(
                    f"Invalid box of interest on axis {axis}: [{lo}, {hi}) for size {size}")
            box.append(slice(lo, hi))
        self._box = tuple(box)

    def clear_box_of_interest(self) -> None:
        self._box = None

    @property
    def box_of_interest(self) -> Optional[Tuple[slice, ...]]:
        return self._box

    @property
    def active(self) -> np.ndarray:
        '''View of the box of interest, or of the whole array.'''
        if self._box is None:
            return self.data
        return self.data[self._box]

    def __iter__(self) -> Iterator[Coordinate]:
        offsets = [0] * self.ndim if self._box is None else [s.start for s in self._box]
        for index in np.ndindex(*self.active.shape):
            yield Coordinate(**{a: i + o for a, i, o in zip(self.axes, index, offsets)})

    def copy(self) -> 'PixelGrid':
        '''Copy of the data; the box of interest is carried over.'''
        other = type(self)(self.data.copy())
        other._box = self._box
        return other

    def __repr__(self) -> str:
        return f"{type(self).__name__}(shape={self.shape}, dtype={self.data.dtype})"


class LabelMap(PixelGrid):
    '''
    PixelGrid of region labels. 0 is background or barrier.
    '''

    def __init__(self, data: np.ndarray, copy: bool = False):
        data = np.asarray(data)
        if data.dtype == bool or np.issubdtype(data.dtype, np.integer):
            # labels are always int64
            data = data.astype(np.int64, copy=copy)
        else:
            data = np.trunc(data).astype(np.int64)
        if data.size and data.min() < 0:
            raise ValueError("Labels must be non-negative")
        super().__init__(data)

    @property
    def num_regions(self) -> int:
        '''Number of distinct positive labels.'''
        values = np.unique(self.data)
        return int(np.count_nonzero(values))

    def region_sizes(self) -> np.ndarray:
        '''Pixel counts indexed by label (index 0 is background).'''
        return np.bincount(self.data.ravel())


def as_grid(image: Union[PixelGrid, np.ndarray], copy: bool = False) -> PixelGrid:
    '''
    Return `image` as a PixelGrid, wrapping arrays without copying unless asked.
    '''
    if isinstance(image, PixelGrid):
        return image.copy() if copy else image
    return PixelGrid(image, copy=copy)


def as_label_map(labels: Union[PixelGrid, np.ndarray]) -> LabelMap:
    if isinstance(labels, LabelMap):
        return labels
    if isinstance(labels, PixelGrid):
        return LabelMap(labels.data)
    return LabelMap(labels)
