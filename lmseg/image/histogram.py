'''
author: zyx
date: 2026-10-16
last_modified: 2026-10-16
description:
    Integer-bucketed intensity histogram of a PixelGrid snapshot
'''
import logging
from dataclasses import dataclass
from typing import Union

import numpy as np

from lmseg.image.pixel_grid import PixelGrid, as_grid

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Histogram:
    '''
    Immutable histogram of the active region of a grid.

    Values are truncated to integers and bucketed into counts[0..max_value].
    Negative values are skipped. Statistics over "nonzero" values exclude
    bucket 0, so background does not dominate the mode or the separability
    calculation.
    '''
    counts: np.ndarray
    cumulative_counts: np.ndarray
    total_counts: int
    max_value: int
    min_value: int
    min_value_nonzero: int
    mean: float
    variance: float
    mean_nonzero: float
    variance_nonzero: float
    mode: int
    counts_at_mode: int

    @property
    def nonzero_counts(self) -> int:
        return self.total_counts - int(self.counts[0])

    @staticmethod
    def find_max_value(image: Union[PixelGrid, np.ndarray]) -> int:
        '''Largest value in the active region truncated to int, or 0.'''
        values = as_grid(image).active
        if values.size == 0:
            return 0
        return max(int(np.nanmax(values)), 0)

    @classmethod
    def build(cls, image: Union[PixelGrid, np.ndarray]) -> 'Histogram':
        values = np.asarray(as_grid(image).active, dtype=np.float64).ravel()

        negative = values < 0
        if negative.any():
            logger.warning(f"Ignoring {int(negative.sum())} negative image values in histogram")
        values = values[values >= 0]

        buckets = values.astype(np.int64)
        max_value = int(buckets.max()) if buckets.size else 0
        counts = np.bincount(buckets, minlength=max_value + 1)
        total = int(counts.sum())

        populated = np.flatnonzero(counts)
        min_value = int(populated[0]) if populated.size else 0
        populated_nonzero = populated[populated > 0]
        min_value_nonzero = int(populated_nonzero[0]) if populated_nonzero.size else 0

        mean = float(values.sum() / total) if total else 0.0

        index = np.arange(counts.size, dtype=np.float64)
        nonzero = total - int(counts[0])
        if nonzero > 0:
            mean_nonzero = float((index[1:] * counts[1:]).sum() / nonzero)
            variance_nonzero = float((((index[1:] - mean_nonzero) ** 2) * counts[1:]).sum() / nonzero)
        else:
            mean_nonzero = 0.0
            variance_nonzero = 0.0
        variance = float((((index - mean) ** 2) * counts).sum() / total) if total else 0.0

        # mode search skips bucket 0
        if counts.size > 1 and counts[1:].max() > 0:
            mode = int(np.argmax(counts[1:])) + 1
            counts_at_mode = int(counts[mode])
        else:
            mode = 0
            counts_at_mode = 0

        cumulative = np.cumsum(counts)
        counts.flags.writeable = False
        cumulative.flags.writeable = False

        return cls(
            counts=counts,
            cumulative_counts=cumulative,
            total_counts=total,
            max_value=max_value,
            min_value=min_value,
            min_value_nonzero=min_value_nonzero,
            mean=mean,
            variance=variance,
            mean_nonzero=mean_nonzero,
            variance_nonzero=variance_nonzero,
            mode=mode,
            counts_at_mode=counts_at_mode,
        )

    def __str__(self) -> str:
        return ",".join(f"({i},{c})" for i, c in enumerate(self.counts))


def build_histogram(image: Union[PixelGrid, np.ndarray]) -> Histogram:
    '''Convenience wrapper for Histogram.build.'''
    return Histogram.build(image)
