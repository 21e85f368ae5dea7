'''
author: zyx
date: 2026-10-16
last_modified: 2026-10-16
description:
    Per-region intensity measurements for a label map
'''
import logging
from typing import Optional, Union

import numpy as np
import pandas as pd
from scipy import ndimage

from lmseg.image.pixel_grid import PixelGrid, as_grid, as_label_map

logger = logging.getLogger(__name__)

COLUMNS = ['label', 'size', 'mean_intensity', 'total_intensity', 'centroid', 'bbox']


def measure_regions(
    labels: Union[PixelGrid, np.ndarray],
    image: Optional[Union[PixelGrid, np.ndarray]] = None
) -> pd.DataFrame:
    '''
    Measure every labeled region.

    Parameters
    ----------
    labels : PixelGrid or numpy.ndarray
        Region labels, 0 is background
    image : PixelGrid or numpy.ndarray, optional
        Intensity grid of the same shape. Without it the intensity columns are NaN.

    Returns
    -------
    pandas.DataFrame
        One row per region, sorted by label:
        - 'label': region label
        - 'size': pixel count
        - 'mean_intensity': mean intensity inside the region
        - 'total_intensity': summed intensity inside the region
        - 'centroid': centroid in array axis order
        - 'bbox': (start, ..., stop, ...) in array axis order, stop exclusive
    '''
    label_data = as_label_map(labels).data
    intensity = None
    if image is not None:
        intensity = as_grid(image).data.astype(np.float64)
        if intensity.shape != label_data.shape:
            raise ValueError(f"Label shape {label_data.shape} does not match image shape {intensity.shape}")

    rows = []
    for index, slices in enumerate(ndimage.find_objects(label_data)):
        if slices is None:
            continue
        region = index + 1
        region_mask = label_data[slices] == region
        size = int(region_mask.sum())
        offset = [s.start for s in slices]
        centroid = tuple(float(c + o) for c, o in zip(ndimage.center_of_mass(region_mask), offset))
        if intensity is not None:
            values = intensity[slices][region_mask]
            mean_intensity = float(values.mean())
            total_intensity = float(values.sum())
        else:
            mean_intensity = total_intensity = float('nan')
        rows.append({
            'label': region,
            'size': size,
            'mean_intensity': mean_intensity,
            'total_intensity': total_intensity,
            'centroid': centroid,
            'bbox': tuple(s.start for s in slices) + tuple(s.stop for s in slices),
        })

    logger.info(f"Measured {len(rows)} regions")
    return pd.DataFrame(rows, columns=COLUMNS)
