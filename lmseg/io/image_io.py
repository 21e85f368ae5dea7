'''
author: zyx
date: 2026-10-16
last_modified: 2026-10-16
description:
    Loading and saving intensity images and label maps (TIFF or .npy)
'''
import logging
from pathlib import Path
from typing import Union

import numpy as np
import tifffile

logger = logging.getLogger(__name__)

TIFF_SUFFIXES = ('.tif', '.tiff')
NUMPY_SUFFIXES = ('.npy',)


def _check_suffix(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix not in TIFF_SUFFIXES + NUMPY_SUFFIXES:
        raise ValueError(f"Unsupported file type '{suffix}' for {path}; use .tif, .tiff or .npy")
    return suffix


def load_image(path: Union[str, Path]) -> np.ndarray:
    '''
    Load an image volume or slice from a TIFF or .npy file.

    Parameters
    ----------
    path : str or Path
        File to read

    Returns
    -------
    numpy.ndarray
        Image data as stored
    '''
    path = Path(path)
    suffix = _check_suffix(path)
    if not path.exists():
        raise FileNotFoundError(f"Image not found: {path}")
    try:
        if suffix in TIFF_SUFFIXES:
            data = tifffile.imread(path)
        else:
            data = np.load(path, allow_pickle=False)
    except Exception as e:
        logger.error(f"Error loading image {path}: {e}")
        raise
    logger.info(f"Loaded {path} with shape {data.shape}, dtype {data.dtype}")
    return data


def load_labels(path: Union[str, Path]) -> np.ndarray:
    '''Load a label map and convert it to int64.'''
    data = load_image(path)
    if not np.issubdtype(data.dtype, np.integer):
        data = np.trunc(data)
    return data.astype(np.int64)


def save_image(path: Union[str, Path], data: np.ndarray) -> Path:
    '''
    Save an array as TIFF or .npy, chosen by the file extension.

    Label maps are stored as int32 in TIFF files.
    '''
    path = Path(path)
    suffix = _check_suffix(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = np.asarray(data)
    if suffix in TIFF_SUFFIXES:
        if data.dtype == np.int64:
            data = data.astype(np.int32)
        tifffile.imwrite(path, data)
    else:
        np.save(path, data)
    logger.info(f"Saved {path}")
    return path
