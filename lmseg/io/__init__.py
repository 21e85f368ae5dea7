'''
IO module for lmseg.
Contains functions for loading and saving images, label maps, parameters and run metadata.
'''

from .image_io import load_image, load_labels, save_image
from .parameters import SegmentationParameters, load_parameters, save_parameters
from .metadata_tracking import ProcessingStep, RunMetadata, metadata_path

__all__ = [
    'load_image',
    'load_labels',
    'save_image',
    'SegmentationParameters',
    'load_parameters',
    'save_parameters',
    'ProcessingStep',
    'RunMetadata',
    'metadata_path'
]
