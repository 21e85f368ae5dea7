'''
author: zyx
date: 2026-10-16
last_modified: 2026-10-16
description:
    Segmentation parameters: defaults, validation and YAML files
'''
import logging
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from lmseg.errors import ParameterError

logger = logging.getLogger(__name__)


@dataclass
class SegmentationParameters:
    '''
    Named options accepted by the segmentation methods.

    Attributes
    ----------
    min_size : int
        Smallest region kept, in pixels
    max_size : int
        Largest region kept; larger regions are re-thresholded
    adaptive_increment : bool
        Subsample threshold candidates to about 1000 steps
    threshold_increment : int
        Threshold candidate step when not adaptive
    box_size : int
        Box radius of the local background (median) filter
    max_thresh_recursions : int
        Maximum rounds of recursive re-thresholding
    shrink_edge_windows : bool
        Count only real pixels in median windows at the image edge
    '''
    min_size: int = 25
    max_size: int = 1000
    adaptive_increment: bool = False
    threshold_increment: int = 1
    box_size: int = 25
    max_thresh_recursions: int = 3
    shrink_edge_windows: bool = False

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        '''Raise ParameterError for wrongly typed or out of range values.'''
        for f in fields(self):
            value = getattr(self, f.name)
            if f.type in (bool, 'bool'):
                if not isinstance(value, bool):
                    raise ParameterError(f"{f.name} must be true or false, got {value!r}")
            elif isinstance(value, bool) or not isinstance(value, int):
                raise ParameterError(f"{f.name} must be an integer, got {value!r}")
            elif value < 0:
                raise ParameterError(f"{f.name} must be non-negative, got {value}")
        if self.threshold_increment < 1:
            raise ParameterError(f"threshold_increment must be at least 1, got {self.threshold_increment}")
        if self.min_size > self.max_size:
            raise ParameterError(f"min_size ({self.min_size}) is larger than max_size ({self.max_size})")

    @classmethod
    def from_dict(cls, mapping: Dict[str, Any]) -> 'SegmentationParameters':
        '''Build from a mapping; missing keys take defaults, unknown keys are an error.'''
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(mapping) - known)
        if unknown:
            raise ParameterError(f"Unknown parameter(s): {', '.join(unknown)}")
        return cls(**mapping)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def updated(self, **overrides) -> 'SegmentationParameters':
        '''Copy with the given values replaced; None values are ignored.'''
        changes = {k: v for k, v in overrides.items() if v is not None}
        if not changes:
            return self
        known = {f.name for f in fields(self)}
        unknown = sorted(set(changes) - known)
        if unknown:
            raise ParameterError(f"Unknown parameter(s): {', '.join(unknown)}")
        return replace(self, **changes)


def load_parameters(path: Union[str, Path]) -> SegmentationParameters:
    '''
    Load segmentation parameters from a YAML file

    Parameters
    ----------
    path : str or Path
        YAML file holding a mapping of parameter names to values

    Returns
    -------
    SegmentationParameters
        Validated parameters
    '''
    try:
        with open(path, 'r') as f:
            config = yaml.safe_load(f)
        if config is None:
            config = {}
        if not isinstance(config, dict):
            raise ParameterError(f"Parameter file must contain a mapping, got {type(config).__name__}")
        return SegmentationParameters.from_dict(config)
    except Exception as e:
        logger.error(f"Error loading parameters from {path}: {e}")
        raise


def save_parameters(parameters: SegmentationParameters, path: Union[str, Path]) -> Path:
    '''Write parameters to a YAML file.'''
    path = Path(path)
    with open(path, 'w') as f:
        yaml.safe_dump(parameters.to_dict(), f, default_flow_style=False, sort_keys=False)
    return path
