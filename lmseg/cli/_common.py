'''
Shared argument handling for the lmseg subcommands.
'''
import logging
from pathlib import Path
from typing import List, Optional

from lmseg.io.metadata_tracking import RunMetadata, metadata_path
from lmseg.io.parameters import SegmentationParameters, load_parameters

logger = logging.getLogger(__name__)


def add_verbose_argument(parser):
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )


def add_parameter_arguments(parser, names: List[str]):
    '''
    Add --config and per-parameter flags that override the config file.
    '''
    parser.add_argument(
        "--config",
        type=str,
        help="YAML file with segmentation parameters"
    )
    flags = {
        "min_size": dict(type=int, help="Smallest region kept (pixels)"),
        "max_size": dict(type=int, help="Largest region kept (pixels)"),
        "threshold_increment": dict(type=int, help="Step between threshold candidates"),
        "box_size": dict(type=int, help="Box radius of the median background filter"),
        "max_thresh_recursions": dict(type=int, help="Maximum rounds of recursive re-thresholding"),
    }
    switches = {
        "adaptive_increment": "Subsample threshold candidates to about 1000 steps",
        "shrink_edge_windows": "Count only real pixels in median windows at the edges",
    }
    for name in names:
        option = "--" + name.replace("_", "-")
        if name in flags:
            parser.add_argument(option, dest=name, default=None, **flags[name])
        else:
            parser.add_argument(option, dest=name, action="store_const", const=True,
                                default=None, help=switches[name])


def resolve_parameters(args) -> SegmentationParameters:
    '''Parameters from --config (or defaults) with command line overrides applied.'''
    config = getattr(args, "config", None)
    params = load_parameters(config) if config else SegmentationParameters()
    names = [n for n in params.to_dict() if hasattr(args, n)]
    return params.updated(**{n: getattr(args, n) for n in names})


def write_metadata(metadata: RunMetadata, output: str) -> Optional[Path]:
    '''Write run metadata as JSON next to the output file.'''
    path = metadata_path(output)
    metadata.output = str(output)
    metadata.to_json(path)
    logger.info(f"Saved run metadata to {path}")
    return path
