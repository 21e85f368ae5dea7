'''
Run a named segmentation method with parameters from a YAML file.

Methods:
    recursive_thresholding: global threshold refined per region
    spot_finding: local-maximum threshold for small bright foci
    watershed: watershed with merging and size filtering
'''
import logging

from lmseg.cli._common import add_parameter_arguments, add_verbose_argument, resolve_parameters, write_metadata
from lmseg.io.image_io import load_image, load_labels, save_image
from lmseg.io.metadata_tracking import RunMetadata
from lmseg.seg.pipelines import METHODS, background_subtracted, get_method
from lmseg.seg.quantify import measure_regions

logger = logging.getLogger(__name__)


def add_arguments(parser):
    '''
    Add command line arguments for the segment command.
    '''
    parser.add_argument(
        "input",
        type=str,
        help="Path to intensity image"
    )
    parser.add_argument(
        "output",
        type=str,
        help="Path to save the label map"
    )
    parser.add_argument(
        "--method",
        type=str,
        default="recursive_thresholding",
        choices=sorted(METHODS),
        help="Segmentation method"
    )
    parser.add_argument(
        "--seeds",
        type=str,
        help="Seed labels for the watershed method"
    )
    parser.add_argument(
        "--subtract-background",
        action="store_true",
        help="Subtract the local median (--box-size) before segmenting"
    )
    parser.add_argument(
        "--table",
        type=str,
        help="Also save per-region measurements of the input image to this CSV file"
    )
    add_parameter_arguments(parser, [
        "min_size", "max_size", "adaptive_increment", "threshold_increment",
        "box_size", "max_thresh_recursions", "shrink_edge_windows"
    ])
    add_verbose_argument(parser)


def main(args):
    '''
    Execute the segment command.
    '''
    params = resolve_parameters(args)
    method = get_method(args.method)
    image = load_image(args.input)
    inputs = [args.input]
    metadata = RunMetadata(command="segment", inputs=inputs, parameters=params.to_dict())

    working = background_subtracted(image, params, metadata) if args.subtract_background else image

    if args.method == "watershed":
        seeds = None
        if args.seeds:
            seeds = load_labels(args.seeds)
            inputs.append(args.seeds)
        labels = method(working, params, seeds=seeds, metadata=metadata)
    else:
        if args.seeds:
            logger.warning(f"--seeds is ignored by the {args.method} method")
        labels = method(working, params, metadata=metadata)

    save_image(args.output, labels.data)
    if args.table:
        table = measure_regions(labels, image)
        table.to_csv(args.table, index=False)
        logger.info(f"Saved measurements of {len(table)} regions to {args.table}")
    write_metadata(metadata, args.output)
    logger.info(f"Saved {labels.num_regions} regions to {args.output}")
