'''
Zero every pixel below a maximum separability threshold.

The threshold is chosen from the image histogram either at the global
separability maximum or, with --method local, from its local maxima.
'''
import logging

from lmseg.cli._common import add_parameter_arguments, add_verbose_argument, resolve_parameters, write_metadata
from lmseg.image.pixel_grid import PixelGrid
from lmseg.io.image_io import load_image, save_image
from lmseg.io.metadata_tracking import RunMetadata
from lmseg.seg.thresholding import apply_local_maximum_separability, apply_maximum_separability

logger = logging.getLogger(__name__)

THRESHOLD_METHODS = {
    'global': apply_maximum_separability,
    'local': apply_local_maximum_separability,
}


def add_arguments(parser):
    '''
    Add command line arguments for the threshold command.
    '''
    parser.add_argument(
        "input",
        type=str,
        help="Path to intensity image (.tif, .tiff or .npy)"
    )
    parser.add_argument(
        "output",
        type=str,
        help="Path to save the thresholded image"
    )
    parser.add_argument(
        "--method",
        type=str,
        default="global",
        choices=sorted(THRESHOLD_METHODS),
        help="Global separability maximum or local-maximum refinement"
    )
    add_parameter_arguments(parser, ["adaptive_increment", "threshold_increment"])
    add_verbose_argument(parser)


def main(args):
    '''
    Execute the threshold command.
    '''
    params = resolve_parameters(args)
    grid = PixelGrid(load_image(args.input), copy=True)
    threshold = THRESHOLD_METHODS[args.method](
        grid, params.adaptive_increment, params.threshold_increment)
    save_image(args.output, grid.data)

    metadata = RunMetadata(command="threshold", inputs=[args.input], parameters=params.to_dict())
    metadata.add_step(f"{args.method}_maximum_separability",
                      parameters={'threshold': threshold},
                      input_data=[args.input], output_data=args.output)
    write_metadata(metadata, args.output)
    logger.info(f"Saved thresholded image (threshold {threshold}) to {args.output}")
