'''
Estimate or subtract local background with a sliding median filter.
'''
import logging

from lmseg.cli._common import add_parameter_arguments, add_verbose_argument, resolve_parameters, write_metadata
from lmseg.compute.rank_filter import local_median, subtract_local_background
from lmseg.io.image_io import load_image, save_image
from lmseg.io.metadata_tracking import RunMetadata

logger = logging.getLogger(__name__)


def add_arguments(parser):
    '''
    Add command line arguments for the background command.
    '''
    parser.add_argument(
        "input",
        type=str,
        help="Path to intensity image (2D or 3D)"
    )
    parser.add_argument(
        "output",
        type=str,
        help="Path to save the result"
    )
    parser.add_argument(
        "--estimate-only",
        action="store_true",
        help="Save the local median itself instead of the background-subtracted image"
    )
    add_parameter_arguments(parser, ["box_size", "shrink_edge_windows"])
    add_verbose_argument(parser)


def main(args):
    '''
    Execute the background command.
    '''
    params = resolve_parameters(args)
    image = load_image(args.input)
    if args.estimate_only:
        result = local_median(image, params.box_size, params.shrink_edge_windows)
        step = "local_median"
    else:
        result = subtract_local_background(image, params.box_size, params.shrink_edge_windows)
        step = "subtract_local_background"
    save_image(args.output, result.data)

    metadata = RunMetadata(command="background", inputs=[args.input], parameters=params.to_dict())
    metadata.add_step(step,
                      parameters={'box_size': params.box_size,
                                  'shrink_edge_windows': params.shrink_edge_windows},
                      input_data=[args.input], output_data=args.output)
    write_metadata(metadata, args.output)
