'''
Watershed segmentation, flooding from the brightest level or from seed labels.
'''
import logging

from lmseg.cli._common import add_verbose_argument, write_metadata
from lmseg.io.image_io import load_image, load_labels, save_image
from lmseg.io.metadata_tracking import RunMetadata
from lmseg.seg.watershed import Seeded, Unseeded, watershed

logger = logging.getLogger(__name__)


def add_arguments(parser):
    '''
    Add command line arguments for the watershed command.
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
        "--seeds",
        type=str,
        help="Path to seed labels; without it the brightest level seeds the flood"
    )
    invert = parser.add_mutually_exclusive_group()
    invert.add_argument(
        "--invert",
        action="store_const",
        const=True,
        dest="invert",
        help="Flood the inverted image (default without seeds)"
    )
    invert.add_argument(
        "--no-invert",
        action="store_const",
        const=False,
        dest="invert",
        help="Flood the image as is (default with seeds)"
    )
    add_verbose_argument(parser)


def main(args):
    '''
    Execute the watershed command.
    '''
    image = load_image(args.input)
    inputs = [args.input]
    if args.seeds:
        strategy = Seeded.from_seeds(load_labels(args.seeds))
        inputs.append(args.seeds)
    else:
        strategy = Unseeded()

    labels = watershed(image, strategy, invert=args.invert)
    save_image(args.output, labels.data)

    metadata = RunMetadata(command="watershed", inputs=inputs)
    metadata.add_step("watershed",
                      parameters={'seeded': args.seeds is not None, 'invert': args.invert,
                                  'regions': labels.num_regions},
                      input_data=inputs, output_data=args.output)
    write_metadata(metadata, args.output)
    logger.info(f"Saved {labels.num_regions} regions to {args.output}")
