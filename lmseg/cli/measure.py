'''
Measure size, intensity and position of every labeled region.
'''
import logging

from lmseg.cli._common import add_verbose_argument
from lmseg.io.image_io import load_image, load_labels
from lmseg.seg.quantify import measure_regions

logger = logging.getLogger(__name__)


def add_arguments(parser):
    '''
    Add command line arguments for the measure command.
    '''
    parser.add_argument(
        "labels",
        type=str,
        help="Path to label map"
    )
    parser.add_argument(
        "output",
        type=str,
        help="Path to save the measurements (CSV)"
    )
    parser.add_argument(
        "--intensity",
        type=str,
        help="Path to intensity image of the same shape"
    )
    add_verbose_argument(parser)


def main(args):
    '''
    Execute the measure command.
    '''
    labels = load_labels(args.labels)
    image = load_image(args.intensity) if args.intensity else None
    table = measure_regions(labels, image)
    table.to_csv(args.output, index=False)
    logger.info(f"Saved measurements of {len(table)} regions to {args.output}")
