'''
Label connected regions of a mask (8-connected in 2D, 6-connected in 3D).
'''
import logging

from lmseg.cli._common import add_verbose_argument, write_metadata
from lmseg.io.image_io import load_image, save_image
from lmseg.io.metadata_tracking import RunMetadata
from lmseg.seg.labeling import label, label_2d, merge, relabel

logger = logging.getLogger(__name__)


def add_arguments(parser):
    '''
    Add command line arguments for the label command.
    '''
    parser.add_argument(
        "input",
        type=str,
        help="Path to mask or thresholded image; positive pixels are foreground"
    )
    parser.add_argument(
        "output",
        type=str,
        help="Path to save the label map"
    )
    parser.add_argument(
        "--planes",
        action="store_true",
        help="Label every (y, x) plane separately instead of the whole volume"
    )
    parser.add_argument(
        "--merge",
        action="store_true",
        help="Treat the input as labels and merge touching regions"
    )
    add_verbose_argument(parser)


def main(args):
    '''
    Execute the label command.
    '''
    data = load_image(args.input)
    metadata = RunMetadata(command="label", inputs=[args.input])

    if args.merge:
        labels = relabel(merge(data))
        step = "merge"
    elif args.planes:
        labels = label_2d(data)
        step = "label_2d"
    else:
        labels = label(data)
        step = "label"

    save_image(args.output, labels.data)
    metadata.add_step(step, parameters={'regions': labels.num_regions},
                      input_data=[args.input], output_data=args.output)
    write_metadata(metadata, args.output)
    logger.info(f"Saved {labels.num_regions} regions to {args.output}")
