import os.path
import sys
import logging
from argparse import ArgumentParser
from nibabel.filebasedimages import ImageFileError
from ..compose import TransformOptions
from ..errors import TransformError
from ..logger import setup_logger
from ..utils import expand_path
from .object import Transformer

logger = logging.getLogger('voltransform')

#                           ---------
#                           Arguments
#                           ---------
# Options can be written with one dash (-transform) or two (--transform).
parser = ArgumentParser(
    prog='transform-tool',
    description='Apply spatial transformations or reslice images. In most '
                'cases, this command only modifies the transform matrix, '
                'without reslicing the image. Only the "reslice" option '
                'modifies the image data.')
parser.add_argument('input', metavar='INPUT',
                    help='Input image to be transformed')
parser.add_argument('output', metavar='OUTPUT',
                    help='Output image')

#                           -----------------
#                           Transform options
#                           -----------------
parser.add_argument('-transform', '--transform', default=None,
                    metavar='FILE',
                    help='The 4x4 transform to apply, in the form of an '
                         'ASCII file')
parser.add_argument('-replace', '--replace', default=False,
                    action='store_true',
                    help='Replace the transform of the original image by '
                         'that specified, rather than applying it to the '
                         'original image')
parser.add_argument('-inverse', '--inverse', default=False,
                    action='store_true',
                    help='Invert the specified transform before using it')
parser.add_argument('-reference', '--reference', default=None,
                    metavar='IMAGE',
                    help='The transform maps the input image onto this '
                         'reference image (i.e. not to scanner '
                         'coordinates). Implies -replace')
parser.add_argument('-flipx', '--flipx', default=False, action='store_true',
                    help='Assume the transform is expressed in a coordinate '
                         'system with the x-axis reversed (e.g. FSL FLIRT). '
                         'Only used with -reference')

#                           ---------------
#                           Reslice options
#                           ---------------
parser.add_argument('-reslice', '--reslice', default=None, dest='template',
                    metavar='TEMPLATE',
                    help='Reslice the input image to match the specified '
                         'template image')
parser.add_argument('-interp', '--interp', default='linear',
                    dest='interpolation',
                    choices=['nearest', 'linear', 'cubic'],
                    help='Interpolation method used when reslicing '
                         '[default: linear]')
parser.add_argument('-oversample', '--oversample', nargs='+', default=None,
                    metavar='FACTOR',
                    help='Number of samples to take per voxel along each '
                         'spatial dimension (3 integers) [default: from '
                         'input and output voxel sizes]')
parser.add_argument('-nthreads', '--nthreads', type=int, default=1,
                    dest='n_jobs', metavar='N',
                    help='Number of threads used when reslicing '
                         '[default: 1]')

#                           --------------
#                           Output options
#                           --------------
parser.add_argument('-datatype', '--datatype', default=None, dest='dtype',
                    metavar='TYPE',
                    help='Output data type [default: same as input]')
parser.add_argument('-quiet', '--quiet', default=False, action='store_true',
                    help='Only display errors')
parser.add_argument('-verbose', '--verbose', default=False,
                    action='store_true',
                    help='Display debugging information')
parser.add_argument('-log', '--log', default=None, dest='log_file',
                    metavar='FILE',
                    help='Also write messages to this file')


def main(argv=None):
    """Run the command line tool.

    Returns
    -------
    status : int
        0 on success, 1 on failure.

    """
    args = parser.parse_args(argv)

    level = logging.INFO
    if args.quiet:
        level = logging.ERROR
    elif args.verbose:
        level = logging.DEBUG
    setup_logger(log_file=args.log_file, level=level)

    options = TransformOptions(
        transform=args.transform,
        replace=args.replace,
        inverse=args.inverse,
        reference=expand_path(args.reference) if args.reference else None,
        flipx=args.flipx,
        template=expand_path(args.template) if args.template else None,
        interpolation=args.interpolation,
        oversample=args.oversample,
        dtype=args.dtype,
        n_jobs=args.n_jobs,
        progress=not args.quiet,
    )

    try:
        Transformer(options)(expand_path(args.input),
                             os.path.expanduser(args.output))
    except (TransformError, OSError, ImageFileError) as e:
        logger.error('%s', e)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
