"""Apply a transform to a volume, implemented in an Object-Oriented
paradigm."""

import os.path
import logging
import numpy as np
from tqdm import tqdm
from ..io import VolumeReader, VolumeWriter, parse_dtype
from ..linalg import AffineMatrix
from ..space import check_oversample
from ..interpolate import get_interpolator
from ..compose import TransformOptions, compose_transform, apply_to_header
from ..reslice import Reslicer

logger = logging.getLogger(__name__)


def _select_writer(x, writer, prefix):
    """Choose writer based on input type."""
    if writer is None:
        if isinstance(x, str):
            writer = VolumeWriter(prefix=prefix)
        else:
            writer = VolumeWriter(dummy=True)
    return writer


def copy_with_progress(x, progress=False):
    """Copy a volume slice by slice.

    Parameters
    ----------
    x : np.ndarray
        Input volume
    progress : bool, default=False
        Display a progress bar

    Returns
    -------
    y : np.ndarray
        Copy of the input volume

    """
    y = np.empty_like(x)
    for i in tqdm(range(x.shape[0]), desc='copying', unit='slice',
                  disable=not progress):
        y[i] = x[i]
    return y


class Transformer:
    """Apply a spatial transform to a volume, or reslice it.

    In most cases, only the orientation matrix stored in the header is
    modified and voxel values are copied unchanged. When a template is
    provided, the volume is resliced onto the geometry of the template.

    All options are checked, and the net transform is computed, before
    any voxel data is read or written.
    """

    output_prefix = 'transformed_'

    def __init__(self, options=None, writer=None, **kwargs):
        """

        Parameters
        ----------
        options : TransformOptions, optional
            Options of the run. Keywords arguments (any field of
            ``TransformOptions``) override its values.

        writer : io.VolumeWriter, optional
            Writer object. Selected based on the input type by default.
        """
        if options is None:
            options = TransformOptions()
        self.options = options._replace(**kwargs)
        self.reader = VolumeReader()
        self.writer = writer

    def _inspect(self, x):
        if x is None:
            return None
        return self.reader.inspect(x)

    def __call__(self, x, output=None):
        """Transform a volume.

        Parameters
        ----------
        x : str or nib.SpatialImage or array_like
            Input volume.

        output : str, optional
            Output file name. Default: prefixed input.

        Returns
        -------
        y : nib.SpatialImage or np.ndarray
            Written image, or transformed array if the input is an array
            and no output file is given.

        """
        opt = self.options
        if output is None:
            writer = _select_writer(x, self.writer, self.output_prefix)
        else:
            writer = self.writer or VolumeWriter()

        # --- Validate everything before touching voxel data ---
        info = self.reader.inspect(x)
        geometry = info['geometry']
        transform = opt.transform
        if isinstance(transform, str):
            transform = AffineMatrix.load(os.path.expanduser(transform))
        reference = self._inspect(opt.reference)
        template = self._inspect(opt.template)
        dtype = parse_dtype(opt.dtype)
        interpolation = get_interpolator(opt.interpolation)
        oversample = (check_oversample(opt.oversample)
                      if opt.oversample is not None else None)

        transform, replace = compose_transform(
            transform,
            inverse=opt.inverse,
            reference=reference['geometry'] if reference else None,
            flipx=opt.flipx,
            input_geometry=geometry,
            replace=opt.replace)
        if transform is not None:
            logger.debug('net transform (%s):\n%s',
                         'replace' if replace else 'compose',
                         np.array2string(transform.matrix, precision=6,
                                         suppress_small=True))

        # --- Reslice or copy ---
        if template is not None:
            if replace:
                # The input now maps directly to scanner space
                geometry = apply_to_header(geometry, transform, replace=True)
                transform = None
            out_geometry = template['geometry'].with_shape(
                template['geometry'].spatial_shape + geometry.shape[3:])
            x = self.reader(x, read_info=False)
            y = Reslicer(interpolation, oversample, n_jobs=opt.n_jobs,
                         progress=opt.progress)(x, geometry, out_geometry,
                                                transform)
            name = template['name'] or 'array'
            description = 'resliced to reference image "{}"'.format(name)
        else:
            out_geometry = apply_to_header(geometry, transform, replace)
            x = self.reader(x, read_info=False)
            y = copy_with_progress(x, opt.progress)
            description = None
            if transform is not None:
                description = 'transform modified'

        return writer(y, fname=output, info=info,
                      affine=np.asarray(out_geometry.affine), dtype=dtype,
                      description=description)
