"""Tools for reslicing volumes implemented in an Object-Oriented paradigm."""

# WARNING: reslice.functional imports reslice.object, so the opposite
# import is forbidden

import itertools
import logging
from concurrent.futures import ThreadPoolExecutor
import numpy as np
from tqdm import tqdm
from ..interpolate import get_interpolator, affine_grid
from ..linalg import AffineMatrix
from ..space import GridGeometry, default_oversample, check_oversample
from ..utils import argdef

logger = logging.getLogger(__name__)


def subvoxel_offsets(oversample):
    """Positions of the sub-samples within a voxel.

    Each voxel is divided into a regular grid of ``prod(oversample)``
    cells, and sub-samples are taken at the centre of each cell. With an
    oversampling factor of one, the only sample is the voxel centre.

    Parameters
    ----------
    oversample : iterable[int]
        Number of sub-samples along each dimension.

    Returns
    -------
    offsets : (prod(oversample), 3) np.ndarray
        Offsets with respect to the voxel centre, in voxels.

    """
    axes = [(np.arange(o, dtype=np.float64) + 0.5) / o - 0.5
            for o in oversample]
    return np.asarray(list(itertools.product(*axes)), dtype=np.float64)


class Reslicer:
    """Resample a volume onto a new voxel grid.

    Each output voxel is mapped into the input voxel space through the
    matrix ``inv(input.affine) @ transform @ output.affine``. The voxel
    is oversampled on a regular sub-grid, each sub-sample is
    interpolated in the input volume, and the output value is the mean
    of all sub-samples.

    Output slices (along the first dimension) do not depend on each
    other and can be computed in parallel.
    """

    def __init__(self, interpolation='linear', oversample=None, *,
                 n_jobs=1, progress=False):
        """

        Parameters
        ----------
        interpolation : {'nearest', 'linear', 'cubic'} or Interpolator,
                        default='linear'
            Interpolation method

        oversample : iterable[int], default=from voxel sizes
            Number of sub-samples per output voxel along each dimension.
            By default, ``ceil(output_vs / input_vs)``.

        Other Parameters
        ----------------
        n_jobs : int, default=1
            Number of threads

        progress : bool, default=False
            Display a progress bar
        """
        self.interpolation = get_interpolator(interpolation)
        self.oversample = (check_oversample(oversample)
                           if oversample is not None else None)
        self.n_jobs = n_jobs
        self.progress = progress

    def __call__(self, x, input_geometry, output_geometry, transform=None, *,
                 interpolation=None, oversample=None, n_jobs=None,
                 progress=None, out=None):
        """Reslice a volume onto a target geometry.

        Parameters
        ----------
        x : (*input_spatial, *features) array_like
            Input volume.

        input_geometry : GridGeometry
            Geometry of the input volume.

        output_geometry : GridGeometry or (4, 4) array_like
            Geometry of the output volume. If a matrix is provided, the
            output grid has the same shape as the input.

        transform : (4, 4) array_like, default=identity
            Scanner-to-scanner transform applied to output coordinates
            before they are mapped into the input volume.

        Other Parameters
        ----------------
        interpolation : str or Interpolator, default=self.interpolation
            Interpolation method

        oversample : iterable[int], default=self.oversample
            Oversampling factors

        n_jobs : int, default=self.n_jobs
            Number of threads

        progress : bool, default=self.progress
            Display a progress bar

        out : (*output_spatial, *features) np.ndarray, optional
            Output placeholder

        Returns
        -------
        y : (*output_spatial, *features) np.ndarray
            Resliced volume

        """
        x = np.asarray(x)
        if x.ndim < 3:
            x = x.reshape(x.shape + (1,) * (3 - x.ndim))
        if not isinstance(input_geometry, GridGeometry):
            input_geometry = GridGeometry(x.shape[:3], input_geometry)
        if not isinstance(output_geometry, GridGeometry):
            output_geometry = GridGeometry(x.shape[:3], output_geometry)

        interpolation = get_interpolator(argdef(interpolation,
                                                self.interpolation))
        oversample = argdef(oversample, self.oversample)
        if oversample is None:
            oversample = default_oversample(input_geometry.voxel_size,
                                            output_geometry.voxel_size)
        else:
            oversample = check_oversample(oversample)
        n_jobs = max(1, int(argdef(n_jobs, self.n_jobs)))
        progress = argdef(progress, self.progress)
        transform = (AffineMatrix.identity() if transform is None
                     else AffineMatrix(transform))

        # The voxel-to-voxel mapping is the same for all output voxels
        mat = (input_geometry.affine.inverse() @ transform
               @ output_geometry.affine)
        shifts = np.dot(subvoxel_offsets(oversample), mat.linear.transpose())

        output_shape = tuple(output_geometry.spatial_shape) + x.shape[3:]
        if out is None:
            out = np.zeros(output_shape, dtype=np.float64)
        elif tuple(out.shape) != output_shape:
            raise ValueError('Output placeholder has shape {}, expected {}'
                             .format(tuple(out.shape), output_shape))

        logger.info('reslicing %s -> %s (%s interpolation, oversampling %s)',
                    'x'.join(str(s) for s in x.shape[:3]),
                    'x'.join(str(s) for s in output_shape[:3]),
                    interpolation.name, 'x'.join(str(o) for o in oversample))

        def reslice_slice(i):
            grid = affine_grid(mat.matrix, (1,) + output_shape[1:3],
                               start=(i, 0, 0))[0]
            acc = np.zeros(output_shape[1:], dtype=np.float64)
            for shift in shifts:
                acc += interpolation.sample(x, grid + shift)[0]
            acc /= len(shifts)
            return acc

        nb_slices = output_shape[0]
        with tqdm(total=nb_slices, desc='reslicing', unit='slice',
                  disable=not progress) as pbar:
            if n_jobs == 1:
                for i in range(nb_slices):
                    out[i] = reslice_slice(i)
                    pbar.update(1)
            else:
                with ThreadPoolExecutor(n_jobs) as executor:
                    slices = executor.map(reslice_slice, range(nb_slices))
                    for i, y in enumerate(slices):
                        out[i] = y
                        pbar.update(1)
        return out
