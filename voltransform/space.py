"""Voxel grids and their mapping to scanner space."""

import math
import numpy as np
from .linalg import AffineMatrix
from .errors import ValidationError
from .utils import parse_ints


def voxel_size(mat):
    """Return the voxel size associated with an affine matrix."""
    mat = np.asarray(mat)
    return np.sqrt((mat[:-1, :-1] ** 2).sum(axis=0))


class GridGeometry:
    """Geometry of a voxel grid: shape, voxel size and orientation.

    Two matrices describe the position of the grid in scanner space:

    * ``affine`` maps voxel indices to scanner coordinates;
    * ``transform`` maps scaled voxel coordinates (index times voxel
      size, in millimetres) to scanner coordinates. It is the matrix that
      transform files refer to, and is equal to
      ``affine @ diag(1/voxel_size)``.

    Instances are immutable.
    """

    __slots__ = ('_shape', '_vs', '_affine')

    def __init__(self, shape, affine=None, voxel_size=None):
        """

        Parameters
        ----------
        shape : iterable[int]
            Grid shape. Only the first three dimensions are spatial;
            trailing dimensions (e.g. volumes of a time series) are kept
            but not resampled. Missing spatial dimensions are singletons.
        affine : (4, 4) array_like, default=diag(voxel_size)
            Voxel-to-scanner matrix.
        voxel_size : iterable[float], default=from affine
            Voxel size. Computed from the norm of the affine columns when
            not provided.
        """
        shape = tuple(int(s) for s in shape)
        shape = shape + (1,) * max(0, 3 - len(shape))
        if any(s < 1 for s in shape[:3]):
            raise ValidationError('grid dimensions must be positive, got {}'
                                  .format(shape))
        if affine is None:
            vs = [1., 1., 1.] if voxel_size is None else voxel_size
            affine = np.diag(list(vs)[:3] + [1.])
        affine = AffineMatrix(affine)
        if voxel_size is None:
            voxel_size = np.sqrt((affine.linear ** 2).sum(axis=0))
        vs = tuple(float(v) for v in voxel_size)[:3]
        if len(vs) != 3 or any(v <= 0 for v in vs):
            raise ValidationError('voxel sizes must be three positive '
                                  'values, got {}'.format(vs))
        self._shape = shape
        self._vs = vs
        self._affine = affine

    @property
    def shape(self):
        """Full shape (spatial and trailing dimensions)."""
        return self._shape

    @property
    def spatial_shape(self):
        """Shape of the three spatial dimensions."""
        return self._shape[:3]

    @property
    def voxel_size(self):
        return self._vs

    @property
    def affine(self):
        """Voxel-to-scanner matrix."""
        return self._affine

    @property
    def scaling(self):
        """Voxel-to-millimetre scaling matrix."""
        return AffineMatrix(np.diag(list(self._vs) + [1.]))

    @property
    def transform(self):
        """Millimetre-to-scanner matrix."""
        unscale = AffineMatrix(np.diag([1. / v for v in self._vs] + [1.]))
        return self._affine @ unscale

    def with_transform(self, transform):
        """Return a copy of the geometry with a new scanner transform."""
        affine = AffineMatrix(transform) @ self.scaling
        return GridGeometry(self._shape, affine, self._vs)

    def with_shape(self, shape):
        """Return a copy of the geometry with a new shape."""
        return GridGeometry(shape, self._affine, self._vs)

    def __repr__(self):
        return 'GridGeometry(shape={}, voxel_size={})'.format(
            self._shape, tuple(round(v, 6) for v in self._vs))


def default_oversample(input_vs, output_vs):
    """Default oversampling factors.

    Output voxels that are larger than input voxels are sampled several
    times along each axis so that all the input voxels they cover
    contribute to their value.

    Parameters
    ----------
    input_vs : iterable[float]
        Input voxel size
    output_vs : iterable[float]
        Output voxel size

    Returns
    -------
    oversample : tuple[int]
        ``max(1, ceil(output_vs / input_vs))`` along each axis.

    """
    factors = []
    for i, o in zip(list(input_vs)[:3], list(output_vs)[:3]):
        ratio = round(float(o) / float(i), 6)
        factors.append(max(1, int(math.ceil(ratio))))
    return tuple(factors)


def check_oversample(oversample):
    """Validate user-defined oversampling factors.

    Parameters
    ----------
    oversample : str or int or iterable[int or str]
        Exactly three values, each greater than zero.

    Returns
    -------
    oversample : tuple[int]

    Raises
    ------
    ValidationError

    """
    factors = parse_ints(oversample)
    if len(factors) != 3:
        raise ValidationError('option "oversample" expects a vector of 3 '
                              'values, got {}'.format(len(factors)))
    if any(f < 1 for f in factors):
        raise ValidationError('oversample factors must be greater than '
                              'zero, got {}'.format(factors))
    return tuple(factors)
