"""Sampling of volumes at continuous coordinates.

Three interpolators are available (``Nearest``, ``Linear`` and
``Cubic``). They share the same interface: ``sample(x, grid)`` returns
the values of ``x`` at the coordinates stored in ``grid`` together with
a mask of in-bounds coordinates. Coordinates that fall outside the
field-of-view, i.e., further than half a voxel from the first or last
voxel centre along any axis, are assigned the value zero.

Volumes have shape ``(*spatial, *features)`` with three spatial
dimensions; features (e.g. volumes of a series) are sampled
independently.
"""

import itertools
import numpy as np
from .errors import ValidationError


def identity_grid(shape, start=None, dtype=None):
    """Generate a dense identity grid

    Parameters
    ----------
    shape : iterable of length D
        Shape of the dense grid.
    start : iterable of length D, default=0
        Index of the first grid point along each dimension.
    dtype : type, default=float64
        Output data type.

    Returns
    -------
    grid : np.ndarray of shape (*shape, D)
        Dense identity grid.

    """
    if start is None:
        start = [0] * len(shape)
    grid = np.stack(np.meshgrid(*(np.arange(b, b + s, dtype=dtype)
                                  for b, s in zip(start, shape)),
                                indexing='ij', copy=False), axis=-1)
    return grid


def affine_grid(mat, shape, start=None, dtype=None):
    """Generate a dense affine grid.

    Parameters
    ----------
    mat : array_like of shape (D+1, D+1)
        Affine matrix.
        - mat[:D, :D] contains the linear part of the affine transform
        - mat[:D, D] contains the translation part of the affine transform
    shape : iterable of length D
        Shape of the dense grid.
    start : iterable of length D, default=0
        Index of the first grid point along each dimension.
    dtype : type, default=float64
        Output data type.

    Returns
    -------
    grid : np.ndarray of shape (*shape, D)
        Dense affine grid.

    """
    mat = np.asarray(mat, dtype=dtype or np.float64)
    dim = mat.shape[1] - 1
    if len(shape) != dim:
        raise ValueError('Grid shape should have {} dimensions, got {}'
                         .format(dim, len(shape)))

    grid = identity_grid(shape, start, mat.dtype)
    linear = mat[:dim, :dim]
    translation = mat[:dim, dim].reshape((1,)*dim + (dim,))
    grid = np.dot(grid, linear.transpose())
    grid += translation
    return grid


def in_bounds(grid, shape):
    """Mask of coordinates that lie within the field-of-view.

    The field-of-view extends half a voxel beyond the first and last
    voxel centres.

    Parameters
    ----------
    grid : (*spatial, D) array_like
    shape : iterable of length >= D

    Returns
    -------
    mask : (*spatial) np.ndarray[bool]

    """
    grid = np.asarray(grid)
    mask = np.ones(grid.shape[:-1], dtype=bool)
    for d in range(grid.shape[-1]):
        g = grid[..., d]
        mask &= (g >= -0.5) & (g <= shape[d] - 0.5)
    return mask


def _expand(w, nb_features):
    """Append singleton dimensions so that ``w`` broadcasts to features."""
    return w.reshape(w.shape + (1,) * nb_features)


class Interpolator:
    """Base class for interpolators.

    Subclasses implement ``sample``.
    """

    name = None
    order = None

    def __call__(self, x, grid):
        return self.sample(x, grid)

    def sample(self, x, grid):
        """Sample a volume at continuous coordinates.

        Parameters
        ----------
        x : (*input_spatial, *features) array_like
            Input volume
        grid : (*output_spatial, 3) array_like
            Voxel coordinates in the input volume

        Returns
        -------
        y : (*output_spatial, *features) np.ndarray
            Sampled values (zero out-of-bounds)
        mask : (*output_spatial) np.ndarray[bool]
            In-bounds coordinates

        """
        raise NotImplementedError

    def __repr__(self):
        return '{}()'.format(type(self).__name__)


class Nearest(Interpolator):
    """Nearest-neighbour interpolation."""

    name = 'nearest'
    order = 0

    def sample(self, x, grid):
        x = np.asarray(x)
        grid = np.asarray(grid)
        dim = grid.shape[-1]
        nb_features = x.ndim - dim

        index = np.floor(grid + 0.5).astype(np.int64)
        mask = np.ones(grid.shape[:-1], dtype=bool)
        subs = []
        for d in range(dim):
            i = index[..., d]
            mask &= (i >= 0) & (i < x.shape[d])
            subs.append(np.clip(i, 0, x.shape[d] - 1))

        y = x[tuple(subs)]
        y = np.where(_expand(mask, nb_features), y, 0)
        return y, mask


class Linear(Interpolator):
    """Trilinear interpolation.

    Neighbours that fall outside of the volume are replaced by zeros.
    """

    name = 'linear'
    order = 1

    def sample(self, x, grid):
        x = np.asarray(x)
        grid = np.asarray(grid, dtype=np.float64)
        dim = grid.shape[-1]
        nb_features = x.ndim - dim
        mask = in_bounds(grid, x.shape)

        corner0 = np.floor(grid)
        weight1 = grid - corner0
        weight0 = 1 - weight1
        corner0 = corner0.astype(np.int64)

        y = np.zeros(grid.shape[:-1] + x.shape[dim:], dtype=np.float64)
        for corner in itertools.product((0, 1), repeat=dim):
            w = np.ones(grid.shape[:-1], dtype=np.float64)
            valid = mask.copy()
            subs = []
            for d, c in enumerate(corner):
                i = corner0[..., d] + c
                w *= weight1[..., d] if c else weight0[..., d]
                valid &= (i >= 0) & (i < x.shape[d])
                subs.append(np.clip(i, 0, x.shape[d] - 1))
            w[~valid] = 0
            y += _expand(w, nb_features) * x[tuple(subs)]
        return y, mask


def catmull_rom(t):
    """Weights of the Catmull-Rom cubic kernel.

    Parameters
    ----------
    t : array_like
        Fractional position in [0, 1) with respect to the node ``0``.

    Returns
    -------
    weights : list of 4 np.ndarray
        Weights of the nodes ``-1``, ``0``, ``1`` and ``2``.

    """
    t = np.asarray(t, dtype=np.float64)
    t2 = t * t
    t3 = t2 * t
    return [0.5 * (-t3 + 2 * t2 - t),
            0.5 * (3 * t3 - 5 * t2 + 2),
            0.5 * (-3 * t3 + 4 * t2 + t),
            0.5 * (t3 - t2)]


class Cubic(Interpolator):
    """Tricubic (Catmull-Rom) interpolation.

    Neighbours that are one voxel outside of the volume are replaced by
    the closest edge voxel. Neighbours further away are replaced by
    zeros.
    """

    name = 'cubic'
    order = 3

    def sample(self, x, grid):
        x = np.asarray(x)
        grid = np.asarray(grid, dtype=np.float64)
        dim = grid.shape[-1]
        nb_features = x.ndim - dim
        mask = in_bounds(grid, x.shape)

        # Separable weights and indices of the 4 nodes along each axis
        weights, subs, valid = [], [], []
        for d in range(dim):
            g = grid[..., d]
            i0 = np.floor(g)
            weights.append(catmull_rom(g - i0))
            i0 = i0.astype(np.int64)
            subs_d, valid_d = [], []
            for k in range(4):
                i = i0 + (k - 1)
                valid_d.append((i >= -1) & (i <= x.shape[d]))
                subs_d.append(np.clip(i, 0, x.shape[d] - 1))
            subs.append(subs_d)
            valid.append(valid_d)

        y = np.zeros(grid.shape[:-1] + x.shape[dim:], dtype=np.float64)
        for nodes in itertools.product(range(4), repeat=dim):
            w = np.ones(grid.shape[:-1], dtype=np.float64)
            ok = mask.copy()
            for d, k in enumerate(nodes):
                w *= weights[d][k]
                ok &= valid[d][k]
            w[~ok] = 0
            index = tuple(subs[d][k] for d, k in enumerate(nodes))
            y += _expand(w, nb_features) * x[index]
        return y, mask


interpolators = {
    'nearest': Nearest,
    'linear': Linear,
    'cubic': Cubic,
}


def get_interpolator(method=None):
    """Select an interpolator.

    Parameters
    ----------
    method : {'nearest', 'linear', 'cubic'} or {0, 1, 3} or Interpolator,
             default='linear'

    Returns
    -------
    interpolator : Interpolator

    Raises
    ------
    ValidationError
        If the method is unknown.

    """
    if method is None:
        method = 'linear'
    if isinstance(method, Interpolator):
        return method
    if isinstance(method, type) and issubclass(method, Interpolator):
        return method()
    if isinstance(method, str):
        key = method.lower()
        if key in interpolators:
            return interpolators[key]()
    else:
        for klass in interpolators.values():
            if method == klass.order:
                return klass()
    raise ValidationError('unknown interpolation method "{}" (expected one '
                          'of: {})'.format(method, ', '.join(interpolators)))
