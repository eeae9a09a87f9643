"""Fixed-size 4x4 affine matrices.

All transforms handled by this package are 3D affine transforms, stored
as homogeneous 4x4 matrices whose bottom row is ``(0, 0, 0, 1)``.
Instances of ``AffineMatrix`` are immutable: every operation returns a
new matrix.
"""

import warnings
import numpy as np
from scipy.linalg import lu_factor, lu_solve, LinAlgWarning
from .errors import ValidationError, SingularMatrixError

_bottom_row = np.array([0., 0., 0., 1.])


class AffineMatrix:
    """Immutable 4x4 affine matrix."""

    __slots__ = ('_mat',)

    def __init__(self, mat):
        """

        Parameters
        ----------
        mat : (4, 4) array_like or AffineMatrix
            Homogeneous matrix. Its bottom row must be ``(0, 0, 0, 1)``.
        """
        if isinstance(mat, AffineMatrix):
            mat = mat._mat
        try:
            mat = np.array(mat, dtype=np.float64)
        except (TypeError, ValueError):
            raise ValidationError('affine matrix must contain numbers')
        if mat.shape != (4, 4):
            raise ValidationError('affine matrix must be 4x4, got shape {}'
                                  .format(mat.shape))
        if not np.all(np.isfinite(mat)):
            raise ValidationError('affine matrix contains non-finite values')
        if not np.allclose(mat[3], _bottom_row, rtol=0, atol=1e-6):
            raise ValidationError('bottom row of affine matrix must be '
                                  '(0, 0, 0, 1), got {}'.format(mat[3]))
        mat[3] = _bottom_row
        mat.setflags(write=False)
        self._mat = mat

    # ------------------------------------------------------------------
    #                          Construction
    # ------------------------------------------------------------------

    @classmethod
    def identity(cls):
        """Return the 4x4 identity."""
        return cls(np.eye(4))

    @classmethod
    def from_parts(cls, linear=None, translation=None):
        """Build a matrix from a 3x3 linear block and a translation."""
        mat = np.eye(4)
        if linear is not None:
            mat[:3, :3] = linear
        if translation is not None:
            mat[:3, 3] = translation
        return cls(mat)

    @classmethod
    def load(cls, fname):
        """Load a matrix stored as 4 rows of 4 numbers in an ASCII file.

        Empty lines and text following a ``#`` are ignored.

        Parameters
        ----------
        fname : str
            Path to the text file.

        Returns
        -------
        mat : AffineMatrix

        """
        rows = []
        with open(fname, 'r') as f:
            try:
                lines = f.readlines()
            except UnicodeDecodeError:
                raise ValidationError('transform matrix supplied in file '
                                      '"{}" is not a text file'.format(fname))
        for line in lines:
            line = line.split('#', 1)[0].strip()
            if not line:
                continue
            try:
                rows.append([float(v) for v in line.split()])
            except ValueError:
                raise ValidationError('transform matrix supplied in file '
                                      '"{}" contains non-numeric values'
                                      .format(fname))
        if len(rows) != 4 or any(len(row) != 4 for row in rows):
            raise ValidationError('transform matrix supplied in file "{}" '
                                  'is not 4x4'.format(fname))
        try:
            return cls(rows)
        except ValidationError as e:
            raise ValidationError('transform matrix supplied in file "{}": {}'
                                  .format(fname, e))

    def save(self, fname):
        """Write the matrix in the format read by ``load``."""
        np.savetxt(fname, self._mat, fmt='%.10g')

    # ------------------------------------------------------------------
    #                            Accessors
    # ------------------------------------------------------------------

    @property
    def matrix(self):
        """Read-only (4, 4) view of the matrix."""
        return self._mat

    @property
    def linear(self):
        """(3, 3) linear block."""
        return self._mat[:3, :3]

    @property
    def translation(self):
        """(3,) translation."""
        return self._mat[:3, 3]

    def __array__(self, dtype=None, copy=None):
        if dtype is None:
            return self._mat.copy()
        return self._mat.astype(dtype)

    def __getitem__(self, index):
        return self._mat[index]

    def __repr__(self):
        rows = np.array2string(self._mat, precision=6, suppress_small=True,
                               prefix='AffineMatrix(')
        return 'AffineMatrix({})'.format(rows)

    def __eq__(self, other):
        if not isinstance(other, AffineMatrix):
            return NotImplemented
        return np.array_equal(self._mat, other._mat)

    def __hash__(self):
        return hash(self._mat.tobytes())

    def allclose(self, other, tol=1e-5):
        """Check that two matrices are equal within a tolerance."""
        return np.allclose(self._mat, np.asarray(other), rtol=0, atol=tol)

    # ------------------------------------------------------------------
    #                            Algebra
    # ------------------------------------------------------------------

    def __matmul__(self, other):
        if not isinstance(other, AffineMatrix):
            return NotImplemented
        return AffineMatrix(np.matmul(self._mat, other._mat))

    def multiply(self, other):
        """Compose with another matrix: ``self @ other``.

        ``other`` is applied first, ``self`` last.
        """
        return self @ AffineMatrix(other)

    def inverse(self):
        """Invert the matrix using an LU decomposition.

        Raises
        ------
        SingularMatrixError
            If the linear block is (numerically) singular.

        """
        with warnings.catch_warnings():
            # singular matrices are reported below
            warnings.simplefilter('ignore', LinAlgWarning)
            lu, piv = lu_factor(self._mat, check_finite=False)
        pivots = np.abs(np.diag(lu))
        tol = pivots.max() * 4 * np.finfo(np.float64).eps
        if np.any(pivots <= tol):
            raise SingularMatrixError('cannot invert singular matrix:\n{}'
                                      .format(self._mat))
        inv = lu_solve((lu, piv), np.eye(4), check_finite=False)
        inv[3] = _bottom_row
        return AffineMatrix(inv)

    def apply(self, points):
        """Apply the transform to an array of 3D coordinates.

        Parameters
        ----------
        points : (..., 3) array_like

        Returns
        -------
        points : (..., 3) np.ndarray

        """
        points = np.asarray(points, dtype=np.float64)
        return np.dot(points, self.linear.transpose()) + self.translation


def identity():
    """Return the 4x4 identity matrix."""
    return AffineMatrix.identity()


def multiply(a, b):
    """Compose two affine matrices: ``a @ b`` (``b`` is applied first)."""
    return AffineMatrix(a) @ AffineMatrix(b)


def invert(a):
    """Invert an affine matrix.

    Raises
    ------
    SingularMatrixError
        If the matrix is singular.

    """
    return AffineMatrix(a).inverse()


def load(fname):
    """Load a 4x4 matrix from an ASCII file.

    Raises
    ------
    ValidationError
        If the file does not contain exactly 4 rows of 4 numbers.

    """
    return AffineMatrix.load(fname)


def flip_matrix(dim, vs):
    """Matrix that mirrors the first axis of a field-of-view.

    The x coordinate (in millimetres) is negated and shifted so that the
    first and last voxel centres swap places.

    Parameters
    ----------
    dim : int
        Number of voxels along the first axis.
    vs : float
        Voxel size along the first axis.

    Returns
    -------
    mat : AffineMatrix

    """
    mat = np.eye(4)
    mat[0, 0] = -1
    mat[0, 3] = (dim - 1) * vs
    return AffineMatrix(mat)
