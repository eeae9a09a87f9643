"""Apply affine transforms to volumes and reslice them onto new grids."""

__version__ = '0.1a'

from .errors import TransformError, ValidationError, SingularMatrixError
from .linalg import AffineMatrix, identity, multiply, invert, load
from .space import GridGeometry, default_oversample
from .interpolate import Interpolator, Nearest, Linear, Cubic, \
    get_interpolator
from .compose import TransformOptions, compose_transform, apply_to_header
from .reslice import Reslicer
from .transform import Transformer
