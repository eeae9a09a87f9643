"""Composition of user-supplied transforms with image orientations.

A transform supplied by the user maps the scanner space of the input
image onto a new scanner space. It can be inverted, expressed with
respect to a reference image (in which case it maps onto the reference
space), and expressed in the mirrored-x convention used by FSL FLIRT.
``compose_transform`` reduces these options to a single matrix and
decides whether this matrix replaces or composes with the orientation
stored in the input header.
"""

import logging
from typing import NamedTuple, Optional, Any
from .linalg import AffineMatrix, flip_matrix
from .errors import ValidationError

logger = logging.getLogger(__name__)


class TransformOptions(NamedTuple):
    """Options of a transform run, resolved once.

    Attributes
    ----------
    transform : str or (4, 4) array_like, optional
        Transform matrix or path to a 4x4 ASCII file.
    replace : bool
        Replace the input orientation instead of composing with it.
    inverse : bool
        Invert the transform before using it.
    reference : str or GridGeometry, optional
        Image onto which the transform maps (implies ``replace``).
    flipx : bool
        The transform uses the mirrored-x convention (FSL FLIRT).
    template : str or GridGeometry, optional
        Reslice onto the geometry of this image.
    interpolation : {'nearest', 'linear', 'cubic'}
        Interpolation method used when reslicing.
    oversample : iterable[int], optional
        Oversampling factors. Default: from voxel sizes.
    dtype : str or np.dtype, optional
        Output data type. Default: same as input.
    n_jobs : int
        Number of threads used when reslicing.
    progress : bool
        Display a progress bar.
    """
    transform: Optional[Any] = None
    replace: bool = False
    inverse: bool = False
    reference: Optional[Any] = None
    flipx: bool = False
    template: Optional[Any] = None
    interpolation: str = 'linear'
    oversample: Optional[Any] = None
    dtype: Optional[Any] = None
    n_jobs: int = 1
    progress: bool = False


def compose_transform(transform=None, inverse=False, reference=None,
                      flipx=False, input_geometry=None, replace=False):
    """Build the net transform from user inputs.

    Parameters
    ----------
    transform : AffineMatrix or (4, 4) array_like, optional
        Raw transform.
    inverse : bool, default=False
        Invert the transform.
    reference : GridGeometry, optional
        Geometry of the image onto which the transform maps. The output
        transform then maps directly onto scanner space and must replace
        the input orientation.
    flipx : bool, default=False
        The transform was estimated in a frame where the x axis is
        mirrored (FSL FLIRT). Only used with ``reference``.
    input_geometry : GridGeometry, optional
        Geometry of the input image. Required by ``flipx``.
    replace : bool, default=False
        Replace the input orientation with the transform.

    Returns
    -------
    transform : AffineMatrix or None
        Net transform.
    replace : bool
        Whether the transform replaces the input orientation.

    Raises
    ------
    ValidationError
        If an option requires a transform and none is provided.
    SingularMatrixError
        If the transform must be inverted and is singular.

    """
    if transform is not None:
        transform = AffineMatrix(transform)

    if inverse:
        if transform is None:
            raise ValidationError("no transform provided for option "
                                  "'-inverse' (specify using '-transform' "
                                  "option)")
        transform = transform.inverse()

    if reference is not None:
        if transform is None:
            raise ValidationError("no transform provided for option "
                                  "'-reference' (specify using '-transform' "
                                  "option)")
        if flipx:
            if input_geometry is None:
                raise ValidationError("option '-flipx' requires the "
                                      "geometry of the input image")
            flip_ref = flip_matrix(reference.spatial_shape[0],
                                   reference.voxel_size[0])
            flip_orig = flip_matrix(input_geometry.spatial_shape[0],
                                    input_geometry.voxel_size[0])
            if inverse:
                flip_ref, flip_orig = flip_orig, flip_ref
            transform = flip_ref @ transform @ flip_orig
        transform = reference.transform @ transform
        replace = True
    elif flipx:
        logger.warning("option '-flipx' has no effect without '-reference'")

    if replace and transform is None:
        raise ValidationError("no transform provided for option '-replace' "
                              "(specify using '-transform' option)")

    return transform, replace


def apply_to_header(geometry, transform=None, replace=False):
    """Update the orientation of an image with a transform.

    Parameters
    ----------
    geometry : GridGeometry
        Input geometry.
    transform : AffineMatrix, optional
        Net transform. If None, the geometry is returned unchanged.
    replace : bool, default=False
        If True, the scanner transform of the image becomes
        ``transform``. Otherwise, it becomes ``transform @ original``.

    Returns
    -------
    geometry : GridGeometry

    """
    if transform is None:
        return geometry
    transform = AffineMatrix(transform)
    if not replace:
        transform = transform @ geometry.transform
    return geometry.with_transform(transform)
