"""Apply a transform to a volume, implemented in a Functional paradigm."""

from .object import Transformer


def transform(x, output=None, **kwargs):
    """Apply a spatial transform to a volume, or reslice it.

    Parameters
    ----------
    x : str or nib.SpatialImage or array_like
        Input volume.

    output : str, optional
        Output file name. Default: prefixed input.

    Other Parameters
    ----------------
    transform : str or (4, 4) array_like, optional
        Transform matrix or path to a 4x4 ASCII file.
    replace : bool, default=False
        Replace the input orientation instead of composing with it.
    inverse : bool, default=False
        Invert the transform before using it.
    reference : str or GridGeometry, optional
        Image onto which the transform maps (implies ``replace``).
    flipx : bool, default=False
        The transform uses the mirrored-x convention (FSL FLIRT).
    template : str or GridGeometry, optional
        Reslice onto the geometry of this image.
    interpolation : {'nearest', 'linear', 'cubic'}, default='linear'
        Interpolation method used when reslicing.
    oversample : iterable[int], optional
        Oversampling factors. Default: from voxel sizes.
    dtype : str or np.dtype, optional
        Output data type. Default: same as input.
    n_jobs : int, default=1
        Number of threads used when reslicing.
    progress : bool, default=False
        Display a progress bar.

    Returns
    -------
    y : nib.SpatialImage or np.ndarray
        Written image, or transformed array.

    """
    return Transformer(**kwargs)(x, output)
