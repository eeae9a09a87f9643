"""Tools for reslicing volumes implemented in a Functional paradigm."""

from .object import Reslicer


def reslice(x, input_geometry, output_geometry, transform=None,
            interpolation='linear', oversample=None, **kwargs):
    """Reslice a volume onto a target geometry.

    Parameters
    ----------
    x : (*input_spatial, *features) array_like
        Input volume.

    input_geometry : GridGeometry
        Geometry of the input volume.

    output_geometry : GridGeometry or (4, 4) array_like
        Geometry of the output volume.

    transform : (4, 4) array_like, default=identity
        Scanner-to-scanner transform applied to output coordinates
        before they are mapped into the input volume.

    interpolation : {'nearest', 'linear', 'cubic'}, default='linear'
        Interpolation method

    oversample : iterable[int], default=from voxel sizes
        Oversampling factors

    Other Parameters
    ----------------
    n_jobs : int, default=1
        Number of threads

    progress : bool, default=False
        Display a progress bar

    out : np.ndarray, optional
        Output placeholder

    Returns
    -------
    y : (*output_spatial, *features) np.ndarray
        Resliced volume

    """
    return Reslicer()(x, input_geometry, output_geometry, transform,
                      interpolation=interpolation, oversample=oversample,
                      **kwargs)
