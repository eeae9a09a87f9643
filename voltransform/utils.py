import os.path
from glob import glob
import numpy as np
from .errors import ValidationError


def expand_path(path):
    """Expand the user directory and unix tokens in a path.

    Parameters
    ----------
    path : str
        Path that can contain ``~`` or glob tokens.

    Returns
    -------
    path : str
        Full path. If the token matches several files, the first one
        (in lexicographic order) is returned.

    """
    path = os.path.expanduser(path)
    matches = sorted(glob(path))
    if matches:
        return matches[0]
    return path


def argpad(arg, n, default=None):
    """Crop or pad a list of values to length ``n``.

    Parameters
    ----------
    arg : scalar or iterable
        Value(s) to pad
    n : int
        Target length
    default : optional
        Padding value. By default, the last value is repeated.

    Returns
    -------
    arg : list

    """
    if isinstance(arg, (list, tuple, np.ndarray)):
        arg = list(arg)[:n]
    else:
        arg = [arg]
    if default is None:
        default = arg[-1]
    return arg + [default] * (n - len(arg))


def argdef(*args):
    """Return the first argument that is not None (or None)."""
    for arg in args:
        if arg is not None:
            return arg
    return None


def parse_ints(values):
    """Parse a sequence of integers.

    Each element can itself be a comma-separated list, so that
    ``['2,2,1']``, ``['2', '2', '1']`` and ``[2, 2, 1]`` all yield
    ``[2, 2, 1]``.

    Parameters
    ----------
    values : str or int or iterable[str or int]

    Returns
    -------
    values : list[int]

    """
    if isinstance(values, (str, int, np.integer)):
        values = [values]
    out = []
    for value in values:
        if isinstance(value, str):
            tokens = [tok for tok in value.replace(',', ' ').split() if tok]
        else:
            tokens = [value]
        for tok in tokens:
            try:
                out.append(int(tok))
            except (TypeError, ValueError):
                raise ValidationError('expected an integer, got "{}"'
                                      .format(tok))
    return out


def fileparts(fname):
    """Split a filename into directory / basename / extension.

    If the last extension is ``.gz``, this function checks if another
    extension is present, in which case it returns ``.<ext>.gz``
    """
    dir = os.path.dirname(fname)
    basename = os.path.basename(fname)
    basename, ext = os.path.splitext(basename)
    if ext == '.gz':
        basename, ext0 = os.path.splitext(basename)
        ext = ext0 + ext
    return dir, basename, ext
