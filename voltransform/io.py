"""Reading and writing of volumes.

Volumes can be files (any format handled by nibabel, or ``.npy``),
nibabel images, or plain arrays. Headers are inspected without loading
voxel data, so that all the inputs of a run can be checked before
anything is read.
"""

import os.path
import logging
import nibabel as nb
import numpy as np
from nibabel.spatialimages import SpatialImage
from .space import GridGeometry, voxel_size
from .errors import ValidationError
from .utils import argpad, argdef, fileparts

logger = logging.getLogger(__name__)

_numpy_ext = ('.npy',)


def _default_affine(shape):
    """Orientation matrix of an array without header.

    Voxels are 1 mm wide and the scanner origin lies at the centre of
    the field-of-view.

    """
    shape = np.asarray(shape[:3], dtype=np.float64)
    affine = np.eye(4)
    affine[:3, 3] = 0.5 - shape / 2
    return affine


def _zooms(img, affine):
    """Spatial voxel size of a nibabel image.

    Falls back to the norm of the affine columns when the header
    stores null or missing zooms.
    """
    zooms = list(img.header.get_zooms())[:3]
    zooms = argpad(zooms, 3, 1.) if zooms else [1., 1., 1.]
    if any(z <= 0 for z in zooms):
        return voxel_size(affine)
    return zooms


def parse_dtype(dtype):
    """Convert a data type name into a numpy data type.

    Parameters
    ----------
    dtype : str or type or np.dtype or None

    Returns
    -------
    dtype : np.dtype or None

    Raises
    ------
    ValidationError
        If the name is not a known (real or boolean) data type.

    """
    if dtype is None:
        return None
    if isinstance(dtype, str):
        dtype = dtype.strip().lower()
    try:
        dtype = np.dtype(dtype)
    except TypeError:
        raise ValidationError('unknown data type "{}"'.format(dtype))
    if dtype.kind not in 'biuf':
        raise ValidationError('unsupported data type "{}"'.format(dtype))
    return dtype


def cast(x, dtype):
    """Cast data to an output data type.

    Integer outputs are rounded and clipped to the range of the type.
    """
    dtype = np.dtype(dtype)
    x = np.asarray(x)
    if dtype.kind in 'iu' and x.dtype.kind == 'f':
        info = np.iinfo(dtype)
        x = np.clip(np.rint(x), info.min, info.max)
    elif dtype.kind == 'b':
        x = x != 0
    return x.astype(dtype)


class VolumeReader:
    """Read volumes and their geometry."""

    def __init__(self, dtype=np.float64, allow_memmap=True):
        """

        Parameters
        ----------
        dtype : type or str, default=float64
            Data type in which voxel values are loaded.

        allow_memmap : bool, default=True
            Memory-map ``.npy`` files instead of loading them.
        """
        self.dtype = dtype
        self.allow_memmap = allow_memmap

    def __call__(self, *args, **kwargs):
        return self.read(*args, **kwargs)

    def _open(self, x, mmap_mode='r'):
        """Open a file without loading its data."""
        if not isinstance(x, str):
            return x
        if fileparts(x)[2] in _numpy_ext:
            return np.load(x, mmap_mode=mmap_mode)
        return nb.load(x)

    def inspect(self, x):
        """Read the metadata of a volume without loading its data.

        Parameters
        ----------
        x : str or nib.SpatialImage or array_like or GridGeometry

        Returns
        -------
        info : dict
            'name' : file name (or None)
            'dir', 'basename', 'ext' : parts of the file name
            'dtype' : on-disk data type
            'shape' : full shape, with at least 3 dimensions
            'affine' : (4, 4) voxel-to-scanner matrix
            'header', 'extra', 'klass' : nibabel metadata (or None)
            'geometry' : GridGeometry

        """
        info = dict.fromkeys(('name', 'dir', 'basename', 'ext', 'dtype',
                              'shape', 'affine', 'header', 'extra', 'klass',
                              'geometry'))
        if isinstance(x, GridGeometry):
            info.update(shape=x.shape, affine=np.asarray(x.affine),
                        geometry=x)
            return info

        if isinstance(x, str):
            info['name'] = x
            info['dir'], info['basename'], info['ext'] = fileparts(x)
        obj = self._open(x)

        zooms = None
        if isinstance(obj, SpatialImage):
            info['shape'] = tuple(obj.header.get_data_shape())
            info['shape'] = tuple(argpad(info['shape'], 3, 1)) \
                + info['shape'][3:]
            info['dtype'] = obj.get_data_dtype()
            info['header'] = obj.header
            info['extra'] = obj.extra
            info['klass'] = type(obj)
            info['affine'] = obj.affine
            if info['affine'] is None:
                info['affine'] = _default_affine(info['shape'])
            zooms = _zooms(obj, info['affine'])
        else:
            obj = np.asanyarray(obj)
            info['shape'] = tuple(argpad(obj.shape, 3, 1)) + obj.shape[3:]
            info['dtype'] = obj.dtype
            info['affine'] = _default_affine(info['shape'])
        info['geometry'] = GridGeometry(info['shape'], info['affine'], zooms)
        return info

    def read(self, x, dtype=None, read_info=True):
        """Load the voxel data of a volume.

        Parameters
        ----------
        x : str or nib.SpatialImage or array_like
            Input volume, on disk or in memory.

        dtype : type or str, default=self.dtype
            Data type in which voxel values are loaded.

        read_info : bool, default=True
            Also return the metadata (see ``inspect``).

        Returns
        -------
        x : np.ndarray
            Voxel data, with at least three dimensions.
        info : dict, if `read_info`

        """
        dtype = np.dtype(argdef(dtype, self.dtype))
        info = self.inspect(x) if read_info else None

        obj = self._open(x, 'r' if self.allow_memmap else None)
        if isinstance(obj, SpatialImage):
            logger.debug('loading image data (%s)',
                         'x'.join(str(s) for s in obj.shape))
            obj = obj.get_fdata(dtype=dtype)
        x = np.array(obj, dtype=dtype)
        if x.ndim < 3:
            x = x.reshape(tuple(argpad(x.shape, 3, 1)))

        if read_info:
            return x, info
        return x


class VolumeWriter:
    """Write volumes, in the format of the input when possible."""

    def __init__(self, dtype=None, dir=None, ext=None, prefix='',
                 dummy=False):
        """

        Parameters
        ----------
        dtype : str or type, default=same as input
            Output data type

        dir : str, default=same as input or current directory
            Output directory, when no file name is given

        ext : str, default=same as input or '.nii.gz'
            Output extension, when no file name is given

        prefix : str, default=''
            Prefix added to the input basename, when no file name is given

        dummy : bool, default=False
            Do not write anything: return the cast array.
        """
        self.dtype = dtype
        self.dir = dir
        self.ext = ext
        self.prefix = prefix
        self.dummy = dummy

    def __call__(self, *args, **kwargs):
        return self.write(*args, **kwargs)

    def _default_name(self, info):
        dir = argdef(self.dir, info.get('dir'), '.')
        ext = argdef(self.ext, info.get('ext'), '.nii.gz')
        basename = info.get('basename') or 'array'
        return os.path.join(dir, self.prefix + basename + ext)

    def write(self, x, fname=None, info=None, affine=None, dtype=None,
              description=None):
        """Write a volume to disk.

        Parameters
        ----------
        x : np.ndarray
            Voxel data.
        fname : str, optional
            Output file name. Default: prefixed input name.
        info : dict, optional
            Metadata of the input volume (see ``VolumeReader.inspect``).
            Its header, format and data type are reused.
        affine : (4, 4) array_like, default=info['affine']
            Voxel-to-scanner matrix of the output.
        dtype : str or type, default=self.dtype or info['dtype']
            Output data type.
        description : str, optional
            Text stored in the header description field, if the format
            has one.

        Returns
        -------
        obj : nib.SpatialImage or np.ndarray
            Written image (or cast array if dummy).

        """
        info = argdef(info, {})
        dtype = np.dtype(argdef(dtype, self.dtype, info.get('dtype'),
                                x.dtype))
        x = cast(x, dtype)
        if self.dummy:
            return x

        fname = argdef(fname, self._default_name(info))
        if fileparts(fname)[2] in _numpy_ext:
            logger.debug('writing %s', fname)
            np.save(fname, x)
            return x

        affine = np.asarray(argdef(affine, info.get('affine'), np.eye(4)),
                            dtype=np.float64)
        # Drop trailing singleton dimensions, which some formats reject
        while x.ndim > 3 and x.shape[-1] == 1:
            x = x[..., 0]

        klass = argdef(info.get('klass'), nb.Nifti1Image)
        header = info.get('header')
        if header is None:
            # nibabel refuses some data types (int64) unless they are
            # explicitly stored in the header
            header = klass.header_class()
            header.set_data_dtype(dtype)
        obj = klass(x, affine, header, info.get('extra'))
        obj.header.set_data_dtype(dtype)
        if hasattr(obj, 'set_sform'):
            obj.set_sform(affine)
            obj.set_qform(affine)
        if description and 'descrip' in obj.header.keys():
            obj.header['descrip'] = description[:79]

        logger.debug('writing %s', fname)
        nb.save(obj, fname)
        return obj
