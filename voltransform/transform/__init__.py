"""Apply affine transforms to volumes.

By default, only the orientation matrix stored in the header of the
image is modified. Voxel data are only resampled when a template image
is provided, in which case the volume is resliced onto the template
geometry.
"""

from .object import Transformer, copy_with_progress
from .functional import transform
