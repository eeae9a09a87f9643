"""Tools for reslicing volumes.

Reslicing is the sequential process of:
    * **interpolation:**  transform a discrete set of points into a
      continuous function;
    * **spatial transformation:** compose the continuous image
      function with an affine transform *i.e.*, a change of coordinates;
    * **resampling:** evaluate the transformed function at a new
      set of discrete points, averaging several sub-samples per voxel.

"""

from .object import Reslicer, subvoxel_offsets
from .functional import reslice
