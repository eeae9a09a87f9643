import numpy as np
import pytest

from voltransform.interpolate import Nearest, Linear, Cubic, \
    get_interpolator, identity_grid, affine_grid, in_bounds, catmull_rom
from voltransform.errors import ValidationError


@pytest.fixture
def ramp():
    # x[i, j, k] = 9*i + 3*j + k
    return np.arange(27, dtype=np.float64).reshape((3, 3, 3))


def sample(interpolator, x, point):
    y, mask = interpolator.sample(x, np.asarray([point], dtype=np.float64))
    return y[0], mask[0]


def test_identity_grid():
    grid = identity_grid((2, 3, 4))
    assert grid.shape == (2, 3, 4, 3)
    assert grid[1, 2, 3].tolist() == [1, 2, 3]
    grid = identity_grid((1, 3, 4), start=(5, 0, 0))
    assert grid[0, 0, 0].tolist() == [5, 0, 0]


def test_affine_grid():
    mat = np.diag([2., 1., 1., 1.])
    mat[:3, 3] = [0.5, -1., 0.]
    grid = affine_grid(mat, (2, 3, 4))
    assert np.allclose(grid[1, 2, 3], [2.5, 1., 3.])
    with pytest.raises(ValueError):
        affine_grid(mat, (2, 3))


def test_in_bounds():
    grid = np.array([[-0.5, 0., 0.], [2.5, 2., 2.], [-0.51, 0., 0.],
                     [1., 1., 2.51]])
    assert in_bounds(grid, (3, 3, 3)).tolist() == [True, True, False, False]


def test_catmull_rom_partition_of_unity():
    t = np.linspace(0, 1, 11)
    assert np.allclose(sum(catmull_rom(t)), 1)
    assert np.allclose([w[0] for w in catmull_rom([0.])], [0, 1, 0, 0])


@pytest.mark.parametrize('interpolator', [Nearest(), Linear(), Cubic()])
def test_identity_grid_is_exact(interpolator):
    x = np.random.RandomState(1).normal(size=(4, 5, 6))
    y, mask = interpolator.sample(x, identity_grid(x.shape))
    assert np.allclose(y, x)
    assert mask.all()


def test_linear_midpoint(ramp):
    y, mask = sample(Linear(), ramp, (0.5, 0., 0.))
    assert y == pytest.approx(4.5)
    assert mask
    y, _ = sample(Linear(), ramp, (1.5, 0.5, 0.5))
    assert y == pytest.approx(13.5 + 1.5 + 0.5)


def test_linear_borders():
    x = np.ones((3, 3, 3))
    # half a voxel outside the edge: neighbours outside count as zero
    y, mask = sample(Linear(), x, (-0.25, 1., 1.))
    assert y == pytest.approx(0.75)
    assert mask
    y, mask = sample(Linear(), x, (2.25, 1., 1.))
    assert y == pytest.approx(0.75)
    assert mask
    # outside the field-of-view
    y, mask = sample(Linear(), x, (-0.6, 1., 1.))
    assert y == 0
    assert not mask
    # no zero-padded ramp beyond the field-of-view: 0, not 0.3
    y, mask = sample(Linear(), x, (-0.7, 1., 1.))
    assert y == 0
    assert not mask


def test_nearest(ramp):
    y, mask = sample(Nearest(), ramp, (0.6, 1.4, 0.))
    assert y == 12
    assert mask
    y, mask = sample(Nearest(), ramp, (2.4, 0., 0.))
    assert y == 18
    y, mask = sample(Nearest(), ramp, (2.6, 0., 0.))
    assert y == 0
    assert not mask


def test_nearest_keeps_dtype():
    x = np.arange(8, dtype=np.int16).reshape((2, 2, 2))
    y, _ = Nearest().sample(x, identity_grid(x.shape))
    assert y.dtype == np.int16


def test_cubic_borders():
    x = np.ones((4, 4, 4))
    y, _ = sample(Cubic(), x, (1.5, 1.5, 1.5))
    assert y == pytest.approx(1.)
    # the node one voxel before the volume is clamped to the edge
    y, _ = sample(Cubic(), x, (0.3, 1.5, 1.5))
    assert y == pytest.approx(1.)
    # the node two voxels past the volume is dropped
    y, mask = sample(Cubic(), x, (3.2, 1.5, 1.5))
    assert y == pytest.approx(1.016)
    assert mask
    y, mask = sample(Cubic(), x, (3.6, 1.5, 1.5))
    assert y == 0
    assert not mask


def test_cubic_reproduces_linear_ramp():
    x = np.arange(64, dtype=np.float64).reshape((4, 4, 4))
    y, _ = sample(Cubic(), x, (1.25, 1., 1.))
    assert y == pytest.approx(16 * 1.25 + 4 + 1)


@pytest.mark.parametrize('interpolator', [Nearest(), Linear(), Cubic()])
def test_features_are_sampled_independently(interpolator, ramp):
    x = np.stack([ramp, 2 * ramp], axis=-1)
    grid = np.array([[0.5, 1., 1.], [1., 1.25, 0.], [5., 0., 0.]])
    y, mask = interpolator.sample(x, grid)
    assert y.shape == (3, 2)
    assert np.allclose(y[:, 1], 2 * y[:, 0])
    assert mask.tolist() == [True, True, False]


@pytest.mark.parametrize('method,klass', [
    (None, Linear),
    ('nearest', Nearest),
    ('Cubic', Cubic),
    (0, Nearest),
    (1, Linear),
    (3, Cubic),
    (Nearest, Nearest),
])
def test_get_interpolator(method, klass):
    assert isinstance(get_interpolator(method), klass)


def test_get_interpolator_instance():
    interpolator = Cubic()
    assert get_interpolator(interpolator) is interpolator


@pytest.mark.parametrize('method', ['sinc', 2, 'spline'])
def test_get_interpolator_unknown(method):
    with pytest.raises(ValidationError, match='unknown interpolation'):
        get_interpolator(method)
