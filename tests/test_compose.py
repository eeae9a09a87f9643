import numpy as np
import pytest

from voltransform.compose import compose_transform, apply_to_header, \
    TransformOptions
from voltransform.linalg import AffineMatrix, identity, flip_matrix
from voltransform.space import GridGeometry
from voltransform.errors import ValidationError, SingularMatrixError


def rigid(angle, shift):
    c, s = np.cos(angle), np.sin(angle)
    return AffineMatrix.from_parts([[c, -s, 0], [s, c, 0], [0, 0, 1]], shift)


@pytest.fixture
def mat():
    return rigid(0.3, [4., -2., 7.])


@pytest.fixture
def input_geometry():
    return GridGeometry((5, 4, 4), np.eye(4))


@pytest.fixture
def reference_geometry():
    return GridGeometry((10, 4, 4), np.diag([2., 1., 1., 1.]))


def test_no_transform():
    assert compose_transform() == (None, False)


@pytest.mark.parametrize('kwargs,option', [
    (dict(inverse=True), '-inverse'),
    (dict(replace=True), '-replace'),
    (dict(reference=GridGeometry((4, 4, 4))), '-reference'),
])
def test_missing_transform(kwargs, option):
    with pytest.raises(ValidationError, match=option):
        compose_transform(None, **kwargs)


def test_inverse(mat):
    transform, replace = compose_transform(mat, inverse=True)
    assert transform.allclose(mat.inverse())
    assert replace is False


def test_inverse_singular():
    with pytest.raises(SingularMatrixError):
        compose_transform(np.diag([0., 1., 1., 1.]), inverse=True)


def test_replace_is_kept(mat):
    transform, replace = compose_transform(mat, replace=True)
    assert transform == mat
    assert replace is True


def test_reference_forces_replace(mat, input_geometry):
    reference = GridGeometry((4, 4, 4), rigid(0.1, [1., 2., 3.]) @
                             AffineMatrix(np.diag([2., 2., 2., 1.])))
    transform, replace = compose_transform(mat, reference=reference,
                                           input_geometry=input_geometry)
    assert replace is True
    assert transform.allclose(reference.transform @ mat)


def test_flipx_correction(input_geometry, reference_geometry):
    transform, replace = compose_transform(
        identity(), reference=reference_geometry, flipx=True,
        input_geometry=input_geometry)
    # x -> -x + 4 in the input frame, then x -> -x + 18 in the reference
    expected = AffineMatrix.from_parts(translation=[14., 0., 0.])
    assert transform.allclose(expected)
    assert replace is True


def test_flipx_order(mat, input_geometry, reference_geometry):
    transform, _ = compose_transform(
        mat, reference=reference_geometry, flipx=True,
        input_geometry=input_geometry)
    flip_ref = flip_matrix(10, 2.)
    flip_orig = flip_matrix(5, 1.)
    assert transform.allclose(flip_ref @ mat @ flip_orig)


def test_flipx_inverse_round_trip(mat, input_geometry, reference_geometry):
    forward, _ = compose_transform(
        mat, reference=reference_geometry, flipx=True,
        input_geometry=input_geometry)
    backward, _ = compose_transform(
        mat, inverse=True, reference=reference_geometry, flipx=True,
        input_geometry=input_geometry)
    assert (forward @ backward).allclose(identity())
    assert backward.allclose(forward.inverse())


def test_flipx_without_reference_is_ignored(mat):
    transform, replace = compose_transform(mat, flipx=True)
    assert transform == mat
    assert replace is False


def test_apply_to_header_replace(mat):
    geometry = GridGeometry((4, 4, 4), np.diag([2., 2., 2., 1.]))
    new = apply_to_header(geometry, mat, replace=True)
    assert new.transform.allclose(mat)
    assert new.shape == geometry.shape


def test_apply_to_header_compose(mat):
    affine = AffineMatrix.from_parts(np.diag([2., 2., 2.]), [1., 2., 3.])
    geometry = GridGeometry((4, 4, 4), affine)
    new = apply_to_header(geometry, mat, replace=False)
    assert new.transform.allclose(mat @ geometry.transform)
    assert new.affine.allclose(mat @ affine)


def test_apply_to_header_twice_is_associative(mat):
    other = rigid(-0.7, [0., 5., 1.])
    geometry = GridGeometry((4, 4, 4), np.diag([1.5, 1.5, 3., 1.]))
    twice = apply_to_header(apply_to_header(geometry, mat), other)
    once = apply_to_header(geometry, other @ mat)
    assert twice.affine.allclose(once.affine)


def test_apply_to_header_without_transform():
    geometry = GridGeometry((4, 4, 4))
    assert apply_to_header(geometry, None, replace=True) is geometry


def test_options_are_immutable():
    options = TransformOptions(transform='mat.txt', replace=True)
    with pytest.raises(AttributeError):
        options.replace = False
    assert options._replace(inverse=True).inverse is True
    assert options.inverse is False
    assert options.interpolation == 'linear'
