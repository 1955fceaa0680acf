import numpy as np
import pytest

from lssm.errors import DimensionMismatchError, PreconditionError, SingularMatrixError
from lssm.projection import project_pseudo_document


def test_zero_vector_projects_to_origin():
    Uk = np.arange(12, dtype=float).reshape(4, 3)
    Sk = np.diag([3.0, 2.0, 1.0])

    pseudo = project_pseudo_document(np.zeros(4), Uk, Sk)

    assert pseudo.shape == (3,)
    np.testing.assert_array_equal(pseudo, np.zeros(3))


def test_diagonal_projection():
    weighted = np.array([0.5, 2.0, 1.0])
    Uk = np.array([[1.0, 0.0], [0.0, 1.0], [1.0, 1.0]])
    Sk = np.diag([2.0, 4.0])

    pseudo = project_pseudo_document(weighted, Uk, Sk)

    # q^T Uk = [1.5, 3.0]; times diag(1/2, 1/4)
    np.testing.assert_allclose(pseudo, [0.75, 0.75], atol=1e-12)


def test_inverse_is_applied_on_the_right():
    weighted = np.array([1.0, 1.0])
    Uk = np.eye(2)
    Sk = np.array([[2.0, 1.0], [0.0, 1.0]])

    pseudo = project_pseudo_document(weighted, Uk, Sk)

    # [1, 1] @ [[0.5, -0.5], [0, 1]] = [0.5, 0.5], whereas Sk^-1 @ [1, 1] = [0, 1]
    np.testing.assert_allclose(pseudo, [0.5, 0.5], atol=1e-12)


def test_singular_matrix():
    with pytest.raises(SingularMatrixError) as excinfo:
        project_pseudo_document(np.ones(2), np.eye(2), np.diag([1.0, 0.0]))
    assert excinfo.value.stage == "projection"


@pytest.mark.parametrize(
    "weighted, Uk, Sk",
    [
        (np.ones(3), np.ones((3, 2)), np.ones((2, 3))),  # Sk not square
        (np.ones(4), np.ones((3, 2)), np.eye(2)),  # vector longer than Uk
        (np.ones(3), np.ones((3, 2)), np.eye(3)),  # Uk columns != Sk rows
    ],
)
def test_dimension_mismatch(weighted, Uk, Sk):
    with pytest.raises(DimensionMismatchError) as excinfo:
        project_pseudo_document(weighted, Uk, Sk)
    assert excinfo.value.stage == "projection"


def test_non_finite_singular_values():
    with pytest.raises(PreconditionError, match="non-finite") as excinfo:
        project_pseudo_document(np.ones(2), np.eye(2), np.diag([1.0, np.inf]))
    assert excinfo.value.stage == "projection"
