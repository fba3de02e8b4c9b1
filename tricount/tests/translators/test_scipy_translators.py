import numpy as np
import pytest
import scipy.sparse as ss
from tricount import build_csr, translate_csr2scipy, translate_scipy2csr, CSRGraph


def test_csr_to_scipy():
    g = build_csr([(0, 1), (1, 2), (2, 0), (2, 3)])
    matrix = translate_csr2scipy(g)
    assert matrix.shape == (4, 4)
    assert matrix.dtype == bool
    expected = np.array(
        [
            [0, 1, 1, 0],
            [1, 0, 1, 0],
            [1, 1, 0, 1],
            [0, 0, 1, 0],
        ],
        dtype=bool,
    )
    assert (matrix.toarray() == expected).all()


def test_scipy_to_csr_round_trip():
    g = build_csr([(0, 1), (1, 2), (2, 0), (2, 3), (4, 0)])
    CSRGraph.assert_equal(translate_scipy2csr(translate_csr2scipy(g)), g)


def test_scipy_directed_matrix_is_symmetrised():
    """
              +-+
     ------>  |1|
     |        +-+
     |
     |         |
     |         v

    +-+  <--  +-+       +-+
    |0|       |2|  <--  |3|
    +-+  -->  +-+       +-+"""
    matrix = ss.csr_matrix(
        np.array(
            [
                [0, 1, 1, 0],
                [0, 0, 1, 0],
                [1, 0, 0, 0],
                [0, 0, 1, 0],
            ]
        )
    )
    g = translate_scipy2csr(matrix)
    g.validate()
    CSRGraph.assert_equal(g, build_csr([(0, 1), (0, 2), (1, 2), (2, 3)]))


def test_scipy_diagonal_and_explicit_zeros_dropped():
    matrix = ss.coo_matrix(
        (np.array([5, 0, 1, 1]), (np.array([0, 0, 1, 2]), np.array([0, 1, 2, 1]))),
        shape=(4, 4),
    )
    g = translate_scipy2csr(matrix)
    # node 0 has only a self-loop and a stored zero; node 3 has nothing
    assert g.num_nodes == 4
    assert g.row_ptr.tolist() == [0, 0, 1, 2, 2]
    assert g.edge_list.tolist() == [2, 1]


def test_scipy_non_square_rejected():
    with pytest.raises(ValueError, match="square"):
        translate_scipy2csr(ss.csr_matrix(np.ones((2, 3))))


def test_scipy_dense_rejected():
    with pytest.raises(TypeError):
        translate_scipy2csr(np.eye(3))
