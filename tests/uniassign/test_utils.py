r"""
Tests for ``uniassign.assignment._utils``.
"""

from __future__ import annotations

import numpy as np
import pytest
import torch

from uniassign.assignment import InvalidInput, as_cost_matrix, gather_total_cost


def test_as_cost_matrix_copies():
    matrix = np.array([[1.0, 2.0], [3.0, 4.0]])

    cm = as_cost_matrix(matrix)
    cm[0, 0] = 100.0

    assert cm.dtype == np.float64
    assert matrix[0, 0] == 1.0


def test_as_cost_matrix_tensor():
    matrix = torch.tensor([[1, 2], [3, 4]], dtype=torch.int32, requires_grad=False)

    cm = as_cost_matrix(matrix)

    assert isinstance(cm, np.ndarray)
    assert cm.tolist() == [[1.0, 2.0], [3.0, 4.0]]


def test_as_cost_matrix_reports_position():
    with pytest.raises(InvalidInput, match=r"\(1, 0\)"):
        as_cost_matrix([[1.0, 2.0], [float("nan"), 4.0]])


def test_as_cost_matrix_chains_conversion_error():
    with pytest.raises(InvalidInput) as info:
        as_cost_matrix([[1.0, 2.0], [3.0]])

    assert isinstance(info.value.__cause__, ValueError)


def test_gather_total_cost_sequence():
    matrix = [[4, 1, 3], [2, 0, 5], [3, 2, 2]]

    assert gather_total_cost(matrix, [(0, 1), (1, 0), (2, 2)]) == 5.0
    assert gather_total_cost(matrix, []) == 0.0


def test_gather_total_cost_tensor():
    matrix = torch.tensor([[4.0, 1.0], [2.0, 0.0]])

    total = gather_total_cost(matrix, torch.tensor([[0, 1], [1, 0]]))

    assert isinstance(total, torch.Tensor)
    assert total.item() == 3.0


def test_as_cost_matrix_reduced_precision_tensor():
    matrix = torch.tensor([[1.0, 2.0], [3.0, 4.0]], dtype=torch.bfloat16)

    cm = as_cost_matrix(matrix)

    assert cm.dtype == np.float64
    assert cm.tolist() == [[1.0, 2.0], [3.0, 4.0]]


def test_as_cost_matrix_rejects_overflowing_spread():
    with pytest.raises(InvalidInput, match="overflows"):
        as_cost_matrix([[1e308, -1e308], [1e308, -1e308]])
