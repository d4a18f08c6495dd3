r"""
Various utilities for working with assignment problems.
"""

from __future__ import annotations

import typing as T

import numpy as np
import torch
from torch import Tensor

from ..constants import DTYPE

__all__ = ["InvalidInput", "as_cost_matrix", "gather_total_cost"]


class InvalidInput(ValueError):
    """
    Raised when a cost matrix cannot be solved: it is empty, not rectangular, or
    contains a value that is not finite.
    """


def as_cost_matrix(matrix: T.Any) -> np.ndarray:
    """
    Validate a cost matrix and return a private ``float64`` copy of it that may be
    mutated freely.

    Parameters
    ----------
    matrix
        A sequence of sequences, array or tensor of shape (N, M).

    Returns
    -------
    np.ndarray[N, M]
        Working copy of the cost matrix.

    Raises
    ------
    InvalidInput
        If the matrix is empty, jagged, not two-dimensional, not finite, or its
        values are so far apart that reducing them overflows.
    """
    try:
        if isinstance(matrix, Tensor):
            matrix = matrix.detach().to(device="cpu", dtype=torch.float64).numpy()
        cm = np.array(matrix, dtype=DTYPE, copy=True)
    except (TypeError, ValueError, RuntimeError) as err:
        msg = f"Cost matrix must be a rectangular table of real numbers: {err}"
        raise InvalidInput(msg) from err

    if cm.size == 0:
        msg = f"Cost matrix must have at least one row and one column, got shape {cm.shape}!"
        raise InvalidInput(msg)
    if cm.ndim != 2:
        msg = f"Cost matrix must be two-dimensional, got {cm.ndim} dimension(s)!"
        raise InvalidInput(msg)
    if not np.isfinite(cm).all():
        bad = np.argwhere(~np.isfinite(cm))[0]
        msg = f"Cost matrix contains a non-finite value at {tuple(bad.tolist())}!"
        raise InvalidInput(msg)

    # Reduced costs stay within min(N, M) times the spread of the matrix
    with np.errstate(over="ignore"):
        bound = np.ptp(cm) * min(cm.shape)
    if not np.isfinite(bound):
        msg = f"Cost matrix spread {cm.min():e} to {cm.max():e} overflows during reduction!"
        raise InvalidInput(msg)

    return cm


@T.overload
def gather_total_cost(cost_matrix: Tensor, assignment: Tensor) -> Tensor: ...


@T.overload
def gather_total_cost(cost_matrix: T.Any, assignment: T.Any) -> float: ...


def gather_total_cost(cost_matrix, assignment):
    """
    Gather the total cost of an assignment. The amounts to summing all the assigned
    items from the cost matrix.

    Parameters
    ----------
    cost_matrix: Tensor[N, M] | ArrayLike
        The cost matrix.
    assignment: Tensor[min(N, M), 2] | Sequence[tuple[int, int]]
        The assignment of row-column pairs.

    Returns
    -------
    Tensor[*] | float
        The total cost of the assignment.
    """

    if isinstance(cost_matrix, Tensor):
        assignment = torch.as_tensor(assignment, dtype=torch.long).reshape(-1, 2)
        return cost_matrix[assignment[:, 0], assignment[:, 1]].sum()

    cm = np.asarray(cost_matrix, dtype=DTYPE)
    pairs = np.asarray(assignment, dtype=np.intp).reshape(-1, 2)
    return float(cm[pairs[:, 0], pairs[:, 1]].sum())
