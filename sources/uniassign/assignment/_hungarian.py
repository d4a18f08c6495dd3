"""
Reference solver for the assignment problem backed by SciPy.
"""

from __future__ import annotations

import typing as T

import numpy as np
import scipy.optimize
import torch
import torch.fx
import typing_extensions as TX
from torch import Tensor

from ._base import Assignment
from ._utils import as_cost_matrix

__all__ = ["Hungarian", "hungarian_assignment"]


class Hungarian(Assignment):
    r"""
    Solves a linear assignment problem with :func:`scipy.optimize.linear_sum_assignment`.

    Accepts the same cost matrices as :class:`.Munkres` and is used to validate it on
    matrices that are too large for exhaustive search.
    """

    @TX.override
    def _assign(self, cost_matrix: Tensor) -> T.Tuple[Tensor, Tensor, Tensor]:
        return hungarian_assignment(cost_matrix)


@torch.no_grad()
def hungarian_assignment(cost_matrix: Tensor) -> T.Tuple[Tensor, Tensor, Tensor]:
    """
    Perform linear assignment using the SciPy implementation.

    Parameters
    ----------
    cost_matrix
        Cost matrix (N x M) of finite values.

    Returns
    -------
        Tuple of matches (min(N, M) x 2), unmatched rows and unmatched columns.

    Raises
    ------
    InvalidInput
        See :func:`.as_cost_matrix`.
    """
    cm = as_cost_matrix(cost_matrix)
    row_ind, col_ind = scipy.optimize.linear_sum_assignment(cm)
    pairs = torch.from_numpy(np.column_stack((row_ind, col_ind))).to(
        device=cost_matrix.device, dtype=torch.long
    )

    is_row_matched = torch.zeros(cm.shape[0], dtype=torch.bool, device=pairs.device)
    is_col_matched = torch.zeros(cm.shape[1], dtype=torch.bool, device=pairs.device)
    is_row_matched[pairs[:, 0]] = True
    is_col_matched[pairs[:, 1]] = True

    return (
        pairs,
        (~is_row_matched).nonzero().flatten(),
        (~is_col_matched).nonzero().flatten(),
    )


torch.fx.wrap("hungarian_assignment")
