from __future__ import annotations

from abc import abstractmethod
from typing import Tuple

import torch

from ._utils import InvalidInput

__all__ = ["Assignment"]


class Assignment(torch.nn.Module):
    """
    Solves a linear assignment problem (LAP).

    Matches with a cost at or above ``threshold`` are rejected after solving, and the
    involved rows and columns are reported as unmatched.
    """

    threshold: float

    def __init__(self, threshold: float = torch.inf):
        super().__init__()

        self.threshold = threshold

    def forward(
        self, cost_matrix: torch.Tensor
    ) -> Tuple[torch.Tensor, torch.Tensor, torch.Tensor]:
        """
        Solve the cost matrix

        Parameters
        ----------
        cost_matrix
            Cost matrix (NxM) to solve

        Returns
        -------
            Tuple of matches (N_match x 2), unmatched rows and
            unmatched columns
        """

        if cost_matrix.ndim != 2:
            msg = f"Expected a cost matrix of shape (N, M), got {tuple(cost_matrix.shape)}!"
            raise InvalidInput(msg)

        if min(cost_matrix.shape) == 0:
            return self._no_match(cost_matrix)

        matches, unmatch_rows, unmatch_cols = self._assign(cost_matrix)

        if self.threshold == torch.inf:
            return matches, unmatch_rows, unmatch_cols
        return self._gate(cost_matrix, matches, unmatch_rows, unmatch_cols)

    def _gate(
        self,
        cost_matrix: torch.Tensor,
        matches: torch.Tensor,
        unmatch_rows: torch.Tensor,
        unmatch_cols: torch.Tensor,
    ) -> Tuple[torch.Tensor, torch.Tensor, torch.Tensor]:
        keep = cost_matrix[matches[:, 0], matches[:, 1]] < self.threshold
        rejected = matches[~keep]

        unmatch_rows = torch.cat((unmatch_rows, rejected[:, 0])).sort().values
        unmatch_cols = torch.cat((unmatch_cols, rejected[:, 1])).sort().values

        return matches[keep], unmatch_rows, unmatch_cols

    @staticmethod
    def _no_match(
        cost_matrix: torch.Tensor,
    ) -> Tuple[torch.Tensor, torch.Tensor, torch.Tensor]:
        cs_num, ds_num = cost_matrix.shape
        device = cost_matrix.device
        return (
            torch.empty((0, 2), dtype=torch.long, device=device),
            torch.arange(cs_num, dtype=torch.long, device=device),
            torch.arange(ds_num, dtype=torch.long, device=device),
        )

    @abstractmethod
    def _assign(
        self, cost_matrix: torch.Tensor
    ) -> Tuple[torch.Tensor, torch.Tensor, torch.Tensor]:
        raise NotImplementedError
