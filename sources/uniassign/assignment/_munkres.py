r"""
Implements the Kuhn-Munkres (Hungarian) algorithm as an explicit state machine.

The solver works on a private copy of the cost matrix, a grid of zero markings and
a pair of cover vectors. Each step of the method is a function that mutates the
:class:`MunkresState` and returns the next :class:`Step`:

.. code-block:: text

    REDUCE -> STAR -> COVER -> PRIME -> AUGMENT -> COVER -> ... -> DONE
                                 ^  |
                                 |  v
                               MINIMIZE

All scans are performed in row-major order. This order is the tie-break among
assignments of equal cost, which makes the result deterministic.
"""

from __future__ import annotations

import dataclasses
import enum
import logging
import typing as T

import numpy as np
import torch
import torch.fx
import typing_extensions as TX
from torch import Tensor

from ..debug import check_debug_enabled
from ._base import Assignment
from ._utils import as_cost_matrix

__all__ = [
    "Munkres",
    "MunkresState",
    "Step",
    "ZeroMark",
    "munkres_assignment",
    "run",
    "solve",
]

logger = logging.getLogger(__name__)


class Step(enum.Enum):
    """
    States of the solver.
    """

    REDUCE = enum.auto()
    STAR = enum.auto()
    COVER = enum.auto()
    PRIME = enum.auto()
    AUGMENT = enum.auto()
    MINIMIZE = enum.auto()
    DONE = enum.auto()


class ZeroMark(enum.IntEnum):
    """
    Marking of a cell in the zero grid.
    """

    NONE = 0
    STARRED = 1
    PRIMED = 2


@dataclasses.dataclass(eq=False)
class MunkresState:
    """
    Context that is threaded through the steps of a single solve.

    Attributes
    ----------
    cost
        Working copy of the cost matrix (N x M) with ``N <= M``.
    marks
        Grid of :class:`ZeroMark` values with the same shape as ``cost``.
    row_covered
        Cover flags of the rows (N).
    col_covered
        Cover flags of the columns (M).
    transposed
        Whether the caller's matrix was transposed so that ``N <= M``.
    start
        Primed zero that seeds the next augmenting path.
    """

    cost: np.ndarray
    marks: np.ndarray
    row_covered: np.ndarray
    col_covered: np.ndarray
    transposed: bool = False
    start: T.Optional[T.Tuple[int, int]] = None

    @classmethod
    def from_matrix(cls, matrix: T.Any) -> TX.Self:
        """
        Validate the cost matrix and allocate fresh state for it. A matrix with more
        rows than columns is transposed.
        """
        cost = as_cost_matrix(matrix)
        transposed = cost.shape[1] < cost.shape[0]
        if transposed:
            cost = np.ascontiguousarray(cost.T)

        rows, cols = cost.shape
        return cls(
            cost=cost,
            marks=np.full((rows, cols), ZeroMark.NONE, dtype=np.int8),
            row_covered=np.zeros(rows, dtype=bool),
            col_covered=np.zeros(cols, dtype=bool),
            transposed=transposed,
        )

    @property
    def rows(self) -> int:
        return self.cost.shape[0]

    @property
    def cols(self) -> int:
        return self.cost.shape[1]

    def clear_covers(self) -> None:
        self.row_covered[:] = False
        self.col_covered[:] = False

    def uncovered(self) -> np.ndarray:
        """
        Mask of the cells whose row and column are both uncovered.
        """
        return ~self.row_covered[:, None] & ~self.col_covered[None, :]

    def find_uncovered_zero(self) -> T.Optional[T.Tuple[int, int]]:
        """
        First uncovered zero in row-major order, if any.
        """
        hits = (self.cost == 0) & self.uncovered()
        idx = int(hits.argmax())
        if not hits.flat[idx]:
            return None
        row, col = divmod(idx, self.cols)
        return row, col

    def find_in_row(self, mark: ZeroMark, row: int) -> T.Optional[int]:
        (hits,) = np.nonzero(self.marks[row, :] == mark)
        return int(hits[0]) if hits.size > 0 else None

    def find_in_col(self, mark: ZeroMark, col: int) -> T.Optional[int]:
        (hits,) = np.nonzero(self.marks[:, col] == mark)
        return int(hits[0]) if hits.size > 0 else None

    def starred(self) -> T.List[T.Tuple[int, int]]:
        """
        Positions of the starred zeros in row-major order, in the caller's axes.
        """
        rows, cols = np.nonzero(self.marks == ZeroMark.STARRED)
        if self.transposed:
            rows, cols = cols, rows
        return list(zip(rows.tolist(), cols.tolist()))


#########
# Steps #
#########


def reduce_rows(state: MunkresState) -> Step:
    """
    Subtract the smallest value of each row from that row, leaving at least one zero
    per row.
    """
    state.cost -= state.cost.min(axis=1, keepdims=True)
    return Step.STAR


def star_zeros(state: MunkresState) -> Step:
    """
    Star the first zero in each row whose column holds no star yet.

    The covers are only used as scratch space here and are cleared afterwards.
    """
    for row, col in np.argwhere(state.cost == 0):
        if state.row_covered[row] or state.col_covered[col]:
            continue
        state.marks[row, col] = ZeroMark.STARRED
        state.row_covered[row] = True
        state.col_covered[col] = True

    state.clear_covers()
    return Step.COVER


def cover_starred_columns(state: MunkresState) -> Step:
    """
    Cover each column that contains a starred zero. When every row has a star, the
    stars form a complete assignment.
    """
    state.col_covered |= (state.marks == ZeroMark.STARRED).any(axis=0)

    if np.count_nonzero(state.col_covered) == state.rows:
        return Step.DONE
    return Step.PRIME


def prime_zeros(state: MunkresState) -> Step:
    """
    Prime uncovered zeros until one is found with no star in its row, which seeds
    an augmenting path. A primed zero that shares a row with a star covers that row
    and uncovers the column of the star.
    """
    while True:
        zero = state.find_uncovered_zero()
        if zero is None:
            return Step.MINIMIZE

        row, col = zero
        state.marks[row, col] = ZeroMark.PRIMED

        star_col = state.find_in_row(ZeroMark.STARRED, row)
        if star_col is None:
            state.start = (row, col)
            return Step.AUGMENT

        state.row_covered[row] = True
        state.col_covered[star_col] = False


def augment_path(state: MunkresState) -> Step:
    """
    Build the alternating path of primed and starred zeros that starts at the seed
    prime, then swap the roles of its cells. This adds exactly one star.
    """
    if state.start is None:
        msg = "Cannot augment without a starting primed zero!"
        raise RuntimeError(msg)

    path = [state.start]
    while True:
        col = path[-1][1]
        row = state.find_in_col(ZeroMark.STARRED, col)
        if row is None:
            break
        path.append((row, col))

        col = state.find_in_row(ZeroMark.PRIMED, row)
        if col is None:
            msg = f"Starred zero at ({row}, {path[-1][1]}) has no primed zero in its row!"
            raise RuntimeError(msg)
        path.append((row, col))

    for row, col in path:
        if state.marks[row, col] == ZeroMark.STARRED:
            state.marks[row, col] = ZeroMark.NONE
        else:
            state.marks[row, col] = ZeroMark.STARRED

    state.clear_covers()
    state.marks[state.marks == ZeroMark.PRIMED] = ZeroMark.NONE
    state.start = None

    return Step.COVER


def minimize(state: MunkresState) -> Step:
    """
    Add the smallest uncovered value to every covered row and subtract it from every
    uncovered column. Existing zeros survive and at least one new uncovered zero
    appears.
    """
    smallest = state.cost[state.uncovered()].min()
    if not np.isfinite(smallest):
        msg = f"Smallest uncovered cost is not finite: {smallest}!"
        raise RuntimeError(msg)

    state.cost[state.row_covered, :] += smallest
    state.cost[:, ~state.col_covered] -= smallest

    return Step.PRIME


_STEPS: T.Final[T.Mapping[Step, T.Callable[[MunkresState], Step]]] = {
    Step.REDUCE: reduce_rows,
    Step.STAR: star_zeros,
    Step.COVER: cover_starred_columns,
    Step.PRIME: prime_zeros,
    Step.AUGMENT: augment_path,
    Step.MINIMIZE: minimize,
}


def run(state: MunkresState, step: Step = Step.REDUCE) -> MunkresState:
    """
    Drive the state machine from ``step`` until it reaches :attr:`Step.DONE`.

    Parameters
    ----------
    state
        Freshly allocated state, see :meth:`MunkresState.from_matrix`.
    step, optional
        Initial step.

    Returns
    -------
        The same state, whose starred zeros hold the assignment.
    """
    debug = check_debug_enabled()
    iterations = 0

    while step is not Step.DONE:
        try:
            handler = _STEPS[step]
        except KeyError:
            msg = f"No handler for step {step!r}!"
            raise RuntimeError(msg) from None

        following = handler(state)
        if debug:
            logger.debug("Step %s -> %s", step.name, following.name)

        step = following
        iterations += 1

    if debug:
        logger.debug(
            "Solved %d x %d cost matrix in %d steps with %d matches (transposed: %s)",
            state.rows,
            state.cols,
            iterations,
            np.count_nonzero(state.marks == ZeroMark.STARRED),
            state.transposed,
        )

    return state


def solve(matrix: T.Any) -> T.List[T.Tuple[int, int]]:
    """
    Solve the linear assignment problem over a cost matrix.

    Parameters
    ----------
    matrix
        Cost matrix (N x M) of finite values. Any sequence of sequences, array or
        tensor is accepted.

    Returns
    -------
        List of ``min(N, M)`` row-column pairs that minimize the total cost.

    Raises
    ------
    InvalidInput
        If the matrix is empty, jagged or contains a non-finite value.
    """
    return run(MunkresState.from_matrix(matrix)).starred()


class Munkres(Assignment):
    """
    Solves the linear assignment over a cost matrix using the Kuhn-Munkres method.

    See :func:`.munkres_assignment` for details.
    """

    @TX.override
    def _assign(self, cost_matrix: Tensor) -> T.Tuple[Tensor, Tensor, Tensor]:
        return munkres_assignment(cost_matrix)


@torch.no_grad()
def munkres_assignment(cost_matrix: Tensor) -> T.Tuple[Tensor, Tensor, Tensor]:
    """
    Perform linear assignment on a tensor using :func:`solve`.

    Parameters
    ----------
    cost_matrix
        Cost matrix (N x M) of finite values.

    Returns
    -------
    matches : Tensor[min(N, M), 2]
        Indices of matched row-column pairs.
    unmatched_rows : Tensor
        Indices of unmatched rows.
    unmatched_cols : Tensor
        Indices of unmatched columns.
    """
    device = cost_matrix.device

    pairs = solve(cost_matrix)
    matches = torch.as_tensor(pairs, dtype=torch.long, device=device).reshape(-1, 2)

    idx_row = torch.arange(cost_matrix.shape[0], device=device)
    idx_col = torch.arange(cost_matrix.shape[1], device=device)

    unmatch_row = idx_row[~torch.isin(idx_row, matches[:, 0])]
    unmatch_col = idx_col[~torch.isin(idx_col, matches[:, 1])]

    return matches, unmatch_row, unmatch_col


torch.fx.wrap("munkres_assignment")
