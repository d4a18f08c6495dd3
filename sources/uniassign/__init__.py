r"""
UniAssign
=========

This module implements solvers for the rectangular linear assignment problem.

.. math::

    Assignment: C \in \mathbb{R}^{m \times n} \rightarrow \{(i, j)\}_{k=1}^{\min(m, n)}

Each row and each column of the cost matrix is used at most once, and the sum of
the costs at the returned pairs is minimal.

Terminology
-----------

- **Cost matrix**: The table of pairwise costs between rows and columns.

- **Starred zero**: A zero-cost cell that is tentatively part of the assignment.

- **Primed zero**: A zero-cost cell found while searching for an augmenting path.

- **Cover**: A row or column that is excluded from the search for uncovered zeros.
"""

from __future__ import annotations

__version__ = "1.0.0"

from . import assignment, constants, debug
from .assignment import InvalidInput, solve
