r"""
Common set-up for all tests.

Defines fixtures for random cost matrices and an exhaustive reference solver.
"""

from __future__ import annotations

import itertools
import typing as T

import numpy as np
import pytest

import uniassign


def brute_force_cost(matrix: T.Any) -> float:
    """
    Minimal total cost over all pairings of ``min(N, M)`` rows and columns.
    """
    cm = np.asarray(matrix, dtype=np.float64)
    if cm.shape[0] > cm.shape[1]:
        cm = cm.T

    rows = range(cm.shape[0])
    return min(
        float(cm[rows, list(cols)].sum())
        for cols in itertools.permutations(range(cm.shape[1]), cm.shape[0])
    )


def assert_valid_pairs(pairs: list[tuple[int, int]], shape: tuple[int, int]) -> None:
    rows = [r for r, _ in pairs]
    cols = [c for _, c in pairs]

    assert len(pairs) == min(shape)
    assert len(set(rows)) == len(rows)
    assert len(set(cols)) == len(cols)
    assert all(0 <= r < shape[0] for r in rows)
    assert all(0 <= c < shape[1] for c in cols)


@pytest.fixture()
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)


@pytest.fixture(autouse=True)
def _reset_debug_cache():
    uniassign.debug.check_debug_enabled.cache_clear()
    yield
    uniassign.debug.check_debug_enabled.cache_clear()


@pytest.fixture()
def brute_force() -> T.Callable[[T.Any], float]:
    return brute_force_cost


@pytest.fixture()
def check_pairs() -> T.Callable[[list[tuple[int, int]], tuple[int, int]], None]:
    return assert_valid_pairs
