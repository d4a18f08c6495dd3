r"""
Tests for ``uniassign.debug``.
"""

from __future__ import annotations

import environs
import pytest

from uniassign.constants import ENV_DEBUG
from uniassign.debug import check_debug_enabled


@pytest.mark.parametrize(
    ["value", "expected"],
    [
        ("1", True),
        ("true", True),
        ("YES", True),
        ("on", True),
        ("0", False),
        ("false", False),
        ("off", False),
    ],
)
def test_check_debug_enabled(monkeypatch, value, expected):
    monkeypatch.setenv(ENV_DEBUG, value)

    assert check_debug_enabled() is expected


def test_check_debug_disabled_by_default(monkeypatch):
    monkeypatch.delenv(ENV_DEBUG, raising=False)

    assert check_debug_enabled() is False


def test_check_debug_rejects_unknown_value(monkeypatch):
    monkeypatch.setenv(ENV_DEBUG, "maybe")

    with pytest.raises(environs.EnvError):
        check_debug_enabled()


def test_check_debug_enabled_is_cached(monkeypatch):
    monkeypatch.setenv(ENV_DEBUG, "1")
    assert check_debug_enabled()

    monkeypatch.setenv(ENV_DEBUG, "0")
    assert check_debug_enabled()
