"""Tests for package metadata."""

import pytest

import pg_shell
from pg_shell.__about__ import __version__


@pytest.mark.unit
def test_version_is_exported():
    assert pg_shell.__version__ == __version__


@pytest.mark.unit
def test_version_is_semver_like():
    parts = __version__.split(".")
    assert len(parts) == 3
    assert all(part.isdigit() for part in parts)
