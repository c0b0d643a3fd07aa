"""Tests for the lazy top-level perch API."""

import pytest

import perch


class TestLazyImports:
    @pytest.mark.parametrize("name", perch.__all__)
    def test_every_public_name_resolves(self, name: str) -> None:
        assert getattr(perch, name) is not None

    def test_app(self) -> None:
        from perch.app import App

        assert perch.App is App

    def test_unknown_name(self) -> None:
        with pytest.raises(AttributeError, match="no attribute 'nope'"):
            perch.nope  # noqa: B018

    def test_version(self) -> None:
        assert perch.__version__
