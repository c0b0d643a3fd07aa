"""Tests for perch.config — AppConfig defaults and immutability."""

import dataclasses

import pytest

from perch.config import AppConfig


class TestAppConfig:
    def test_defaults(self) -> None:
        config = AppConfig()
        assert config.host == "127.0.0.1"
        assert config.port == 8000
        assert config.debug is False
        assert config.redirect_status == 303
        assert config.log_level == "info"

    def test_override(self) -> None:
        config = AppConfig(port=3000, redirect_status=308)
        assert config.port == 3000
        assert config.redirect_status == 308

    def test_frozen(self) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            AppConfig().port = 1  # type: ignore[misc]
