"""Tests for perch.config — immutable AppConfig."""

from dataclasses import FrozenInstanceError

import pytest

from perch.config import AppConfig


class TestAppConfig:
    def test_defaults(self) -> None:
        config = AppConfig()
        assert config.debug is False
        assert config.context_path == ()
        assert config.default_middleware == ()
        assert config.allow_overlap is False
        assert config.resolvers == ()
        assert config.server_uri is None
        assert config.max_content_length == 16 * 1024 * 1024

    def test_frozen(self) -> None:
        with pytest.raises(FrozenInstanceError):
            AppConfig().debug = True  # type: ignore[misc]
