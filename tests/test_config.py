"""Tests for perch.config — AppConfig frozen dataclass."""

import pytest

from perch.config import AppConfig


class TestAppConfig:
    def test_defaults(self) -> None:
        cfg = AppConfig()

        assert cfg.host == "127.0.0.1"
        assert cfg.port == 3000
        assert cfg.debug is False
        assert cfg.workers == 1
        assert cfg.reload_dirs == ()
        assert cfg.case_sensitive is False
        assert cfg.strict_slashes is False
        assert cfg.regex_timeout == 0.05
        assert cfg.log_level == "info"

    def test_override(self) -> None:
        cfg = AppConfig(host="0.0.0.0", port=8080, debug=True, regex_timeout=None)

        assert cfg.host == "0.0.0.0"
        assert cfg.port == 8080
        assert cfg.debug is True
        assert cfg.regex_timeout is None

    def test_frozen(self) -> None:
        cfg = AppConfig()

        with pytest.raises(AttributeError):
            cfg.debug = True  # type: ignore[misc]

    def test_reload_dirs_custom(self) -> None:
        cfg = AppConfig(reload_dirs=("src", "../shared"))
        assert cfg.reload_dirs == ("src", "../shared")
