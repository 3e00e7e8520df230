"""Tests for perch.cli._run — ``perch run`` subcommand."""

import sys
import types
from unittest.mock import MagicMock, patch

import pytest

from perch.app import App
from perch.cli import main
from perch.config import AppConfig
from perch.errors import ConfigurationError


@pytest.fixture
def fake_app(monkeypatch: pytest.MonkeyPatch) -> App:
    """Register a fake module with a perch App instance."""
    app = App(config=AppConfig(host="127.0.0.1", port=8000, workers=2))
    mod = types.ModuleType("_run_test_app")
    mod.app = app  # type: ignore[attr-defined]
    monkeypatch.setitem(sys.modules, "_run_test_app", mod)
    return app


class TestPerchRun:
    @patch("perch.server.dev.run_dev_server")
    def test_default_host_and_port(self, mock_server: MagicMock, fake_app: App) -> None:
        """run uses app config defaults when --host/--port are omitted."""
        main(["run", "_run_test_app:app"])
        mock_server.assert_called_once()
        args = mock_server.call_args[0]
        assert args[0] is fake_app
        assert args[1] == "127.0.0.1"
        assert args[2] == 8000

    @patch("perch.server.dev.run_dev_server")
    def test_host_override(self, mock_server: MagicMock, fake_app: App) -> None:
        main(["run", "_run_test_app:app", "--host", "0.0.0.0"])
        assert mock_server.call_args[0][1] == "0.0.0.0"

    @patch("perch.server.dev.run_dev_server")
    def test_port_override(self, mock_server: MagicMock, fake_app: App) -> None:
        main(["run", "_run_test_app:app", "--port", "3001"])
        assert mock_server.call_args[0][2] == 3001

    @patch("perch.server.dev.run_dev_server")
    def test_app_path_forwarded(self, mock_server: MagicMock, fake_app: App) -> None:
        """The original import string is passed as app_path for reload."""
        main(["run", "_run_test_app:app"])
        assert mock_server.call_args[1]["app_path"] == "_run_test_app:app"

    @patch("perch.server.dev.run_dev_server")
    def test_config_forwarded(self, mock_server: MagicMock, fake_app: App) -> None:
        main(["run", "_run_test_app:app"])
        kwargs = mock_server.call_args[1]
        assert kwargs["reload"] is False
        assert kwargs["workers"] == 2
        assert kwargs["log_level"] == "info"

    @patch("perch.server.dev.run_dev_server")
    def test_debug_flag_enables_reload(self, mock_server: MagicMock, fake_app: App) -> None:
        main(["run", "_run_test_app:app", "--debug"])
        assert mock_server.call_args[1]["reload"] is True
        assert fake_app.config.debug is True

    @patch("perch.server.dev.run_dev_server")
    def test_app_frozen_before_serving(self, mock_server: MagicMock, fake_app: App) -> None:
        main(["run", "_run_test_app:app"])
        assert fake_app._frozen is True

    def test_invalid_import_string(self, capsys: pytest.CaptureFixture[str]) -> None:
        """run exits 1 with error message for bad import string."""
        with pytest.raises(SystemExit) as exc_info:
            main(["run", "nonexistent_module_xyz:app"])
        assert exc_info.value.code == 1
        assert "Error:" in capsys.readouterr().err


class TestPerchRunFileTarget:
    @patch("perch.server.dev.run_dev_server")
    def test_file_target_not_reimported(self, mock_server: MagicMock, tmp_path) -> None:
        target = tmp_path / "site.py"
        target.write_text("from perch import App\napp = App()\n")
        main(["run", str(target)])
        assert mock_server.call_args[1]["app_path"] is None


class TestPerchRunServerMissing:
    @patch(
        "perch.server.dev.run_dev_server",
        side_effect=ConfigurationError("Serving requires pounce."),
    )
    def test_exits_with_message(
        self, mock_server: MagicMock, fake_app: App, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["run", "_run_test_app:app"])
        assert exc_info.value.code == 1
        assert "Serving requires pounce." in capsys.readouterr().err
