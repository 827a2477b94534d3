"""Unit tests for the main entry point.

Tests the main() function including:
- CLI argument parsing
- Configuration loading with priority (CLI > env > config)
- Workspace selection
- Message output to a file or stdout
- Exit code handling
"""

import io
import logging
import zipfile
from email import message_from_bytes, policy
from unittest.mock import patch

import pytest

from buildmail.attachments import JinjaTemplateExpander
from buildmail.build import BuildContext
from buildmail.config import AppConfig, ConfigurationError, EnvironmentConfig, WorkspaceConfig
from buildmail.main import (
    build_parser,
    build_workspace,
    load_runtime_config,
    main,
    parse_variables,
    render_subject,
)
from buildmail.workspace import LocalWorkspace, RemoteWorkspace


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    """Run in an empty directory with root logging and signal handlers restored."""
    monkeypatch.chdir(tmp_path)
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    with patch("buildmail.main.signal"):
        yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def build_dir(tmp_path):
    """Workspace with reports and a console log."""
    ws = tmp_path / "ws"
    (ws / "reports").mkdir(parents=True)
    (ws / "reports" / "junit.xml").write_bytes(b"<testsuite tests='3'/>")
    (ws / "reports" / "coverage.json").write_bytes(b"{}" * 1000)
    log_file = tmp_path / "console.log"
    log_file.write_bytes(b"Started by timer\nBUILD SUCCESS\n")
    return ws, log_file


def _read_eml(path):
    return message_from_bytes(path.read_bytes(), policy=policy.default)


class TestParseVariables:
    """Test suite for parse_variables."""

    def test_pairs(self):
        assert parse_variables(["job=nightly", "extra=a=b", " n =1"]) == {
            "job": "nightly",
            "extra": "a=b",
            "n": "1",
        }

    def test_invalid_pairs(self):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_variables(["novalue", "=x"])
        assert len(exc_info.value.errors) == 2


class TestLoadRuntimeConfig:
    """Test suite for load_runtime_config."""

    def test_cli_overrides(self, tmp_path):
        (tmp_path / "buildmail.yaml").write_text(
            "attachments:\n  pattern: '*.log'\n  max_attachment_size: 1MB\n"
            "message:\n  subject: from file\n"
        )
        args = build_parser().parse_args(
            [
                "--pattern", " reports/*.xml ",
                "--max-size", "2MB",
                "--compress-log",
                "--workspace", str(tmp_path),
                "--subject", "from cli",
                "--to", "a@example.com",
                "--to", "b@example.com",
                "--log-level", "DEBUG",
            ]
        )

        app_config, _ = load_runtime_config(args)

        assert app_config.attachments.pattern == "reports/*.xml"
        assert app_config.attachments.max_attachment_size == 2 * 1024 * 1024
        assert app_config.attachments.attach_build_log is True
        assert app_config.attachments.compress_build_log is True
        assert app_config.workspace.path == str(tmp_path)
        assert app_config.message.subject == "from cli"
        assert app_config.message.recipients == ["a@example.com", "b@example.com"]
        assert app_config.logging.level == "DEBUG"

    def test_file_values_kept_without_flags(self, tmp_path):
        (tmp_path / "buildmail.yaml").write_text("attachments:\n  pattern: '*.log'\n")

        app_config, _ = load_runtime_config(build_parser().parse_args([]))

        assert app_config.attachments.pattern == "*.log"
        assert app_config.attachments.attach_build_log is False

    def test_invalid_max_size(self):
        args = build_parser().parse_args(["--max-size", "lots"])
        with pytest.raises(ConfigurationError, match="--max-size"):
            load_runtime_config(args)


class TestBuildWorkspace:
    """Test suite for build_workspace."""

    def test_local(self, tmp_path):
        config = AppConfig(workspace=WorkspaceConfig(path=str(tmp_path)))
        workspace = build_workspace(config, EnvironmentConfig())
        assert isinstance(workspace, LocalWorkspace)

    def test_none_without_path(self):
        assert build_workspace(AppConfig(), EnvironmentConfig()) is None

    def test_remote_with_token(self):
        config = AppConfig(
            workspace=WorkspaceConfig(type="remote", url="http://agent:8080", node="n1", timeout=10)
        )
        workspace = build_workspace(config, EnvironmentConfig(workspace_token="tok"))

        assert isinstance(workspace, RemoteWorkspace)
        assert workspace.timeout == 10
        assert workspace._session.headers["Authorization"] == "Bearer tok"


def test_render_subject_falls_back_to_raw():
    context = BuildContext(build_id="b1")
    expander = JinjaTemplateExpander()

    assert render_subject(expander, "Build {{ build_id }}", context) == "Build b1"
    assert render_subject(expander, "Build {{ nope }}", context) == "Build {{ nope }}"


class TestMain:
    """Test suite for main()."""

    def test_writes_message_with_attachments(self, build_dir, tmp_path):
        ws, log_file = build_dir
        output = tmp_path / "out.eml"

        exit_code = main(
            [
                "--workspace", str(ws),
                "--pattern", "reports/*.xml",
                "--log-file", str(log_file),
                "--compress-log",
                "--build-id", "nightly#42",
                "--from", "ci@example.com",
                "--to", "dev@example.com",
                "--output", str(output),
            ]
        )

        assert exit_code == 0
        message = _read_eml(output)
        assert message["Subject"] == "Build notification for nightly#42"
        assert message["To"] == "dev@example.com"

        parts = list(message.iter_attachments())
        assert [p.get_filename() for p in parts] == ["junit.xml", "build.zip"]
        with zipfile.ZipFile(io.BytesIO(parts[1].get_content())) as archive:
            assert archive.read("build.log") == b"Started by timer\nBUILD SUCCESS\n"

    def test_ceiling_skips_large_files(self, build_dir, tmp_path):
        ws, _ = build_dir
        output = tmp_path / "out.eml"

        exit_code = main(
            [
                "--workspace", str(ws),
                "--pattern", "reports/*",
                "--max-size", "1KB",
                "--output", str(output),
            ]
        )

        assert exit_code == 0
        names = [p.get_filename() for p in _read_eml(output).iter_attachments()]
        assert names == ["junit.xml"]

    def test_template_variables(self, build_dir, tmp_path):
        ws, _ = build_dir
        output = tmp_path / "out.eml"

        exit_code = main(
            [
                "--workspace", str(ws),
                "--pattern", "reports/{{ report }}",
                "--var", "report=junit.xml",
                "--subject", "{{ report }} ready",
                "--output", str(output),
            ]
        )

        assert exit_code == 0
        message = _read_eml(output)
        assert message["Subject"] == "junit.xml ready"
        assert [p.get_filename() for p in message.iter_attachments()] == ["junit.xml"]

    def test_writes_to_stdout(self, build_dir, capsysbinary):
        ws, _ = build_dir

        exit_code = main(["--workspace", str(ws), "--pattern", "reports/*.xml"])

        assert exit_code == 0
        message = message_from_bytes(capsysbinary.readouterr().out, policy=policy.default)
        assert [p.get_filename() for p in message.iter_attachments()] == ["junit.xml"]

    def test_missing_workspace_still_sends(self, tmp_path):
        output = tmp_path / "out.eml"

        exit_code = main(["--pattern", "*.xml", "--output", str(output)])

        assert exit_code == 0
        assert list(_read_eml(output).iter_attachments()) == []

    def test_invalid_variable(self, capsys):
        exit_code = main(["--var", "novalue"])

        assert exit_code == 1
        assert "Configuration Error" in capsys.readouterr().err

    def test_missing_config_file(self, tmp_path, capsys):
        exit_code = main(["--config", str(tmp_path / "missing.yaml")])

        assert exit_code == 1
        assert "not found" in capsys.readouterr().err

    def test_unwritable_output(self, tmp_path, capsys):
        exit_code = main(["--output", str(tmp_path / "no" / "such" / "dir" / "out.eml")])

        assert exit_code == 1
        assert "Failed to write message" in capsys.readouterr().err

    def test_console_file_receives_progress_lines(self, build_dir, tmp_path):
        ws, _ = build_dir
        console = tmp_path / "console.txt"

        exit_code = main(
            [
                "--workspace", str(ws),
                "--pattern", "reports/*",
                "--max-size", "1KB",
                "--console", str(console),
                "--output", str(tmp_path / "out.eml"),
            ]
        )

        assert exit_code == 0
        lines = console.read_text(encoding="utf-8").splitlines()
        assert any(line.startswith("Skipping `coverage.json'") for line in lines)
        assert any(line.startswith("File ") and line.endswith("junit.xml was attached") for line in lines)

    def test_console_dash_writes_to_stderr(self, build_dir, tmp_path, capsys):
        ws, _ = build_dir

        exit_code = main(
            [
                "--workspace", str(ws),
                "--pattern", "reports/*.xml",
                "--console", "-",
                "--output", str(tmp_path / "out.eml"),
            ]
        )

        assert exit_code == 0
        assert "junit.xml was attached" in capsys.readouterr().err

    def test_unopenable_console(self, tmp_path, capsys):
        exit_code = main(["--console", str(tmp_path / "no" / "dir" / "console.txt")])

        assert exit_code == 1
        assert "Cannot open --console file" in capsys.readouterr().err

    def test_double_star_inside_name(self, build_dir, tmp_path):
        ws, _ = build_dir
        output = tmp_path / "out.eml"

        exit_code = main(["--workspace", str(ws), "--pattern", "reports/**.xml", "--output", str(output)])

        assert exit_code == 0
        assert [p.get_filename() for p in _read_eml(output).iter_attachments()] == ["junit.xml"]
