"""Tests for argument parsing and the CLI entry point."""

import logging
from datetime import timedelta
from unittest.mock import patch

import pytest

from args import parse_args
from constants import ExitCodes
from depup import build_filter, main
from orchestrator import RunResult
from versioning.models import Ecosystem, ManifestResult


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestParseArgs:
    def test_defaults(self):
        args = parse_args([])
        assert args.path == "."
        assert not args.DRY_RUN
        assert args.LOG_LEVEL == "WARNING"
        assert args.EXCLUDE == []
        assert args.AGE is None

    def test_flags(self):
        args = parse_args(["proj", "-n", "--node", "--go", "--exclude", "a,b", "--exclude", "c", "--age", "7d"])
        assert args.path == "proj"
        assert args.DRY_RUN
        assert args.LANG_NODE and args.LANG_GO and not args.LANG_PYTHON
        assert args.EXCLUDE == ["a,b", "c"]
        assert args.AGE == "7d"

    def test_verbose_and_quiet_are_exclusive(self):
        with pytest.raises(SystemExit):
            parse_args(["-v", "-q"])

    def test_json_and_diff_are_exclusive(self):
        with pytest.raises(SystemExit):
            parse_args(["--json", "--diff"])


class TestBuildFilter:
    def test_filter_from_args(self):
        update_filter = build_filter(parse_args(["--python", "--only", "x,y", "--include-pinned"]))
        assert update_filter.languages == frozenset({Ecosystem.PYTHON})
        assert update_filter.only == frozenset({"x", "y"})
        assert update_filter.include_pinned


class TestMain:
    def test_success(self, tmp_path, capsys):
        with patch("depup.run", return_value=RunResult(dry_run=True)) as mock_run:
            with pytest.raises(SystemExit) as info:
                main([str(tmp_path), "--age", "2w", "-n"])
        assert info.value.code == ExitCodes.SUCCESS.value
        kwargs = mock_run.call_args[1]
        assert kwargs["cli_age"] == timedelta(days=14)
        assert kwargs["dry_run"] is True
        assert "(dry-run) Summary:" in capsys.readouterr().out

    def test_invalid_age(self, tmp_path):
        with patch("depup.run") as mock_run:
            with pytest.raises(SystemExit) as info:
                main([str(tmp_path), "--age", "soon"])
        assert info.value.code == ExitCodes.USAGE_ERROR.value
        mock_run.assert_not_called()

    def test_missing_directory(self, tmp_path):
        with pytest.raises(SystemExit) as info:
            main([str(tmp_path / "absent")])
        assert info.value.code == ExitCodes.FILE_ERROR.value

    def test_warnings_exit_code(self, tmp_path):
        failed = RunResult(manifests=[ManifestResult("package.json", Ecosystem.NODE, errors=["broken"])])
        with patch("depup.run", return_value=failed):
            with pytest.raises(SystemExit) as info:
                main([str(tmp_path), "--error-on-warnings", "-q"])
        assert info.value.code == ExitCodes.EXIT_WARNINGS.value

    def test_warnings_without_flag_succeed(self, tmp_path):
        failed = RunResult(manifests=[ManifestResult("package.json", Ecosystem.NODE, errors=["broken"])])
        with patch("depup.run", return_value=failed):
            with pytest.raises(SystemExit) as info:
                main([str(tmp_path), "-q"])
        assert info.value.code == ExitCodes.SUCCESS.value

    def test_json_output(self, tmp_path, capsys):
        with patch("depup.run", return_value=RunResult()):
            with pytest.raises(SystemExit):
                main([str(tmp_path), "--json"])
        assert '"manifests": []' in capsys.readouterr().out

    def test_unreachable_registry_exit_code(self, tmp_path):
        with patch("depup.run", return_value=RunResult(registry_unreachable=True)):
            with pytest.raises(SystemExit) as info:
                main([str(tmp_path), "-q"])
        assert info.value.code == ExitCodes.CONNECTION_ERROR.value == 2

    @pytest.mark.parametrize("flag", ["-q", "--json", "--diff"])
    def test_progress_is_off_for_quiet_and_machine_output(self, tmp_path, flag):
        with patch("depup.run", return_value=RunResult()), patch("depup.LookupProgress") as mock_progress:
            with pytest.raises(SystemExit):
                main([str(tmp_path), flag])
        mock_progress.assert_called_once_with(enabled=False)

    def test_progress_is_requested_for_text_output(self, tmp_path):
        with patch("depup.run", return_value=RunResult()), patch("depup.LookupProgress") as mock_progress:
            with pytest.raises(SystemExit):
                main([str(tmp_path)])
        mock_progress.assert_called_once_with(enabled=True)
