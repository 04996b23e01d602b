"""Tests for minimum release age parsing, sources and cascade."""

import json
import logging
from datetime import timedelta

import pytest

from common.errors import ConfigError
from policy.age import parse_duration, resolve_age_policy
from policy.sources import default_sources, read_npmrc, read_package_json, read_pnpm_workspace
from versioning.models import AgePolicy, AgeSource


class TestParseDuration:
    @pytest.mark.parametrize("text,days", [("10d", 10), ("2w", 14), ("1m", 30), (" 3d ", 3), ("0d", 0)])
    def test_valid(self, text, days):
        assert parse_duration(text) == timedelta(days=days)

    @pytest.mark.parametrize("text", ["", "10", "d", "-1d", "1y", "1.5d", "ten days"])
    def test_invalid(self, text):
        with pytest.raises(ConfigError):
            parse_duration(text)


class TestCascade:
    def test_first_present_value_wins(self):
        policy = resolve_age_policy([
            (AgeSource.CLI, lambda: None),
            (AgeSource.NPMRC, lambda: timedelta(days=3)),
            (AgeSource.PNPM_WORKSPACE, lambda: timedelta(days=9)),
        ])
        assert policy == AgePolicy(timedelta(days=3), AgeSource.NPMRC)

    def test_malformed_source_falls_through(self, caplog):
        def broken():
            raise ConfigError(".npmrc", "soon")

        with caplog.at_level(logging.WARNING):
            policy = resolve_age_policy([
                (AgeSource.NPMRC, broken),
                (AgeSource.PACKAGE_JSON, lambda: timedelta(days=1)),
            ])
        assert policy.source == AgeSource.PACKAGE_JSON
        assert "soon" in caplog.text

    def test_nothing_anywhere(self):
        assert resolve_age_policy([(AgeSource.CLI, lambda: None)]) == AgePolicy()


class TestSources:
    def test_npmrc(self, tmp_path):
        (tmp_path / ".npmrc").write_text("# comment\nregistry=https://x\nminimum-release-age = \"5d\"\n")
        assert read_npmrc(str(tmp_path)) == timedelta(days=5)

    def test_npmrc_malformed(self, tmp_path):
        (tmp_path / ".npmrc").write_text("minimum-release-age=1440\n")
        with pytest.raises(ConfigError):
            read_npmrc(str(tmp_path))

    def test_pnpm_workspace_minutes(self, tmp_path):
        (tmp_path / "pnpm-workspace.yaml").write_text("packages:\n  - 'pkgs/*'\nminimumReleaseAge: 1440\n")
        assert read_pnpm_workspace(str(tmp_path)) == timedelta(minutes=1440)

    def test_pnpm_workspace_duration(self, tmp_path):
        (tmp_path / "pnpm-workspace.yaml").write_text("minimumReleaseAge: '2w'\n")
        assert read_pnpm_workspace(str(tmp_path)) == timedelta(days=14)

    def test_package_json(self, tmp_path):
        data = {"name": "x", "pnpm": {"settings": {"minimumReleaseAge": "1m"}}}
        (tmp_path / "package.json").write_text(json.dumps(data))
        assert read_package_json(str(tmp_path)) == timedelta(days=30)

    def test_package_json_without_setting(self, tmp_path):
        (tmp_path / "package.json").write_text('{"pnpm": "not-an-object"}')
        assert read_package_json(str(tmp_path)) is None

    def test_missing_files(self, tmp_path):
        assert read_npmrc(str(tmp_path)) is None
        assert read_pnpm_workspace(str(tmp_path)) is None
        assert read_package_json(str(tmp_path)) is None

    def test_cli_beats_files(self, tmp_path):
        (tmp_path / ".npmrc").write_text("minimum-release-age=5d\n")
        policy = resolve_age_policy(default_sources(str(tmp_path), timedelta(days=1)))
        assert policy == AgePolicy(timedelta(days=1), AgeSource.CLI)

    def test_bad_npmrc_falls_through_to_workspace(self, tmp_path):
        (tmp_path / ".npmrc").write_text("minimum-release-age=later\n")
        (tmp_path / "pnpm-workspace.yaml").write_text("minimumReleaseAge: 60\n")
        policy = resolve_age_policy(default_sources(str(tmp_path)))
        assert policy == AgePolicy(timedelta(minutes=60), AgeSource.PNPM_WORKSPACE)
