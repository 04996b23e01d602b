"""Tests for the registry clients and the dispatching RegistryClient."""

from datetime import datetime, timezone
from unittest.mock import patch

import pytest

from common.errors import NetworkError, NotFound
from registry import crates_io, go_proxy, maven, npm, packagist, pypi, rubygems
from registry.client import RateLimiter, RegistryClient
from versioning.models import Candidate, Ecosystem
from versioning.semver import parse_version


def texts(candidates):
    return sorted(c.version.text for c in candidates)


def released(candidates):
    return {c.version.text: c.released_at for c in candidates}


class TestNpm:
    PACKUMENT = {
        "name": "left-pad",
        "versions": {"1.0.0": {}, "1.1.0": {}, "2.0.0-beta.1": {}, "not-a-version": {}},
        "time": {
            "created": "2016-01-01T00:00:00.000Z",
            "1.0.0": "2016-03-01T10:00:00.000Z",
            "1.1.0": "2016-04-01T10:00:00.000Z",
        },
    }

    def test_versions_and_times(self):
        with patch("registry.npm.get_json", return_value=(200, {}, self.PACKUMENT)):
            result = npm.list_versions("left-pad")
        assert texts(result) == ["1.0.0", "1.1.0", "2.0.0-beta.1"]
        times = released(result)
        assert times["1.1.0"] == datetime(2016, 4, 1, 10, tzinfo=timezone.utc)
        assert times["2.0.0-beta.1"] is None

    def test_scoped_name_keeps_at_sign(self):
        with patch("registry.npm.get_json", return_value=(200, {}, {"versions": {}})) as mock_get:
            npm.list_versions("@types/node")
        assert mock_get.call_args[0][0] == "https://registry.npmjs.org/@types%2Fnode"

    def test_not_found(self):
        with patch("registry.npm.get_json", return_value=(404, {}, None)):
            with pytest.raises(NotFound):
                npm.list_versions("missing")

    def test_server_error(self):
        with patch("registry.npm.get_json", return_value=(503, {}, None)):
            with pytest.raises(NetworkError):
                npm.list_versions("flaky")

    def test_list_payload_is_a_network_error(self):
        with patch("registry.npm.get_json", return_value=(200, {}, ["lodash"])):
            with pytest.raises(NetworkError):
                npm.list_versions("lodash")


class TestPypi:
    PAYLOAD = {
        "releases": {
            "2.0.0": [
                {"upload_time_iso_8601": "2023-05-02T00:00:00.000000Z", "yanked": False},
                {"upload_time_iso_8601": "2023-05-01T00:00:00.000000Z", "yanked": False},
            ],
            "2.0.1": [{"upload_time_iso_8601": "2023-06-01T00:00:00Z", "yanked": True}],
            "2.1.0": [],
            "2.2.0rc1": [{"upload_time_iso_8601": "2023-07-01T00:00:00Z"}],
        }
    }

    def test_yanked_releases_are_dropped(self):
        with patch("registry.pypi.get_json", return_value=(200, {}, self.PAYLOAD)):
            result = pypi.list_versions("demo")
        assert texts(result) == ["2.0.0", "2.1.0", "2.2.0rc1"]

    def test_release_time_is_earliest_upload(self):
        with patch("registry.pypi.get_json", return_value=(200, {}, self.PAYLOAD)):
            times = released(pypi.list_versions("demo"))
        assert times["2.0.0"] == datetime(2023, 5, 1, tzinfo=timezone.utc)
        assert times["2.1.0"] is None

    def test_invalid_payload(self):
        with patch("registry.pypi.get_json", return_value=(200, {}, None)):
            with pytest.raises(NetworkError):
                pypi.list_versions("demo")


class TestCratesIo:
    def test_yanked_versions_are_skipped(self):
        payload = {"versions": [
            {"num": "1.0.200", "created_at": "2024-05-01T12:00:00.123456+00:00", "yanked": False},
            {"num": "1.0.199", "created_at": "2024-04-01T12:00:00+00:00", "yanked": True},
        ]}
        with patch("registry.crates_io.get_json", return_value=(200, {}, payload)) as mock_get:
            result = crates_io.list_versions("serde")
        assert texts(result) == ["1.0.200"]
        assert result[0].released_at.year == 2024
        assert mock_get.call_args[0][0] == "https://crates.io/api/v1/crates/serde"


class TestGoProxy:
    def test_escape_module_path(self):
        assert go_proxy.escape_module_path("github.com/BurntSushi/toml") == "github.com/!burnt!sushi/toml"

    def test_list_then_info(self):
        infos = {
            "https://proxy.golang.org/github.com/!burnt!sushi/toml/@v/v1.3.0.info":
                (200, {}, {"Version": "v1.3.0", "Time": "2023-05-01T00:00:00Z"}),
            "https://proxy.golang.org/github.com/!burnt!sushi/toml/@v/v1.2.0.info": (500, {}, None),
        }
        with patch("registry.go_proxy.robust_get", return_value=(200, {}, "v1.2.0\nv1.3.0\n\n")) as mock_list, \
                patch("registry.go_proxy.get_json", side_effect=lambda url, **kw: infos[url]):
            result = go_proxy.list_versions("github.com/BurntSushi/toml")

        assert mock_list.call_args[0][0] == "https://proxy.golang.org/github.com/!burnt!sushi/toml/@v/list"
        times = released(result)
        assert times["1.3.0"] == datetime(2023, 5, 1, tzinfo=timezone.utc)
        assert times["1.2.0"] is None

    def test_unknown_module(self):
        with patch("registry.go_proxy.robust_get", return_value=(410, {}, "gone")):
            with pytest.raises(NotFound):
                go_proxy.list_versions("example.com/nothing")


class TestRubygems:
    def test_platform_builds_collapse(self):
        payload = [
            {"number": "1.16.0", "platform": "ruby", "created_at": "2024-01-02T00:00:00.000Z"},
            {"number": "1.16.0", "platform": "x86_64-linux", "created_at": "2024-01-02T00:00:00.000Z"},
            {"number": "1.15.5", "platform": "ruby", "created_at": "2023-11-01T00:00:00.000Z"},
            {"number": "1.15.4", "platform": "ruby", "yanked": True},
        ]
        with patch("registry.rubygems.get_json", return_value=(200, {}, payload)):
            result = rubygems.list_versions("nokogiri")
        assert texts(result) == ["1.15.5", "1.16.0"]

    def test_object_payload_is_invalid(self):
        with patch("registry.rubygems.get_json", return_value=(200, {}, {"error": "x"})):
            with pytest.raises(NetworkError):
                rubygems.list_versions("rails")


class TestPackagist:
    def test_expand_minified(self):
        entries = [
            {"version": "2.0.0", "time": "2023-01-01T00:00:00+00:00", "require": {"php": ">=8.0"}},
            {"version": "1.9.0", "require": "__unset"},
        ]
        expanded = packagist.expand_minified(entries)
        assert expanded[1] == {"version": "1.9.0", "time": "2023-01-01T00:00:00+00:00"}
        assert expanded[0]["require"] == {"php": ">=8.0"}

    def test_dev_branches_are_excluded(self):
        payload = {
            "minified": "composer/2.0",
            "packages": {"monolog/monolog": [
                {"version": "3.5.0", "time": "2023-10-27T15:32:31+00:00"},
                {"version": "dev-main"},
                {"version": "3.x-dev"},
                {"version": "3.4.0", "time": "2023-06-21T08:46:11+00:00"},
            ]},
        }
        with patch("registry.packagist.get_json", return_value=(200, {}, payload)):
            result = packagist.list_versions("monolog/monolog")
        assert texts(result) == ["3.4.0", "3.5.0"]


class TestMaven:
    def test_split_coordinates(self):
        assert maven.split_coordinates("org.slf4j:slf4j-api") == ("org.slf4j", "slf4j-api")
        with pytest.raises(ValueError):
            maven.split_coordinates("slf4j-api")

    def test_search_query(self):
        payload = {"response": {"docs": [
            {"g": "org.slf4j", "a": "slf4j-api", "v": "2.0.9", "timestamp": 1693526400000},
            {"g": "org.slf4j", "a": "slf4j-api", "v": "2.0.7", "timestamp": 1678000000000},
        ]}}
        with patch("registry.maven.get_json", return_value=(200, {}, payload)) as mock_get:
            result = maven.list_versions("org.slf4j:slf4j-api")

        params = mock_get.call_args[1]["params"]
        assert params["q"] == 'g:"org.slf4j" AND a:"slf4j-api"'
        assert params["core"] == "gav"
        assert texts(result) == ["2.0.7", "2.0.9"]
        assert released(result)["2.0.9"] == datetime(2023, 9, 1, tzinfo=timezone.utc)

    def test_no_docs_is_not_found(self):
        with patch("registry.maven.get_json", return_value=(200, {}, {"response": {"docs": []}})):
            with pytest.raises(NotFound):
                maven.list_versions("org.example:nothing")

    def test_malformed_coordinate_is_not_found(self):
        with patch("registry.maven.get_json") as mock_get:
            with pytest.raises(NotFound):
                maven.list_versions("no-colon")
        mock_get.assert_not_called()


class TestRegistryClient:
    def test_dispatch_by_ecosystem(self):
        calls = []

        def fake(name):
            calls.append(name)
            return [Candidate(parse_version("1.0.0", Ecosystem.RUBY), None)]

        client = RegistryClient(lookups={Ecosystem.RUBY: fake})
        result = client.list_versions("rails", Ecosystem.RUBY)
        assert calls == ["rails"]
        assert texts(result) == ["1.0.0"]

    def test_errors_propagate(self):
        def missing(name):
            raise NotFound(name, "npm")

        client = RegistryClient(lookups={Ecosystem.NODE: missing})
        with pytest.raises(NotFound):
            client.list_versions("nope", Ecosystem.NODE)

    def test_default_table_covers_every_ecosystem(self):
        assert set(RegistryClient().lookups) == set(Ecosystem)


class TestRateLimiter:
    def test_second_call_waits(self):
        limiter = RateLimiter(1.0)
        with patch("registry.client.time.monotonic", side_effect=[100.0, 100.0, 100.25, 101.0]), \
                patch("registry.client.time.sleep") as mock_sleep:
            limiter.wait()
            limiter.wait()
        mock_sleep.assert_called_once_with(pytest.approx(0.75))

    def test_first_call_does_not_wait(self):
        limiter = RateLimiter(1.0)
        with patch("registry.client.time.monotonic", return_value=50.0), \
                patch("registry.client.time.sleep") as mock_sleep:
            limiter.wait()
        mock_sleep.assert_not_called()
