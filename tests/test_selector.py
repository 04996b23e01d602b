"""Tests for candidate selection."""

from datetime import datetime, timedelta, timezone

import pytest

from versioning.grammars import parse_spec
from versioning.models import (
    AgePolicy,
    AgeSource,
    Candidate,
    ChangeKind,
    DecisionKind,
    Ecosystem,
    SkipReason,
)
from versioning.selector import implied_ceiling, satisfies, select_update
from versioning.semver import parse_version

NOW = datetime(2024, 6, 1, tzinfo=timezone.utc)
OLD = NOW - timedelta(days=365)


def candidates(ecosystem, *versions, released_at=OLD):
    return [Candidate(parse_version(v, ecosystem), released_at) for v in versions]


class TestScenarios:
    """End-to-end selection examples."""

    def test_caret_patch_update(self):
        spec = parse_spec("^4.17.20", Ecosystem.NODE)
        decision = select_update(spec, candidates(Ecosystem.NODE, "4.17.20", "4.17.21", "5.0.0"), now=NOW)
        assert decision.kind == DecisionKind.UPDATE
        assert decision.new_spec_text == "^4.17.21"
        assert decision.change_kind == ChangeKind.PATCH

    def test_python_compound_stays_below_upper_bound(self):
        spec = parse_spec(">=3.5.0,<4.0.0", Ecosystem.PYTHON)
        decision = select_update(
            spec, candidates(Ecosystem.PYTHON, "3.5.0", "3.9.0", "4.0.0", "4.1.0"), now=NOW,
        )
        assert decision.new_spec_text == ">=3.9.0,<4.0.0"
        assert decision.change_kind == ChangeKind.MINOR

    def test_node_exact_pin_is_skipped(self):
        spec = parse_spec("1.2.3", Ecosystem.NODE)
        decision = select_update(spec, candidates(Ecosystem.NODE, "1.2.4", "2.0.0"), now=NOW)
        assert decision.kind == DecisionKind.SKIPPED
        assert decision.reason == SkipReason.PINNED

    def test_go_is_always_updated(self):
        spec = parse_spec("v1.2.3", Ecosystem.GO)
        decision = select_update(spec, candidates(Ecosystem.GO, "v1.2.3", "v1.3.0"), now=NOW)
        assert decision.new_spec_text == "v1.3.0"
        assert decision.change_kind == ChangeKind.MINOR


class TestPinLaw:
    def test_include_pinned_evaluates_pins(self):
        spec = parse_spec("1.2.3", Ecosystem.NODE)
        decision = select_update(
            spec, candidates(Ecosystem.NODE, "1.2.4", "2.0.0"), include_pinned=True, now=NOW,
        )
        assert decision.new_spec_text == "2.0.0"
        assert decision.change_kind == ChangeKind.MAJOR

    def test_degraded_spec_is_skipped_even_with_include_pinned(self):
        spec = parse_spec(">=1.0,!=1.5", Ecosystem.PYTHON)
        decision = select_update(spec, candidates(Ecosystem.PYTHON, "2.0"), include_pinned=True, now=NOW)
        assert decision.reason == SkipReason.PINNED
        assert decision.detail == "unrecognized version specifier"


class TestUpperBoundLaw:
    @pytest.mark.parametrize("raw,expected", [
        ("^1.2.3", "1.9.9"),
        ("~1.2.3", "1.2.9"),
        ("^0.2.3", "0.2.9"),
        (">=1.0.0 <1.5.0", "1.4.9"),
        (">=1.0.0 <=1.5.0", "1.4.9"),
    ])
    def test_selected_version_stays_below_ceiling(self, raw, expected):
        spec = parse_spec(raw, Ecosystem.NODE)
        pool = candidates(Ecosystem.NODE, "1.2.9", "1.4.9", "1.5.0", "1.9.9", "2.0.0", "0.2.9", "0.3.0")
        decision = select_update(spec, pool, now=NOW)
        assert decision.new_version == parse_version(expected)

    def test_ceilings(self):
        assert implied_ceiling(parse_spec("^1.2.3", Ecosystem.NODE).lower).release == (2, 0, 0)
        assert implied_ceiling(parse_spec("^0.0.3", Ecosystem.NODE).lower).release == (0, 0, 4)
        assert implied_ceiling(parse_spec("~1.2.3", Ecosystem.NODE).lower).release == (1, 3, 0)
        assert implied_ceiling(parse_spec("~> 7.0.4", Ecosystem.RUBY).lower).release == (7, 1, 0)
        assert implied_ceiling(parse_spec("~=2.28", Ecosystem.PYTHON).lower).release == (3, 0, 0)
        assert implied_ceiling(parse_spec(">=1.0", Ecosystem.PYTHON).lower) is None

    def test_satisfies_respects_greater_than(self):
        spec = parse_spec(">1.0.0", Ecosystem.NODE)
        assert not satisfies(spec, parse_version("1.0.0"))
        assert satisfies(spec, parse_version("1.0.1"))


class TestAgeLaw:
    POLICY = AgePolicy(min_age=timedelta(days=7), source=AgeSource.CLI)

    def test_young_release_is_not_selected(self):
        spec = parse_spec("^4.17.20", Ecosystem.NODE)
        pool = candidates(Ecosystem.NODE, "4.17.20", "4.17.21") + [
            Candidate(parse_version("4.17.22"), NOW - timedelta(days=2)),
        ]
        decision = select_update(spec, pool, self.POLICY, now=NOW)
        assert decision.new_spec_text == "^4.17.21"

    def test_only_young_releases_means_no_change(self):
        spec = parse_spec("^4.17.20", Ecosystem.NODE)
        pool = [Candidate(parse_version("4.17.21"), NOW - timedelta(days=1))]
        assert select_update(spec, pool, self.POLICY, now=NOW).kind == DecisionKind.NO_CHANGE

    def test_below_age_when_current_is_outside_the_range(self):
        spec = parse_spec(">1.0.0", Ecosystem.NODE)
        pool = [Candidate(parse_version("1.1.0"), NOW - timedelta(days=1))]
        decision = select_update(spec, pool, self.POLICY, now=NOW)
        assert decision.reason == SkipReason.BELOW_AGE

    def test_unknown_release_time_is_excluded(self):
        spec = parse_spec("^1.0.0", Ecosystem.NODE)
        pool = [Candidate(parse_version("1.1.0"), None)]
        assert select_update(spec, pool, self.POLICY, now=NOW).kind == DecisionKind.NO_CHANGE

    def test_exactly_min_age_is_eligible(self):
        spec = parse_spec("^1.0.0", Ecosystem.NODE)
        pool = [Candidate(parse_version("1.1.0"), NOW - timedelta(days=7))]
        assert select_update(spec, pool, self.POLICY, now=NOW).new_spec_text == "^1.1.0"


class TestSelection:
    def test_idempotent(self):
        pool = candidates(Ecosystem.NODE, "4.17.20", "4.17.21")
        first = select_update(parse_spec("^4.17.20", Ecosystem.NODE), pool, now=NOW)
        second = select_update(parse_spec(first.new_spec_text, Ecosystem.NODE), pool, now=NOW)
        assert second.kind == DecisionKind.NO_CHANGE

    def test_prerelease_ignored_for_stable_current(self):
        spec = parse_spec("^1.0.0", Ecosystem.NODE)
        decision = select_update(spec, candidates(Ecosystem.NODE, "1.0.0", "1.1.0-beta.1"), now=NOW)
        assert decision.kind == DecisionKind.NO_CHANGE

    def test_prerelease_considered_for_prerelease_current(self):
        spec = parse_spec("^2.0.0-beta.1", Ecosystem.NODE)
        decision = select_update(spec, candidates(Ecosystem.NODE, "2.0.0-beta.2", "2.0.0"), now=NOW)
        assert decision.new_spec_text == "^2.0.0"

    def test_no_candidates_in_range(self):
        spec = parse_spec(">1.0.0", Ecosystem.NODE)
        decision = select_update(spec, [], now=NOW)
        assert decision.reason == SkipReason.NO_ELIGIBLE_CANDIDATE

    def test_released_at_is_carried(self):
        spec = parse_spec("^1.0.0", Ecosystem.NODE)
        decision = select_update(spec, candidates(Ecosystem.NODE, "1.2.0"), now=NOW)
        assert decision.released_at == OLD

    def test_zero_min_age_does_not_filter(self):
        spec = parse_spec("^1.0.0", Ecosystem.NODE)
        pool = [Candidate(parse_version("1.1.0"), None)]
        policy = AgePolicy(min_age=timedelta(0), source=AgeSource.CLI)
        assert select_update(spec, pool, policy, now=NOW).new_spec_text == "^1.1.0"


class TestFullVersionOrdering:
    def test_fourth_component_update(self):
        spec = parse_spec("2.13.4.1", Ecosystem.JAVA)
        decision = select_update(spec, candidates(Ecosystem.JAVA, "2.13.4.1", "2.13.4.2"), now=NOW)
        assert decision.new_spec_text == "2.13.4.2"
        assert decision.change_kind == ChangeKind.PATCH

    def test_fourth_component_compares_numerically(self):
        spec = parse_spec("1.2.3.1", Ecosystem.JAVA)
        decision = select_update(spec, candidates(Ecosystem.JAVA, "1.2.3.9", "1.2.3.10"), now=NOW)
        assert decision.new_spec_text == "1.2.3.10"

    def test_post_release_update(self):
        spec = parse_spec("==2023.3", Ecosystem.PYTHON)
        decision = select_update(
            spec, candidates(Ecosystem.PYTHON, "2023.3", "2023.3.post1"), include_pinned=True, now=NOW,
        )
        assert decision.new_spec_text == "==2023.3.post1"


class TestQualifiers:
    def test_java_variant_is_kept(self):
        spec = parse_spec("31.1-android", Ecosystem.JAVA)
        pool = candidates(Ecosystem.JAVA, "31.1-android", "32.1.3-android", "33.0.0-jre")
        assert select_update(spec, pool, now=NOW).new_spec_text == "32.1.3-android"

    def test_plain_java_version_ignores_variants(self):
        spec = parse_spec("1.0", Ecosystem.JAVA)
        pool = candidates(Ecosystem.JAVA, "1.0", "1.1-jre")
        assert select_update(spec, pool, now=NOW).kind == DecisionKind.NO_CHANGE

    def test_unknown_npm_tag_is_a_prerelease(self):
        spec = parse_spec("^1.2.3", Ecosystem.NODE)
        pool = candidates(Ecosystem.NODE, "1.2.3", "1.3.0-foo.1")
        assert select_update(spec, pool, now=NOW).kind == DecisionKind.NO_CHANGE
