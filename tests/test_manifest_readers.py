"""Tests for the manifest readers."""

import json
from unittest.mock import patch

import pytest

from common.errors import ManifestError
from manifest import cargo_toml, composer_json, gemfile, go_mod, gradle, package_json, pyproject_toml, reader_for
from versioning.models import Ecosystem


def by_name(deps):
    return {d.name: d for d in deps}


def assert_spans(text, deps):
    for dep in deps:
        start, end = dep.value_span
        assert text[start:end] == dep.spec.raw_text


class TestPackageJson:
    TEXT = json.dumps({
        "name": "app",
        "version": "1.0.0",
        "dependencies": {
            "lodash": "^4.17.20",
            "local": "workspace:*",
            "gh": "user/repo",
            "tag": "latest",
            "aliased": "npm:other@^1.0.0",
        },
        "devDependencies": {"jest": "~29.7.0"},
        "peerDependencies": {"react": ">=18.0.0 <19.0.0"},
        "scripts": {"build": "1.0.0"},
    }, indent=2)

    def test_sections_and_skips(self):
        deps = by_name(package_json.extract(self.TEXT))
        assert set(deps) == {"lodash", "jest", "react"}
        assert deps["jest"].is_dev
        assert deps["jest"].section == ("devDependencies",)
        assert not deps["react"].is_dev
        assert_spans(self.TEXT, deps.values())

    def test_same_name_in_two_sections(self):
        text = '{"dependencies": {"a": "^1.0.0"}, "devDependencies": {"a": "^1.0.0"}}'
        deps = package_json.extract(text)
        assert [d.section for d in deps] == [("dependencies",), ("devDependencies",)]
        assert deps[0].value_span != deps[1].value_span

    def test_invalid_json(self):
        with pytest.raises(ManifestError):
            package_json.extract('{"dependencies": ')


class TestPyprojectToml:
    TEXT = """\
[project]
name = "demo"
dependencies = [
    "requests>=2.28.0,<3.0.0",
    "click[extra] ~=8.1 ; python_version >= '3.8'",
    "unpinned",
]

[project.optional-dependencies]
docs = ["sphinx==7.2.6"]

[tool.poetry.dependencies]
python = "^3.9"
httpx = "^0.27.0"
rich = { version = "^13.7.0", optional = true }

[tool.poetry.group.dev.dependencies]
pytest = "^8.0.0"
"""

    def test_pep621_and_poetry(self):
        deps = by_name(pyproject_toml.extract(self.TEXT))
        assert set(deps) == {"requests", "click", "sphinx", "httpx", "rich", "pytest"}
        assert deps["requests"].spec.raw_text == ">=2.28.0,<3.0.0"
        assert deps["click"].spec.raw_text == "~=8.1"
        assert deps["sphinx"].section == ("project", "optional-dependencies", "docs")
        assert deps["rich"].section == ("tool", "poetry", "dependencies")
        assert deps["pytest"].is_dev
        assert not deps["httpx"].is_dev
        assert_spans(self.TEXT, deps.values())

    def test_invalid_toml(self):
        with pytest.raises(ManifestError):
            pyproject_toml.extract("[project\n")

    def test_escaped_quotes_in_multiline_string(self):
        text = (
            '[project]\n'
            'description = """say \\"""hi\\""" and """\n'
            'readme = """plain ""quoted"" text"""\n'
            'dependencies = ["requests>=2.28.0"]\n'
        )
        deps = by_name(pyproject_toml.extract(text))
        assert deps["requests"].spec.raw_text == ">=2.28.0"
        assert_spans(text, deps.values())

    def test_locator_failure_is_a_manifest_error(self):
        with patch("manifest.pyproject_toml.toml_locator.string_leaves", side_effect=ValueError("bad")):
            with pytest.raises(ManifestError):
                pyproject_toml.extract('[project]\ndependencies = ["requests>=2.28.0"]\n')


class TestCargoToml:
    TEXT = """\
[package]
name = "demo"
version = "0.1.0"

[dependencies]
serde = { version = "1.0", features = ["derive"] }
tokio = "1.35"
local = { path = "../local" }
shared = { workspace = true }
renamed = { package = "real-crate", version = "0.4" }

[dev-dependencies]
criterion = "0.5"

[target.'cfg(windows)'.dependencies]
winapi = "0.3.9"

[build-dependencies.cc]
version = "1.0.83"
"""

    def test_entries(self):
        deps = by_name(cargo_toml.extract(self.TEXT))
        assert set(deps) == {"serde", "tokio", "real-crate", "criterion", "winapi", "cc"}
        assert deps["criterion"].is_dev
        assert deps["winapi"].section == ("target", "cfg(windows)", "dependencies")
        assert deps["cc"].section == ("build-dependencies",)
        assert_spans(self.TEXT, deps.values())


class TestGoMod:
    TEXT = """\
module example.com/demo

go 1.21

require github.com/pkg/errors v0.9.1

require (
\tgithub.com/spf13/cobra v1.8.0 // pinned
\tgolang.org/x/sys v0.15.0 // indirect
)

replace (
\tgithub.com/old/mod v1.0.0 => github.com/new/mod v1.1.0
)
"""

    def test_require_forms(self):
        deps = by_name(go_mod.extract(self.TEXT))
        assert set(deps) == {"github.com/pkg/errors", "github.com/spf13/cobra", "golang.org/x/sys"}
        assert deps["github.com/spf13/cobra"].comment == "pinned"
        assert deps["golang.org/x/sys"].is_dev
        assert deps["github.com/pkg/errors"].spec.raw_text == "v0.9.1"
        assert_spans(self.TEXT, deps.values())


class TestGemfile:
    TEXT = """\
source "https://rubygems.org"

gem "rails", "~> 7.0.4"
gem 'pg', '>= 1.1', '< 2.0'
gem "bootsnap", require: false

group :development, :test do
  gem "rspec-rails", "~> 6.1"
  if ENV["CI"]
    gem "simplecov", "~> 0.22"
  end
end

gem "puma", ">= 5.0", group: :production
"""

    def test_gems(self):
        deps = by_name(gemfile.extract(self.TEXT))
        assert set(deps) == {"rails", "pg", "rspec-rails", "simplecov", "puma"}
        assert deps["pg"].spec.raw_text == ">= 1.1', '< 2.0"
        assert deps["rspec-rails"].is_dev
        assert deps["rspec-rails"].section == ("group", "development", "test")
        assert deps["simplecov"].is_dev
        assert deps["puma"].section == ("group", "production")
        assert not deps["puma"].is_dev
        assert deps["rails"].section == ("dependencies",)
        assert_spans(self.TEXT, deps.values())


class TestComposerJson:
    TEXT = json.dumps({
        "require": {
            "php": ">=8.1",
            "ext-json": "*",
            "monolog/monolog": "^3.5",
            "symfony/console": "^6.0 || ^7.0",
        },
        "require-dev": {"phpunit/phpunit": "^10.5"},
    }, indent=4)

    def test_entries(self):
        deps = by_name(composer_json.extract(self.TEXT))
        assert set(deps) == {"monolog/monolog", "symfony/console", "phpunit/phpunit"}
        assert deps["symfony/console"].spec.degraded
        assert deps["phpunit/phpunit"].is_dev
        assert_spans(self.TEXT, deps.values())


class TestGradle:
    TEXT = """\
def jacksonVersion = '2.15.3'

ext {
    junitVersion = "5.10.1"
}

dependencies {
    implementation 'com.google.guava:guava:32.1.3-jre'
    implementation "com.fasterxml.jackson.core:jackson-databind:$jacksonVersion"
    implementation "com.fasterxml.jackson.core:jackson-core:${jacksonVersion}"
    testImplementation("org.junit.jupiter:junit-jupiter:${junitVersion}")
    implementation platform('org.springframework.boot:spring-boot-dependencies:3.2.0')
    runtimeOnly group: 'org.postgresql', name: 'postgresql', version: '42.7.1'
    implementation 'org.example:unversioned'
}
"""

    def test_notations(self):
        deps = gradle.extract(self.TEXT)
        names = {d.name for d in deps}
        assert names == {
            "com.google.guava:guava",
            "com.fasterxml.jackson.core:jackson-databind",
            "com.fasterxml.jackson.core:jackson-core",
            "org.junit.jupiter:junit-jupiter",
            "org.springframework.boot:spring-boot-dependencies",
            "org.postgresql:postgresql",
        }
        found = by_name(deps)
        assert found["org.junit.jupiter:junit-jupiter"].is_dev
        assert found["org.postgresql:postgresql"].section == ("runtimeOnly",)
        assert_spans(self.TEXT, deps)

    def test_variable_references_point_at_definition(self):
        deps = by_name(gradle.extract(self.TEXT))
        databind = deps["com.fasterxml.jackson.core:jackson-databind"]
        core = deps["com.fasterxml.jackson.core:jackson-core"]
        assert databind.value_span == core.value_span
        assert databind.spec.raw_text == "2.15.3"

    def test_kotlin_dsl(self):
        text = 'val ktorVersion = "2.3.7"\n\ndependencies {\n    implementation("io.ktor:ktor-server-core:$ktorVersion")\n}\n'
        deps = gradle.extract(text)
        assert [d.name for d in deps] == ["io.ktor:ktor-server-core"]
        assert_spans(text, deps)


class TestReaderTable:
    @pytest.mark.parametrize("path,ecosystem", [
        ("a/package.json", Ecosystem.NODE),
        ("pyproject.toml", Ecosystem.PYTHON),
        ("src-tauri/Cargo.toml", Ecosystem.RUST),
        ("go.mod", Ecosystem.GO),
        ("Gemfile", Ecosystem.RUBY),
        ("composer.json", Ecosystem.PHP),
        ("build.gradle.kts", Ecosystem.JAVA),
    ])
    def test_reader_for(self, path, ecosystem):
        assert reader_for(path).ecosystem == ecosystem

    def test_unknown_file(self):
        assert reader_for("requirements.txt") is None
