"""Constants used in the project."""

from enum import Enum

__version__ = "0.3.0"


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    CONNECTION_ERROR = 2
    FILE_ERROR = 1
    EXIT_WARNINGS = 3
    USAGE_ERROR = 4


class ManifestFiles:  # pylint: disable=too-few-public-methods
    """Manifest file names recognized at a project root."""

    PACKAGE_JSON = "package.json"
    PYPROJECT_TOML = "pyproject.toml"
    CARGO_TOML = "Cargo.toml"
    GO_MOD = "go.mod"
    GEMFILE = "Gemfile"
    COMPOSER_JSON = "composer.json"
    BUILD_GRADLE_KTS = "build.gradle.kts"
    BUILD_GRADLE = "build.gradle"
    NPMRC = ".npmrc"
    PNPM_WORKSPACE = "pnpm-workspace.yaml"
    TAURI_DIR = "src-tauri"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    REGISTRY_URL_NPM = "https://registry.npmjs.org/"
    REGISTRY_URL_PYPI = "https://pypi.org/pypi/"
    REGISTRY_URL_CRATES = "https://crates.io/api/v1/crates/"
    REGISTRY_URL_GO_PROXY = "https://proxy.golang.org/"
    REGISTRY_URL_RUBYGEMS = "https://rubygems.org/api/v1/versions/"
    REGISTRY_URL_PACKAGIST = "https://repo.packagist.org/p2/"
    REGISTRY_URL_MAVEN = "https://search.maven.org/solrsearch/select"
    MAVEN_MAX_VERSIONS = 100

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOG_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
    USER_AGENT = f"depup/{__version__}"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    HTTP_RETRY_MAX = 3
    HTTP_RETRY_BASE_DELAY_SEC = 0.1
    HTTP_CACHE_TTL_SEC = 300

    # Registry fan-out
    MAX_CONCURRENT_LOOKUPS = 8
    CRATES_IO_MIN_INTERVAL_SEC = 1.0

    # Prerelease identifiers; a candidate carrying one of these is only
    # considered when the current version is itself a prerelease.
    PRERELEASE_IDENTIFIERS = (
        "alpha", "beta", "rc", "canary", "dev", "preview", "next",
        "nightly", "snapshot", "pre", "insiders", "experimental",
        "a", "b", "m", "cr", "ea",
    )

    DRY_RUN_PREFIX = "(dry-run) "
