"""Constants used in the project."""

from enum import Enum


class RepositoryHosts(Enum):
    """Git hosting providers whose raw manifests can be fetched.

    Args:
        Enum (string): URL prefix of the provider.
    """

    GITHUB = "https://github.com"
    GITLAB = "https://gitlab.com"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    Values may be overridden at runtime by crategate.config.
    """

    CRATES_IO_INDEX = "https://github.com/rust-lang/crates.io-index"
    CRATES_IO_SOURCE = "crates-io"
    MANIFEST_FILE = "Cargo.toml"
    DEFAULT_BRANCH = "master"
    RAW_URL_GITHUB = "https://raw.githubusercontent.com/{owner}/{repo}/{branch}/{manifest}"
    RAW_URL_GITLAB = "https://gitlab.com/{owner}/{repo}/raw/{branch}/{manifest}"
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOG_LEVEL_ENV = "CRATEGATE_LOG_LEVEL"
    CONFIG_ENV = "CRATEGATE_CONFIG"
    CONFIG_FILES = ["crategate.yml", "crategate.yaml"]
    USER_CONFIG_DIR = "~/.config/crategate"
    REQUEST_TIMEOUT = 10  # Timeout in seconds for manifest downloads

    # Registry index
    ENV_CARGO_HOME = "CARGO_HOME"
    DEFAULT_CARGO_HOME = "~/.cargo"
    CARGO_CONFIG_FILES = ["config.toml", "config"]
    GIT_COMMAND = "git"
    REGISTRY_BACKOFF_SEC = 1
    INDEX_LOCK_RETRY_MAX = None  # None retries for as long as the lock is held
    INDEX_DIR_HASH_LEN = 16

    # Fuzzy matching toggles at most this many separators (2**10 variants)
    FUZZY_MAX_SEPARATORS = 10
