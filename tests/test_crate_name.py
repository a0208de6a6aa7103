"""Tests for crate specifier parsing."""

from unittest.mock import patch

import pytest

from crategate.crate_name import CrateName
from crategate.errors import InvalidVersionRequirementError, ManifestIoError
from crategate.models import GitSource

MANIFEST = """
[package]
name = "your-face"
version = "0.1.0"

[features]
default = ["nose"]
nose = []
mouth = ["nose"]

[dependencies]
eyes = { version = "1", optional = true }
ears = "0.2"
"""


class TestParseVersionOrFeatures:
    """Test CrateName.parse_version_or_features."""

    def test_bare_name_returns_none(self):
        assert CrateName("docopt").parse_version_or_features() is None

    def test_name_with_version(self):
        dep = CrateName("docopt@^0.8").parse_version_or_features()
        assert dep.name == "docopt"
        assert dep.version == "^0.8"
        assert dep.features is None

    def test_invalid_version_is_rejected(self):
        """An unparseable requirement never silently defaults."""
        with pytest.raises(InvalidVersionRequirementError) as excinfo:
            CrateName("docopt@not-a-version").parse_version_or_features()
        assert excinfo.value.requirement == "not-a-version"
        assert "not-a-version" in str(excinfo.value)

    def test_empty_version_is_rejected(self):
        with pytest.raises(InvalidVersionRequirementError):
            CrateName("docopt@").parse_version_or_features()

    def test_features_without_version(self):
        dep = CrateName("serde+featA,featB").parse_version_or_features()
        assert dep.name == "serde"
        assert set(dep.features) == {"featA", "featB"}
        assert dep.source is None
        assert dep.version is None

    def test_version_then_features(self):
        dep = CrateName("serde@1.0+derive").parse_version_or_features()
        assert dep.name == "serde"
        assert dep.version == "1.0"
        assert dep.features == ("derive",)

    def test_features_then_version(self):
        dep = CrateName("serde+derive,rc@1.0").parse_version_or_features()
        assert dep.name == "serde"
        assert dep.version == "1.0"
        assert dep.features == ("derive", "rc")

    def test_only_first_at_splits(self):
        with pytest.raises(InvalidVersionRequirementError) as excinfo:
            CrateName("a@1@2").parse_version_or_features()
        assert excinfo.value.requirement == "1@2"


class TestClassification:
    """Test has_version and the permissive path heuristic."""

    def test_has_version(self):
        assert CrateName("a@1").has_version()
        assert not CrateName("a").has_version()

    @pytest.mark.parametrize("text", ["../foo", "foo/bar", "foo.rs", "C:\\crates\\foo", "."])
    def test_path_like(self, text):
        assert CrateName(text).is_path()

    def test_plain_name_is_not_path(self):
        assert not CrateName("cargo-edit").is_path()


class TestParseCrateNameFromUri:
    """Test CrateName.parse_crate_name_from_uri."""

    def test_plain_name_returns_none(self):
        assert CrateName("serde").parse_crate_name_from_uri() is None

    def test_local_path(self, tmp_path):
        """Path dependencies are canonicalized and report their features."""
        crate_dir = tmp_path / "your-face"
        crate_dir.mkdir()
        (crate_dir / "Cargo.toml").write_text(MANIFEST, encoding="utf-8")

        dep = CrateName(str(crate_dir / ".." / "your-face")).parse_crate_name_from_uri()

        assert dep.name == "your-face"
        assert dep.path == crate_dir.resolve()
        assert dep.version is None
        assert set(dep.available_features) == {"default", "nose", "mouth", "eyes"}

    def test_local_path_without_manifest(self, tmp_path):
        with pytest.raises(ManifestIoError) as excinfo:
            CrateName(str(tmp_path)).parse_crate_name_from_uri()
        assert "Cargo.toml" in excinfo.value.path

    @patch("crategate.repository.fetch.get_text")
    def test_github_url(self, mock_get_text):
        """Git dependencies keep the URL as given and no revision."""
        mock_get_text.return_value = MANIFEST
        url = "https://github.com/someone/your-face"

        dep = CrateName(url).parse_crate_name_from_uri()

        assert dep.name == "your-face"
        assert dep.git == GitSource(url, None)
        assert "mouth" in dep.available_features
        mock_get_text.assert_called_once()
        assert mock_get_text.call_args[0][0] == (
            "https://raw.githubusercontent.com/someone/your-face/master/Cargo.toml"
        )
