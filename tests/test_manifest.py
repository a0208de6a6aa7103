"""Tests for Cargo.toml parsing."""

import pytest

from crategate.errors import ManifestIoError, ManifestParseError
from crategate.repository.manifest import get_manifest_from_path, parse_manifest


class TestParseManifest:
    """Test parse_manifest."""

    def test_name_and_features(self):
        manifest = parse_manifest(
            '[package]\nname = "foo"\n\n[features]\ndefault = ["std"]\nstd = []\n',
            "inline",
        )
        assert manifest.package_name == "foo"
        assert manifest.feature_table == {"default": ["std"], "std": []}
        assert manifest.features() == ["default", "std"]

    def test_optional_dependencies_are_implicit_features(self):
        text = """
[package]
name = "foo"

[features]
std = []

[dependencies]
serde = { version = "1", optional = true }
log = "0.4"

[target.'cfg(unix)'.dependencies]
libc = { version = "0.2", optional = true }
"""
        manifest = parse_manifest(text, "inline")
        assert manifest.optional_dependencies == ("serde", "libc")
        assert manifest.features() == ["std", "serde", "libc"]

    def test_virtual_manifest_has_no_name(self):
        manifest = parse_manifest('[workspace]\nmembers = ["a"]\n', "inline")
        assert manifest.package_name is None
        with pytest.raises(ManifestParseError):
            manifest.require_package_name("inline")

    def test_invalid_toml(self):
        with pytest.raises(ManifestParseError) as excinfo:
            parse_manifest("[package\nname = ", "https://example.invalid/Cargo.toml")
        assert excinfo.value.source == "https://example.invalid/Cargo.toml"

    def test_features_must_be_table(self):
        with pytest.raises(ManifestParseError):
            parse_manifest('features = "nope"\n[package]\nname = "x"\n', "inline")


class TestGetManifestFromPath:
    """Test get_manifest_from_path."""

    def test_reads_manifest(self, tmp_path):
        (tmp_path / "Cargo.toml").write_text('[package]\nname = "bar"\n', encoding="utf-8")
        assert get_manifest_from_path(tmp_path).package_name == "bar"

    def test_missing_manifest(self, tmp_path):
        with pytest.raises(ManifestIoError) as excinfo:
            get_manifest_from_path(tmp_path)
        assert excinfo.value.path == str(tmp_path / "Cargo.toml")

    def test_unparseable_manifest(self, tmp_path):
        (tmp_path / "Cargo.toml").write_text("not toml ===", encoding="utf-8")
        with pytest.raises(ManifestIoError):
            get_manifest_from_path(tmp_path)
