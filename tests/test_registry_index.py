"""Tests for the local registry index client."""

import json
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from crategate.errors import IndexLockedError, IndexUpdateError, NoCrateError, ParseVersionError
from crategate.registry.index import LocalIndexClient, crate_path, parse_index_line
from crategate.registry.query import fuzzy_query_registry_index


def write_crate(index: Path, name: str, entries):
    """Write index lines for a crate in the crates.io layout."""
    path = index / crate_path(name)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(e if isinstance(e, str) else json.dumps(e) for e in entries) + "\n",
                    encoding="utf-8")


def entry(name, vers, yanked=False, features=None, features2=None):
    data = {"name": name, "vers": vers, "deps": [], "cksum": "0" * 64,
            "features": features or {}, "yanked": yanked}
    if features2 is not None:
        data["features2"] = features2
    return data


class TestCratePath:
    """Test crate_path index layout."""

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("a", "1/a"),
            ("ab", "2/ab"),
            ("abc", "3/a/abc"),
            ("serde", "se/rd/serde"),
            ("Serde_JSON", "se/rd/serde_json"),
        ],
    )
    def test_layout(self, name, expected):
        assert crate_path(name) == Path(expected)


class TestParseIndexLine:
    """Test parse_index_line."""

    def test_record_fields(self):
        rec = parse_index_line(json.dumps(entry("foo", "1.2.3", True, {"std": []}, {"serde": ["dep:serde"]})), "foo")
        assert rec.name == "foo"
        assert str(rec.version) == "1.2.3"
        assert rec.yanked is True
        assert rec.available_features == ("std", "serde")

    def test_blank_and_malformed_lines(self):
        assert parse_index_line("   ", "foo") is None
        assert parse_index_line("{not json", "foo") is None
        assert parse_index_line('{"name": "foo"}', "foo") is None

    def test_bad_version(self):
        with pytest.raises(ParseVersionError) as excinfo:
            parse_index_line(json.dumps(entry("foo", "1.x")), "foo")
        assert excinfo.value.version == "1.x"
        assert excinfo.value.crate_name == "foo"


class TestLocalIndexClient:
    """Test LocalIndexClient lookups."""

    def test_crate_versions(self, tmp_path):
        write_crate(tmp_path, "serde", [entry("serde", "1.0.0"), entry("serde", "1.0.1", yanked=True)])
        client = LocalIndexClient(tmp_path)

        versions = client.crate_versions("serde")

        assert [str(v.version) for v in versions] == ["1.0.0", "1.0.1"]
        assert [v.yanked for v in versions] == [False, True]

    def test_unknown_crate(self, tmp_path):
        assert LocalIndexClient(tmp_path).crate_versions("nope") is None
        assert LocalIndexClient(tmp_path).crate_versions("") is None

    def test_lookup_is_case_insensitive_but_keeps_canonical_name(self, tmp_path):
        write_crate(tmp_path, "Inflector", [entry("Inflector", "0.11.4")])
        versions = LocalIndexClient(tmp_path).crate_versions("inflector")
        assert versions[0].name == "Inflector"

    def test_malformed_line_is_skipped(self, tmp_path):
        write_crate(tmp_path, "serde", ["{oops", entry("serde", "1.0.0")])
        versions = LocalIndexClient(tmp_path).crate_versions("serde")
        assert len(versions) == 1


class TestFuzzyQueryRegistryIndex:
    """Test fuzzy_query_registry_index over a local index."""

    def test_exact_name_wins(self, tmp_path):
        write_crate(tmp_path, "cargo-edit", [entry("cargo-edit", "0.3.0")])
        write_crate(tmp_path, "cargo_edit", [entry("cargo_edit", "9.9.9")])
        versions = fuzzy_query_registry_index("cargo-edit", LocalIndexClient(tmp_path))
        assert versions[0].name == "cargo-edit"

    def test_other_spelling_found(self, tmp_path):
        write_crate(tmp_path, "cargo_edit", [entry("cargo_edit", "0.3.0")])
        versions = fuzzy_query_registry_index("cargo-edit", LocalIndexClient(tmp_path))
        assert versions[0].name == "cargo_edit"

    def test_no_crate(self, tmp_path):
        with pytest.raises(NoCrateError) as excinfo:
            fuzzy_query_registry_index("does-not-exist", LocalIndexClient(tmp_path))
        assert excinfo.value.crate_name == "does-not-exist"


def _completed(returncode=0, stderr=""):
    result = Mock()
    result.returncode = returncode
    result.stderr = stderr
    return result


class TestLocalIndexUpdate:
    """Test git synchronization of the local index."""

    @patch("crategate.registry.index.subprocess.run")
    def test_clone_when_missing(self, mock_run, tmp_path):
        mock_run.return_value = _completed()
        index = tmp_path / "registry" / "index" / "example"
        LocalIndexClient(index, "https://example.com/index").update()

        args = mock_run.call_args[0][0]
        assert args[1] == "clone"
        assert "https://example.com/index" in args
        assert str(index) in args

    @patch("crategate.registry.index.subprocess.run")
    def test_fetch_and_reset_when_present(self, mock_run, tmp_path):
        (tmp_path / ".git").mkdir()
        mock_run.return_value = _completed()
        LocalIndexClient(tmp_path, "https://example.com/index").update()

        commands = [c[0][0][1] for c in mock_run.call_args_list]
        assert commands == ["fetch", "reset"]
        assert mock_run.call_args_list[0].kwargs["cwd"] == str(tmp_path)

    @patch("crategate.registry.index.subprocess.run")
    def test_lock_contention(self, mock_run, tmp_path):
        (tmp_path / ".git").mkdir()
        mock_run.return_value = _completed(
            128, "fatal: Unable to create '/idx/.git/index.lock': File exists.\n"
        )
        with pytest.raises(IndexLockedError):
            LocalIndexClient(tmp_path, "https://example.com/index").update()

    @patch("crategate.registry.index.subprocess.run")
    def test_other_failure(self, mock_run, tmp_path):
        (tmp_path / ".git").mkdir()
        mock_run.return_value = _completed(128, "fatal: unable to access 'https://example.com/index/'")
        with pytest.raises(IndexUpdateError) as excinfo:
            LocalIndexClient(tmp_path, "https://example.com/index").update()
        assert not isinstance(excinfo.value, IndexLockedError)
        assert excinfo.value.registry_url == "https://example.com/index"

    @patch("crategate.registry.index.subprocess.run")
    def test_git_not_installed(self, mock_run, tmp_path):
        mock_run.side_effect = FileNotFoundError("git")
        with pytest.raises(IndexUpdateError):
            LocalIndexClient(tmp_path / "idx").update()
