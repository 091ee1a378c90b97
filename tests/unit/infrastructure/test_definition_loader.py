"""Tests for YAML definition loading and schema validation."""

from __future__ import annotations

from pathlib import Path

import pytest

from indexarr.domain.indexers import DefinitionLoadError, FilterName
from indexarr.infrastructure.definitions import load_definition, parse_definition

_BARE = """
id: demo
name: Demo
links:
  - " https://demo.example/ "
settings:
  - name: sort
    type: select
    default: 5
search:
  path: "s/{{ .Keywords }}"
  inputs:
    page: 1
  keywordsfilters:
    - name: re_replace
      args: ["\\\\s+", "+"]
  rows:
    selector: tr
    after: 1
  fields:
    title: td.name
    download:
      selector: a.dl
      filters:
        - name: TRIM
        - name: dateparse
          args: [2006]
    category:
      selector: td.cat
      case:
        1: Movies
"""

_RESOURCE = """
apiVersion: torrents.example/v1
kind: Indexer
metadata:
  name: wrapped
spec:
  name: Wrapped
  links: [https://wrapped.example/]
  search:
    paths:
      - path: browse
        method: POST
        inheritinputs: false
    rows: {selector: tr}
    fields:
      title: {selector: a}
      download: {selector: a, attribute: href}
"""


def _write(tmp_path: Path, text: str, name: str = "def.yml") -> Path:
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


class TestLoadDefinition:
    def test_bare_document(self, tmp_path: Path) -> None:
        d = load_definition(_write(tmp_path, _BARE))

        assert d.id == "demo"
        assert d.links == ("https://demo.example/",)
        assert d.setting_defaults() == {"sort": "5"}

    def test_legacy_path_becomes_paths(self, tmp_path: Path) -> None:
        d = load_definition(_write(tmp_path, _BARE))

        assert d.search is not None
        assert [p.path for p in d.search.paths] == ["s/{{ .Keywords }}"]

    def test_scalars_coerced(self, tmp_path: Path) -> None:
        d = load_definition(_write(tmp_path, _BARE))

        assert d.search is not None
        assert d.search.inputs == {"page": "1"}
        assert d.search.fields["category"].case == {"1": "Movies"}
        assert d.search.rows.after == 1

    def test_field_shorthand(self, tmp_path: Path) -> None:
        d = load_definition(_write(tmp_path, _BARE))

        assert d.search is not None
        assert d.search.fields["title"].selector == "td.name"

    def test_filters_mapped_to_catalog(self, tmp_path: Path) -> None:
        d = load_definition(_write(tmp_path, _BARE))

        assert d.search is not None
        [kw] = d.search.keywords_filters
        assert kw.name is FilterName.RE_REPLACE
        assert kw.args == ("\\s+", "+")
        trim, unknown = d.search.fields["download"].filters
        assert trim.name is FilterName.TRIM
        assert unknown.known is False
        assert unknown.args == ("2006",)

    def test_resource_document(self, tmp_path: Path) -> None:
        d = load_definition(_write(tmp_path, _RESOURCE))

        assert d.id == "wrapped"
        assert d.search is not None
        [path] = d.search.paths
        assert path.method == "post"
        assert path.inherit_inputs is False

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(DefinitionLoadError):
            load_definition(tmp_path / "absent.yml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        with pytest.raises(DefinitionLoadError):
            load_definition(_write(tmp_path, "id: [unclosed"))

    def test_schema_violation(self, tmp_path: Path) -> None:
        with pytest.raises(DefinitionLoadError):
            load_definition(_write(tmp_path, "id: x\nname: X\nsearch: {rows: {after: -1}}"))


class TestParseDefinition:
    def test_empty_document(self) -> None:
        with pytest.raises(DefinitionLoadError, match="empty"):
            parse_definition(None)

    def test_non_mapping(self) -> None:
        with pytest.raises(DefinitionLoadError, match="mapping"):
            parse_definition(["id", "x"])

    def test_blank_id_rejected(self) -> None:
        with pytest.raises(DefinitionLoadError):
            parse_definition({"id": "", "name": "X"})

    def test_unknown_keys_ignored(self) -> None:
        d = parse_definition({"id": "x", "name": "X", "headers": {"a": "b"}})
        assert d.id == "x"
        assert d.search is None

    def test_bad_type_rejected(self) -> None:
        with pytest.raises(DefinitionLoadError):
            parse_definition({"id": "x", "name": "X", "type": "secret"})
