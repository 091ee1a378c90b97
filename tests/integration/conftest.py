"""Shared fixtures for integration tests.

These tests use real infrastructure components (DefinitionRegistry,
DirectFetcher, RelayFetcher, the row parser) with mocked HTTP via respx.
"""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest
import respx

_TRACKER = "https://tracker.test"

_TRACKER_DEFINITION = f"""
id: tracker
name: Tracker
links: ["{_TRACKER}/"]
settings:
  - name: sort
    type: select
    default: seeders
search:
  paths:
    - path: "search/{{{{ .Keywords }}}}/"
  inputs:
    sort: "{{{{ .Config.sort }}}}"
  rows:
    selector: table.results tr.row
    remove: tr.sponsored
  fields:
    title:
      selector: td.name a
    details:
      selector: td.name a
    download:
      selector: a.magnet
    size:
      selector: td.size
    seeders:
      selector: td.seeds
    leechers:
      selector: td.peers
"""

_GUARDED_DEFINITION = """
apiVersion: torrents.test/v1
kind: Indexer
metadata:
  name: guarded
spec:
  name: Guarded
  links: ["https://guarded.test/"]
  settings:
    - name: info_flaresolverr
      type: info_flaresolverr
  search:
    paths:
      - path: "s/{{ .Keywords | replace \\"%20\\" \\"-\\" }}"
    rows:
      selector: div.hit
    fields:
      title: {selector: b}
      download: {selector: a}
      seeders: {selector: i}
"""

_TRACKER_PAGE = """
<html><body><table class="results">
  <tr class="row sponsored">
    <td class="name"><a href="/t/0">Ad</a></td><td><a class="magnet" href="magnet:?xt=ad">m</a></td>
    <td class="size">1 MB</td><td class="seeds">99999</td><td class="peers">0</td>
  </tr>
  <tr class="row">
    <td class="name"><a href="/t/1">Ubuntu 24.04 Desktop</a></td>
    <td><a class="magnet" href="magnet:?xt=urn:btih:ubuntu">m</a></td>
    <td class="size">5.7 GB</td><td class="seeds">1,204</td><td class="peers">33</td>
  </tr>
  <tr class="row">
    <td class="name"><a href="/t/2">Ubuntu 24.04 Server</a></td>
    <td><a class="magnet" href="/download/2.torrent">m</a></td>
    <td class="size">2.6 GB</td><td class="seeds">310</td><td class="peers">12</td>
  </tr>
  <tr class="row">
    <td class="name"><a href="/t/3"></a></td>
    <td><a class="magnet" href="magnet:?xt=untitled">m</a></td>
    <td class="size">1 GB</td><td class="seeds">5000</td><td class="peers">1</td>
  </tr>
</table></body></html>
"""

_GUARDED_PAGE = """
<html><body>
  <div class="hit"><b>Ubuntu Mirror</b><a href="magnet:?xt=urn:btih:guarded"></a><i>40</i></div>
</body></html>
"""


@pytest.fixture()
async def http_client() -> httpx.AsyncClient:
    """Real httpx.AsyncClient for use with respx mocking."""
    async with httpx.AsyncClient() as client:
        yield client


@pytest.fixture()
def respx_mock() -> respx.MockRouter:
    """Explicit respx mock router for request interception."""
    with respx.mock(assert_all_called=False) as router:
        yield router


@pytest.fixture()
def definitions_dir(tmp_path: Path) -> Path:
    """Directory holding one bare and one resource-wrapped definition."""
    directory = tmp_path / "definitions"
    directory.mkdir()
    (directory / "tracker.yml").write_text(_TRACKER_DEFINITION, encoding="utf-8")
    (directory / "guarded.yaml").write_text(_GUARDED_DEFINITION, encoding="utf-8")
    return directory


@pytest.fixture()
def tracker_page() -> str:
    """Results page for the bare definition: one sponsored, three real rows."""
    return _TRACKER_PAGE


@pytest.fixture()
def guarded_page() -> str:
    """Results page served through the relay for the wrapped definition."""
    return _GUARDED_PAGE
