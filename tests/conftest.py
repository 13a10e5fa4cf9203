"""Shared fixtures: a temp-dir config and a routed httpx mock transport."""

import json

import httpx
import pytest

from sds_harvester.client import HttpClient
from sds_harvester.config import AppConfig, SourceConfig

SEARCH_URL = "https://api.test/search?page={page}&size={page_size}"
DOCUMENT_URL = "https://api.test/documents/{doc_id}"


class Router:
    """Maps absolute URLs to canned responses and records every request."""

    def __init__(self):
        self.routes = {}
        self.requests = []

    def add(self, url, status=200, json_body=None, content=b"", headers=None):
        if json_body is not None:
            content = json.dumps(json_body).encode()
            headers = {"content-type": "application/json", **(headers or {})}
        self.routes[url] = (status, content, headers or {})

    def add_pdf(self, url, content=b"%PDF-1.4 test document", status=200):
        self.add(url, status=status, content=content, headers={"content-type": "application/pdf"})

    def count(self, url):
        return sum(1 for u in self.requests if u == url)

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(url)
        if url not in self.routes:
            return httpx.Response(404, content=b"not found")
        status, content, headers = self.routes[url]
        return httpx.Response(status, content=content, headers=headers)


@pytest.fixture
def router():
    return Router()


@pytest.fixture
def config(tmp_path):
    cfg = AppConfig(log_dir=str(tmp_path / "logs"))
    cfg.harvest.start_page = 0
    cfg.harvest.stop_page = 0
    cfg.harvest.output_dir = str(tmp_path / "PDFs")
    cfg.harvest.manifest_path = str(tmp_path / "downloaded.txt")
    cfg.download.max_workers = 4
    cfg.sources["thermofisher"] = SourceConfig(
        search_url=SEARCH_URL,
        document_url=DOCUMENT_URL,
        landing_prefix="https://host/",
        landing_suffix="/SDS",
    )
    (tmp_path / "PDFs").mkdir()
    return cfg


@pytest.fixture
def http(config, router):
    client = HttpClient(config.download, transport=httpx.MockTransport(router.handler))
    yield client
    client.close()
