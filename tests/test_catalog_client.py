"""
Tests for the catalog providers (network and database calls mocked)
"""
import json
from unittest.mock import MagicMock, patch

import pytest
import requests
from pymongo.errors import ServerSelectionTimeoutError

import catalog_client
from catalog_client import CatalogUnavailable, fetch_catalog_file, fetch_catalog_http, fetch_catalog_mongo, load_catalog


PAYLOAD = {"BMW": {"X3": ["2004-2010"]}}


def test_fetch_http_returns_mapping():
    response = MagicMock()
    response.json.return_value = PAYLOAD
    with patch("catalog_client.requests.get", return_value=response) as get:
        assert fetch_catalog_http("https://shop.example.com/api/makes-models") == PAYLOAD
    response.raise_for_status.assert_called_once()
    assert get.call_args.kwargs["timeout"] == catalog_client.CATALOG_TIMEOUT


def test_fetch_http_network_error():
    with patch("catalog_client.requests.get", side_effect=requests.exceptions.ConnectionError("down")):
        with pytest.raises(CatalogUnavailable):
            fetch_catalog_http("https://shop.example.com/api/makes-models")


def test_fetch_http_rejects_non_object_payload():
    response = MagicMock()
    response.json.return_value = ["BMW"]
    with patch("catalog_client.requests.get", return_value=response):
        with pytest.raises(CatalogUnavailable):
            fetch_catalog_http("https://shop.example.com/api/makes-models")


def test_fetch_http_requires_url(monkeypatch):
    monkeypatch.setattr(catalog_client, "CATALOG_API_URL", None)
    with pytest.raises(CatalogUnavailable):
        fetch_catalog_http()


def test_fetch_mongo_folds_documents(monkeypatch):
    docs = [
        {"make": "BMW", "model": "X3", "yearRanges": ["2004-2010"]},
        {"make": "BMW", "model": "X3", "yearRanges": ["2004-2010", "2011-2017"]},
        {"make": "Ford", "model": "", "yearRanges": []},
        {"make": "", "model": "Orphan", "yearRanges": ["2000-2001"]},
    ]
    client = MagicMock()
    client.__getitem__.return_value.__getitem__.return_value.find.return_value.sort.return_value = docs

    monkeypatch.setattr(catalog_client, "MONGO_URI", "mongodb://localhost:27017")
    with patch("catalog_client.get_mongo_client", return_value=client):
        data = fetch_catalog_mongo()

    assert data == {"BMW": {"X3": ["2004-2010", "2011-2017"]}, "Ford": {}}


def test_fetch_mongo_error(monkeypatch):
    client = MagicMock()
    client.__getitem__.return_value.__getitem__.return_value.find.side_effect = ServerSelectionTimeoutError("timeout")

    monkeypatch.setattr(catalog_client, "MONGO_URI", "mongodb://localhost:27017")
    with patch("catalog_client.get_mongo_client", return_value=client):
        with pytest.raises(CatalogUnavailable):
            fetch_catalog_mongo()


def test_fetch_mongo_requires_uri(monkeypatch):
    monkeypatch.setattr(catalog_client, "MONGO_URI", None)
    with pytest.raises(CatalogUnavailable):
        fetch_catalog_mongo()


def test_fetch_file(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps(PAYLOAD), encoding="utf-8")
    assert fetch_catalog_file(str(path)) == PAYLOAD


def test_fetch_file_missing(tmp_path):
    with pytest.raises(CatalogUnavailable):
        fetch_catalog_file(str(tmp_path / "missing.json"))


def test_load_catalog_uses_selected_provider(monkeypatch):
    monkeypatch.setitem(catalog_client.PROVIDERS, "http", lambda: PAYLOAD)
    catalog = load_catalog("http")
    assert catalog.year_ranges("BMW", "X3") == ("2004-2010",)


def test_load_catalog_unknown_source():
    with pytest.raises(CatalogUnavailable):
        load_catalog("ftp")


def test_bundled_catalog_file_loads():
    catalog = load_catalog("file")
    assert "BMW" in catalog
    assert catalog.year_ranges("BMW", "X3") == ("2004-2010",)


def test_connection_report_on_failure():
    report = catalog_client.test_connection("ftp")
    assert report["connected"] is False
    assert "ftp" in report["error"]
