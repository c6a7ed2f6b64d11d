"""
Shared fixtures: a small synthetic catalog and stored product records.
"""
import pytest

from compatibility import CompatibilityCatalog


CATALOG_DATA = {
    "BMW": {
        "3-Series": ["2000-2003", "2004-2007"],
        "X3": ["2004-2010"],
    },
    "Ford": {
        "F-150": ["2009-2014", "2015-2020", "2021-2023"],
        "Explorer": ["2011-2015", "2016-2019"],
    },
}


@pytest.fixture
def catalog():
    return CompatibilityCatalog(CATALOG_DATA)


@pytest.fixture
def products():
    return [
        {
            "id": "ford-f150-remote",
            "selectedCompatibility": [
                {"brand": "Ford", "model": "F-150", "yearStart": "2015", "yearEnd": "2020", "keyTypes": []},
            ],
        },
        {
            "id": "ford-universal-fob",
            "selectedCompatibility": [
                {"brand": "Ford", "model": "", "yearStart": "", "yearEnd": "", "keyTypes": []},
            ],
        },
        {
            "id": "bmw-x3-key",
            "selectedCompatibility": [
                {"brand": "BMW", "model": "X3", "yearStart": "2004", "yearEnd": "2010", "keyTypes": ["Smart"]},
            ],
        },
        {
            "id": "no-compat",
        },
    ]
