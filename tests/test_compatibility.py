"""
Tests for the catalog and the selectedCompatibility projection
"""
import pytest

from compatibility import (
    CompatibilityCatalog, CompatibilityEntry, deserialize_entries,
    from_selected_compatibility, serialize_entries, to_selected_compatibility
)
from year_range import InvalidYearRange, YearRange


def test_catalog_lookup(catalog):
    assert catalog.makes() == ["BMW", "Ford"]
    assert catalog.models("BMW") == ["3-Series", "X3"]
    assert catalog.year_ranges("Ford", "Explorer") == ("2011-2015", "2016-2019")
    assert catalog.year_ranges("Ford", "Mustang") == ()
    assert catalog.models("Honda") == []
    assert "BMW" in catalog
    assert catalog.model_count() == 4


def test_catalog_canonicalizes_and_drops_bad_ranges():
    catalog = CompatibilityCatalog({"BMW": {"Z4": ["2003", "2009-2016", "2016-2009", "2009-2016"]}})
    assert catalog.year_ranges("BMW", "Z4") == ("2003-2003", "2009-2016")


def test_catalog_is_read_only(catalog):
    with pytest.raises(TypeError):
        catalog._makes["Honda"] = {}


def test_catalog_to_dict_is_a_copy(catalog):
    data = catalog.to_dict()
    data["BMW"]["X3"].append("2011-2017")
    assert catalog.year_ranges("BMW", "X3") == ("2004-2010",)


def test_empty_catalog_is_falsy():
    assert not CompatibilityCatalog.empty()
    assert not CompatibilityCatalog(None)


def test_to_selected_compatibility():
    entry = CompatibilityEntry("BMW", "X3", YearRange(2004, 2010))
    assert to_selected_compatibility(entry) == {
        "brand": "BMW", "model": "X3", "yearStart": "2004", "yearEnd": "2010", "keyTypes": [],
    }


def test_to_selected_compatibility_universal():
    record = to_selected_compatibility(CompatibilityEntry("Ford"), key_types=["Transponder"])
    assert record == {"brand": "Ford", "model": "", "yearStart": "", "yearEnd": "", "keyTypes": ["Transponder"]}


def test_from_selected_compatibility():
    entry = from_selected_compatibility({"brand": "BMW", "model": "X3", "yearStart": "2004", "yearEnd": "2010"})
    assert entry == CompatibilityEntry("BMW", "X3", YearRange(2004, 2010))


def test_from_selected_compatibility_single_year_and_universal():
    single = from_selected_compatibility({"brand": "BMW", "model": "X3", "yearStart": "2005", "yearEnd": ""})
    assert single.year_range == YearRange(2005, 2005)

    universal = from_selected_compatibility({"brand": "Ford", "model": "", "yearStart": "", "yearEnd": ""})
    assert universal.is_universal_model
    assert universal.is_universal_year


def test_from_selected_compatibility_rejects_inverted():
    with pytest.raises(InvalidYearRange):
        from_selected_compatibility({"brand": "BMW", "model": "X3", "yearStart": "2010", "yearEnd": "2004"})


def test_serialize_then_deserialize_keeps_entries():
    entries = [
        CompatibilityEntry("BMW", "X3", YearRange(2004, 2010)),
        CompatibilityEntry("Ford", "", None),
    ]
    assert deserialize_entries(serialize_entries(entries)) == entries


def test_deserialize_skips_bad_records():
    records = [
        {"brand": "BMW", "model": "X3", "yearStart": "abcd", "yearEnd": "2010"},
        {"brand": "", "model": "X3"},
        "not a record",
        {"brand": "Ford", "model": "F-150", "yearStart": "2015", "yearEnd": "2020"},
    ]
    assert deserialize_entries(records) == [CompatibilityEntry("Ford", "F-150", YearRange(2015, 2020))]
    assert deserialize_entries(None) == []


def test_entry_label():
    assert CompatibilityEntry("BMW", "X3", YearRange(2004, 2010)).label() == "BMW X3 2004-2010"
    assert CompatibilityEntry("Ford").label() == "Ford"
