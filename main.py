# -*- coding: utf-8 -*-
"""
Vehicle Compatibility Service

HTTP front for the compatibility engine used by the storefront admin and
the filter page:
- Auto-detect compatibility entries from pasted supplier text
- Merge pasted specification tables into custom fields
- Filter products by make / model / year range
"""
import datetime
import logging
import os
import threading
import time
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

import uvicorn
from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from catalog_client import CATALOG_SOURCE, CatalogUnavailable, load_catalog, test_connection
from compatibility import (
    CompatibilityCatalog, CompatibilityEntry, CustomField,
    deserialize_entries, serialize_entries
)
from extractor import PatternExtractor
from merger import generate_description, merge_custom_field, merge_custom_fields, merge_entries, parse_spec_table
from query_filter import CompatibilityQuery, filter_products
from year_range import InvalidYearRange, parse_optional


# ============================================================================
# CONFIGURATION
# ============================================================================

REFRESH_INTERVAL = int(os.environ.get('REFRESH_INTERVAL', '3600'))  # seconds
LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()
HOST = os.environ.get('HOST', '127.0.0.1')
PORT = int(os.environ.get('PORT', '8000'))

logger = logging.getLogger(__name__)


# ============================================================================
# CATALOG LOADING
# ============================================================================

catalog: CompatibilityCatalog = CompatibilityCatalog.empty()
catalog_loaded = False
catalog_load_error: Optional[str] = None
last_refresh_time: Optional[float] = None
refresh_count = 0


def load_catalog_data():
    """Load the catalog from the configured provider and swap it in."""
    global catalog, catalog_loaded, catalog_load_error, last_refresh_time, refresh_count

    try:
        logger.info("Loading vehicle compatibility catalog (%s)...", CATALOG_SOURCE)
        new_catalog = load_catalog()
    except CatalogUnavailable as e:
        # Keep serving: extraction and filtering degrade to "no matches"
        catalog_load_error = str(e)
        logger.error("Error loading catalog: %s", e)
        return

    if not new_catalog:
        logger.warning("Catalog provider returned no makes")

    catalog = new_catalog
    last_refresh_time = time.time()
    refresh_count += 1
    catalog_loaded = True
    catalog_load_error = None

    logger.info("Catalog loaded (refresh #%d): %d makes, %d models",
                refresh_count, len(catalog), catalog.model_count())


def refresh_catalog_periodically():
    """Background thread to refresh the catalog."""
    while True:
        time.sleep(REFRESH_INTERVAL)
        logger.info("[Auto-refresh] Refreshing vehicle compatibility catalog...")
        load_catalog_data()


def catalog_available() -> bool:
    """True once any catalog has loaded (a failed refresh keeps the previous one)."""
    return catalog_loaded


# ============================================================================
# FASTAPI APPLICATION
# ============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load the catalog on startup when running via uvicorn."""
    load_thread = threading.Thread(target=load_catalog_data, daemon=True)
    load_thread.start()
    refresh_thread = threading.Thread(target=refresh_catalog_periodically, daemon=True)
    refresh_thread.start()
    yield


app = FastAPI(
    title="Vehicle Compatibility Service",
    description="Make/model/year compatibility extraction and product filtering",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


class EntryModel(BaseModel):
    make: str
    model: str = ""
    yearRange: Optional[str] = None


class CustomFieldModel(BaseModel):
    label: str
    value: str = ""


class ExtractRequest(BaseModel):
    text: Optional[str] = None
    customFields: List[CustomFieldModel] = []
    existing: List[EntryModel] = []


class ExtractResult(BaseModel):
    catalog_available: bool
    error: Optional[str] = None
    detected: List[EntryModel] = []
    compatibility: List[EntryModel] = []
    selectedCompatibility: List[Dict[str, Any]] = []
    log: List[str] = []


class ParseFieldsRequest(BaseModel):
    text: str
    existing: List[CustomFieldModel] = []


class MergeFieldRequest(BaseModel):
    existing: List[CustomFieldModel] = []
    label: str
    values: List[str] = []


class CustomFieldsResult(BaseModel):
    customFields: List[CustomFieldModel] = []
    description: str = ""


class FilterRequest(BaseModel):
    products: List[Dict[str, Any]] = []


class FilterResult(BaseModel):
    catalog_available: bool
    error: Optional[str] = None
    count: int = 0
    products: List[Dict[str, Any]] = []


class SerializeRequest(BaseModel):
    entries: List[EntryModel] = []


class DeserializeRequest(BaseModel):
    selectedCompatibility: List[Dict[str, Any]] = []


def to_entry(model: EntryModel) -> CompatibilityEntry:
    try:
        year_range = parse_optional(model.yearRange)
    except InvalidYearRange as e:
        raise HTTPException(status_code=400, detail=str(e))
    return CompatibilityEntry(model.make.strip(), model.model.strip(), year_range)


def to_entry_model(entry: CompatibilityEntry) -> EntryModel:
    return EntryModel(
        make=entry.make,
        model=entry.model,
        yearRange=str(entry.year_range) if entry.year_range else None,
    )


def to_fields(models: List[CustomFieldModel]) -> List[CustomField]:
    return [CustomField(m.label, m.value) for m in models]


def to_field_models(fields: List[CustomField]) -> List[CustomFieldModel]:
    return [CustomFieldModel(label=f.label, value=f.value) for f in fields]


@app.get("/api/stats")
async def stats():
    """Get service status."""
    if catalog_load_error:
        return {"status": "error", "message": catalog_load_error}
    if not catalog_loaded:
        return {"status": "loading", "message": "Loading vehicle compatibility catalog..."}

    last_refresh_str = None
    next_refresh_in = None
    if last_refresh_time:
        last_refresh_str = datetime.datetime.fromtimestamp(last_refresh_time).isoformat()
        elapsed = time.time() - last_refresh_time
        next_refresh_in = max(0, REFRESH_INTERVAL - int(elapsed))

    return {
        "status": "ready",
        "catalog_source": CATALOG_SOURCE,
        "makes": len(catalog),
        "models": catalog.model_count(),
        "last_refresh": last_refresh_str,
        "next_refresh_in_seconds": next_refresh_in,
        "refresh_count": refresh_count,
    }


@app.get("/api/catalog")
async def get_catalog():
    """Make -> model -> year ranges, for the selection dropdowns."""
    if not catalog_loaded:
        raise HTTPException(status_code=503, detail=catalog_load_error or "Catalog not loaded yet")
    return catalog.to_dict()


@app.post("/api/extract")
async def extract_compatibility(request: ExtractRequest):
    """Detect vehicles in pasted text or custom fields and merge them in."""
    existing = [to_entry(e) for e in request.existing]
    extractor = PatternExtractor(catalog)

    if request.customFields:
        report = extractor.extract_fields(to_fields(request.customFields))
    else:
        report = extractor.extract_report(request.text)

    merged = merge_entries(existing, report.entries)

    return ExtractResult(
        catalog_available=catalog_available(),
        error=catalog_load_error,
        detected=[to_entry_model(e) for e in report.entries],
        compatibility=[to_entry_model(e) for e in merged],
        selectedCompatibility=serialize_entries(merged),
        log=report.log,
    )


@app.post("/api/custom-fields/parse")
async def parse_custom_fields(request: ParseFieldsRequest):
    """Parse a pasted specification table and merge it into the custom fields."""
    merged = merge_custom_fields(to_fields(request.existing), parse_spec_table(request.text))
    return CustomFieldsResult(
        customFields=to_field_models(merged),
        description=generate_description(merged),
    )


@app.post("/api/custom-fields/merge")
async def merge_custom_field_values(request: MergeFieldRequest):
    """Merge values into one custom field (bucketed by label)."""
    if not request.label.strip():
        raise HTTPException(status_code=400, detail="Label is required")
    merged = merge_custom_field(to_fields(request.existing), request.label, request.values)
    return CustomFieldsResult(
        customFields=to_field_models(merged),
        description=generate_description(merged),
    )


@app.post("/api/filter")
async def filter_compatible_products(
    request: FilterRequest,
    make: Optional[str] = Query(default=None, description="Vehicle make"),
    model: Optional[str] = Query(default=None, description="Vehicle model"),
    yearRange: Optional[str] = Query(default=None, description="YYYY or YYYY-YYYY"),
):
    """Keep the products whose selectedCompatibility fits the query."""
    try:
        query = CompatibilityQuery.from_params(make, model, yearRange)
    except InvalidYearRange as e:
        raise HTTPException(status_code=400, detail=str(e))

    if not catalog_available():
        return FilterResult(catalog_available=False, error=catalog_load_error)

    products = filter_products(query, request.products)
    return FilterResult(
        catalog_available=catalog_available(),
        count=len(products),
        products=products,
    )


@app.post("/api/compatibility/serialize")
async def serialize_compatibility(request: SerializeRequest):
    """Entries -> stored selectedCompatibility records."""
    entries = [to_entry(e) for e in request.entries]
    return {"selectedCompatibility": serialize_entries(entries)}


@app.post("/api/compatibility/deserialize")
async def deserialize_compatibility(request: DeserializeRequest):
    """Stored selectedCompatibility records -> entries (bad year data skipped)."""
    entries = deserialize_entries(request.selectedCompatibility)
    return {"entries": [to_entry_model(e) for e in entries]}


# ============================================================================
# MAIN ENTRY POINT
# ============================================================================

def main():
    """Run the compatibility service."""
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print("=" * 60)
    print("Vehicle Compatibility Service v1.0")
    print("=" * 60)

    print(f"\nTesting catalog connection ({CATALOG_SOURCE})...")
    conn_test = test_connection()
    if conn_test.get('connected'):
        print(f"  Catalog reachable: {conn_test.get('makes')} makes, {conn_test.get('models')} models")
    else:
        print(f"  WARNING: Catalog unavailable: {conn_test.get('error')}")
        print("  Service will start with an empty catalog and retry on refresh...")

    print(f"\nStarting server at http://{HOST}:{PORT}")
    print(f"Catalog refresh interval: {REFRESH_INTERVAL // 60} minutes")
    print("Press Ctrl+C to stop\n")

    uvicorn.run(app, host=HOST, port=PORT, log_level=LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
