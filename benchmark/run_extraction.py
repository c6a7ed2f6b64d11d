# -*- coding: utf-8 -*-
"""
Batch Extraction - Run the extractor over a product export

Reads a CSV with product_id and text columns (the supplier's compatibility
text for each product), extracts compatibility entries against the
configured catalog, and writes one output row per detected entry.

Usage:
    python -m benchmark.run_extraction products.csv
"""
import csv
import os
import sys
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime
from typing import Dict, List

# Add parent directory to path so we can import project modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from catalog_client import CatalogUnavailable, load_catalog
from compatibility import to_selected_compatibility
from extractor import PatternExtractor

# ============================================================================
# CONFIGURATION
# ============================================================================

OUTPUT_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)))
MAX_WORKERS = 5

OUTPUT_COLUMNS = ['product_id', 'make', 'model', 'yearStart', 'yearEnd']


def load_input_csv(path: str) -> List[Dict]:
    """Load the product CSV into a list of dicts."""
    with open(path, 'r', encoding='utf-8') as f:
        return list(csv.DictReader(f))


def process_row(row: Dict, extractor: PatternExtractor) -> List[Dict]:
    """Extract one product's entries as output rows (empty if none found)."""
    product_id = row.get('product_id', '')
    results = []
    for entry in extractor.extract(row.get('text', '')):
        record = to_selected_compatibility(entry)
        results.append({
            'product_id': product_id,
            'make': record['brand'],
            'model': record['model'],
            'yearStart': record['yearStart'],
            'yearEnd': record['yearEnd'],
        })
    return results


def write_output_csv(path: str, rows: List[Dict]) -> None:
    with open(path, 'w', encoding='utf-8', newline='') as f:
        writer = csv.DictWriter(f, fieldnames=OUTPUT_COLUMNS)
        writer.writeheader()
        for row in rows:
            writer.writerow(row)


def main():
    print("=" * 70)
    print("Batch Compatibility Extraction")
    print("=" * 70)

    if len(sys.argv) < 2:
        print("Usage: python -m benchmark.run_extraction <input.csv>")
        sys.exit(1)
    input_csv = sys.argv[1]

    # 1. Load input CSV
    print(f"\n[1/4] Loading input CSV...")
    if not os.path.exists(input_csv):
        print(f"ERROR: Input CSV not found: {input_csv}")
        sys.exit(1)

    rows = load_input_csv(input_csv)
    total = len(rows)
    print(f"  Loaded {total} product rows")

    # 2. Load catalog
    print(f"\n[2/4] Loading vehicle compatibility catalog...")
    try:
        catalog = load_catalog()
    except CatalogUnavailable as e:
        print(f"ERROR: {e}")
        sys.exit(1)
    print(f"  Catalog: {len(catalog):,} makes, {catalog.model_count():,} models")

    extractor = PatternExtractor(catalog)

    # 3. Extract in parallel (extractor is read-only, safe to share)
    print(f"\n[3/4] Extracting ({MAX_WORKERS} workers)...")
    start_time = time.time()
    results_by_index: Dict[int, List[Dict]] = {}
    completed = 0

    with ThreadPoolExecutor(max_workers=MAX_WORKERS) as executor:
        futures = {
            executor.submit(process_row, row, extractor): i
            for i, row in enumerate(rows)
        }
        for future in as_completed(futures):
            results_by_index[futures[future]] = future.result()
            completed += 1
            if completed % 100 == 0 or completed == total:
                print(f"  [{completed}/{total}] processed")

    # Keep input order in the output
    output_rows = []
    for i in range(total):
        output_rows.extend(results_by_index.get(i, []))

    # 4. Write output CSV
    timestamp = datetime.now().strftime("%Y-%m-%dT%H-%M-%S")
    output_path = os.path.join(OUTPUT_DIR, f"extraction_{timestamp}.csv")

    print(f"\n[4/4] Writing output CSV...")
    write_output_csv(output_path, output_rows)
    print(f"  Output: {output_path}")

    # --- Summary stats ---
    products_with_matches = sum(1 for r in results_by_index.values() if r)

    print("\n" + "=" * 70)
    print("SUMMARY")
    print("=" * 70)
    print(f"\nTotal products:       {total}")
    if total > 0:
        print(f"With matches:         {products_with_matches} ({products_with_matches/total*100:.1f}%)")
    print(f"Entries detected:     {len(output_rows)}")
    print(f"\nDone! Total time: {time.time() - start_time:.1f}s")


if __name__ == "__main__":
    main()
