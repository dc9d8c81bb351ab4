"""
Bulk phone lookup from a names file, without the web console.
Run directly: python scripts/lookup_names.py names.csv [forager|aviato]

Writes lookup_results_<date>.csv to the current directory.
"""

import asyncio
import os
import sys
from functools import partial

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from number_search.services.export import export_filename, lookup_results_csv
from number_search.services.lookup import lookup_aviato_name, lookup_forager_name, lookup_names, parse_names
from number_search.services.providers import AviatoClient, ForagerClient


async def main(path: str, source: str):
    print("=" * 60)
    print(f"BULK NAME LOOKUP ({source.upper()})")
    print("=" * 60)

    print(f"\n[1] Parsing {path}...")
    with open(path, encoding="utf-8") as f:
        names = parse_names(f.read())
    print(f"    Found {len(names)} names")

    if not names:
        print("    Nothing to look up.")
        return

    for i, name in enumerate(names[:5]):
        print(f"    {i+1}. {name.full_name}")
    if len(names) > 5:
        print(f"    ... and {len(names) - 5} more")

    if source == "aviato":
        client = AviatoClient()
        lookup_one = partial(lookup_aviato_name, client)
    else:
        client = ForagerClient()
        lookup_one = partial(lookup_forager_name, client)

    print(f"\n[2] Looking up phone numbers...")
    print("-" * 60)
    try:
        results = await lookup_names([n.full_name for n in names], lookup_one, source=source)
    finally:
        await client.aclose()

    filename = export_filename("lookup_results")
    with open(filename, "w", encoding="utf-8", newline="") as f:
        f.write(lookup_results_csv(results))

    # Summary
    print("\n" + "=" * 60)
    print("RESULTS")
    print("=" * 60)
    found = sum(1 for r in results if r.status == "found")
    not_found = sum(1 for r in results if r.status == "not_found")
    errors = sum(1 for r in results if r.status == "error")

    print(f"  Total: {len(results)}")
    print(f"  Found: {found}")
    print(f"  Not found: {not_found}")
    print(f"  Errors: {errors}")
    print(f"\n  Saved to {filename}")


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python scripts/lookup_names.py <names file> [forager|aviato]")
        sys.exit(1)

    source = sys.argv[2] if len(sys.argv) > 2 else "forager"
    if source not in ("forager", "aviato"):
        print(f"Unknown source: {source}")
        sys.exit(1)

    asyncio.run(main(sys.argv[1], source))
