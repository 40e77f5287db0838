"""
Sandbox script for trying aggregated search against the live TheMealDB API.

This script runs aggregated_search, which searches TheMealDB by name and by
main ingredient in parallel and merges the results, then looks up the first
hit in full.

Prerequisites:
- Network access to www.themealdb.com (or MEALDB_BASE_URL in .env)

Run:
    python -m sandbox.sandbox_search [query]
"""

import sys

import api.config  # noqa: F401  (loads .env and logging)

from mealfinder.connectors.base import NetworkError
from mealfinder.connectors.mealdb_connector import MealDBConnector
from mealfinder.search import aggregated_search


def run(query: str = "chicken"):
    """Search, print the merged list, then show the first recipe's ingredients."""
    connector = MealDBConnector()

    print("=" * 80)
    print("Testing Aggregated Search")
    print("=" * 80)
    print(f"\nQuery: '{query}'")
    print(f"Base URL: {connector.base_url}\n")

    response = aggregated_search(query, connector=connector)

    print(f"Sources: {response.sources_status}")
    if response.all_failed:
        print("Both endpoints failed; check network access.")
        return
    print(f"Total results: {len(response.results)}")

    for i, recipe in enumerate(response.results, 1):
        print(f"{i:2d}. [{recipe.id:>6s}] {recipe.category or '-':14s} | {recipe.name}")

    if not response.results:
        return

    first = response.results[0]
    print(f"\n=== {first.name} ===")
    try:
        detail = connector.lookup_by_id(first.id)
    except NetworkError as e:
        print(f"Lookup failed: {e}")
        return
    if detail is None:
        print("Recipe not found.")
        return
    print(f"Area: {detail.area or '-'} | Tags: {', '.join(detail.tags) or '-'}")
    for line in detail.ingredients:
        print(f"  - {line.label}")


if __name__ == "__main__":
    run(sys.argv[1] if len(sys.argv) > 1 else "chicken")
