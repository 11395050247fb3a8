#!/usr/bin/env python3
"""
Print checkout links for every subject and the bundle (success_url pointing at the site).
Run from the project root: python -m scripts.print_checkout_links https://example.pl/
or: PYTHONPATH=. python scripts/print_checkout_links.py https://example.pl/
"""
import os
import sys

# project root on PYTHONPATH
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from egzamin8.access import PageLocation, checkout_url_for
from egzamin8.catalog.loader import CatalogError, get_catalog


def main():
    if len(sys.argv) < 2:
        print("Użycie: print_checkout_links.py <adres strony, np. https://egzamin8.pl/>")
        return
    location = PageLocation(sys.argv[1])
    try:
        catalog = get_catalog()
    except CatalogError as e:
        print(f"Nie można wczytać katalogu: {e}")
        return
    print(f"Linki do płatności (strona: {location.origin}{location.pathname}):\n")
    for target in [*catalog, catalog.bundle]:
        if not target.checkout_link:
            print(f"  {target.name}\n    (brak linku w CHECKOUT_LINKS)\n")
            continue
        print(f"  {target.name}\n    {checkout_url_for(target, location)}\n")


if __name__ == "__main__":
    main()
