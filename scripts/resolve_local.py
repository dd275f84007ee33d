#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from marketplace.application.exceptions import MarketplaceError
from marketplace.application.use_cases.binding_resolver import AttributeBindingResolver
from marketplace.application.use_cases.catalog_resolver import CatalogResolver
from marketplace.application.use_cases.form_schema import generate_preview
from marketplace.application.use_cases.location_resolver import LocationResolver
from marketplace.domain.entities.catalog import CatalogFilters
from marketplace.domain.entities.location_session import LocationQuery, LocationSession
from marketplace.infrastructure.store.seed_data import build_memory_stores

"""
Local resolver harness against the seeded in-memory stores (no HTTP, no Supabase).

Usage:
  python3 scripts/resolve_local.py form grocery
  python3 scripts/resolve_local.py location --pincode 516269
  python3 scripts/resolve_local.py catalog --pincode 516269 --service-type fashion
"""


async def show_form(service_type_id: str) -> None:
    attributes, _, _ = build_memory_stores()
    fields = await AttributeBindingResolver(store=attributes).resolve_bindings(service_type_id)
    for p in generate_preview(fields):
        flags = " ".join(flag for flag, on in (("required", p.required), ("locked", p.locked)) if on)
        print(f"{p.name:<22} {p.type:<9} {p.label:<20} {flags}")
        if p.options:
            print(" " * 23 + ", ".join(o.label for o in p.options))


async def show_location(pincode: str | None, city: str | None) -> None:
    _, areas, _ = build_memory_stores()
    session = LocationSession()
    await LocationResolver(store=areas).change_location(session, LocationQuery(pincode=pincode, city=city))
    print(f"status:        {session.status.value}")
    print(f"service area:  {session.service_area_id or '-'}")
    print(f"service types: {', '.join(session.available_service_types) or '-'}")


async def show_catalog(pincode: str | None, city: str | None, service_type: str, search: str | None) -> None:
    _, areas, catalog = build_memory_stores()
    session = LocationSession()
    await LocationResolver(store=areas).change_location(session, LocationQuery(pincode=pincode, city=city))
    entries = await CatalogResolver(catalog=catalog, areas=areas).resolve_for_session(
        session,
        service_type,
        CatalogFilters(search_term=search),
    )
    if not entries:
        print(f"No {service_type} offerings for this location ({session.status.value})")
        return
    for e in entries:
        price = f"{e.location_price:.2f}" if e.location_price is not None else "-"
        stock = "in stock" if e.is_available else "unavailable"
        print(f"{e.name:<28} {price:>10} [{e.price_source}] {stock}")
        print(" " * 29 + ", ".join(f"{k}={v}" for k, v in e.display.items()))


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the marketplace resolvers against seeded data")
    sub = parser.add_subparsers(dest="command", required=True)

    form = sub.add_parser("form", help="Show the product form for a service type")
    form.add_argument("service_type")

    for name in ("location", "catalog"):
        p = sub.add_parser(name)
        p.add_argument("--pincode")
        p.add_argument("--city")
        if name == "catalog":
            p.add_argument("--service-type", required=True)
            p.add_argument("--search")

    args = parser.parse_args()
    try:
        if args.command == "form":
            asyncio.run(show_form(args.service_type))
        elif args.command == "location":
            asyncio.run(show_location(args.pincode, args.city))
        else:
            asyncio.run(show_catalog(args.pincode, args.city, args.service_type, args.search))
    except MarketplaceError as e:
        print(f"{type(e).__name__}: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
