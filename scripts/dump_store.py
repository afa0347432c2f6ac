#!/usr/bin/env python3
"""Fetch storefront data and dump the resolved entities.

Runs the same fetches the storefront pages do (brand directory, featured
brands, hero products, optional category showcase and SKU recommendations)
against the live marketplace API, then prints the denormalized results.
Useful for checking which relationships actually come back populated.

Usage
-----
Set environment variables and run::

    export MELA_CLIENT_ID="..."
    export MELA_BRAND_IDS="uuid-1,uuid-2"
    python scripts/dump_store.py

Options::

    --page N             Brand directory page (default: 1)
    --category L:NAME    Also fetch a category showcase, e.g. category:baby
    --sku SKU            Also fetch recommendations for SKU (repeatable)
    --snapshot           Print the raw normalized store instead of resolved entities
    --output FILE        Write output to FILE instead of stdout
    -v                   Debug logging
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from melacache import MelaClient, MelaConfig  # noqa: E402


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--page", type=int, default=1)
    parser.add_argument("--category", default=None)
    parser.add_argument("--sku", action="append", default=[])
    parser.add_argument("--snapshot", action="store_true")
    parser.add_argument("--output", default=None)
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args()


async def _run(args: argparse.Namespace) -> dict[str, Any]:
    config = MelaConfig.from_env()
    async with MelaClient(config) as client:
        await client.fetch_brands(page=args.page)
        await client.fetch_featured_brands()
        await client.fetch_hero_products()
        if args.category:
            level, _, name = args.category.partition(":")
            await client.fetch_category_products(level, name)
        if args.sku:
            await client.fetch_recommended_products(args.sku)

        if args.snapshot:
            return client.store.snapshot()

        output: dict[str, Any] = {
            "brands": client.entities(client.brands),
            "featured_brands": client.entities(client.featured_brands),
            "hero": client.entities(client.hero),
            "recommended": client.entities(client.recommended),
            "categories": {key: client.entities(client.categories[key]) for key in client.categories},
            "errors": {
                name: state.error.model_dump()
                for name, state in (
                    ("brands", client.brands),
                    ("featured_brands", client.featured_brands),
                    ("hero", client.hero),
                    ("recommended", client.recommended),
                )
                if state.error is not None
            },
        }
        return output


def main() -> int:
    args = _parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    result = asyncio.run(_run(args))
    text = json.dumps(result, indent=2, ensure_ascii=False, default=str)
    if args.output:
        Path(args.output).write_text(text + "\n", encoding="utf-8")
    else:
        print(text)
    return 0


if __name__ == "__main__":
    sys.exit(main())
