#!/usr/bin/env python3
"""
Basic portfolio usage example.

Builds the page for one GitHub account, exercises the components and writes
the result to a static HTML file.
Run with: python examples/basic_usage.py [output.html]
"""

import asyncio
import logging
import sys
from pathlib import Path

from portfolio import AppCoordinator, KeyPress, PortfolioConfig, ValidationError, configure_logging


async def main(output: Path) -> None:
    print("=== Portfolio Basic Usage Example ===\n")

    configure_logging(level=logging.INFO)
    config = PortfolioConfig.from_env()

    async with AppCoordinator.from_config(config) as app:
        # 1. Startup: theme, catalog, profile statistics
        print("1. Starting the app...")
        if not await app.start():
            print(f"   Startup failed: {app.error}")
            return
        await app.stats.settle()
        for slot_id in ("repos-count", "followers-count", "following-count"):
            print(f"   {slot_id}: {app.page.text_of(slot_id)}")

        # 2. Catalog views
        print("\n2. Filtering projects...")
        print(f"   Python projects: {[p.name for p in app.catalog.filter_by_language('Python')]}")
        print(f"   Search 'kv': {[p.name for p in app.catalog.search('kv')]}")
        app.catalog.search(None)

        try:
            app.catalog.add_project({"name": "incomplete"})
        except ValidationError as e:
            print(f"   Rejected: {e} (fields: {e.fields})")

        # 3. Themes and shortcuts
        print("\n3. Switching themes...")
        app.on_key(KeyPress("T", ctrl=True, shift=True))
        print(f"   Active theme: {app.themes.current}")
        app.themes.apply_theme("ocean")
        print(f"   Exported: {app.themes.export_theme()['name']}")

        # 4. Static output
        output.write_text(app.page.render_html(), encoding="utf-8")
        print(f"\n4. Wrote {output}")
        print(f"   Status: {app.status()}")


if __name__ == "__main__":
    target = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("index.html")
    asyncio.run(main(target))
