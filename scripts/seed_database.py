#!/usr/bin/env python3
"""
CLI script to seed the database with DEFRA emission factors from CSV files.

Usage:
    # Seed emission factors
    python scripts/seed_database.py

    # Apply migrations first, then seed
    python scripts/seed_database.py --migrate

    # Also load a demo organization with unprocessed activities
    python scripts/seed_database.py --demo

    # Use another config file or data directory
    python scripts/seed_database.py --config production.toml --data-dir path/to/csv/files
"""

import argparse
import asyncio
import logging
import sys
import uuid
from pathlib import Path

# Add parent directory to path so we can import app modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.core.config import get_config
from app.database.base import apply_db_migration, get_db_url, get_engine_kw
from app.database.session_manager.db_session import Database
from app.services.seed_database import (
    DEMO_ORGANIZATION_ID,
    DEMO_USER_ID,
    DatabaseSeeder,
)
from app.utils.constants import ConfigFile
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

console = Console()


def print_header(text: str, style: str = "bold cyan"):
    console.print(
        Panel(
            Text(text, justify="center", style=style),
            border_style="cyan",
            padding=(1, 2),
        )
    )


def print_config(args):
    config_table = Table(show_header=False, box=None, padding=(0, 2))
    config_table.add_column("Setting", style="bold yellow")
    config_table.add_column("Value", style="green")

    config_table.add_row("Config File", args.config)
    config_table.add_row("Data Directory", args.data_dir)
    config_table.add_row("Run Migrations", "Yes" if args.migrate else "No")
    config_table.add_row("Clear Existing", "Yes" if args.clear else "No")
    config_table.add_row("Demo Organization", str(args.organization_id) if args.demo else "No")

    console.print(config_table)
    console.print()


def print_stats(stats: dict):
    print_header("SEEDING STATISTICS", "bold green")

    stats_table = Table(show_header=True, box=None, padding=(0, 2))
    stats_table.add_column("Category", style="bold cyan", width=30)
    stats_table.add_column("Count", justify="right", style="bold green")

    stats_table.add_row("Emission Factors Created", str(stats["emission_factors"]))
    stats_table.add_row("Emission Factors Skipped", str(stats["skipped_factors"]))
    stats_table.add_row("Demo Activities", str(stats["activities"]))
    stats_table.add_row("Organization Members", str(stats["members"]))

    console.print(stats_table)
    console.print()


async def main():
    """Main entry point for the seeding script."""
    parser = argparse.ArgumentParser(
        description="Seed the database with emission factors from CSV files"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=ConfigFile.DEVELOPMENT,
        help="Config file under config/ (default: development.toml)",
    )
    parser.add_argument(
        "--migrate",
        action="store_true",
        help="Apply Alembic migrations before seeding",
    )
    parser.add_argument(
        "--clear",
        action="store_true",
        help="Clear unreferenced factors and activities before seeding",
    )
    parser.add_argument(
        "--demo",
        action="store_true",
        help="Also load demo activities and membership",
    )
    parser.add_argument(
        "--organization-id",
        type=uuid.UUID,
        default=DEMO_ORGANIZATION_ID,
        help="Organization owning the demo data",
    )
    parser.add_argument(
        "--user-id",
        type=uuid.UUID,
        default=DEMO_USER_ID,
        help="User made a member of the demo organization",
    )
    parser.add_argument(
        "--data-dir",
        type=str,
        default="app/test/test_data",
        help="Directory containing CSV files (default: app/test/test_data)",
    )

    args = parser.parse_args()

    print_header("DATABASE SEEDING", "bold cyan")
    print_config(args)

    try:
        config = get_config(args.config)
        if args.migrate:
            with console.status("[bold cyan]Applying migrations...", spinner="dots"):
                await apply_db_migration(config)

        async_db_url = get_db_url(config)
        Database.init(async_db_url, engine_kw=get_engine_kw(async_db_url))
        logger.info("Database initialized")

        with console.status("[bold yellow]Loading emission factors...", spinner="dots"):
            async with DatabaseSeeder(data_dir=args.data_dir) as seeder:
                stats = await seeder.seed_all(
                    clear_existing=args.clear,
                    with_demo_data=args.demo,
                    organization_id=args.organization_id,
                    user_id=args.user_id,
                )

        print_stats(stats)
        console.print(
            Panel(
                Text("SEEDING COMPLETED SUCCESSFULLY", justify="center"),
                border_style="bold green",
                style="bold green",
            )
        )

    except Exception as e:
        logger.error(f"Seeding failed: {e}", exc_info=True)
        console.print()
        console.print(
            Panel(
                f"[bold red]SEEDING FAILED[/bold red]\n\n[red]{e!s}[/red]",
                border_style="bold red",
            )
        )
        console.print()
        sys.exit(1)
    finally:
        await Database.close()


if __name__ == "__main__":
    asyncio.run(main())
