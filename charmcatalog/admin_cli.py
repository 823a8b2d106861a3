#!/usr/bin/env python3
"""
Catalog Admin CLI: direct server-side management tool.

Runs directly on the catalog server against its SQLite database, with
no authentication. For local admin use only.

Usage:
    catalog-admin [--db path/to/catalog.db]
"""

import argparse
import asyncio
import sys
from pathlib import Path

from charmcatalog.config import get_settings
from charmcatalog.db.database import Database
from charmcatalog.db.repositories.entity_repo import EntityRepository
from charmcatalog.exceptions import CatalogError
from charmcatalog.models.entity import Entity
from charmcatalog.models.reference import Reference
from charmcatalog.resolver.preference import SeriesPreference
from charmcatalog.resolver.url import URLResolver


# =================== Colors ===================

class C:
    R = "\033[0m"
    B = "\033[1m"
    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    CYAN = "\033[96m"
    GREY = "\033[90m"
    MAGENTA = "\033[95m"


def colored(text: str, color: str) -> str:
    return f"{color}{text}{C.R}"


# =================== Display Helpers ===================

def banner():
    print(f"\n{C.CYAN}{'═' * 56}{C.R}")
    print(f"{C.B}  Catalog Admin CLI: Direct Server Management{C.R}")
    print(f"{C.CYAN}{'═' * 56}{C.R}\n")


def print_table(headers: list[str], rows: list[list[str]], widths: list[int]):
    header_line = "  ".join(f"{C.B}{h:<{w}}{C.R}" for h, w in zip(headers, widths))
    print(f"  {header_line}")
    print(f"  {'─' * (sum(widths) + 2 * (len(widths) - 1))}")
    for row in rows:
        print(f"  {'  '.join(f'{val:<{w}}' for val, w in zip(row, widths))}")


def prompt(msg: str, default: str = "") -> str:
    suffix = f" [{default}]" if default else ""
    val = input(f"  {C.CYAN}>{C.R} {msg}{suffix}: ").strip()
    return val or default


def confirm(msg: str) -> bool:
    return input(f"  {C.YELLOW}?{C.R} {msg} [y/N]: ").strip().lower() == "y"


def ok(msg: str):
    print(f"  {C.GREEN}✓{C.R} {msg}")


def err(msg: str):
    print(f"  {C.RED}✗{C.R} {msg}")


def info(msg: str):
    print(f"  {C.CYAN}ℹ{C.R} {msg}")


class AdminContext:
    """Repositories shared by the admin commands."""

    def __init__(self, db: Database, preference: SeriesPreference):
        self.db = db
        self.preference = preference
        self.repo = EntityRepository(db)
        self.resolver = URLResolver(self.repo, preference)


# =================== Commands ===================

async def cmd_list_entities(ctx: AdminContext):
    """List every series and revision of a name."""
    text = prompt("Name (e.g. wordpress or ~bob/wordpress)")
    if not text:
        return

    ref = Reference.parse(text)
    refs = await ctx.resolver.expand_id(ref)
    rows = []
    for r in refs:
        entity = await ctx.repo.find_entity(r)
        rows.append([
            str(r),
            r.series,
            str(r.revision),
            str(entity.size),
            entity.upload_time.strftime("%Y-%m-%d %H:%M"),
        ])

    print(f"\n  {C.B}Entities ({len(rows)}){C.R}\n")
    print_table(
        ["Id", "Series", "Rev", "Size", "Uploaded"],
        rows,
        [36, 12, 6, 10, 16],
    )
    print()


async def cmd_add_entity(ctx: AdminContext):
    """Register a published revision."""
    text = prompt("Fully qualified id (e.g. cs:trusty/wordpress-25)")
    if not text:
        return

    ref = Reference.parse(text)
    if not ref.is_fully_qualified:
        err("Series and revision are required.")
        return

    size = prompt("Archive size (bytes)", "0")
    blob_hash = prompt("SHA384 hash (optional)")
    blob_hash256 = prompt("SHA256 hash (optional)")

    if not confirm(f"Add {ref}?"):
        info("Cancelled.")
        return

    await ctx.repo.add_entity(Entity(
        ref=ref,
        size=int(size),
        blob_hash=blob_hash,
        blob_hash256=blob_hash256,
    ))
    ok(f"Added {ref}.")


async def cmd_resolve(ctx: AdminContext):
    """Resolve a partial reference the way the API does."""
    text = prompt("Reference")
    if not text:
        return

    resolved = await ctx.resolver.resolve(Reference.parse(text))
    ok(f"{text} → {resolved}")


async def cmd_revision_info(ctx: AdminContext):
    """Show the revisions of an id's series."""
    text = prompt("Reference")
    if not text:
        return

    ref = await ctx.resolver.resolve(Reference.parse(text))
    revisions = await ctx.resolver.revision_info(ref)
    print(f"\n  {C.B}Revisions of {ref.series}/{ref.name} ({len(revisions)}){C.R}\n")
    for r in revisions:
        marker = colored("●", C.GREEN) if r == ref else " "
        print(f"  {marker} {r}")
    print()


async def cmd_set_read_perms(ctx: AdminContext):
    """Replace the read ACL of a charm or bundle."""
    text = prompt("Name (e.g. wordpress or ~bob/wordpress)")
    if not text:
        return

    ref = Reference.parse(text)
    base = await ctx.repo.find_base_entity(ref)
    info(f"{base.ref} read: {', '.join(base.acl_read) or '—'}")

    value = prompt("New read ACL (comma separated)", ",".join(base.acl_read))
    acl = [v.strip() for v in value.split(",") if v.strip()]

    if not confirm(f"Set read ACL of {base.ref} to {acl}?"):
        return

    await ctx.repo.set_perms(ref, read=acl)
    ok("Permissions updated.")


async def cmd_sql(ctx: AdminContext):
    """Run raw SQL (read-only by default, write with !prefix)."""
    print(f"  {C.GREY}Enter SQL. Prefix with ! for write queries. 'q' to exit.{C.R}")
    while True:
        query = input(f"  {C.MAGENTA}SQL>{C.R} ").strip()
        if not query or query.lower() == "q":
            break

        try:
            if query.startswith("!"):
                await ctx.db.execute(query[1:])
                await ctx.db.commit()
                ok("Executed.")
            else:
                rows = await ctx.db.fetch_all(query)
                if not rows:
                    info("No results.")
                else:
                    keys = rows[0].keys()
                    print(f"  {C.B}{'  '.join(keys)}{C.R}")
                    for r in rows[:50]:
                        print(f"  {'  '.join(str(r[k])[:30] for k in keys)}")
                    if len(rows) > 50:
                        info(f"... and {len(rows) - 50} more rows")
        except CatalogError as e:
            err(e.message)


# =================== Main Loop ===================

COMMANDS = {
    "1": ("List entities of a name", cmd_list_entities),
    "2": ("Add entity", cmd_add_entity),
    "3": ("Resolve reference", cmd_resolve),
    "4": ("Revision info", cmd_revision_info),
    "5": ("Set read permissions", cmd_set_read_perms),
    "6": ("Raw SQL", cmd_sql),
}


async def main_loop(db_path: str, lts_series: list[str]):
    db = Database(f"sqlite:///{db_path}")
    await db.initialize()
    ctx = AdminContext(db, SeriesPreference(lts_series))
    info(f"Connected to: {db_path}")

    banner()

    while True:
        print(f"  {C.B}Commands:{C.R}")
        for key, (label, _) in COMMANDS.items():
            print(f"    {C.CYAN}{key}{C.R}  {label}")
        print(f"    {C.CYAN}q{C.R}  Quit\n")

        choice = input(f"  {C.B}→{C.R} ").strip()

        if choice.lower() == "q":
            break

        cmd = COMMANDS.get(choice)
        if not cmd:
            err("Invalid choice.")
            continue

        try:
            print()
            await cmd[1](ctx)
            print()
        except KeyboardInterrupt:
            print()
        except CatalogError as e:
            err(f"{e.kind.value}: {e.message}")
            print()
        except ValueError as e:
            err(f"Invalid input: {e}")
            print()

    await db.close()
    info("Bye.")


def main():
    settings = get_settings()
    default_db = settings.database_url.removeprefix("sqlite:///")

    parser = argparse.ArgumentParser(
        prog="catalog-admin",
        description="Catalog Admin CLI: direct server-side management",
    )
    parser.add_argument(
        "--db",
        default=default_db,
        help=f"Path to catalog SQLite database (default: {default_db})",
    )
    args = parser.parse_args()

    db_path = Path(args.db)
    if not db_path.exists():
        print(f"Error: Database not found: {db_path}")
        print("Use --db to specify the correct path.")
        sys.exit(1)

    asyncio.run(main_loop(str(db_path), settings.lts_series))


if __name__ == "__main__":
    main()
