#!/usr/bin/env python3
"""
Import Announcements from a JSON File

Loads a JSON array of announcements and writes them to the announcements
collection. By default items are upserted by slug (re-running an import
updates content and leaves views/postedAt untouched); with --insert every
item becomes a new document with a generated slug.

Usage:
    # Validate only
    python scripts/import_announcements.py data/announcements.json --dry-run

    # Upsert by slug
    python scripts/import_announcements.py data/announcements.json --user importer

    # Insert as new documents
    python scripts/import_announcements.py data/jobs.json --insert

    # Create indexes (unique slug etc.) before writing
    python scripts/import_announcements.py data/announcements.json --ensure-indexes

Exit status is 1 when any item failed.
"""

import argparse
import json
import os
import sys
from typing import Any, List, Optional, Sequence

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Load environment variables
from dotenv import load_dotenv
load_dotenv()

from pydantic import ValidationError

from jobboard.common.logger import setup_logging
from jobboard.common.repositories import (
    AnnouncementRepositoryInterface,
    get_announcement_repository,
)
from jobboard.common.schemas import AnnouncementCreate, BulkUpsertItem


def load_items(path: str) -> List[Any]:
    """
    Read the import file.

    Raises:
        ValueError: If the file is not a JSON array
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON array, got {type(data).__name__}")
    return data


def validate_items(items: Sequence[Any], insert: bool) -> List[str]:
    """Validate every item without touching the database."""
    model = AnnouncementCreate if insert else BulkUpsertItem
    errors = []
    for index, item in enumerate(items):
        try:
            model.model_validate(item)
        except ValidationError as e:
            title = item.get("title") if isinstance(item, dict) else None
            errors.append(f"Item {index} ({title or '<untitled>'}): {e.error_count()} validation error(s)")
    return errors


def run_import(
    path: str,
    insert: bool = False,
    dry_run: bool = False,
    user_id: Optional[str] = None,
    repo: Optional[AnnouncementRepositoryInterface] = None,
    ensure_indexes: bool = False,
) -> int:
    """
    Import announcements from ``path``.

    Returns:
        Process exit status (0 on success, 1 if any item failed)
    """
    items = load_items(path)
    mode = "insert" if insert else "upsert"

    print(f"\n{'='*60}")
    print("Announcement Import")
    print(f"{'='*60}")
    print(f"File: {path}")
    print(f"Items: {len(items):,}")
    print(f"Mode: {mode}{' (DRY RUN)' if dry_run else ''}")
    print(f"{'='*60}\n")

    if dry_run:
        errors = validate_items(items, insert)
        print(f"Valid items: {len(items) - len(errors):,}")
    else:
        repo = repo or get_announcement_repository()
        if ensure_indexes:
            print(f"Indexes ensured: {repo.ensure_indexes()}")
        if insert:
            result = repo.batch_insert(items, user_id)
            print(f"Inserted: {result.inserted:,}")
        else:
            result = repo.bulk_upsert(items, user_id)
            print(f"Upserted: {result.upserted:,}")
            print(f"Modified: {result.modified:,}")
        errors = result.errors

    if errors:
        print(f"\nErrors ({len(errors)}):")
        for error in errors:
            print(f"  - {error}")
        return 1

    print("\nDone.")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Import announcements from a JSON array file"
    )
    parser.add_argument("path", help="Path to a JSON file containing an array of announcements")
    parser.add_argument(
        "--insert",
        action="store_true",
        help="Insert new documents instead of upserting by slug"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate items without writing"
    )
    parser.add_argument(
        "--ensure-indexes",
        action="store_true",
        help="Create the announcements indexes before writing"
    )
    parser.add_argument(
        "--user",
        default=None,
        help="User reference stored as postedBy on new documents"
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Log level (default: WARNING)"
    )

    args = parser.parse_args(argv)
    setup_logging(level=args.log_level)

    try:
        return run_import(
            args.path,
            insert=args.insert,
            dry_run=args.dry_run,
            user_id=args.user,
            ensure_indexes=args.ensure_indexes,
        )
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
