#!/usr/bin/env python3
"""
Cross-check the blob store against the metadata database.

Reports dangling records (a record whose file is gone) and orphan blobs
(a file no record points at). Nothing is changed unless a purge flag is
given; each purge re-checks its target before deleting it.

Usage:
    python scripts/audit_storage.py
    python scripts/audit_storage.py --json
    python scripts/audit_storage.py --purge-dangling-records
    python scripts/audit_storage.py --purge-orphan-blobs --grace-minutes 30

Exit status is 0 when both stores agree and 1 otherwise.
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from datetime import timedelta
from pathlib import Path

# Configure logging for CLI output
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from dotenv import load_dotenv

env_file = os.environ.get("ENV_FILE", ".env")
env_path = project_root / env_file
if env_path.exists():
    load_dotenv(env_path)


async def purge_dangling_records(service, records) -> int:
    """Delete each record whose file is still missing. Returns the number purged."""
    from pdf_vault.core.exceptions import DocumentNotFoundError

    purged = 0
    for record in records:
        try:
            deleted = await service.purge_dangling_record(record.id)
        except DocumentNotFoundError:
            logger.info(f"Record {record.id} already removed")
            continue
        if deleted:
            purged += 1
            logger.info(f"Purged record {record.id}")
        else:
            logger.info(f"Kept record {record.id}: file is present again")
    return purged


async def purge_orphan_blobs(service, keys, grace: timedelta) -> int:
    """Delete each file that is still unreferenced. Returns the number purged."""
    purged = 0
    for key in keys:
        if await service.purge_orphan_blob(key, orphan_grace=grace):
            purged += 1
            logger.info(f"Purged blob {key}")
        else:
            logger.info(f"Kept blob {key}")
    return purged


async def run_audit(args) -> int:
    from pdf_vault.core.blob_store import get_blob_store
    from pdf_vault.core.config import settings
    from pdf_vault.core.db_client import DatabaseManager
    from pdf_vault.services.document import DocumentCrudService, DocumentService

    db = DatabaseManager()
    service = DocumentService(
        blob_store=get_blob_store(settings),
        metadata_store=DocumentCrudService(db),
    )
    grace = timedelta(minutes=args.grace_minutes)

    try:
        report = await service.audit(orphan_grace=grace)

        if args.json:
            print(json.dumps(report.model_dump(mode="json"), indent=2))
        else:
            logger.info(
                f"Checked {report.records_checked} records and "
                f"{report.blobs_checked} blobs"
            )
            for record in report.dangling_records:
                logger.warning(
                    f"Dangling record: id={record.id} "
                    f"stored_name={record.stored_name} filename={record.original_name}"
                )
            for key in report.orphan_blobs:
                logger.warning(f"Orphan blob: {key}")
            if report.is_consistent:
                logger.info("Stores are consistent")

        if args.purge_dangling_records:
            await purge_dangling_records(service, report.dangling_records)

        if args.purge_orphan_blobs:
            await purge_orphan_blobs(service, report.orphan_blobs, grace)

        return 0 if report.is_consistent else 1
    finally:
        await db.close()


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Audit PDF Vault storage consistency"
    )
    parser.add_argument("--json", action="store_true", help="Print the report as JSON")
    parser.add_argument(
        "--purge-dangling-records",
        action="store_true",
        help="Delete records whose file is missing",
    )
    parser.add_argument(
        "--purge-orphan-blobs",
        action="store_true",
        help="Delete files that no record references",
    )
    parser.add_argument(
        "--grace-minutes",
        type=float,
        default=5.0,
        help="Ignore files younger than this (uploads in flight, default: 5)",
    )

    args = parser.parse_args()
    sys.exit(asyncio.run(run_audit(args)))


if __name__ == "__main__":
    main()
