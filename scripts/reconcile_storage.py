#!/usr/bin/env python3
"""
Recompute each owner's cached ``used_storage`` from their live images.

Upload admission never reads the cached value, so running this is only
needed to refresh what profile views display.

Run:
    python scripts/reconcile_storage.py --user-id <USER-ID> [--user-id <USER-ID> ...]
"""

import argparse
import sys

from aws_lambda_powertools import Logger

from imagehost.core.infrastructure.aws.dynamodb_metadata import DynamoDBMetadata
from imagehost.core.infrastructure.aws.dynamodb_users import DynamoDBUsers
from imagehost.core.models.errors import ImageServiceError
from imagehost.core.services.quota_ledger import QuotaLedger

logger = Logger(service="reconcile")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile cached storage usage")

    parser.add_argument(
        "--user-id",
        dest="user_ids",
        action="append",
        required=True,
        help="Owner whose usage should be recomputed (repeatable)",
    )

    return parser.parse_args(argv)


def reconcile_storage(argv: list[str] | None = None, ledger: QuotaLedger | None = None) -> int:
    """Reconcile every requested owner; return the number of failures."""
    args = parse_args(argv)
    ledger = ledger or QuotaLedger(DynamoDBMetadata(), DynamoDBUsers())
    failures = 0

    logger.info("Starting reconciliation", extra={"owners": len(args.user_ids)})

    for user_id in args.user_ids:
        try:
            used = ledger.reconcile(user_id)
        except ImageServiceError as exc:
            failures += 1
            logger.error(
                "Failed to reconcile owner",
                extra={"user_id": user_id, "error_code": exc.error_code},
            )
            continue

        logger.info("Reconciled owner", extra={"user_id": user_id, "used": used})

    logger.info("Reconciliation completed", extra={"failures": failures})
    return failures


if __name__ == "__main__":
    sys.exit(1 if reconcile_storage() else 0)
