"""
Data retention sweep.

Meant to be run by cron (or any scheduler), e.g. daily at 02:00:

    0 2 * * *  python -m app.retention

Removes Pending and Rejected feed requests older than
DATA_RETENTION_MONTHS. Approved requests, farmers, admins and stock stay.
"""
import argparse

from app.core.config import settings
from app.core.logging import get_logger, setup_logging
from app.db import SessionLocal
from app.models.feed_request import RequestStatus
from app.services.retention_service import purge_older_than, retention_cutoff

logger = get_logger(module="retention")


def run(months: int, include_approved: bool = False) -> int:
    statuses = [RequestStatus.PENDING.value, RequestStatus.REJECTED.value]
    if include_approved:
        statuses.append(RequestStatus.APPROVED.value)

    db = SessionLocal()
    try:
        return purge_older_than(db, retention_cutoff(months), statuses)
    finally:
        db.close()


def main() -> None:
    parser = argparse.ArgumentParser(description="Purge old feed requests")
    parser.add_argument(
        "--months",
        type=int,
        default=settings.DATA_RETENTION_MONTHS,
        help="retention period in months (default: %(default)s)",
    )
    parser.add_argument(
        "--include-approved",
        action="store_true",
        help="also delete approved requests; reports lose that history",
    )
    args = parser.parse_args()

    setup_logging()
    deleted = run(args.months, args.include_approved)
    logger.info("Retention sweep finished", deleted=deleted, months=args.months)


if __name__ == "__main__":
    main()
