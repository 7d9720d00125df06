from datetime import datetime
from typing import Iterable, Optional

from dateutil.relativedelta import relativedelta
from sqlalchemy import delete
from sqlalchemy.orm import Session

from app.core.logging import get_logger
from app.models.base import utcnow
from app.models.feed_request import FeedRequest, RequestStatus

logger = get_logger(module="retention_service")

DEFAULT_PURGE_STATUSES = (RequestStatus.PENDING.value, RequestStatus.REJECTED.value)


def retention_cutoff(months: int, now: Optional[datetime] = None) -> datetime:
    return (now or utcnow()) - relativedelta(months=months)


def purge_older_than(
    db: Session,
    cutoff: datetime,
    statuses: Iterable[str] = DEFAULT_PURGE_STATUSES,
) -> int:
    """
    Delete feed requests created before ``cutoff`` whose status is in
    ``statuses``. Approved requests carry report data and are kept by the
    default. Farmers, admins and stock are never touched.
    """
    statuses = [s.value if isinstance(s, RequestStatus) else s for s in statuses]
    result = db.execute(
        delete(FeedRequest)
        .where(FeedRequest.created_at < cutoff, FeedRequest.status.in_(statuses))
        .execution_options(synchronize_session=False)
    )
    db.commit()

    logger.info(
        "Old feed requests purged",
        deleted=result.rowcount,
        cutoff=cutoff.isoformat(),
        statuses=statuses,
    )
    return result.rowcount
