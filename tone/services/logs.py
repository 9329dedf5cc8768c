"""
Log CRUD against the ``logs`` table.

Ownership is enforced by the store's row-level security; this module never
checks it. Reads are joined with the referenced item and ordered newest first.
"""

from typing import Any, Dict, List, Optional

from ..core.errors import RemoteError
from ..core.logger import get_logger
from ..models.schemas import Log, LogCreate, LogUpdate
from .remote import Filter, RemoteService

_logger = get_logger(__name__)

LOGS_TABLE = "logs"
LOG_COLUMNS = "*, items(*)"


def _clean_memo(memo: Optional[str]) -> Optional[str]:
    return memo if memo and memo.strip() else None


def _fetch(remote: RemoteService, filters: List[Filter]) -> List[Log]:
    rows = remote.select(LOGS_TABLE, columns=LOG_COLUMNS, filters=filters, order_by="created_at", descending=True)
    return [Log(**row) for row in rows]


# PUBLIC_INTERFACE
def list_logs(remote: RemoteService, user_id: str) -> List[Log]:
    """All logs owned by user_id, newest first. Raises RemoteError on failure."""
    try:
        return _fetch(remote, [Filter(column="user_id", op="eq", value=user_id)])
    except RemoteError as exc:
        raise exc.with_message("Could not load your logs.") from exc


# PUBLIC_INTERFACE
def list_public_logs(remote: RemoteService, user_id: str) -> List[Log]:
    """Only the is_public logs of user_id, newest first."""
    try:
        return _fetch(
            remote,
            [
                Filter(column="user_id", op="eq", value=user_id),
                Filter(column="is_public", op="eq", value=True),
            ],
        )
    except RemoteError as exc:
        raise exc.with_message("Could not load logs.") from exc


# PUBLIC_INTERFACE
def create_log(remote: RemoteService, user_id: str, item_id: Any, payload: LogCreate) -> Log:
    row: Dict[str, Any] = {
        "user_id": user_id,
        "item_id": item_id,
        "stamp": payload.stamp.value,
        "memo": _clean_memo(payload.memo),
        "is_public": payload.is_public,
    }
    try:
        created = remote.insert(LOGS_TABLE, row)
    except RemoteError as exc:
        raise exc.with_message("Failed to save the log.") from exc
    _logger.info("Log created", extra={"log_id": created.get("id"), "item_id": item_id})
    return Log(**created)


# PUBLIC_INTERFACE
def update_log(remote: RemoteService, log_id: Any, payload: LogUpdate) -> Log:
    """
    Replace stamp, memo and visibility of one log.

    A row the store refuses to update comes back as an empty result; that is
    reported the same way as any other failure.
    """
    values = {
        "stamp": payload.stamp.value,
        "memo": _clean_memo(payload.memo),
        "is_public": payload.is_public,
    }
    try:
        rows = remote.update_by_id(LOGS_TABLE, log_id, values)
    except RemoteError as exc:
        raise exc.with_message("Failed to update the log.") from exc
    if not rows:
        _logger.error("Log update matched no rows", extra={"log_id": log_id})
        raise RemoteError("Failed to update the log.", operation="update", detail="no row updated")
    return Log(**rows[0])


# PUBLIC_INTERFACE
def delete_log(remote: RemoteService, log_id: Any) -> None:
    try:
        remote.delete_by_id(LOGS_TABLE, log_id)
    except RemoteError as exc:
        raise exc.with_message("Failed to delete the log.") from exc
    _logger.info("Log deleted", extra={"log_id": log_id})
