"""Commission ledger lookups for affiliates."""

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from storefront.commission.commission import CommissionEntry, CommissionStatus


def commissions_for_affiliate(affiliate_id, status=None, limit=None) -> list[CommissionEntry]:
    """An affiliate's commission entries, newest first.

    `status` narrows to one of pending/approved/paid; `limit` keeps only the
    most recent entries.
    """
    filters = {"affiliate_id": str(affiliate_id)}
    if status is not None:
        if status not in {s.value for s in CommissionStatus}:
            raise ValidationError({"status": [f"Unknown commission status {status!r}"]})
        filters["status"] = status

    entries = current_domain.repository_for(CommissionEntry)._dao.query.filter(**filters).all().items
    entries = sorted(entries, key=lambda e: e.recorded_at, reverse=True)
    return entries[:limit] if limit is not None else entries
