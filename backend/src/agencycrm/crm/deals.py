"""Tenant-scoped deals (sales opportunities)."""

from agencycrm.crm.records import TenantRecordStore
from agencycrm.persistence.schema import deals

DEFAULT_STAGE = "new"


class DealStore(TenantRecordStore):
    """``value`` is a 12,2 decimal and is returned as a string, e.g. ``"1500.00"``."""

    table = deals
    fields = {
        "ownerId": "owner_id",
        "contactId": "contact_id",
        "title": "title",
        "value": "value",
        "stage": "stage",
        "expectedCloseDate": "expected_close_date",
        "notes": "notes",
    }
    create_only = frozenset({"ownerId"})
