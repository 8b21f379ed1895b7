"""Tenant-scoped contacts."""

from agencycrm.crm.records import TenantRecordStore
from agencycrm.persistence.schema import contacts


class ContactStore(TenantRecordStore):
    table = contacts
    fields = {
        "ownerId": "owner_id",
        "name": "name",
        "email": "email",
        "phone": "phone",
        "company": "company",
        "role": "role",
        "notes": "notes",
    }
    create_only = frozenset({"ownerId"})
