"""Tenant-scoped CRM records."""

from agencycrm.crm.contacts import ContactStore
from agencycrm.crm.deals import DealStore
from agencycrm.crm.tasks import TaskStore

__all__ = ["ContactStore", "DealStore", "TaskStore"]
