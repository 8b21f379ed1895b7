"""Tenant-scoped tasks."""

from agencycrm.crm.records import TenantRecordStore
from agencycrm.persistence.schema import tasks

DEFAULT_STATUS = "todo"
DEFAULT_PRIORITY = "medium"


class TaskStore(TenantRecordStore):
    table = tasks
    fields = {
        "assignedTo": "assigned_to",
        "title": "title",
        "description": "description",
        "status": "status",
        "priority": "priority",
        "dueDate": "due_date",
    }
