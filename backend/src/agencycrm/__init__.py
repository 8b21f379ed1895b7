"""AgencyCRM - multi-tenant CRM backend."""

__version__ = "0.1.0"
