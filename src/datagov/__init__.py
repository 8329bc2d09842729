"""Datagov — multi-tenant data governance platform.

Workspaces (tenants) own datasets, jobs, members and API keys. Every
tenant-scoped route is gated by the caller's membership role.
"""

__version__ = "0.1.0"
