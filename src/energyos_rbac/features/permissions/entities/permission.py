"""Permission value type for the energyos-rbac permissions feature.

Permissions are closed, immutable ``resource:action`` tokens. Members of the
enum compare equal to their token strings, so they can be stored and
serialized as plain strings.
"""

from enum import Enum
from typing import Optional


class Permission(str, Enum):
    """Closed catalog of platform permissions."""

    # User Management
    USERS_CREATE = "users:create"
    USERS_READ = "users:read"
    USERS_UPDATE = "users:update"
    USERS_DELETE = "users:delete"
    USERS_MANAGE_ROLES = "users:manage_roles"

    # Company Management
    COMPANIES_CREATE = "companies:create"
    COMPANIES_READ = "companies:read"
    COMPANIES_UPDATE = "companies:update"
    COMPANIES_DELETE = "companies:delete"
    COMPANIES_VERIFY = "companies:verify"
    COMPANIES_SUSPEND = "companies:suspend"

    # Project Management
    PROJECTS_CREATE = "projects:create"
    PROJECTS_READ = "projects:read"
    PROJECTS_UPDATE = "projects:update"
    PROJECTS_DELETE = "projects:delete"
    PROJECTS_APPROVE = "projects:approve"
    PROJECTS_ASSIGN = "projects:assign"

    # Quote Management
    QUOTES_CREATE = "quotes:create"
    QUOTES_READ = "quotes:read"
    QUOTES_UPDATE = "quotes:update"
    QUOTES_DELETE = "quotes:delete"
    QUOTES_APPROVE = "quotes:approve"
    QUOTES_SEND = "quotes:send"

    # Customer Management
    CUSTOMERS_CREATE = "customers:create"
    CUSTOMERS_READ = "customers:read"
    CUSTOMERS_UPDATE = "customers:update"
    CUSTOMERS_DELETE = "customers:delete"
    CUSTOMERS_IMPORT = "customers:import"
    CUSTOMERS_EXPORT = "customers:export"

    # Product Management
    PRODUCTS_CREATE = "products:create"
    PRODUCTS_READ = "products:read"
    PRODUCTS_UPDATE = "products:update"
    PRODUCTS_DELETE = "products:delete"
    PRODUCTS_MANAGE_PRICING = "products:manage_pricing"

    # Financial Management
    FINANCE_READ = "finance:read"
    FINANCE_UPDATE = "finance:update"
    FINANCE_REPORTS = "finance:reports"
    FINANCE_INVOICING = "finance:invoicing"
    FINANCE_PAYMENTS = "finance:payments"

    # Analytics & Reporting
    ANALYTICS_READ = "analytics:read"
    ANALYTICS_ADVANCED = "analytics:advanced"
    REPORTS_CREATE = "reports:create"
    REPORTS_READ = "reports:read"
    REPORTS_EXPORT = "reports:export"

    # System Administration
    SYSTEM_SETTINGS = "system:settings"
    SYSTEM_MONITORING = "system:monitoring"
    SYSTEM_INTEGRATIONS = "system:integrations"
    SYSTEM_BACKUPS = "system:backups"
    SYSTEM_LOGS = "system:logs"

    # Designer & Tools
    DESIGNER_USE = "designer:use"
    DESIGNER_ADVANCED = "designer:advanced"
    CALCULATOR_USE = "calculator:use"
    CALCULATOR_ADVANCED = "calculator:advanced"

    # Content Management
    CONTENT_CREATE = "content:create"
    CONTENT_READ = "content:read"
    CONTENT_UPDATE = "content:update"
    CONTENT_DELETE = "content:delete"
    CONTENT_PUBLISH = "content:publish"

    @property
    def resource(self) -> str:
        """Extract resource part from permission token."""
        return self.value.split(":")[0]

    @property
    def action(self) -> str:
        """Extract action part from permission token."""
        return self.value.split(":")[1]

    @classmethod
    def lookup(cls, token: object) -> Optional["Permission"]:
        """Return the catalog member for a token, or None if it is not one."""
        if isinstance(token, cls):
            return token
        if not isinstance(token, str):
            return None
        return cls._value2member_map_.get(token)

    def __str__(self) -> str:
        return self.value
