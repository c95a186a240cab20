# orderdesk/core/permissions.py
from enum import Enum
from typing import Literal

# Application roles. Guests have no token and no role.
Role = Literal["admin", "facturador", "vendedor"]


class Capability(str, Enum):
    CREATE_ORDERS = "create_orders"
    MANAGE_ORDERS = "manage_orders"
    VIEW_ALL_ORDERS = "view_all_orders"
    EDIT_ORDER_CUSTOMER = "edit_order_customer"
    MANAGE_CATALOG = "manage_catalog"
    DELETE_CATALOG = "delete_catalog"
    VIEW_DASHBOARD = "view_dashboard"
    MANAGE_USERS = "manage_users"


ROLE_CAPABILITIES: dict[str, frozenset[Capability]] = {
    "admin": frozenset(Capability),
    "facturador": frozenset(
        {
            Capability.MANAGE_ORDERS,
            Capability.VIEW_ALL_ORDERS,
            Capability.MANAGE_CATALOG,
            Capability.VIEW_DASHBOARD,
        }
    ),
    "vendedor": frozenset(
        {
            Capability.CREATE_ORDERS,
            Capability.MANAGE_CATALOG,
        }
    ),
}


def capabilities_for(role: str | None) -> frozenset[Capability]:
    """Unknown or missing roles get no capabilities."""
    if role is None:
        return frozenset()
    return ROLE_CAPABILITIES.get(role, frozenset())


def has_capability(role: str | None, capability: Capability) -> bool:
    return capability in capabilities_for(role)
