"""
Role constants. A user holds exactly one role within their organization.
Values are the display strings stored in `users.role`.
"""

from enum import Enum


class Role(str, Enum):
    HEAD_OF_DEPARTMENT = "Head of Department"
    ADMIN = "Admin"
    LOGISTICS = "Logistics"
    FINANCE = "Finance"
    STORES = "Stores"


HEAD_OF_DEPARTMENT = Role.HEAD_OF_DEPARTMENT.value
ADMIN = Role.ADMIN.value
LOGISTICS = Role.LOGISTICS.value
FINANCE = Role.FINANCE.value
STORES = Role.STORES.value

ALL_ROLES = tuple(r.value for r in Role)
