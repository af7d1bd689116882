# db_models/enums.py
"""
Closed value sets enforced by the relational store.

These mirror the enumerated column types of the hosted schema. Client code
validates against them as a fast-fail, but the store remains the authority.
"""
from enum import Enum


class DeviceType(str, Enum):
    LAPTOP = "laptop"
    DESKTOP = "desktop"
    SERVER = "server"
    MONITOR = "monitor"
    TABLET = "tablet"
    SMARTPHONE = "smartphone"
    NETWORK_SWITCH = "network_switch"
    ROUTER = "router"
    PRINTER = "printer"
    SCANNER = "scanner"
    PROJECTOR = "projector"
    OTHER = "other"


class AssetStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    MAINTENANCE = "maintenance"
    RETIRED = "retired"
    MISSING = "missing"
    DAMAGED = "damaged"


class AssignmentStatus(str, Enum):
    ACTIVE = "active"
    RETURNED = "returned"
    PENDING = "pending"


class RequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"
    COMPLETED = "completed"


class RequestType(str, Enum):
    ASSIGNMENT = "assignment"
    MAINTENANCE = "maintenance"
    REPLACEMENT = "replacement"
    RETURN = "return"
