from enum import Enum


class ErrorCode(str, Enum):
    """Machine-readable error codes returned in ``ErrorResponse.code``."""

    BAD_REQUEST = "BAD_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    TOO_MANY_REQUESTS = "TOO_MANY_REQUESTS"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    UPGRADE_REQUIRED = "UPGRADE_REQUIRED"
    INSUFFICIENT_DATA = "INSUFFICIENT_DATA"
    DAILY_LIMIT = "DAILY_LIMIT"
    STAT_REGRESSION = "STAT_REGRESSION"
    PAYWALL = "PAYWALL"
