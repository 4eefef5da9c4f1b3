from .base import Base
from .error_code import ErrorCode
from .event import Event
from .feature_flag import FeatureFlag
from .profile import SOCIAL_FIELDS, Profile
from .stat_entry import StatEntry
from .system_setting import SystemSetting

__all__ = [
    "Base",
    "ErrorCode",
    "Event",
    "FeatureFlag",
    "Profile",
    "SOCIAL_FIELDS",
    "StatEntry",
    "SystemSetting",
]
