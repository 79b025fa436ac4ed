from enum import Enum


class GenerationVersion(str, Enum):
    """Template generation pipeline an organization is routed to."""

    V1 = "v1"
    V2 = "v2"


class MemberRole(str, Enum):
    """Role of a user inside an organization."""

    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


class RateLimitWindow(str, Enum):
    """Named rate limit windows; the value is the key suffix."""

    MINUTE = "1m"
    DAY = "1d"

    @property
    def seconds(self) -> int:
        return 60 if self is RateLimitWindow.MINUTE else 60 * 60 * 24
