from git_issue.gateway.time.abc import Time
from git_issue.gateway.time.real import RealTime

__all__ = [
    "RealTime",
    "Time",
]
