from enum import Enum


class ErrorKind(Enum):
    """Failure categories raised by the collaborators around the planner."""
    STORAGE_UNAVAILABLE = "storage-unavailable"
    LOOKUP_NOT_FOUND = "lookup-not-found"
    LOOKUP_AMBIGUOUS = "lookup-ambiguous"   # ISIN search returned >1 hit
    NETWORK_FAILURE = "network-failure"
