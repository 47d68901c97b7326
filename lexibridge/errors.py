"""
LexiBridge - Error taxonomy
"""


class LexiBridgeError(Exception):
    """Base class for errors surfaced by the merge engine"""
    status_code = 500


class NotFoundError(LexiBridgeError):
    """A referenced entry, translation or case does not exist"""
    status_code = 404


class InvalidVoteError(LexiBridgeError):
    """Duplicate vote or vote value other than +1 / -1"""
    status_code = 400


class InvalidDecisionError(LexiBridgeError):
    """Unknown merge decision"""
    status_code = 400


class DatabaseError(LexiBridgeError):
    """Custom exception for database operations"""
    pass
