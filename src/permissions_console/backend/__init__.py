from permissions_console.backend.interfaces import Job, LedgerBackend

__all__ = ["Job", "LedgerBackend"]
