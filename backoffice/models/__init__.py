from .user import User, UserRole
from .process import (
    Process,
    ProcessHistory,
    ProcessStatus,
    ProcessPriority,
    HistoryAction,
    STATUS_LABELS
)
from .company import Company
from .contact import Contact
from .info_log import InformationLog, Relevance
from .audit import AuditRecord, AUDIT_COMPANY_DELETION
from .file import StoredFile

__all__ = [
    "User",
    "UserRole",
    "Process",
    "ProcessHistory",
    "ProcessStatus",
    "ProcessPriority",
    "HistoryAction",
    "STATUS_LABELS",
    "Company",
    "Contact",
    "InformationLog",
    "Relevance",
    "AuditRecord",
    "AUDIT_COMPANY_DELETION",
    "StoredFile"
]
