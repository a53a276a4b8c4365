from .auth import (
    RegisterRequest,
    LoginRequest,
    LoginResponse,
    ReauthenticateRequest,
    PasswordResetRequest,
    PasswordResetConfirm,
    ChangePasswordRequest,
    UserResponse,
    ProfileUpdate
)
from .process import (
    ProcessCreate,
    ProcessUpdate,
    ProcessCompletion,
    ProgressUpdate,
    ProcessResponse,
    ProcessListResponse,
    HistoryEntryResponse
)
from .company import (
    EnderecoSchema,
    CompanyCreate,
    CompanyUpdate,
    CompanyDeleteRequest,
    CompanyResponse
)
from .contact import ContactCreate, ContactUpdate, ContactResponse
from .info_log import InfoLogCreate, InfoLogUpdate, InfoLogResponse
from .audit import AuditResponse, CompanyDeleteResponse

__all__ = [
    "RegisterRequest",
    "LoginRequest",
    "LoginResponse",
    "ReauthenticateRequest",
    "PasswordResetRequest",
    "PasswordResetConfirm",
    "ChangePasswordRequest",
    "UserResponse",
    "ProfileUpdate",
    "ProcessCreate",
    "ProcessUpdate",
    "ProcessCompletion",
    "ProgressUpdate",
    "ProcessResponse",
    "ProcessListResponse",
    "HistoryEntryResponse",
    "EnderecoSchema",
    "CompanyCreate",
    "CompanyUpdate",
    "CompanyDeleteRequest",
    "CompanyResponse",
    "ContactCreate",
    "ContactUpdate",
    "ContactResponse",
    "InfoLogCreate",
    "InfoLogUpdate",
    "InfoLogResponse",
    "AuditResponse",
    "CompanyDeleteResponse"
]
