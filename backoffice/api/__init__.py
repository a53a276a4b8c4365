from .auth import router as auth_router
from .users import router as users_router
from .processes import router as processes_router
from .companies import router as companies_router
from .contacts import router as contacts_router
from .info_logs import router as info_logs_router
from .audit import router as audit_router
from .stats import router as stats_router
from .export import router as export_router
from .files import router as files_router
from .address import router as address_router
from .realtime import router as realtime_router

__all__ = [
    "auth_router",
    "users_router",
    "processes_router",
    "companies_router",
    "contacts_router",
    "info_logs_router",
    "audit_router",
    "stats_router",
    "export_router",
    "files_router",
    "address_router",
    "realtime_router"
]
