from .audit import AuditLogRepository
from .packages import PackageRepository, PackageSummaryRow
from .uploaders import PackageUploaderRepository
from .users import UserRepository, hash_token
from .versions import VersionRepository

__all__ = [
    "AuditLogRepository",
    "PackageRepository",
    "PackageSummaryRow",
    "PackageUploaderRepository",
    "UserRepository",
    "VersionRepository",
    "hash_token",
]
