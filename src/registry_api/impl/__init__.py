from .packages_api import PackagesApiImpl  # noqa: F401
from .admin_api import AdminApiImpl  # noqa: F401
from .health_api import HealthApiImpl  # noqa: F401
