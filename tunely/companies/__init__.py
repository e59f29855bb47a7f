"""Company registration API."""

from .router import router
from .service import CompanyService, QuarterDetail

__all__ = ["CompanyService", "QuarterDetail", "router"]
