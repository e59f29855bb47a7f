"""Exception types shared by the adapters, services and routers."""

from __future__ import annotations


class TunelyError(Exception):
    """Base class for errors raised by tunely."""


class CompanyNotFoundError(TunelyError, LookupError):
    """Raised when a company id does not exist."""

    def __init__(self, company_id: int) -> None:
        super().__init__(f"Company {company_id} not found")
        self.company_id = company_id


class CollectionInProgressError(TunelyError):
    """Raised when another collection for the same company is still running."""

    def __init__(self, company_id: int) -> None:
        super().__init__(f"Collection already in progress for company {company_id}")
        self.company_id = company_id


class UpstreamError(TunelyError):
    """Raised when an upstream data source cannot be reached or answers with an error."""

    def __init__(self, source: str, message: str) -> None:
        super().__init__(f"{source}: {message}")
        self.source = source
