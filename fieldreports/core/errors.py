from __future__ import annotations


class ReportingError(RuntimeError):
    """Base class for errors surfaced by the reporting engine."""


class BackendUnavailable(ReportingError):
    """A store call failed (connection, missing table, bad query)."""


class OfficeDirectoryUnavailable(ReportingError):
    """Every retrieval strategy failed and no cached office list exists."""


class DataSourceNotFound(ReportingError):
    """None of the candidate submission tables/views responded."""


class NoDataToExport(ReportingError):
    pass
