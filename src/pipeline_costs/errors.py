"""Exception types raised by the pipelines cost dashboard."""

from __future__ import annotations


class CostDashboardError(RuntimeError):
    """Base class for errors that abort catalog loading or a report render."""


class CatalogError(CostDashboardError):
    """The raw price catalog could not be decoded; the service cannot start."""


class OperationDecodeError(CostDashboardError):
    """An operation's primary metadata could not be decoded."""


class OperationsSourceError(CostDashboardError):
    """The upstream operations listing call failed."""


class ProjectNotConfiguredError(CostDashboardError):
    """No project identifier was supplied or discovered."""
