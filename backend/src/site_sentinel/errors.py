from __future__ import annotations


class SiteSentinelError(Exception):
    """Base class for operational errors raised by Site Sentinel."""


class ConfigError(SiteSentinelError):
    pass


class InspectionError(SiteSentinelError):
    """The inspection itself failed (browser unavailable, broken session).

    Problems with the target site are never raised; they become findings.
    """


class ProjectNotFoundError(SiteSentinelError):
    pass


class StoreError(SiteSentinelError):
    pass


class AnalysisError(SiteSentinelError):
    pass


class OAuthError(SiteSentinelError):
    pass


class AuthenticationRequired(SiteSentinelError):
    pass
