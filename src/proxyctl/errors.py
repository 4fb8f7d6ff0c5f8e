"""Exception hierarchy shared by the codec, resolver, stores and CLI."""

from __future__ import annotations


class ProxyctlError(Exception):
    """Base class for every error raised by proxyctl."""


class ValidationError(ProxyctlError):
    """A policy failed a precondition before reaching the store."""


class NotFoundError(ProxyctlError):
    """An endpoint or container could not be found."""


class SchemaError(ProxyctlError):
    """A payload could not be parsed into the expected schema."""


class ExternalToolError(ProxyctlError):
    """The diagnostic tool failed to start or exited abnormally."""


class StoreError(ProxyctlError):
    """The endpoint store rejected or failed a request."""
