"""Exceptions raised by the capture, config and CLI layers.

The shape extractor and diff analyzer are total and raise nothing.
"""


class InspectorError(Exception):
    """Base class for api-inspector errors shown to the user."""


class CaptureFormatError(InspectorError):
    """A capture source could not be recognised or decoded."""


class RemoteSourceError(InspectorError):
    """A running inspector could not be queried for captured requests."""


class ConfigError(InspectorError):
    """Configuration file or environment values are invalid."""
