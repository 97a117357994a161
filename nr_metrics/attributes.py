"""Attribute merging helpers for common, resource and per-point attributes"""
from typing import Any, Dict, Mapping, Optional
from logging_config import get_logger

logger = get_logger(__name__)

SERVICE_NAME = "service.name"
INSTRUMENTATION_NAME = "instrumentation.name"
INSTRUMENTATION_VERSION = "instrumentation.version"
INSTRUMENTATION_PROVIDER = "instrumentation.provider"
COLLECTOR_NAME = "collector.name"

INSTRUMENTATION_PROVIDER_VALUE = "opentelemetry"
COLLECTOR_NAME_VALUE = "newrelic-opentelemetry-exporter"

# bool is a subclass of int, so it is covered here as well
SUPPORTED_VALUE_TYPES = (str, int, float)

Attributes = Dict[str, Any]


def populate_library_info(attributes: Attributes, library_info: Optional[Any]) -> Attributes:
    """Add instrumentation library name and version to a copy of the attributes.

    Returns the same object when no library info is given. Empty or missing
    name/version values are not added.
    """
    if library_info is None:
        return attributes

    result = dict(attributes)
    name = getattr(library_info, "name", None)
    version = getattr(library_info, "version", None)
    if name:
        result[INSTRUMENTATION_NAME] = name
    if version:
        result[INSTRUMENTATION_VERSION] = version
    return result


def add_resource_attributes(attributes: Attributes, resource: Optional[Any]) -> Attributes:
    """Copy the attributes and overlay the resource attributes (resource wins).

    Returns the same object when no resource is given.
    """
    if resource is None:
        return attributes

    result = dict(attributes)
    put_in_attributes(result, getattr(resource, "attributes", None) or {})
    return result


def put_in_attributes(attributes: Attributes, source_attributes: Mapping[str, Any]) -> None:
    """Copy scalar entries of source_attributes into attributes in place.

    Values that are not str, int, float or bool (arrays, None, nested maps)
    are dropped.
    """
    for key, value in source_attributes.items():
        if isinstance(value, SUPPORTED_VALUE_TYPES):
            attributes[key] = value
        else:
            logger.debug("Dropping unsupported attribute value", key=key, value_type=type(value).__name__)


def merge_attributes(common: Attributes, specific: Mapping[str, Any]) -> Attributes:
    """Return a new attribute set: common overlaid with specific (specific wins)"""
    result = dict(common)
    put_in_attributes(result, specific)
    return result
