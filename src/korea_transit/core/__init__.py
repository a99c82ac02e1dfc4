"""Core transit lookup functionality."""

from .config import Settings, load_settings
from .exceptions import (
    ApiError,
    ApiTimeoutError,
    ConfigurationError,
    FeatureDisabledError,
    NetworkError,
    ToolExecutionError,
    TransitError,
    UpstreamError,
    ValidationError,
)
from .models import (
    BikeStation,
    BusArrival,
    BusStop,
    CombinedTransit,
    PageResult,
    ResponseFormat,
    SubwayArrival,
    SubwayStatus,
    ToolOutput,
)
from .transit import TransitService

__all__ = [
    "BikeStation",
    "BusArrival",
    "BusStop",
    "CombinedTransit",
    "PageResult",
    "ResponseFormat",
    "Settings",
    "SubwayArrival",
    "SubwayStatus",
    "ToolOutput",
    "TransitService",
    "load_settings",
    "TransitError",
    "ValidationError",
    "ConfigurationError",
    "NetworkError",
    "ApiTimeoutError",
    "ApiError",
    "UpstreamError",
    "FeatureDisabledError",
    "ToolExecutionError",
]
