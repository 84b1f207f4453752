"""
Broker — access to the widget data endpoint.

Modules:
  api_config  : YAML loader → APIEndpoint dataclasses.
  http_client : Location-scoped HTTP request, strict JSON decoding.
  widget_api  : WidgetAPIService — location → list[WidgetDescriptor].
"""

from geo_dashboard.services.broker.api_config import APIConfigLoader, APIEndpoint, api_config_loader
from geo_dashboard.services.broker.http_client import FetchResult, HTTPClient, http_client
from geo_dashboard.services.broker.widget_api import (
    WidgetAPIService,
    WidgetFetchError,
    parse_widget_list,
)

__all__ = [
    "APIConfigLoader",
    "APIEndpoint",
    "FetchResult",
    "HTTPClient",
    "WidgetAPIService",
    "WidgetFetchError",
    "api_config_loader",
    "http_client",
    "parse_widget_list",
]
