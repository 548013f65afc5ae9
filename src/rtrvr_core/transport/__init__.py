"""Transport layer: fetch primitive, retry policy and JSON client."""

from .fetch import AiohttpFetcher, AiohttpResponse, Fetcher, FetchResponse
from .http_client import HttpClient, enrich_metadata, extract_error_message
from .retry import backoff_delay_ms, should_retry

__all__ = [
    "Fetcher",
    "FetchResponse",
    "AiohttpFetcher",
    "AiohttpResponse",
    "HttpClient",
    "enrich_metadata",
    "extract_error_message",
    "should_retry",
    "backoff_delay_ms",
]
