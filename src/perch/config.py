"""Application configuration.

AppConfig is a frozen dataclass — built once per server configuration,
passed into the dispatch table compiler and carried by every
RequestContext. Never mutated.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(context_path=("api",), default_middleware=(RequestLogging(),))
    """

    debug: bool = False

    # Routing
    context_path: str | tuple[str, ...] = ()  # Prepended to every namespace's context
    default_middleware: Callable[..., Any] | tuple[Callable[..., Any], ...] = ()  # Used when neither function nor namespace names any
    allow_overlap: bool = False  # Permit overlapping routes (last declaration wins)

    # Argument resolution
    resolvers: tuple[Callable[..., Any], ...] = ()  # Global injected resolvers, tried after request data
    server_uri: str | None = None  # Root URI of the server for resource_uri; computed from the request when unset

    # Limits
    max_content_length: int = 16 * 1024 * 1024  # 16 MB
