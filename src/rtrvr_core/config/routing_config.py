# -*- coding: utf-8 -*-
"""Routing configuration for cloud / extension channel selection."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from ..contracts import RunMode
from ..tools.names import TOOL_NAMES


def _default_cloud_tool_variants() -> Mapping[str, str]:
    return MappingProxyType(
        {
            TOOL_NAMES.SCRAPE: TOOL_NAMES.CLOUD_SCRAPE,
            TOOL_NAMES.PLANNER: TOOL_NAMES.CLOUD_AGENT,
        }
    )


@dataclass(frozen=True)
class RoutingConfig:
    """Routing defaults shared by every call made through one client.

    Attributes:
        default_target: Mode used when a request carries no ``target``
        prefer_extension_by_default: Advisory default for ``prefer_extension``
        cloud_tool_variants: Extension tool name -> cloud-side tool the hub may
            resolve it to (server-side aliasing)
    """

    default_target: RunMode = RunMode.AUTO
    prefer_extension_by_default: bool = False
    cloud_tool_variants: Mapping[str, str] = field(
        default_factory=_default_cloud_tool_variants
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "default_target", RunMode(self.default_target))
        object.__setattr__(
            self, "cloud_tool_variants", MappingProxyType(dict(self.cloud_tool_variants))
        )

    def resolve_mode(self, target: Optional[RunMode]) -> RunMode:
        """Requested mode for a call: the request's target or the default."""
        if target is None:
            return self.default_target
        return RunMode(target)

    def resolve_prefer_extension(self, value: Optional[bool]) -> Optional[bool]:
        """The request's ``prefer_extension``, or True when the default asks for it."""
        if value is not None:
            return value
        return True if self.prefer_extension_by_default else None

    def cloud_variant_of(self, tool: str) -> Optional[str]:
        return self.cloud_tool_variants.get(tool)

    def resolved_to_cloud(self, requested_tool: str, resolved_tool: Optional[str]) -> bool:
        """True when the hub executed the cloud-side variant of ``requested_tool``."""
        variant = self.cloud_variant_of(requested_tool)
        return variant is not None and resolved_tool == variant
