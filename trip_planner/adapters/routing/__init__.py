"""Routing adapters - Implementations of the RoutingPort."""

from .osrm_adapter import OSRMRoutingAdapter

__all__ = ["OSRMRoutingAdapter"]
