"""Upstream forwarding over httpx."""

from perch.upstream.client import UpstreamClient, build_target_url

__all__ = ["UpstreamClient", "build_target_url"]
