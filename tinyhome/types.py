"""Shared type aliases for the tinyhome package."""

from __future__ import annotations

from typing import Any, Callable, Mapping

Payload = Mapping[str, Any]
PayloadDict = dict[str, Any]
AttributeMap = dict[str, str]
PublishResult = dict[str, Any]
HandleResult = dict[str, Any]

PublishFn = Callable[..., str]
DeliverFn = Callable[..., None]
