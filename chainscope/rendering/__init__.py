"""
rendering - Descriptor Text
===========================

Question this layer answers:
"What does this service look like as .proto text?"

Pure functions; no I/O, no transport.
"""

from .renderer import (
    RenderedService,
    referenced_types,
    render,
    render_message,
    render_messages,
    render_service,
)

__all__ = [
    "RenderedService",
    "referenced_types",
    "render",
    "render_message",
    "render_messages",
    "render_service",
]
