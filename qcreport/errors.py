from __future__ import annotations


class LayoutError(RuntimeError):
    """Base class for failures of the document layout engine.

    These are caller/input errors, never transient faults; nothing in the
    engine retries them.
    """


class MetricsUnavailable(LayoutError):
    """A font/size combination cannot be measured."""


class LayoutOverflow(LayoutError):
    """Fixed-width columns (or fixed geometry) exceed the available width."""


class RowTooLarge(LayoutError):
    """An atomic unit is taller than the content area of an empty page."""


class InvalidSectionSpec(LayoutError):
    """A section description is structurally unusable (e.g. zero columns)."""


class ExportError(RuntimeError):
    """The exporter was handed pages it cannot serialize."""
