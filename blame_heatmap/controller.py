"""
Heatmap controller: per-document enable state and redraw orchestration.

The controller owns the two pieces of mutable state: the set of enabled
documents and the current style list.  The host (an editor, or the
terminal renderer in ``terminal.py``) calls into it from its command and
event callbacks; everything runs on that one callback thread.

Redraw order is always: clear every heat style from the view, then, if
the document is enabled, blame + bucket + apply.  A configuration change
clears every visible view before the style list is replaced.

No external dependencies, stdlib only.
"""

from __future__ import annotations

import os
import sys
from typing import Any, Protocol, Sequence

from .blame import AttributionProvider, extract_timestamps
from .buckets import bucket_timestamps, lines_to_ranges
from .config import ConfigurationError, resolve_config
from .styles import HeatStyle, build_styles

LineRange = tuple[int, int]


# ===================================================================
# Host interfaces
# ===================================================================

class HeatDocument(Protocol):
    path: str
    line_count: int


class HeatView(Protocol):
    document: HeatDocument

    def set_decorations(self, style: HeatStyle, ranges: Sequence[LineRange]) -> None:
        ...


class HeatmapHost(Protocol):
    def active_view(self) -> HeatView | None:
        ...

    def visible_views(self) -> Sequence[HeatView]:
        ...

    def show_error(self, message: str) -> None:
        ...


def document_key(document: HeatDocument) -> str:
    return os.path.normcase(os.path.abspath(document.path))


# ===================================================================
# Controller
# ===================================================================

class HeatmapController:
    """Owns heat styles and enabled documents for one host session."""

    def __init__(
        self,
        host: HeatmapHost,
        settings: dict[str, Any] | None = None,
        *,
        provider: AttributionProvider | None = None,
        debug: bool = False,
    ):
        self.host = host
        self.provider = provider
        self.debug = debug or bool(os.environ.get("BLAME_HEATMAP_DEBUG"))
        self.styles: list[HeatStyle] = []
        self.enabled: set[str] = set()
        self._rebuild_styles(settings)

    # ---------------------------------------------------------------
    # Commands (operate on the active view)
    # ---------------------------------------------------------------

    def enable(self) -> None:
        view = self.host.active_view()
        if view is not None:
            self._set_enabled(view, True)

    def disable(self) -> None:
        view = self.host.active_view()
        if view is not None:
            self._set_enabled(view, False)

    def toggle(self) -> None:
        view = self.host.active_view()
        if view is not None:
            self._set_enabled(view, not self.is_enabled(view.document))

    def is_enabled(self, document: HeatDocument) -> bool:
        return document_key(document) in self.enabled

    # ---------------------------------------------------------------
    # Host events
    # ---------------------------------------------------------------

    def on_visible_views_changed(self) -> None:
        for view in self.host.visible_views():
            self.refresh(view)

    def on_configuration_changed(self, settings: dict[str, Any] | None = None) -> None:
        self._rebuild_styles(settings)
        for view in self.host.visible_views():
            self.refresh(view)

    def dispose(self) -> None:
        for view in self.host.visible_views():
            self.clear(view)
        self.styles = []
        self.enabled.clear()

    # ---------------------------------------------------------------
    # Drawing
    # ---------------------------------------------------------------

    def clear(self, view: HeatView) -> None:
        for style in self.styles:
            view.set_decorations(style, [])

    def refresh(self, view: HeatView) -> None:
        """Clear, then redraw if the view's document is enabled."""
        self.clear(view)
        if not self.styles or not self.is_enabled(view.document):
            return

        buckets = self.compute_buckets(view.document)
        if buckets is None:
            return
        for style, lines in zip(self.styles, buckets):
            view.set_decorations(style, lines_to_ranges(lines))

    def compute_buckets(self, document: HeatDocument) -> list[list[int]] | None:
        """Blame + bucket a document; None when there is nothing to draw."""
        timestamps = extract_timestamps(document.path, document.line_count, self.provider)
        if not timestamps:
            self._trace(f"no blame data for {document.path}")
            return None
        buckets = bucket_timestamps(timestamps, len(self.styles))
        if buckets is None:
            self._trace(f"all known lines of {document.path} have the same age")
        return buckets

    def _set_enabled(self, view: HeatView, enabled: bool) -> None:
        key = document_key(view.document)
        if enabled:
            self.enabled.add(key)
        else:
            self.enabled.discard(key)
        self._refresh_document(view)

    def _refresh_document(self, active: HeatView) -> None:
        """Redraw every visible view showing the active view's document."""
        key = document_key(active.document)
        views = [v for v in self.host.visible_views() if document_key(v.document) == key]
        if not any(v is active for v in views):
            views.append(active)
        for view in views:
            self.refresh(view)

    def _rebuild_styles(self, settings: dict[str, Any] | None) -> None:
        for view in self.host.visible_views():
            self.clear(view)
        self.styles = []
        try:
            config = resolve_config(settings)
        except ConfigurationError as exc:
            self.host.show_error(f"Heatmap: {exc}")
            return
        self.styles = build_styles(config)

    def _trace(self, message: str) -> None:
        if self.debug:
            print(f"blame-heatmap: {message}", file=sys.stderr)
