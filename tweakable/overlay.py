"""ipywidgets overlay: rendered content above a panel of editors."""

from __future__ import annotations

import html
import logging
from typing import Any, Dict, Optional, Tuple

import ipywidgets as widgets

from .cell import CellView
from .config import DEFAULT_CONFIG, TweakableConfig
from .descriptor import EditorDescriptor
from .root import TweakableRoot, _same_editor
from .site_key import SiteKey

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


def as_widget(output: Any) -> widgets.Widget:
    """Turn a pass output into something a Box can hold.

    Widgets are used as-is, sequences become a ``VBox``, strings are treated as
    HTML and anything else is shown as its escaped ``repr``.
    """
    if isinstance(output, widgets.Widget):
        return output
    if isinstance(output, (list, tuple)):
        return widgets.VBox([as_widget(item) for item in output])
    if isinstance(output, str):
        return widgets.HTML(value=output)
    return widgets.HTML(value=f"<pre>{html.escape(repr(output))}</pre>")


class TweakableOverlay(widgets.VBox):
    """
    Content area with one editor per tweakable site underneath.

    The overlay owns a :class:`TweakableRoot`. After every settled pass it
    shows the new output and synchronizes the editor panel: rows are built
    lazily the first time a site appears, kept while the site stays mounted
    (so a slider being dragged is not replaced) and removed when it unmounts.
    Rows are ordered by site key.

    Parameters
    ----------
    content : View or callable
        Tree to render.
    config : TweakableConfig, optional
        Display options and collision policy.
    root : TweakableRoot, optional
        Existing root to host instead of creating one from ``content``.
    **kwargs :
        Forwarded to ``ipywidgets.VBox``.

    Examples
    --------
    >>> from tweakable import Tweakable  # doctest: +SKIP
    >>> overlay = TweakableOverlay(Tweakable("padding", 10, lambda p: f"<div style='padding:{p}px'>Hi</div>"))  # doctest: +SKIP
    >>> overlay  # doctest: +SKIP
    """

    def __init__(
        self,
        content: Any = None,
        *,
        config: Optional[TweakableConfig] = None,
        root: Optional[TweakableRoot] = None,
        **kwargs: Any,
    ) -> None:
        if root is None:
            if content is None:
                raise TypeError("TweakableOverlay needs content or a root.")
            root = TweakableRoot(content, config or DEFAULT_CONFIG)
        self.root = root
        self._config = root.config
        self._rows: Dict[SiteKey, Tuple[EditorDescriptor, widgets.Widget, CellView]] = {}

        self.content_box = widgets.Box(layout=widgets.Layout(width="100%", flex="1 1 auto"))
        self.editor_list = widgets.VBox(layout=widgets.Layout(align_items="stretch"))
        self.panel = widgets.Box(
            [self.editor_list],
            layout=widgets.Layout(
                max_height=self._config.panel_max_height,
                overflow="auto",
                border_top="1px solid #ddd",
                padding="4px",
            ),
        )
        super().__init__([self.content_box, self.panel], **kwargs)

        self.root.on_settle(self._sync)
        self.root.render(reason="initial")

    @property
    def rows(self) -> Dict[SiteKey, widgets.Widget]:
        """Current editor rows keyed by site."""
        return {key: row for key, (_, row, _) in self._rows.items()}

    def _drop_row(self, key: SiteKey) -> None:
        _, _, view = self._rows.pop(key)
        view.close()

    def _sync(self, root: TweakableRoot) -> None:
        self.content_box.children = (as_widget(root.output),)

        entries = root.editor_entries()
        live = {key for key, _ in entries}
        for key in [key for key in self._rows if key not in live]:
            self._drop_row(key)

        ordered = []
        for key, descriptor in entries:
            cached = self._rows.get(key)
            if cached is None or not _same_editor(cached[0], descriptor):
                built = self._build_row(key, descriptor)
                if built is None:
                    continue
                if cached is not None:
                    self._drop_row(key)
                self._rows[key] = (descriptor, *built)
            ordered.append(self._rows[key][1])
        self.editor_list.children = tuple(ordered)
        logger.debug("overlay synced: %d editors", len(ordered))

    def _build_row(self, key: SiteKey, descriptor: EditorDescriptor) -> Optional[Tuple[widgets.Widget, CellView]]:
        view = self.root.open_cell(key)
        if view is None:
            return None
        children = [descriptor.render(descriptor.label, view)]
        if self._config.show_captions:
            children.append(
                widgets.HTML(
                    value=f"<span style='font-size:smaller;color:#888'>{html.escape(key.caption)}</span>"
                )
            )
        return widgets.VBox(children, layout=widgets.Layout(align_items="flex-start")), view
