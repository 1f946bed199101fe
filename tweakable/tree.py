"""Declarative view tree rendered once per pass.

The tree is rebuilt and re-rendered by a :class:`~tweakable.root.TweakableRoot`
on every pass. Nodes receive the pass's :class:`RenderContext` explicitly;
:class:`Tweakable` nodes read their value from it and emit their descriptor
into it.

Outputs are whatever the content functions return (widgets, HTML strings,
plain data). The tree never inspects them.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Sequence

from .context import RenderContext
from .descriptor import EditorDescriptor
from .editors import Editor, editor_for
from .site_key import SiteKey


class View:
    """Base class for tree nodes."""

    def render(self, ctx: RenderContext) -> Any:
        raise NotImplementedError

    def tweakable(
        self,
        label: str,
        default: Any,
        content: Callable[[Any, Any], Any],
        editor: Optional[Editor] = None,
        *,
        key: Optional[SiteKey] = None,
    ) -> "Modified":
        """Wrap this view in a tweakable modifier.

        ``content(inner_output, value)`` receives this view's rendered output
        and the site's current value, and returns the modified output.

        Examples
        --------
        >>> view = Static("hi").tweakable("size", 12, lambda out, size: f"<b style='font-size:{size}px'>{out}</b>")  # doctest: +SKIP
        """
        if key is None:
            key = SiteKey.from_caller(2)
        return Modified(self, label, default, content, editor, key=key)


def render_output(node: Any, ctx: RenderContext) -> Any:
    """Render ``node`` if it is a :class:`View`, else return it unchanged."""
    if isinstance(node, View):
        return node.render(ctx)
    return node


class Static(View):
    """Leaf holding a fixed output."""

    def __init__(self, output: Any) -> None:
        self.output = output

    def render(self, ctx: RenderContext) -> Any:
        return self.output


class Tweakable(View):
    """Annotation node: one tweakable value wrapping a content builder.

    On render the node resolves its value from the broadcast table (falling
    back to ``default``), calls ``content(value)`` once, renders the result if
    it is a view, and emits exactly one descriptor for its site.

    Parameters
    ----------
    label : str
        Editor label.
    default : Any
        Value used until edited. Its type selects the default editor.
    content : callable
        ``content(value)`` returning a view or an output.
    editor : callable, optional
        ``editor(label, cell) -> widget``; looked up by ``type(default)`` when
        omitted.
    key : SiteKey, optional
        Explicit site key. Derived from the line constructing the node when
        omitted.
    stacklevel : int, default=1
        Extra frames to skip when deriving the key from a wrapper.

    Raises
    ------
    LookupError
        If ``editor`` is omitted and no editor is registered for the default's
        type.
    """

    def __init__(
        self,
        label: str,
        default: Any,
        content: Callable[[Any], Any],
        editor: Optional[Editor] = None,
        *,
        key: Optional[SiteKey] = None,
        stacklevel: int = 1,
    ) -> None:
        if key is None:
            key = SiteKey.from_caller(stacklevel + 1)
        self.key = key
        self.label = label
        self.default = default
        self.content = content
        self.editor = editor if editor is not None else editor_for(default)

    def descriptor(self) -> EditorDescriptor:
        return EditorDescriptor.create(self.default, self.label, self.editor)

    def render(self, ctx: RenderContext) -> Any:
        value = ctx.read(self.key, self.default)
        output = render_output(self.content(value), ctx)
        ctx.emit(self.key, self.descriptor())
        return output

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.label!r}, {self.default!r}, key={self.key})"


class Modified(Tweakable):
    """Tweakable modifier applied to an inner view.

    The inner view renders first, then ``content(inner_output, value)``.
    """

    def __init__(
        self,
        inner: Any,
        label: str,
        default: Any,
        content: Callable[[Any, Any], Any],
        editor: Optional[Editor] = None,
        *,
        key: Optional[SiteKey] = None,
        stacklevel: int = 1,
    ) -> None:
        if key is None:
            key = SiteKey.from_caller(stacklevel + 1)
        super().__init__(label, default, content, editor, key=key)
        self.inner = inner

    def render(self, ctx: RenderContext) -> Any:
        value = ctx.read(self.key, self.default)
        inner_output = render_output(self.inner, ctx)
        output = render_output(self.content(inner_output, value), ctx)
        ctx.emit(self.key, self.descriptor())
        return output


class Group(View):
    """Children rendered left to right, each in its own collector scope.

    Parameters
    ----------
    *children : View or Any
        Child views (non-views are passed through as outputs).
    combine : callable, optional
        ``combine(outputs)`` builds the group output from the list of child
        outputs. Defaults to returning the list.
    """

    def __init__(self, *children: Any, combine: Optional[Callable[[Sequence[Any]], Any]] = None) -> None:
        self.children = list(children)
        self.combine = combine

    def render(self, ctx: RenderContext) -> Any:
        outputs = []
        for child in self.children:
            with ctx.scope() as child_ctx:
                outputs.append(render_output(child, child_ctx))
        if self.combine is None:
            return outputs
        return self.combine(outputs)


class Component(View):
    """Function component re-executed on every pass.

    ``fn()`` runs with the pass's context active, so it can call
    :func:`~tweakable.context.tweak`. It may return a view or an output.
    """

    def __init__(self, fn: Callable[[], Any]) -> None:
        self.fn = fn

    def render(self, ctx: RenderContext) -> Any:
        with ctx.scope() as child_ctx:
            return render_output(self.fn(), child_ctx)

    def __repr__(self) -> str:
        return f"Component({getattr(self.fn, '__name__', self.fn)!r})"


def component(fn: Callable[[], Any]) -> Component:
    """Decorator form of :class:`Component`."""
    return Component(fn)
