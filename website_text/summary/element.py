"""Tree nodes backing the site-wide and per-document summaries.

A parent owns its children in an ordered list; the ``parent`` attribute of a
child is a back-reference used only for walking upward when visibility or
selection is propagated. Payload conversion never follows back-references,
and :meth:`SummaryNode.set_sub_elements` rebuilds them after a bulk load.

Example
-------
>>> from website_text.summary import Element
>>> group = Element("Guide")
>>> _ = group.add_sub_element(Element("Zebra")).add_sub_element(Element("Apple"))
>>> [child.title for child in group]
['Apple', 'Zebra']
"""

from __future__ import annotations

import collections.abc as cabc
import typing as typ


def _sort_key(element: Element) -> tuple[int, int, str]:
    """Return the sibling ordering key: explicit order first, then title."""
    title = element.title.casefold()
    if element.order is None:
        return (1, 0, title)
    return (0, element.order, title)


class SummaryNode:
    """Ordered container of :class:`Element` children."""

    def __init__(self) -> None:
        self._parent: SummaryNode | None = None
        self._children: list[Element] = []

    def __iter__(self) -> cabc.Iterator[Element]:
        return iter(list(self._children))

    def __len__(self) -> int:
        return len(self._children)

    @property
    def parent(self) -> SummaryNode | None:
        """Return the node owning this one, or ``None`` for a root."""
        return self._parent

    def get_sub_elements(self) -> list[Element]:
        """Return a copy of the ordered direct children."""
        return list(self._children)

    def set_sub_elements(self, elements: cabc.Iterable[Element]) -> SummaryNode:
        """Replace the children, re-parenting and re-ordering them."""
        self._children = [item for item in elements if isinstance(item, Element)]
        for element in self._children:
            element._parent = self
        self._order_sub_elements()
        return self

    def add_sub_element(self, element: Element) -> SummaryNode:
        """Attach ``element`` as a child and re-sort the siblings.

        Raises
        ------
        ValueError
            If ``element`` is this node or one of its ancestors.
        """
        node: SummaryNode | None = self
        while node is not None:
            if node is element:
                msg = f"Element {element.title!r} cannot become its own descendant"
                raise ValueError(msg)
            node = node.parent
        if element._parent is not None and element._parent is not self:
            element._parent._children.remove(element)
        if element not in self._children:
            self._children.append(element)
        element._parent = self
        self._order_sub_elements()
        return self

    def get_element_by_title(self, title: str) -> Element | None:
        """Return the first direct child whose title matches exactly."""
        for element in self._children:
            if element.title == title:
                return element
        return None

    def count_visible(self) -> int:
        """Count direct children flagged visible."""
        return sum(1 for element in self._children if element.visible)

    def walk(self) -> cabc.Iterator[Element]:
        """Yield every descendant depth-first in sibling order."""
        for element in self._children:
            yield element
            yield from element.walk()

    def _order_sub_elements(self) -> None:
        self._children.sort(key=_sort_key)

    def _children_payload(self) -> list[dict[str, typ.Any]]:
        return [element.to_payload() for element in self._children]


class Element(SummaryNode):
    """One navigation entry of a summary tree.

    Attributes
    ----------
    title : str
        Label shown in navigation, unique among siblings.
    url : str | None
        URL path of the page; grouping nodes may have none.
    id : str | None
        Heading anchor within ``url`` for in-page entries.
    order : int | None
        Explicit sibling sort key; unordered entries sort after ordered ones.
    visible : bool
        Whether navigation should display the entry.
    selected : bool
        Whether the entry belongs to the page currently being served.
    """

    def __init__(
        self,
        title: str,
        *,
        url: str | None = None,
        id: str | None = None,  # noqa: A002
        order: int | None = None,
        visible: bool = False,
    ) -> None:
        super().__init__()
        self._title = self._clean_title(title)
        self.url = url
        self.id = id
        self._order = order
        self.visible = visible
        self.selected = False

    def __repr__(self) -> str:
        return (
            f"Element(title={self._title!r}, url={self.url!r}, id={self.id!r}, "
            f"order={self._order!r})"
        )

    @property
    def title(self) -> str:
        return self._title

    @title.setter
    def title(self, value: str) -> None:
        self._title = self._clean_title(value)
        self._reorder_parent()

    @property
    def order(self) -> int | None:
        return self._order

    @order.setter
    def order(self, value: int | None) -> None:
        self._order = value
        self._reorder_parent()

    def set_visible(self, visible: bool, *, recursive: bool = False) -> Element:  # noqa: FBT001
        """Flag the entry visible, optionally applying the flag to every ancestor."""
        self.visible = visible
        if recursive and isinstance(self._parent, Element):
            self._parent.set_visible(visible, recursive=True)
        return self

    def set_selected(self, selected: bool, *, recursive: bool = False) -> Element:  # noqa: FBT001
        """Flag the entry selected, optionally applying the flag to every ancestor."""
        self.selected = selected
        if recursive and isinstance(self._parent, Element):
            self._parent.set_selected(selected, recursive=True)
        return self

    def ancestors(self) -> list[Element]:
        """Return the chain of parent elements, nearest first."""
        chain: list[Element] = []
        node = self._parent
        while isinstance(node, Element):
            chain.append(node)
            node = node.parent
        return chain

    def to_payload(self) -> dict[str, typ.Any]:
        """Return a JSON-ready mapping of this entry and its descendants.

        Selection is request state and is not persisted.
        """
        return {
            "title": self._title,
            "url": self.url,
            "id": self.id,
            "order": self._order,
            "visible": self.visible,
            "children": self._children_payload(),
        }

    @classmethod
    def from_payload(cls, payload: cabc.Mapping[str, typ.Any]) -> Element:
        """Rebuild an entry and its descendants from :meth:`to_payload` output."""
        element = cls(
            payload["title"],
            url=payload.get("url"),
            id=payload.get("id"),
            order=payload.get("order"),
            visible=bool(payload.get("visible", False)),
        )
        children = [cls.from_payload(item) for item in payload.get("children") or []]
        element.set_sub_elements(children)
        return element

    def _reorder_parent(self) -> None:
        if self._parent is not None:
            self._parent._order_sub_elements()

    @staticmethod
    def _clean_title(value: str) -> str:
        title = str(value).strip() if value is not None else ""
        if not title:
            msg = "Summary element title cannot be empty"
            raise ValueError(msg)
        return title


__all__ = ["Element", "SummaryNode"]
