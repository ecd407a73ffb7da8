"""
In-memory document model for the portfolio page.

Components mutate a Page the way browser scripts mutate the DOM: text slots,
containers, classes, custom properties and attributes. The finished page can
be serialised to static HTML with ``render_html()``.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from html import escape

_VOID_TAGS = {"input", "img", "br", "hr", "meta", "link"}


@dataclass(eq=False)
class Element:
    """A node of the page tree."""

    tag: str = "div"
    id: str | None = None
    classes: set[str] = field(default_factory=set)
    attrs: dict[str, str] = field(default_factory=dict)
    style: dict[str, str] = field(default_factory=dict)
    text: str = ""
    html: str = ""  # trusted, pre-rendered inner markup
    children: list["Element"] = field(default_factory=list)
    parent: "Element | None" = field(default=None, repr=False)

    def has_class(self, name: str) -> bool:
        return name in self.classes

    def add_class(self, *names: str) -> None:
        self.classes.update(names)

    def remove_class(self, *names: str) -> None:
        self.classes.difference_update(names)

    def toggle_class(self, name: str, force: bool | None = None) -> bool:
        """Toggle a class; with ``force`` set, add (True) or remove (False) it."""
        present = name not in self.classes if force is None else force
        if present:
            self.classes.add(name)
        else:
            self.classes.discard(name)
        return present

    def append(self, child: "Element") -> "Element":
        if child.parent is not None:
            child.remove()
        child.parent = self
        self.children.append(child)
        return child

    def remove(self) -> None:
        """Detach this element from its parent."""
        if self.parent is not None:
            self.parent.children.remove(self)
            self.parent = None

    def clear(self) -> None:
        """Drop all content: children, text and inner markup."""
        for child in self.children:
            child.parent = None
        self.children = []
        self.text = ""
        self.html = ""

    def iter(self) -> Iterator["Element"]:
        """Depth-first iteration over this element and its descendants."""
        yield self
        for child in self.children:
            yield from child.iter()

    def matches(
        self,
        class_name: str | None = None,
        tag: str | None = None,
        attr: str | None = None,
    ) -> bool:
        if class_name is not None and class_name not in self.classes:
            return False
        if tag is not None and self.tag != tag:
            return False
        if attr is not None and attr not in self.attrs:
            return False
        return True

    def to_html(self) -> str:
        parts = [self.tag]
        if self.id:
            parts.append(f'id="{escape(self.id)}"')
        if self.classes:
            parts.append(f'class="{escape(" ".join(sorted(self.classes)))}"')
        for key, value in self.attrs.items():
            parts.append(f'{escape(key)}="{escape(value)}"')
        if self.style:
            css = "; ".join(f"{key}: {value}" for key, value in self.style.items())
            parts.append(f'style="{escape(css)}"')

        opening = f"<{' '.join(parts)}>"
        if self.tag in _VOID_TAGS:
            return opening

        inner = escape(self.text) + self.html + "".join(child.to_html() for child in self.children)
        return f"{opening}{inner}</{self.tag}>"


class Page:
    """
    The document the components render into.

    ``root`` stands for the document element (custom properties and
    attributes such as ``data-theme``), ``body`` for the body element
    (marker classes such as ``loaded`` or ``offline``).
    """

    def __init__(self, title: str = "Portfolio") -> None:
        self.title = title
        self.root = Element("html", attrs={"lang": "en"})
        self.body = self.root.append(Element("body"))
        self.focused: Element | None = None
        self.scroll_target: Element | None = None

    @classmethod
    def skeleton(cls, title: str = "Portfolio", owner: str = "") -> "Page":
        """Build the standard page layout with every slot the components use."""
        page = cls(title)

        header = page.body.append(Element("header", classes={"header-section"}))
        container = header.append(Element(classes={"container"}))
        container.append(Element("h1", classes={"hero"}, text=owner or title))
        container.append(Element("p", classes={"github-bio"}))

        nav = container.append(Element("nav", classes={"nav"}))
        nav.append(Element("a", attrs={"href": "#about"}, text="About"))
        nav.append(Element("a", attrs={"href": "#projects"}, text="Projects"))

        stats = container.append(Element(classes={"stats"}))
        for slot_id, label in (
            ("repos-count", "Repositories"),
            ("followers-count", "Followers"),
            ("following-count", "Following"),
        ):
            card = stats.append(Element(classes={"stat-card"}))
            card.append(Element("span", id=slot_id, classes={"stat-number"}, text="0"))
            card.append(Element("span", classes={"stat-label"}, text=label))

        main = page.body.append(Element("main"))
        main.append(Element("section", id="about", classes={"about-section"}))
        projects = main.append(Element("section", id="projects", classes={"projects-section"}))
        projects.append(
            Element(
                "input",
                id="search-input",
                attrs={"type": "search", "placeholder": "Search projects"},
            )
        )
        projects.append(Element(id="projects-grid", classes={"projects-grid"}))
        return page

    def get(self, element_id: str) -> Element | None:
        for element in self.root.iter():
            if element.id == element_id:
                return element
        return None

    def query(
        self,
        class_name: str | None = None,
        tag: str | None = None,
        attr: str | None = None,
    ) -> list[Element]:
        return [
            element
            for element in self.root.iter()
            if element.matches(class_name=class_name, tag=tag, attr=attr)
        ]

    def set_text(self, element_id: str, text: str) -> bool:
        element = self.get(element_id)
        if element is None:
            return False
        element.text = text
        return True

    def text_of(self, element_id: str) -> str | None:
        element = self.get(element_id)
        return None if element is None else element.text

    def set_property(self, name: str, value: str) -> None:
        """Set a custom property (``--name``) on the document element."""
        self.root.style[name] = value

    def get_property(self, name: str) -> str | None:
        return self.root.style.get(name)

    def focus(self, element_id: str) -> bool:
        element = self.get(element_id)
        if element is None:
            return False
        self.focused = element
        return True

    def blur(self) -> None:
        self.focused = None

    def render_html(self) -> str:
        """Serialise the whole document, doctype included."""
        head = (
            '<head><meta charset="utf-8">'
            '<meta name="viewport" content="width=device-width, initial-scale=1.0">'
            f"<title>{escape(self.title)}</title></head>"
        )
        document = self.root.to_html()
        # the head is not part of the tree; splice it in after <html ...>
        split_at = document.index(">") + 1
        return f"<!DOCTYPE html>\n{document[:split_at]}{head}{document[split_at:]}"
