"""Data models for the forwardRef rewrite."""

from dataclasses import dataclass, field

from tree_sitter import Node

DEFAULT_ELEMENT_TYPE = "HTMLElement"
REF_PROPS_NAME = "RefProps"
REF_FIELD_NAME = "ref"


@dataclass(frozen=True)
class TypeName:
    """A simple or dotted type name, e.g. ``React.HTMLAttributes``."""

    segments: tuple[str, ...]

    @property
    def text(self) -> str:
        return ".".join(self.segments)

    @property
    def last(self) -> str:
        return self.segments[-1]

    @property
    def is_qualified(self) -> bool:
        return len(self.segments) > 1


@dataclass(frozen=True)
class ElementType:
    """The element type a forwarded ref points at."""

    name: TypeName
    is_fallback: bool = False

    @property
    def text(self) -> str:
        return self.name.text


@dataclass
class CallSite:
    """A located ``X.forwardRef<...>(fn)`` call."""

    node: Node
    namespace: str  # qualifying object of the callee, e.g. "React"
    type_arguments: list[Node]
    function: Node | None  # the inline function argument, if there is one

    @property
    def line(self) -> int:
        return self.node.start_point[0] + 1


# Props type shapes


@dataclass(frozen=True)
class Absent:
    """No usable props type; the parameter gets no annotation."""

    reason: str = "missing"


@dataclass(frozen=True)
class Reference:
    """A single type reference such as ``Props`` or ``React.ComponentProps<"a">``."""

    name: str


@dataclass(frozen=True)
class AttributesMember:
    """A qualified ``*Attributes<Element>`` intersection member."""

    name: TypeName
    element: TypeName

    def render(self) -> str:
        return f"{self.name.text}<{self.element.text}>"


@dataclass(frozen=True)
class NamedMember:
    """Any other type reference member, kept with its own type arguments."""

    name: TypeName
    type_arguments: str = ""

    def render(self) -> str:
        return f"{self.name.text}{self.type_arguments}"


@dataclass(frozen=True)
class OpaqueMember:
    """A member that is not a type reference, kept as written."""

    text: str

    def render(self) -> str:
        return self.text


IntersectionMember = AttributesMember | NamedMember | OpaqueMember


@dataclass(frozen=True)
class Intersection:
    """An intersection of member types."""

    members: tuple[IntersectionMember, ...]


PropsTypeShape = Absent | Reference | Intersection


# Parameter bindings


@dataclass(frozen=True)
class Binding:
    """One entry of an object pattern, e.g. ``a``, ``a: b`` or ``a = 1``."""

    key: str
    text: str


@dataclass(frozen=True)
class RestBinding:
    """The ``...rest`` entry of an object pattern."""

    name: str

    @property
    def text(self) -> str:
        return f"...{self.name}"


@dataclass
class DestructuredParameter:
    """An object pattern parameter with the rest binding kept last."""

    bindings: list[Binding] = field(default_factory=list)
    rest: RestBinding | None = None

    def render(self, annotation: str | None = None) -> str:
        """Render as ``{ a, b, ...rest }`` with an optional type annotation."""
        entries = [binding.text for binding in self.bindings]
        if self.rest is not None:
            entries.append(self.rest.text)
        pattern = "{ " + ", ".join(entries) + " }" if entries else "{}"
        if annotation:
            return f"{pattern}: {annotation}"
        return pattern


@dataclass(frozen=True)
class RefField:
    """The synthesized ``ref`` field shared by every call site in a file."""

    namespace: str
    element: ElementType
    interface_name: str = REF_PROPS_NAME

    @property
    def type_text(self) -> str:
        prefix = f"{self.namespace}." if self.namespace else ""
        return f"{prefix}RefObject<{self.element.text}>"

    def render_declaration(self) -> str:
        return (
            f"interface {self.interface_name} {{\n"
            f"  {REF_FIELD_NAME}: {self.type_text};\n"
            f"}}"
        )
