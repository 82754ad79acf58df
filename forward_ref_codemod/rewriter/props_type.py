"""Classify forwardRef's props type and build the combined annotation."""

import logging

from tree_sitter import Node

from forward_ref_codemod.rewriter.element_type import resolve_type_name
from forward_ref_codemod.rewriter.models import (
    Absent,
    AttributesMember,
    Intersection,
    IntersectionMember,
    NamedMember,
    OpaqueMember,
    PropsTypeShape,
    Reference,
)
from forward_ref_codemod.syntax import SourceTree, named_children

logger = logging.getLogger(__name__)

REFERENCE_TYPES = {"type_identifier", "nested_type_identifier", "generic_type"}

# React.HTMLAttributes, React.InputHTMLAttributes, React.SVGAttributes, ...
ATTRIBUTES_SUFFIX = "Attributes"


def resolve_props_type(tree: SourceTree, node: Node | None) -> PropsTypeShape:
    """Classify a props type node.

    Args:
        tree: The parsed source
        node: The second generic argument (or a parameter's annotation),
            None when there is none

    Returns:
        Absent, Reference or Intersection
    """
    if node is None:
        return Absent("missing")

    if node.type == "type_annotation":
        inner = named_children(node)
        if not inner:
            return Absent("empty annotation")
        node = inner[0]

    if node.type in REFERENCE_TYPES:
        return Reference(tree.text(node))

    if node.type == "intersection_type":
        members = tuple(
            _classify_member(tree, member) for member in _flatten_intersection(node)
        )
        logger.debug(f"Intersection with {len(members)} members: {members}")
        return Intersection(members)

    logger.info(f"Unsupported props type '{tree.text(node)}', skipping annotation")
    return Absent(f"unsupported {node.type}")


def _flatten_intersection(node: Node) -> list[Node]:
    """Members of a (left-nested) intersection in source order."""
    members = []
    for child in named_children(node):
        if child.type == "intersection_type":
            members.extend(_flatten_intersection(child))
        else:
            members.append(child)
    return members


def _classify_member(tree: SourceTree, node: Node) -> IntersectionMember:
    if node.type == "generic_type":
        name_node = node.child_by_field_name("name")
        args_node = node.child_by_field_name("type_arguments")
        name = resolve_type_name(tree, name_node) if name_node is not None else None
        if name is None or args_node is None:
            return OpaqueMember(tree.text(node))

        args = named_children(args_node)
        if name.is_qualified and name.last.endswith(ATTRIBUTES_SUFFIX) and len(args) == 1:
            element = resolve_type_name(tree, args[0])
            if element is not None:
                return AttributesMember(name=name, element=element)

        return NamedMember(name=name, type_arguments=tree.text(args_node))

    if node.type in ("type_identifier", "nested_type_identifier"):
        name = resolve_type_name(tree, node)
        if name is not None:
            return NamedMember(name=name)

    return OpaqueMember(tree.text(node))


def combined_annotation(shape: PropsTypeShape, interface_name: str) -> str | None:
    """Build the parameter annotation that adds the ref interface.

    Args:
        shape: The classified props type
        interface_name: Name of the synthesized ref interface

    Returns:
        ``Props & RefProps`` style text, or None for Absent
    """
    if isinstance(shape, Absent):
        return None

    if isinstance(shape, Reference):
        rendered = [shape.name]
    elif isinstance(shape, Intersection):
        rendered = [member.render() for member in shape.members]
    else:
        raise TypeError(f"Unhandled props type shape: {shape!r}")

    members: list[str] = []
    for text in rendered:
        if text == interface_name or text in members:
            continue
        members.append(text)
    members.append(interface_name)
    return " & ".join(members)
