"""Resolve the element type from forwardRef's first generic argument."""

import logging

from tree_sitter import Node

from forward_ref_codemod.rewriter.models import (
    DEFAULT_ELEMENT_TYPE,
    CallSite,
    ElementType,
    TypeName,
)
from forward_ref_codemod.syntax import SourceTree, name_segments

logger = logging.getLogger(__name__)

FALLBACK_ELEMENT_TYPE = ElementType(TypeName((DEFAULT_ELEMENT_TYPE,)), is_fallback=True)


def resolve_type_name(tree: SourceTree, node: Node) -> TypeName | None:
    """Resolve a type node to its (possibly dotted) name.

    ``Foo`` → ``Foo``, ``A.B.C`` → ``A.B.C``; a generic reference
    ``Foo<Bar>`` resolves to the name of ``Foo``.

    Returns:
        The TypeName, or None for any other type shape
    """
    if node.type == "generic_type":
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return None
        return resolve_type_name(tree, name_node)

    if node.type not in ("type_identifier", "nested_type_identifier"):
        return None

    segments = name_segments(tree, node)
    if not segments:
        return None
    return TypeName(segments)


def extract_element_type(tree: SourceTree, call_site: CallSite) -> ElementType:
    """Extract the element type of a call site.

    Args:
        tree: The parsed source
        call_site: The forwardRef call

    Returns:
        The element type, or the HTMLElement fallback when the first
        generic argument is missing or not a type name
    """
    if not call_site.type_arguments:
        logger.debug(f"No generic arguments at line {call_site.line}, using fallback")
        return FALLBACK_ELEMENT_TYPE

    name = resolve_type_name(tree, call_site.type_arguments[0])
    if name is None:
        logger.debug(
            f"Unrecognized element type '{tree.text(call_site.type_arguments[0])}' "
            f"at line {call_site.line}, using fallback"
        )
        return FALLBACK_ELEMENT_TYPE

    return ElementType(name)
