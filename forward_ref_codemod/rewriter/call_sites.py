"""Locate ``X.forwardRef(...)`` call expressions."""

import logging

from forward_ref_codemod.rewriter.models import CallSite
from forward_ref_codemod.syntax import SourceTree, named_children, walk

logger = logging.getLogger(__name__)

WRAPPER_METHOD = "forwardRef"

FUNCTION_TYPES = {"arrow_function", "function_expression", "function"}


def find_call_sites(tree: SourceTree) -> list[CallSite]:
    """Find every call whose callee is a property access ending in forwardRef.

    The qualifying object is not checked, so ``React.forwardRef`` and an
    aliased ``R.forwardRef`` are both found.

    Args:
        tree: The parsed source

    Returns:
        Call sites in source order
    """
    call_sites = []

    for node in walk(tree.root):
        if node.type != "call_expression":
            continue

        callee = node.child_by_field_name("function")
        if callee is None or callee.type != "member_expression":
            continue
        prop = callee.child_by_field_name("property")
        if prop is None or tree.text(prop) != WRAPPER_METHOD:
            continue

        obj = callee.child_by_field_name("object")
        type_args_node = node.child_by_field_name("type_arguments")
        type_arguments = named_children(type_args_node) if type_args_node else []

        call_site = CallSite(
            node=node,
            namespace=tree.text(obj) if obj is not None else "",
            type_arguments=type_arguments,
            function=_inline_function(node),
        )
        call_sites.append(call_site)
        logger.debug(f"Found {WRAPPER_METHOD} call at line {call_site.line}")

    logger.info(f"Found {len(call_sites)} {WRAPPER_METHOD} call sites")
    return call_sites


def _inline_function(call):
    """Return the sole argument if it is an inline function."""
    args_node = call.child_by_field_name("arguments")
    if args_node is None or args_node.type != "arguments":
        return None
    args = named_children(args_node)
    if len(args) == 1 and args[0].type in FUNCTION_TYPES:
        return args[0]
    return None
