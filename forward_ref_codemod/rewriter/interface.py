"""Synthesize and place the single ``RefProps`` interface of a file."""

import logging

from tree_sitter import Node

from forward_ref_codemod.rewriter.models import (
    REF_FIELD_NAME,
    REF_PROPS_NAME,
    RefField,
)
from forward_ref_codemod.syntax import SourceTree, TextEdit, named_children, walk

logger = logging.getLogger(__name__)

TYPE_DECLARATION_TYPES = {"interface_declaration", "type_alias_declaration"}

NAMED_DECLARATION_TYPES = TYPE_DECLARATION_TYPES | {
    "class_declaration",
    "abstract_class_declaration",
    "enum_declaration",
}


def _top_level_statements(tree: SourceTree) -> list[Node]:
    return list(tree.root.named_children)


def _declaration_of(statement: Node) -> Node:
    """Unwrap ``export interface X`` to the interface itself."""
    if statement.type == "export_statement":
        declaration = statement.child_by_field_name("declaration")
        if declaration is not None:
            return declaration
    return statement


def _is_import_like(statement: Node) -> bool:
    if statement.type == "import_statement":
        return True
    # Directives such as "use client"
    if statement.type == "expression_statement":
        children = named_children(statement)
        return len(children) == 1 and children[0].type == "string"
    return False


def declared_type_names(tree: SourceTree) -> dict[str, Node]:
    """Top-level declared or imported names that live in the type space."""
    names: dict[str, Node] = {}
    for statement in _top_level_statements(tree):
        declaration = _declaration_of(statement)
        if declaration.type in NAMED_DECLARATION_TYPES:
            name_node = declaration.child_by_field_name("name")
            if name_node is not None:
                names.setdefault(tree.text(name_node), declaration)
        elif statement.type == "import_statement":
            for node in walk(statement):
                if node.type == "import_specifier":
                    local = node.child_by_field_name("alias")
                    if local is None:
                        local = node.child_by_field_name("name")
                    if local is not None:
                        names.setdefault(tree.text(local), node)
    return names


def _is_ref_interface(tree: SourceTree, declaration: Node) -> bool:
    """True for ``interface X { ref: ... }`` with no other members."""
    if declaration.type != "interface_declaration":
        return False
    body = declaration.child_by_field_name("body")
    if body is None:
        return False
    members = named_children(body)
    if len(members) != 1 or members[0].type != "property_signature":
        return False
    name_node = members[0].child_by_field_name("name")
    return name_node is not None and tree.text(name_node) == REF_FIELD_NAME


def choose_interface_name(tree: SourceTree) -> tuple[str, bool]:
    """Pick the name of the ref interface.

    Returns:
        Tuple of (name, already_declared). An existing ``RefProps``
        interface holding only ``ref`` is reused; otherwise the first
        free name among RefProps, RefProps2, RefProps3, ... is chosen.
    """
    names = declared_type_names(tree)
    existing = names.get(REF_PROPS_NAME)
    if existing is None:
        return REF_PROPS_NAME, False
    if _is_ref_interface(tree, existing):
        logger.info(f"Reusing existing {REF_PROPS_NAME} interface")
        return REF_PROPS_NAME, True

    suffix = 2
    while f"{REF_PROPS_NAME}{suffix}" in names:
        suffix += 1
    name = f"{REF_PROPS_NAME}{suffix}"
    logger.info(f"{REF_PROPS_NAME} is already taken, using {name}")
    return name, False


def _attached_comment_start(statements: list[Node], index: int) -> Node:
    """Move back over a comment block directly above statements[index]."""
    current = statements[index]
    while index > 0:
        previous = statements[index - 1]
        attached = previous.end_point[0] >= current.start_point[0] - 1
        if previous.type != "comment" or not attached:
            break
        # A trailing comment belongs to the statement it follows
        if index > 1 and statements[index - 2].end_point[0] == previous.start_point[0]:
            break
        current = previous
        index -= 1
    return current


def plan_interface_insertion(tree: SourceTree, ref_field: RefField) -> TextEdit:
    """Build the edit that inserts the ref interface declaration.

    Placement, first match wins:
    1. Before the first top-level interface or type alias
    2. After the last top-level import or directive
    3. At the top of the file

    Args:
        tree: The parsed source
        ref_field: The ref field to declare

    Returns:
        An insertion TextEdit
    """
    declaration = ref_field.render_declaration()
    name = ref_field.interface_name
    statements = _top_level_statements(tree)

    for index, statement in enumerate(statements):
        if _declaration_of(statement).type in TYPE_DECLARATION_TYPES:
            anchor = _attached_comment_start(statements, index)
            logger.debug(f"Inserting {name} before line {anchor.start_point[0] + 1}")
            return TextEdit(anchor.start_byte, anchor.start_byte, declaration + "\n\n")

    imports = [statement for statement in statements if _is_import_like(statement)]
    if imports:
        last = imports[-1]
        logger.debug(f"Inserting {name} after line {last.end_point[0] + 1}")
        return TextEdit(last.end_byte, last.end_byte, "\n\n" + declaration)

    logger.debug(f"Inserting {name} at top of file")
    return TextEdit(0, 0, declaration + "\n\n")
