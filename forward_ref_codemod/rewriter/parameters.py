"""Rewrite a forwardRef render function to take ``ref`` as a prop.

Two parameter shapes are supported:

- Shape A, an object pattern: ``({ a, ...rest }, ref) => ...`` becomes
  ``({ ref, a, ...rest }) => ...``.
- Shape B, a ``props`` identifier destructured in the body:
  ``(props, ref) => { const { a } = props; ... }`` becomes
  ``({ ref, ...props }) => { const { a } = props; ... }``.

In both cases the reference binding comes first and the rest binding, if
any, comes last. The function body is never edited: ``props`` no longer
holds ``ref``, as it did not before. Any other shape is left alone.
"""

import logging
from dataclasses import dataclass

from tree_sitter import Node

from forward_ref_codemod.rewriter.models import (
    REF_FIELD_NAME,
    Binding,
    CallSite,
    DestructuredParameter,
    RestBinding,
)
from forward_ref_codemod.syntax import SourceTree, TextEdit, named_children, walk

logger = logging.getLogger(__name__)

PROPS_NAME = "props"
UNUSED_REF_NAME = "_ref"

IDENTIFIER_TYPES = {
    "identifier",
    "shorthand_property_identifier",
    "shorthand_property_identifier_pattern",
}

SHAPE_DESTRUCTURED = "destructured"
SHAPE_PROPS_IDENTIFIER = "props-identifier"


@dataclass
class ParameterRewrite:
    """The rewrite of one call site."""

    edit: TextEdit  # replaces the whole forwardRef call
    shape: str
    parameter: DestructuredParameter


def _parameter_nodes(function: Node) -> tuple[Node, list[Node]] | None:
    """The node holding the parameter list, and the parameters themselves."""
    params = function.child_by_field_name("parameters")
    if params is not None:
        return params, named_children(params)
    # Arrow function with a bare identifier: props => ...
    single = function.child_by_field_name("parameter")
    if single is not None:
        return single, [single]
    return None


def _pattern_of(param: Node) -> Node | None:
    """The binding pattern of a parameter, None if it has a default value."""
    if param.type in ("required_parameter", "optional_parameter"):
        if param.child_by_field_name("value") is not None:
            return None
        return param.child_by_field_name("pattern")
    return param


def first_parameter_annotation(function: Node | None) -> Node | None:
    """The type annotation of a function's first parameter, if any."""
    if function is None:
        return None
    found = _parameter_nodes(function)
    if found is None or not found[1]:
        return None
    first = found[1][0]
    if first.type in ("required_parameter", "optional_parameter"):
        return first.child_by_field_name("type")
    return None


def classify_bindings(
    tree: SourceTree, pattern: Node
) -> tuple[list[Binding], list[RestBinding]] | None:
    """Split an object pattern into its bindings and rest bindings.

    Returns:
        Tuple of (bindings in source order, rest bindings), or None if the
        pattern holds an entry that is not a recognised binding
    """
    bindings: list[Binding] = []
    rests: list[RestBinding] = []

    for entry in named_children(pattern):
        if entry.type == "shorthand_property_identifier_pattern":
            name = tree.text(entry)
            bindings.append(Binding(key=name, text=name))
        elif entry.type == "pair_pattern":
            key = entry.child_by_field_name("key")
            if key is None:
                return None
            key_text = tree.text(key).strip("\"'")
            bindings.append(Binding(key=key_text, text=tree.text(entry)))
        elif entry.type == "object_assignment_pattern":
            left = entry.child_by_field_name("left")
            if left is None:
                return None
            bindings.append(Binding(key=tree.text(left), text=tree.text(entry)))
        elif entry.type == "rest_pattern":
            target = named_children(entry)
            if len(target) != 1 or target[0].type != "identifier":
                return None
            rests.append(RestBinding(name=tree.text(target[0])))
        else:
            logger.debug(f"Unrecognized pattern entry '{tree.text(entry)}'")
            return None

    return bindings, rests


def reorder_bindings(
    bindings: list[Binding], rests: list[RestBinding], ref_binding: Binding
) -> DestructuredParameter:
    """Put the ref binding first and the rest binding last.

    Non-rest bindings keep their original order, even if the rest binding
    appeared before some of them.
    """
    if len(rests) > 1:
        raise ValueError("An object pattern can hold at most one rest binding")
    return DestructuredParameter(
        bindings=[ref_binding, *bindings],
        rest=rests[0] if rests else None,
    )


def _identifiers_in(tree: SourceTree, node: Node) -> set[str]:
    return {
        tree.text(child)
        for child in walk(node)
        if child.type in IDENTIFIER_TYPES
    }


def _ref_binding(tree: SourceTree, function: Node, ref_name: str | None) -> Binding:
    """The binding that receives the ``ref`` prop.

    Without a ref parameter the prop is bound to a name the function never
    mentions, so a ``ref`` from the enclosing scope is not shadowed.
    """
    if ref_name is None:
        taken = _identifiers_in(tree, function)
        ref_name = UNUSED_REF_NAME
        suffix = 2
        while ref_name in taken:
            ref_name = f"{UNUSED_REF_NAME}{suffix}"
            suffix += 1
    if ref_name == REF_FIELD_NAME:
        return Binding(key=REF_FIELD_NAME, text=REF_FIELD_NAME)
    return Binding(key=REF_FIELD_NAME, text=f"{REF_FIELD_NAME}: {ref_name}")


def _destructures_props(tree: SourceTree, function: Node) -> bool:
    """True if a top-level body statement reads ``const { ... } = props``."""
    body = function.child_by_field_name("body")
    if body is None or body.type != "statement_block":
        return False

    for statement in named_children(body):
        if statement.type not in ("lexical_declaration", "variable_declaration"):
            continue
        for declarator in named_children(statement):
            if declarator.type != "variable_declarator":
                continue
            name = declarator.child_by_field_name("name")
            value = declarator.child_by_field_name("value")
            if (
                name is not None
                and name.type == "object_pattern"
                and value is not None
                and value.type == "identifier"
                and tree.text(value) == PROPS_NAME
            ):
                return True
    return False


def rewrite_parameters(
    tree: SourceTree, call_site: CallSite, annotation: str | None
) -> ParameterRewrite | None:
    """Rewrite a call site's render function to a single destructured parameter.

    Args:
        tree: The parsed source
        call_site: The forwardRef call
        annotation: Type annotation for the new parameter, None for none

    Returns:
        The rewrite, or None if the function's parameters have an
        unsupported shape
    """
    line = call_site.line
    function = call_site.function
    if function is None:
        logger.info(f"Line {line}: argument is not an inline function, skipping")
        return None

    found = _parameter_nodes(function)
    if found is None:
        return None
    params_node, params = found
    if not 1 <= len(params) <= 2:
        logger.info(f"Line {line}: expected (props, ref) parameters, skipping")
        return None

    patterns = [_pattern_of(param) for param in params]
    if any(pattern is None for pattern in patterns):
        logger.info(f"Line {line}: parameter with default value, skipping")
        return None

    ref_name = None
    if len(patterns) == 2:
        if patterns[1].type != "identifier":
            logger.info(f"Line {line}: ref parameter is not an identifier, skipping")
            return None
        ref_name = tree.text(patterns[1])
    ref_binding = _ref_binding(tree, function, ref_name)

    props_pattern = patterns[0]

    if props_pattern.type == "object_pattern":
        classified = classify_bindings(tree, props_pattern)
        if classified is None:
            logger.info(f"Line {line}: unsupported props pattern, skipping")
            return None
        bindings, rests = classified
        if len(rests) > 1 or any(b.key == REF_FIELD_NAME for b in bindings):
            logger.info(
                f"Line {line}: props pattern cannot take a ref binding, skipping"
            )
            return None
        parameter = reorder_bindings(bindings, rests, ref_binding)
        shape = SHAPE_DESTRUCTURED

    elif props_pattern.type == "identifier" and tree.text(props_pattern) == PROPS_NAME:
        if not _destructures_props(tree, function):
            logger.info(f"Line {line}: props is never destructured, skipping")
            return None
        parameter = DestructuredParameter(
            bindings=[ref_binding], rest=RestBinding(PROPS_NAME)
        )
        shape = SHAPE_PROPS_IDENTIFIER

    else:
        logger.info(
            f"Line {line}: unsupported props parameter "
            f"'{tree.text(props_pattern)}', skipping"
        )
        return None

    rendered = parameter.render(annotation)
    source = tree.source
    function_text = (
        source[function.start_byte : params_node.start_byte].decode("utf-8")
        + f"({rendered})"
        + source[params_node.end_byte : function.end_byte].decode("utf-8")
    )

    logger.debug(f"Line {line}: rewrote {shape} parameters to ({rendered})")
    return ParameterRewrite(
        edit=TextEdit(call_site.node.start_byte, call_site.node.end_byte, function_text),
        shape=shape,
        parameter=parameter,
    )
