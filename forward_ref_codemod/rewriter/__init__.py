"""Rewrite React.forwardRef components to take ref as a regular prop."""

from forward_ref_codemod.rewriter.call_sites import find_call_sites
from forward_ref_codemod.rewriter.element_type import extract_element_type
from forward_ref_codemod.rewriter.interface import (
    choose_interface_name,
    plan_interface_insertion,
)
from forward_ref_codemod.rewriter.models import (
    Absent,
    AttributesMember,
    CallSite,
    DestructuredParameter,
    ElementType,
    Intersection,
    NamedMember,
    OpaqueMember,
    Reference,
    RefField,
    TypeName,
)
from forward_ref_codemod.rewriter.parameters import rewrite_parameters
from forward_ref_codemod.rewriter.props_type import (
    combined_annotation,
    resolve_props_type,
)

__all__ = [
    # Models
    "CallSite",
    "TypeName",
    "ElementType",
    "Absent",
    "Reference",
    "Intersection",
    "AttributesMember",
    "NamedMember",
    "OpaqueMember",
    "DestructuredParameter",
    "RefField",
    # Call sites
    "find_call_sites",
    # Type resolution
    "extract_element_type",
    "resolve_props_type",
    "combined_annotation",
    # Interface synthesis
    "choose_interface_name",
    "plan_interface_insertion",
    # Parameter rewriting
    "rewrite_parameters",
]
