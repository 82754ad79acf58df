"""Per-file pipeline: parse, rewrite forwardRef call sites, format."""

import logging
from dataclasses import dataclass
from pathlib import Path

from forward_ref_codemod.formatter import NullFormatter
from forward_ref_codemod.rewriter.call_sites import find_call_sites
from forward_ref_codemod.rewriter.element_type import extract_element_type
from forward_ref_codemod.rewriter.interface import (
    choose_interface_name,
    plan_interface_insertion,
)
from forward_ref_codemod.rewriter.models import RefField
from forward_ref_codemod.rewriter.parameters import (
    first_parameter_annotation,
    rewrite_parameters,
)
from forward_ref_codemod.rewriter.props_type import (
    combined_annotation,
    resolve_props_type,
)
from forward_ref_codemod.syntax import apply_edits, parse_source

logger = logging.getLogger(__name__)


@dataclass
class RewriteOutcome:
    """Result of rewriting source text, before formatting."""

    text: str
    rewritten: int = 0
    skipped: int = 0
    ref_field: RefField | None = None

    @property
    def changed(self) -> bool:
        return self.rewritten > 0


@dataclass
class TransformResult:
    """Result of transforming one file.

    When nothing was rewritten, ``output`` is the source text verbatim.
    """

    path: Path
    source: str
    output: str
    changed: bool
    rewritten: int = 0
    skipped: int = 0


def rewrite_source(source: str) -> RewriteOutcome:
    """Rewrite every supported forwardRef call site in a source text.

    Args:
        source: TSX source text

    Returns:
        The RewriteOutcome; its text is the source unchanged when no call
        site could be rewritten

    Raises:
        SourceParseError: If the source has syntax errors
    """
    tree = parse_source(source)
    call_sites = find_call_sites(tree)
    if not call_sites:
        return RewriteOutcome(text=source)

    interface_name, already_declared = choose_interface_name(tree)
    edits = []
    ref_field = None
    rewritten = 0
    skipped = 0
    covered_end = -1

    for call_site in call_sites:
        # Nested inside a call site that is already being replaced
        if call_site.node.start_byte < covered_end:
            logger.info(f"Line {call_site.line}: nested forwardRef call, skipping")
            skipped += 1
            continue

        element = extract_element_type(tree, call_site)
        if len(call_site.type_arguments) > 1:
            props_node = call_site.type_arguments[1]
        else:
            props_node = first_parameter_annotation(call_site.function)
        shape = resolve_props_type(tree, props_node)
        annotation = combined_annotation(shape, interface_name)

        rewrite = rewrite_parameters(tree, call_site, annotation)
        if rewrite is None:
            skipped += 1
            continue

        edits.append(rewrite.edit)
        covered_end = call_site.node.end_byte
        rewritten += 1

        # The first call site that needs the ref interface decides its type
        if annotation is not None and ref_field is None:
            ref_field = RefField(
                namespace=call_site.namespace,
                element=element,
                interface_name=interface_name,
            )

    if ref_field is not None and not already_declared:
        edits.append(plan_interface_insertion(tree, ref_field))

    logger.info(f"Rewrote {rewritten} call sites, skipped {skipped}")
    if not edits:
        return RewriteOutcome(text=source, skipped=skipped)

    text = apply_edits(tree.source, edits).decode("utf-8")
    return RewriteOutcome(
        text=text, rewritten=rewritten, skipped=skipped, ref_field=ref_field
    )


async def transform_source(source: str, path: Path, formatter=None) -> TransformResult:
    """Rewrite and format the source of one file.

    Args:
        source: The file content
        path: The file path, only used to find formatter configuration
        formatter: Formatter with an async ``format(text, path)``;
            defaults to leaving the text unformatted

    Returns:
        TransformResult with the formatted output, or the source verbatim
        when nothing was rewritten

    Raises:
        SourceParseError: If the source has syntax errors
        FormatterError: If formatting fails
    """
    formatter = formatter or NullFormatter()
    outcome = rewrite_source(source)
    if not outcome.changed:
        logger.info(f"No changes for {path}")
        return TransformResult(
            path=path,
            source=source,
            output=source,
            changed=False,
            skipped=outcome.skipped,
        )

    output = await formatter.format(outcome.text, path)
    return TransformResult(
        path=path,
        source=source,
        output=output,
        changed=True,
        rewritten=outcome.rewritten,
        skipped=outcome.skipped,
    )


async def transform_file(path: Path, formatter=None, write: bool = True) -> TransformResult:
    """Transform a file, writing it back only if it changed.

    Args:
        path: The file to transform
        formatter: Formatter to apply to rewritten files
        write: Write the output back to ``path``

    Returns:
        The TransformResult
    """
    logger.info(f"Transforming {path}")
    source = path.read_text(encoding="utf-8")
    result = await transform_source(source, path, formatter)
    if result.changed and write:
        path.write_text(result.output, encoding="utf-8")
        logger.info(f"Wrote {path}")
    return result
