"""Tests for the per-file transformation pipeline."""

from pathlib import Path

import pytest

from forward_ref_codemod.formatter import FormatterError
from forward_ref_codemod.syntax import SourceParseError
from forward_ref_codemod.transform import rewrite_source, transform_file, transform_source

DESTRUCTURED_INPUT = """\
import React from "react";

interface Props {
  a: string;
  b: string;
}

const Box = React.forwardRef<HTMLDivElement, Props>(({ a, b, ...rest }, ref) => (
  <div ref={ref} {...rest}>
    {a}
    {b}
  </div>
));
"""

DESTRUCTURED_OUTPUT = """\
import React from "react";

interface RefProps {
  ref: React.RefObject<HTMLDivElement>;
}

interface Props {
  a: string;
  b: string;
}

const Box = ({ ref, a, b, ...rest }: Props & RefProps) => (
  <div ref={ref} {...rest}>
    {a}
    {b}
  </div>
);
"""

PROPS_IDENTIFIER_INPUT = """\
import React from "react";

const Field = React.forwardRef((props, ref) => {
  const { x } = props;
  return <input ref={ref} value={x} />;
});
"""

PROPS_IDENTIFIER_OUTPUT = """\
import React from "react";

const Field = ({ ref, ...props }) => {
  const { x } = props;
  return <input ref={ref} value={x} />;
};
"""

INTERSECTION_INPUT = """\
import React from "react";

interface ExpectedProps {
  variant: "primary" | "secondary";
}

const Alert = React.forwardRef<
  HTMLInputElement,
  React.HTMLAttributes<HTMLInputElement> & ExpectedProps
>(({ className, variant, ...props }, ref) => <input ref={ref} />);

export default Alert;
"""

INTERSECTION_OUTPUT = """\
import React from "react";

interface RefProps {
  ref: React.RefObject<HTMLInputElement>;
}

interface ExpectedProps {
  variant: "primary" | "secondary";
}

const Alert = ({ ref, className, variant, ...props }: \
React.HTMLAttributes<HTMLInputElement> & ExpectedProps & RefProps) => <input ref={ref} />;

export default Alert;
"""


class RecordingFormatter:
    """Formatter double that records what it was asked to format."""

    def __init__(self):
        self.calls = []

    async def format(self, text, path):
        self.calls.append((text, path))
        return text + "// formatted\n"


class FailingFormatter:
    async def format(self, text, path):
        raise FormatterError("prettier exploded", path)


class TestRewriteSource:
    def given_source(self, source):
        self.source = source

    def when_source_is_rewritten(self):
        self.outcome = rewrite_source(self.source)

    def then_text_is(self, expected):
        assert self.outcome.text == expected

    def then_source_is_unchanged(self):
        assert self.outcome.changed is False
        assert self.outcome.text == self.source

    def test_destructured_props_with_reference_type(self):
        """Shape A with a named props type gets Props & RefProps."""
        self.given_source(DESTRUCTURED_INPUT)
        self.when_source_is_rewritten()
        self.then_text_is(DESTRUCTURED_OUTPUT)
        assert self.outcome.rewritten == 1

    def test_props_identifier_without_generics(self):
        """Shape B without a props type: no annotation and no RefProps."""
        self.given_source(PROPS_IDENTIFIER_INPUT)
        self.when_source_is_rewritten()
        self.then_text_is(PROPS_IDENTIFIER_OUTPUT)
        assert self.outcome.ref_field is None

    def test_intersection_props_type(self):
        """Attributes and named members are kept, RefProps is appended."""
        self.given_source(INTERSECTION_INPUT)
        self.when_source_is_rewritten()
        self.then_text_is(INTERSECTION_OUTPUT)

    def test_one_ref_interface_for_many_call_sites(self):
        """The first call site that needs RefProps decides its element type."""
        self.given_source(
            'import React from "react";\n\n'
            "type AProps = { a: string };\n"
            "type BProps = { b: string };\n\n"
            "const A = React.forwardRef<HTMLDivElement, AProps>(({ a }, ref) => null);\n"
            "const B = React.forwardRef<HTMLSpanElement, BProps>(({ b }, ref) => null);\n"
        )
        self.when_source_is_rewritten()

        text = self.outcome.text
        assert text.count("interface RefProps") == 1
        assert "ref: React.RefObject<HTMLDivElement>;" in text
        assert "HTMLSpanElement" not in text
        assert "const A = ({ ref, a }: AProps & RefProps) => null;" in text
        assert "const B = ({ ref, b }: BProps & RefProps) => null;" in text
        assert self.outcome.rewritten == 2

    def test_props_type_from_parameter_annotation(self):
        """Without generics, the props parameter's annotation is the props type."""
        self.given_source("const A = React.forwardRef(({ a }: Props, ref) => null);\n")
        self.when_source_is_rewritten()
        self.then_text_is(
            "interface RefProps {\n  ref: React.RefObject<HTMLElement>;\n}\n\n"
            "const A = ({ ref, a }: Props & RefProps) => null;\n"
        )

    def test_aliased_namespace_is_used_for_ref_object(self):
        self.given_source(
            'import * as R from "react";\n\n'
            "const A = R.forwardRef<HTMLDivElement, Props>(({ a }, ref) => null);\n"
        )
        self.when_source_is_rewritten()
        assert "ref: R.RefObject<HTMLDivElement>;" in self.outcome.text

    def test_existing_ref_interface_is_reused(self):
        """A second run over a partially migrated file adds no declaration."""
        self.given_source(
            "interface RefProps {\n  ref: React.RefObject<HTMLElement>;\n}\n\n"
            "const A = React.forwardRef<HTMLDivElement, Props>(({ a }, ref) => null);\n"
        )
        self.when_source_is_rewritten()
        self.then_text_is(
            "interface RefProps {\n  ref: React.RefObject<HTMLElement>;\n}\n\n"
            "const A = ({ ref, a }: Props & RefProps) => null;\n"
        )

    def test_no_call_sites_is_unchanged(self):
        self.given_source('import React from "react";\n\nconst A = () => null;\n')
        self.when_source_is_rewritten()
        self.then_source_is_unchanged()

    def test_unsupported_call_site_is_unchanged(self):
        """An unsupported shape leaves the file verbatim, with no RefProps."""
        self.given_source(
            "interface Props {}\n\n"
            "const A = React.forwardRef<HTMLDivElement, Props>(Render);\n"
        )
        self.when_source_is_rewritten()
        self.then_source_is_unchanged()
        assert self.outcome.skipped == 1

    def test_second_run_is_a_no_op(self):
        self.given_source(rewrite_source(DESTRUCTURED_INPUT).text)
        self.when_source_is_rewritten()
        self.then_source_is_unchanged()

    def test_nested_call_site_is_left_inside_rewritten_one(self):
        self.given_source(
            "const A = React.forwardRef(({ a }, ref) => {\n"
            "  const Inner = React.forwardRef(({ b }, innerRef) => null);\n"
            "  return null;\n"
            "});\n"
        )
        self.when_source_is_rewritten()
        assert "const A = ({ ref, a }) => {" in self.outcome.text
        assert "React.forwardRef(({ b }, innerRef) => null)" in self.outcome.text
        assert self.outcome.rewritten == 1
        assert self.outcome.skipped == 1

    def test_syntax_error_raises(self):
        with pytest.raises(SourceParseError):
            rewrite_source("const = React.forwardRef(;\n")


class TestTransformSource:
    @pytest.mark.asyncio
    async def test_formats_rewritten_text(self):
        """Rewritten text is passed through the formatter with the file path."""
        formatter = RecordingFormatter()
        path = Path("src/Box.tsx")

        result = await transform_source(DESTRUCTURED_INPUT, path, formatter)

        assert result.changed is True
        assert result.output == DESTRUCTURED_OUTPUT + "// formatted\n"
        assert formatter.calls == [(DESTRUCTURED_OUTPUT, path)]

    @pytest.mark.asyncio
    async def test_unchanged_source_skips_formatter(self):
        """Files with nothing to rewrite come back verbatim, unformatted."""
        formatter = RecordingFormatter()
        source = "const A = () => null;\n"

        result = await transform_source(source, Path("A.tsx"), formatter)

        assert result.changed is False
        assert result.output == source
        assert formatter.calls == []

    @pytest.mark.asyncio
    async def test_default_formatter_leaves_text(self):
        result = await transform_source(PROPS_IDENTIFIER_INPUT, Path("Field.tsx"))
        assert result.output == PROPS_IDENTIFIER_OUTPUT

    @pytest.mark.asyncio
    async def test_formatter_failure_propagates(self):
        with pytest.raises(FormatterError):
            await transform_source(DESTRUCTURED_INPUT, Path("Box.tsx"), FailingFormatter())


class TestTransformFile:
    @pytest.mark.asyncio
    async def test_writes_changed_file(self, tmp_path):
        path = tmp_path / "Box.tsx"
        path.write_text(DESTRUCTURED_INPUT)

        result = await transform_file(path)

        assert result.changed is True
        assert path.read_text() == DESTRUCTURED_OUTPUT

    @pytest.mark.asyncio
    async def test_does_not_write_when_disabled(self, tmp_path):
        path = tmp_path / "Box.tsx"
        path.write_text(DESTRUCTURED_INPUT)

        result = await transform_file(path, write=False)

        assert result.output == DESTRUCTURED_OUTPUT
        assert path.read_text() == DESTRUCTURED_INPUT
