"""Integration tests: golden fixtures and the CLI end to end."""

import shutil
import subprocess
import sys
from pathlib import Path

import pytest

from forward_ref_codemod.formatter import PrettierFormatter
from forward_ref_codemod.transform import rewrite_source, transform_source

FIXTURES = Path(__file__).parent / "fixtures" / "forward_ref"

CASES = sorted(path.name.removesuffix(".input.tsx") for path in FIXTURES.glob("*.input.tsx"))

requires_prettier = pytest.mark.skipif(
    shutil.which("prettier") is None, reason="prettier is not installed"
)


def accepted_outputs(case: str) -> list[str]:
    """Every accepted output of a case; any one of them is a pass."""
    return [path.read_text() for path in sorted(FIXTURES.glob(f"{case}.output*.tsx"))]


@pytest.fixture
def fixtures_path():
    return FIXTURES


class TestGoldenFixtures:
    def test_every_case_has_an_output(self):
        assert CASES
        for case in CASES:
            assert accepted_outputs(case), f"{case} has no output fixture"

    @pytest.mark.parametrize("case", CASES)
    def test_unformatted_rewrite_matches(self, case, fixtures_path):
        """Before formatting, the rewrite matches the case's rewritten text."""
        source = (fixtures_path / f"{case}.input.tsx").read_text()
        expected = (fixtures_path / f"{case}.rewritten.tsx").read_text()

        assert rewrite_source(source).text == expected

    @requires_prettier
    @pytest.mark.asyncio
    @pytest.mark.parametrize("case", CASES)
    async def test_matches_accepted_output(self, case, fixtures_path):
        """The formatted transform matches one of the case's accepted outputs."""
        input_path = fixtures_path / f"{case}.input.tsx"

        result = await transform_source(
            input_path.read_text(), input_path, PrettierFormatter()
        )

        assert result.output in accepted_outputs(case)


class TestEndToEnd:
    def given_component_copy(self, tmp_path, fixtures_path):
        self.path = tmp_path / "ref.tsx"
        shutil.copy(fixtures_path / "ref.input.tsx", self.path)

    def when_cli_is_executed(self, *args):
        self.result = subprocess.run(
            [sys.executable, "-m", "forward_ref_codemod", str(self.path), *args],
            capture_output=True,
            text=True,
        )

    def then_exit_code_is_zero(self):
        assert self.result.returncode == 0

    def test_dry_run_prints_transformed_source(self, tmp_path, fixtures_path):
        """python -m forward_ref_codemod rewrites and prints without writing."""
        self.given_component_copy(tmp_path, fixtures_path)
        self.when_cli_is_executed("--no-format", "--dry-run")
        self.then_exit_code_is_zero()
        assert "({ ref, placeholder, onChange }: SearchInputProps & RefProps)" in (
            self.result.stdout
        )
        assert "forwardRef" in self.path.read_text()

    def test_rewrites_file_in_place(self, tmp_path, fixtures_path):
        self.given_component_copy(tmp_path, fixtures_path)
        self.when_cli_is_executed("--no-format")
        self.then_exit_code_is_zero()
        assert "forwardRef" not in self.path.read_text()
