"""Format rewritten source with prettier."""

import asyncio
import json
import logging
import shlex
from pathlib import Path

logger = logging.getLogger(__name__)

# Searched in each directory from the file upwards, in prettier's order
PRETTIER_CONFIG_FILES = (
    ".prettierrc",
    ".prettierrc.json",
    ".prettierrc.yaml",
    ".prettierrc.yml",
    ".prettierrc.json5",
    ".prettierrc.js",
    ".prettierrc.mjs",
    ".prettierrc.cjs",
    "prettier.config.js",
    "prettier.config.mjs",
    "prettier.config.cjs",
    ".prettierrc.toml",
)

DEFAULT_TIMEOUT = 30.0


class FormatterError(Exception):
    """The formatter could not format a file."""

    def __init__(self, message: str, path: Path | None = None):
        super().__init__(message)
        self.path = path


def _has_prettier_key(package_json: Path) -> bool:
    try:
        data = json.loads(package_json.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        logger.warning(f"Ignoring unreadable {package_json}: {e}")
        return False
    return isinstance(data, dict) and "prettier" in data


def find_prettier_config(path: Path) -> Path | None:
    """Find the prettier configuration that applies to a file.

    Walks up from the file's directory. In each directory a package.json
    with a "prettier" key wins over the dedicated config files.

    Args:
        path: The source file being formatted

    Returns:
        Path to the config file, or None if there is none
    """
    directory = path.resolve().parent
    for candidate_dir in (directory, *directory.parents):
        package_json = candidate_dir / "package.json"
        if package_json.is_file() and _has_prettier_key(package_json):
            logger.debug(f"Using prettier config from {package_json}")
            return package_json
        for name in PRETTIER_CONFIG_FILES:
            candidate = candidate_dir / name
            if candidate.is_file():
                logger.debug(f"Using prettier config {candidate}")
                return candidate
    logger.debug(f"No prettier config found for {path}")
    return None


class NullFormatter:
    """Leave text as rendered."""

    async def format(self, text: str, path: Path) -> str:
        return text


class PrettierFormatter:
    """Run the prettier executable over stdin."""

    def __init__(self, executable: str = "prettier", timeout: float = DEFAULT_TIMEOUT):
        self.command = shlex.split(executable)
        self.timeout = timeout

    def build_command(self, path: Path) -> list[str]:
        """Build the prettier command line for a file."""
        command = [*self.command, "--parser", "typescript", "--stdin-filepath", str(path)]
        config = find_prettier_config(path)
        # prettier reads package.json itself; --config expects a dedicated file
        if config is not None and config.name != "package.json":
            command += ["--config", str(config)]
        return command

    async def format(self, text: str, path: Path) -> str:
        """Format TypeScript text as if it were the file at ``path``.

        Args:
            text: Source text to format
            path: The file the text belongs to, used for config discovery

        Returns:
            The formatted text

        Raises:
            FormatterError: If prettier is missing, fails or times out
        """
        command = self.build_command(path)
        logger.debug(f"Running {' '.join(command)}")

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise FormatterError(f"Formatter not found: {self.command[0]}", path) from e

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(text.encode("utf-8")), timeout=self.timeout
            )
        except TimeoutError as e:
            process.kill()
            await process.wait()
            raise FormatterError(
                f"Formatter timed out after {self.timeout}s on {path}", path
            ) from e

        if process.returncode != 0:
            message = stderr.decode("utf-8", errors="replace").strip()
            raise FormatterError(
                f"Formatter exited with {process.returncode} on {path}: {message}", path
            )

        return stdout.decode("utf-8")
