"""Base template class for built-in formats."""

import re
from abc import ABC, abstractmethod
from typing import Any, Optional

from ..formatters import CodeFormatter
from ..models import Command, EmittedFile, Project, Test
from ..plugins import PluginRegistry, get_registry

# Recorder locator prefixes mapped to a strategy name
LOCATOR_STRATEGIES = {
    "id": "id",
    "name": "name",
    "css": "css",
    "xpath": "xpath",
    "linkText": "link",
    "link": "link",
    "partialLinkText": "partial_link",
}


class BaseTemplate(ABC):
    """Base class for built-in formats.

    Each language/framework combination implements this class to generate
    test code in its own syntax. Instances satisfy the Format contract
    through emit_test and emit_suite.
    """

    # Override these in subclasses
    language: str = "unknown"
    framework: str = "unknown"
    file_extension: str = ".txt"
    indent: str = "    "

    def __init__(self, config: Any = None, registry: Optional[PluginRegistry] = None):
        """Initialize template with optional config and plugin registry."""
        self.config = config or {}
        self._registry = registry
        self.formatter = CodeFormatter(self.language)

    @property
    def registry(self) -> PluginRegistry:
        return self._registry or get_registry()

    @abstractmethod
    def generate_imports(self, parallel: bool) -> str:
        """Generate import statements."""
        pass

    @abstractmethod
    def generate_class_header(self, name: str, project: Project, parallel: bool) -> str:
        """Generate class/describe header, including the base URL."""
        pass

    @abstractmethod
    def generate_test_header(self, test: Test) -> str:
        """Generate the opening of one test function."""
        pass

    @abstractmethod
    def generate_command_code(self, command: Command, project: Project) -> str | None:
        """Generate code for a known command, or None if unsupported."""
        pass

    @abstractmethod
    def generate_test_footer(self) -> str:
        """Generate the end of one test function."""
        pass

    @abstractmethod
    def generate_class_footer(self) -> str:
        """Generate class/describe footer."""
        pass

    @abstractmethod
    def filename_for(self, name: str) -> str:
        """File name for a unit name."""
        pass

    async def emit_test(self, project: Project, test_name: str) -> EmittedFile:
        """Generate a file holding a single test."""
        test = project.get_test(test_name)
        body = self.generate(test.name, [test], project)
        return EmittedFile(body=body, filename=self.filename_for(test.name))

    async def emit_suite(self, project: Project, suite_name: str) -> EmittedFile:
        """Generate a file holding every test of a suite, in suite order."""
        suite = project.get_suite(suite_name)
        tests = project.tests_for_suite(suite)
        body = self.generate(suite.name, tests, project, parallel=suite.parallel)
        return EmittedFile(body=body, filename=self.filename_for(suite.name))

    def generate(
        self,
        name: str,
        tests: list[Test],
        project: Project,
        parallel: bool = False,
    ) -> str:
        """Generate complete code for a group of tests.

        Args:
            name: Unit name (test or suite)
            tests: Tests to include, in order
            project: Project the tests belong to
            parallel: Whether the tests must run in parallel

        Returns:
            Generated, formatted code
        """
        parts = [
            self.generate_imports(parallel),
            "",
            self.generate_class_header(name, project, parallel),
        ]

        for test in tests:
            parts.append(self.generate_test_header(test))
            body = []
            for command in test.commands:
                code = self.emit_command(command, project)
                if code:
                    body.append(code)
            parts.extend(body)
            if not self._has_statement(body):
                placeholder = self.generate_empty_body()
                if placeholder:
                    parts.append(placeholder)
            parts.append(self.generate_test_footer())

        parts.append(self.generate_class_footer())

        return self.formatter.format_code("\n".join(parts))

    def emit_command(self, command: Command, project: Project) -> str:
        """Translate one command, falling back to plugins, then a comment."""
        pad = self.indent * 2
        name = command.command.strip()

        if not name:
            return f"{pad}{self.format_comment(command.comment)}" if command.comment else ""

        if name.startswith("//"):
            text = f"{name[2:]} | {command.target} | {command.value}"
            return f"{pad}{self.format_comment(text)}"

        lines = []
        if command.comment:
            lines.append(f"{pad}{self.format_comment(command.comment)}")

        code = self.generate_command_code(command, project)
        if code is None:
            code = self.registry.emit_command(command, self.language)
            if code is not None:
                code = self._indent_block(code, pad)
        if code is None:
            code = f"{pad}{self.format_comment(f'Unsupported command: {name}')}"

        lines.append(code)
        return "\n".join(lines)

    def generate_empty_body(self) -> str:
        """Statement for a test with no generated code ("" when none is needed)."""
        return ""

    def _has_statement(self, chunks: list[str]) -> bool:
        prefix = self._get_comment_prefix()
        return any(
            line.strip() and not line.strip().startswith(prefix)
            for chunk in chunks
            for line in chunk.split("\n")
        )

    def _indent_block(self, code: str, pad: str) -> str:
        return "\n".join(f"{pad}{line}" if line else line for line in code.split("\n"))

    def _get_comment_prefix(self) -> str:
        """Get comment prefix for this language."""
        if self.language in ("python", "ruby"):
            return "#"
        return "//"

    def format_comment(self, text: str) -> str:
        """Format a single-line comment for this language."""
        return f"{self._get_comment_prefix()} {text}".rstrip()

    def parse_locator(self, target: str) -> tuple[str, str]:
        """Split a recorded locator into (strategy, value).

        ``id=login`` -> ("id", "login"), ``//div`` -> ("xpath", "//div");
        anything without a known prefix is treated as CSS.
        """
        if target.startswith("//") or target.startswith("(//"):
            return "xpath", target
        prefix, sep, rest = target.partition("=")
        if sep and prefix in LOCATOR_STRATEGIES:
            return LOCATOR_STRATEGIES[prefix], rest
        return "css", target

    def resolve_url(self, target: str, base_url: str) -> str:
        """Absolute URL for an ``open`` target.

        Relative targets are prefixed with the recorded URL so the URL
        appears literally in generated code.
        """
        if re.match(r"^[a-zA-Z][a-zA-Z0-9+.-]*://", target) or not base_url:
            return target
        if not target:
            return base_url
        return f"{base_url.rstrip('/')}/{target.lstrip('/')}"

    def window_size(self, value: str) -> tuple[str, str]:
        """Parse ``1280x800`` style sizes."""
        width, _, height = value.lower().partition("x")
        return width.strip() or "1280", height.strip() or "800"

    def split_keys(self, value: str) -> list[tuple[bool, str]]:
        """Split a sendKeys value into (is_key, text) parts.

        ``abc${KEY_ENTER}`` -> [(False, "abc"), (True, "ENTER")]
        """
        parts = []
        for piece in re.split(r"(\$\{KEY_[A-Z_]+\})", value):
            if not piece:
                continue
            match = re.fullmatch(r"\$\{KEY_([A-Z_]+)\}", piece)
            if match:
                parts.append((True, match.group(1)))
            else:
                parts.append((False, piece))
        return parts

    def select_option(self, value: str) -> tuple[str, str]:
        """Split a select value (``label=``, ``value=``, ``index=``)."""
        kind, sep, option = value.partition("=")
        if sep and kind in ("label", "value", "index", "id"):
            return kind, option
        return "label", value

    def pause_ms(self, value: str) -> int:
        try:
            return int(float(value))
        except (TypeError, ValueError):
            return 0

    def sanitize_name(self, name: str) -> str:
        """Convert name to valid identifier."""
        sanitized = re.sub(r"[^a-zA-Z0-9_]", "_", name)
        if sanitized and sanitized[0].isdigit():
            sanitized = "_" + sanitized
        return sanitized.lower()

    def to_camel_case(self, name: str) -> str:
        """Convert name to camelCase."""
        words = re.sub(r"[^a-zA-Z0-9]", " ", name).split()
        if not words:
            return "test"
        return words[0].lower() + "".join(w.title() for w in words[1:])

    def to_pascal_case(self, name: str) -> str:
        """Convert name to PascalCase."""
        words = re.sub(r"[^a-zA-Z0-9]", " ", name).split()
        return "".join(w[0].upper() + w[1:] for w in words) if words else "Test"

    def to_snake_case(self, name: str) -> str:
        """Convert name to snake_case."""
        s1 = re.sub(r"(.)([A-Z][a-z]+)", r"\1_\2", name)
        s2 = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", s1)
        s3 = re.sub(r"[^a-zA-Z0-9]", "_", s2)
        return re.sub(r"_+", "_", s3).lower().strip("_") or "test"

    def to_kebab_case(self, name: str) -> str:
        """Convert name to kebab-case."""
        return self.to_snake_case(name).replace("_", "-")

    def escape_string(self, value: str) -> str:
        """Escape string for a double-quoted literal."""
        if value is None:
            return ""
        return value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n").replace("\r", "\\r")
