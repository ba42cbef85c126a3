"""Code formatter for generated sources."""


class CodeFormatter:
    """Formats generated code according to language conventions."""

    def __init__(self, language: str):
        """Initialize formatter for a specific language."""
        self.language = language

    def format_code(self, code: str) -> str:
        """Normalize whitespace in generated code.

        Strips trailing whitespace and leading blank lines, collapses runs of
        blank lines to at most two (one for brace languages) and ends the
        file with exactly one newline.

        Args:
            code: Raw generated code

        Returns:
            Formatted code
        """
        max_blank = 2 if self.language in ("python", "ruby") else 1
        lines = [line.rstrip() for line in code.split("\n")]

        formatted_lines = []
        blank_count = 0
        for line in lines:
            if line == "":
                blank_count += 1
                if formatted_lines and blank_count <= max_blank:
                    formatted_lines.append(line)
            else:
                blank_count = 0
                formatted_lines.append(line)

        while formatted_lines and formatted_lines[-1] == "":
            formatted_lines.pop()

        return "\n".join(formatted_lines) + "\n"
