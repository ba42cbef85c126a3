"""TypeScript Playwright format."""

from ..models import Command, Project, Test
from .base import BaseTemplate

# Recorder key names mapped to Playwright key names
PLAYWRIGHT_KEYS = {
    "ENTER": "Enter",
    "TAB": "Tab",
    "ESC": "Escape",
    "ESCAPE": "Escape",
    "BACKSPACE": "Backspace",
    "BACK_SPACE": "Backspace",
    "DELETE": "Delete",
    "SPACE": "Space",
    "UP": "ArrowUp",
    "ARROW_UP": "ArrowUp",
    "DOWN": "ArrowDown",
    "ARROW_DOWN": "ArrowDown",
    "LEFT": "ArrowLeft",
    "ARROW_LEFT": "ArrowLeft",
    "RIGHT": "ArrowRight",
    "ARROW_RIGHT": "ArrowRight",
    "HOME": "Home",
    "END": "End",
    "PAGE_UP": "PageUp",
    "PAGE_DOWN": "PageDown",
}


class TypeScriptPlaywrightTemplate(BaseTemplate):
    """Template for TypeScript Playwright tests."""

    language = "typescript"
    framework = "playwright"
    file_extension = ".ts"
    indent = "  "

    def generate_imports(self, parallel: bool) -> str:
        """Generate TypeScript imports."""
        return "import { test, expect } from '@playwright/test';"

    def generate_class_header(self, name: str, project: Project, parallel: bool) -> str:
        """Generate Playwright describe block header."""
        lines = [
            "",
            f"const BASE_URL = '{self.escape_single(project.url)}';",
            "",
            f"test.describe('{self.escape_single(name)}', () => {{",
        ]
        if parallel:
            lines.append("  test.describe.configure({ mode: 'parallel' });")
        lines.append("  const vars: Record<string, unknown> = {};")
        lines.append("")
        return "\n".join(lines)

    def generate_test_header(self, test: Test) -> str:
        return f"  test('{self.escape_single(test.name)}', async ({{ page }}) => {{"

    def generate_test_footer(self) -> str:
        return "  });\n"

    def generate_class_footer(self) -> str:
        return "});"

    def filename_for(self, name: str) -> str:
        return f"{self.to_kebab_case(name)}.spec{self.file_extension}"

    def escape_single(self, value: str) -> str:
        """Escape string for a single-quoted literal."""
        if value is None:
            return ""
        return value.replace("\\", "\\\\").replace("'", "\\'").replace("\n", "\\n").replace("\r", "\\r")

    def _get_selector(self, target: str) -> str:
        """Convert a recorded locator to a Playwright selector."""
        strategy, value = self.parse_locator(target)
        if strategy == "id":
            selector = f"#{value}"
        elif strategy == "name":
            selector = f"[name=\"{value}\"]"
        elif strategy == "xpath":
            selector = f"xpath={value}"
        elif strategy == "link":
            selector = f"text=\"{value}\""
        elif strategy == "partial_link":
            selector = f"text={value}"
        else:
            selector = value
        return f"'{self.escape_single(selector)}'"

    def _locator(self, target: str) -> str:
        return f"page.locator({self._get_selector(target)})"

    def generate_command_code(self, command: Command, project: Project) -> str | None:
        """Generate code for a single command."""
        name = command.command
        target = command.target
        value = command.value
        pad = self.indent * 2

        if name == "open":
            url = self.resolve_url(target, project.url)
            return f"{pad}await page.goto('{self.escape_single(url)}');"

        if name in ("click", "clickAt"):
            return f"{pad}await {self._locator(target)}.click();"

        if name in ("doubleClick", "doubleClickAt"):
            return f"{pad}await {self._locator(target)}.dblclick();"

        if name == "type":
            return f"{pad}await {self._locator(target)}.fill('{self.escape_single(value)}');"

        if name == "sendKeys":
            lines = []
            for is_key, text in self.split_keys(value):
                if is_key:
                    key = PLAYWRIGHT_KEYS.get(text, text.title())
                    lines.append(f"{pad}await {self._locator(target)}.press('{key}');")
                else:
                    lines.append(f"{pad}await {self._locator(target)}.pressSequentially('{self.escape_single(text)}');")
            return "\n".join(lines) or f"{pad}await {self._locator(target)}.focus();"

        if name == "select":
            kind, option = self.select_option(value)
            if kind == "index":
                arg = f"{{ index: {self.pause_ms(option)} }}"
            elif kind == "label":
                arg = f"{{ label: '{self.escape_single(option)}' }}"
            else:
                arg = f"'{self.escape_single(option)}'"
            return f"{pad}await {self._locator(target)}.selectOption({arg});"

        if name == "check":
            return f"{pad}await {self._locator(target)}.check();"

        if name == "uncheck":
            return f"{pad}await {self._locator(target)}.uncheck();"

        if name == "mouseOver":
            return f"{pad}await {self._locator(target)}.hover();"

        if name == "pause":
            return f"{pad}await page.waitForTimeout({self.pause_ms(target or value)});"

        if name == "setWindowSize":
            width, height = self.window_size(target)
            return f"{pad}await page.setViewportSize({{ width: {width}, height: {height} }});"

        if name in ("runScript", "executeScript"):
            call = f"await page.evaluate(() => {{ {target} }})"
            if name == "executeScript" and value:
                return f"{pad}vars['{self.escape_single(value)}'] = {call};"
            return f"{pad}{call};"

        if name in ("assertText", "verifyText"):
            return f"{pad}await expect({self._locator(target)}).toHaveText('{self.escape_single(value)}');"

        if name == "assertTitle":
            return f"{pad}await expect(page).toHaveTitle('{self.escape_single(target)}');"

        if name == "assertValue":
            return f"{pad}await expect({self._locator(target)}).toHaveValue('{self.escape_single(value)}');"

        if name == "assertElementPresent":
            return f"{pad}await expect({self._locator(target)}).not.toHaveCount(0);"

        if name == "assertElementNotPresent":
            return f"{pad}await expect({self._locator(target)}).toHaveCount(0);"

        if name == "waitForElementVisible":
            timeout = self.pause_ms(value or "30000")
            return f"{pad}await {self._locator(target)}.waitFor({{ state: 'visible', timeout: {timeout} }});"

        if name == "echo":
            return f"{pad}console.log('{self.escape_single(target)}');"

        if name == "close":
            return f"{pad}await page.close();"

        if name == "submit":
            return f"{pad}await {self._locator(target)}.evaluate((form: HTMLFormElement) => form.submit());"

        if name == "store":
            return f"{pad}vars['{self.escape_single(value)}'] = '{self.escape_single(target)}';"

        return None


default = TypeScriptPlaywrightTemplate()
