"""Python Selenium (pytest) format."""

from ..models import Command, Project, Test
from .base import BaseTemplate

# Recorder key names that differ from selenium's Keys attributes
SELENIUM_KEYS = {"ESC": "ESCAPE", "ARROW_UP": "UP", "ARROW_DOWN": "DOWN"}

PYTHON_LOCATORS = {
    "id": "By.ID",
    "name": "By.NAME",
    "css": "By.CSS_SELECTOR",
    "xpath": "By.XPATH",
    "link": "By.LINK_TEXT",
    "partial_link": "By.PARTIAL_LINK_TEXT",
}


class PythonSeleniumTemplate(BaseTemplate):
    """Template for Python Selenium tests run with pytest."""

    language = "python"
    framework = "selenium"
    file_extension = ".py"
    indent = "    "

    def generate_imports(self, parallel: bool) -> str:
        """Generate Python imports."""
        imports = [
            "import time",
            "",
            "import pytest",
            "from selenium import webdriver",
            "from selenium.webdriver.common.action_chains import ActionChains",
            "from selenium.webdriver.common.by import By",
            "from selenium.webdriver.common.keys import Keys",
            "from selenium.webdriver.support import expected_conditions",
            "from selenium.webdriver.support.ui import Select, WebDriverWait",
        ]
        return "\n".join(imports)

    def generate_class_header(self, name: str, project: Project, parallel: bool) -> str:
        """Generate pytest class header."""
        class_name = self.config.get("test_class_name") or f"Test{self.to_pascal_case(name)}"

        lines = [
            "",
            f'BASE_URL = "{self.escape_string(project.url)}"',
            "",
            "",
            f"class {class_name}:",
            f'    """Generated from: {self.escape_string(name)}"""',
            "",
        ]
        if parallel:
            lines.insert(-1, "    # Tests in this class are independent; run them with pytest-xdist (pytest -n auto)")

        lines.extend([
            "    @pytest.fixture(autouse=True)",
            "    def setup(self):",
            "        self.driver = webdriver.Chrome()",
            "        self.wait = WebDriverWait(self.driver, 10)",
            "        self.vars = {}",
            "        yield",
            "        self.driver.quit()",
            "",
        ])
        return "\n".join(lines)

    def generate_test_header(self, test: Test) -> str:
        return f"    def test_{self.to_snake_case(test.name)}(self):"

    def generate_empty_body(self) -> str:
        return f"{self.indent * 2}pass"

    def generate_test_footer(self) -> str:
        return ""

    def generate_class_footer(self) -> str:
        return ""

    def filename_for(self, name: str) -> str:
        return f"test_{self.to_snake_case(name)}{self.file_extension}"

    def _get_locator(self, target: str) -> str:
        """Convert a recorded locator to a Selenium (By, value) pair."""
        strategy, value = self.parse_locator(target)
        return f'{PYTHON_LOCATORS[strategy]}, "{self.escape_string(value)}"'

    def _find(self, target: str) -> str:
        return f"self.driver.find_element({self._get_locator(target)})"

    def _keys(self, value: str) -> str:
        args = []
        for is_key, text in self.split_keys(value):
            if is_key:
                args.append(f"Keys.{SELENIUM_KEYS.get(text, text)}")
            else:
                args.append(f'"{self.escape_string(text)}"')
        return ", ".join(args) or '""'

    def generate_command_code(self, command: Command, project: Project) -> str | None:
        """Generate code for a single command."""
        name = command.command
        target = command.target
        value = command.value
        pad = self.indent * 2

        if name == "open":
            url = self.resolve_url(target, project.url)
            return f'{pad}self.driver.get("{self.escape_string(url)}")'

        if name in ("click", "clickAt"):
            return f"{pad}{self._find(target)}.click()"

        if name in ("doubleClick", "doubleClickAt"):
            return f"{pad}ActionChains(self.driver).double_click({self._find(target)}).perform()"

        if name == "type":
            return f'{pad}{self._find(target)}.send_keys("{self.escape_string(value)}")'

        if name == "sendKeys":
            return f"{pad}{self._find(target)}.send_keys({self._keys(value)})"

        if name == "select":
            kind, option = self.select_option(value)
            method = {
                "label": f'select_by_visible_text("{self.escape_string(option)}")',
                "value": f'select_by_value("{self.escape_string(option)}")',
                "index": f"select_by_index({self.pause_ms(option)})",
                "id": f'select_by_value("{self.escape_string(option)}")',
            }[kind]
            return f"{pad}Select({self._find(target)}).{method}"

        if name in ("check", "uncheck"):
            negate = "not " if name == "check" else ""
            return (
                f"{pad}element = {self._find(target)}\n"
                f"{pad}if {negate}element.is_selected():\n"
                f"{pad}    element.click()"
            )

        if name == "mouseOver":
            return f"{pad}ActionChains(self.driver).move_to_element({self._find(target)}).perform()"

        if name == "pause":
            return f"{pad}time.sleep({self.pause_ms(target or value) / 1000})"

        if name == "setWindowSize":
            width, height = self.window_size(target)
            return f"{pad}self.driver.set_window_size({width}, {height})"

        if name in ("runScript", "executeScript"):
            call = f'self.driver.execute_script("{self.escape_string(target)}")'
            if name == "executeScript" and value:
                return f'{pad}self.vars["{self.escape_string(value)}"] = {call}'
            return f"{pad}{call}"

        if name in ("assertText", "verifyText"):
            return f'{pad}assert {self._find(target)}.text == "{self.escape_string(value)}"'

        if name == "assertTitle":
            return f'{pad}assert self.driver.title == "{self.escape_string(target)}"'

        if name == "assertValue":
            return f'{pad}assert {self._find(target)}.get_attribute("value") == "{self.escape_string(value)}"'

        if name == "assertElementPresent":
            return f"{pad}assert len(self.driver.find_elements({self._get_locator(target)})) > 0"

        if name == "assertElementNotPresent":
            return f"{pad}assert len(self.driver.find_elements({self._get_locator(target)})) == 0"

        if name == "waitForElementVisible":
            timeout = self.pause_ms(value or "30000") / 1000
            return (
                f"{pad}WebDriverWait(self.driver, {timeout}).until(\n"
                f"{pad}    expected_conditions.visibility_of_element_located(({self._get_locator(target)}))\n"
                f"{pad})"
            )

        if name == "echo":
            return f'{pad}print("{self.escape_string(target)}")'

        if name == "close":
            return f"{pad}self.driver.close()"

        if name == "submit":
            return f"{pad}{self._find(target)}.submit()"

        if name == "store":
            return f'{pad}self.vars["{self.escape_string(value)}"] = "{self.escape_string(target)}"'

        return None


default = PythonSeleniumTemplate()
