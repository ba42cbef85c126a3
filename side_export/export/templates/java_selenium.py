"""Java Selenium (JUnit 5) format."""

from ..models import Command, Project, Test
from .base import BaseTemplate

SELENIUM_KEYS = {"ESC": "ESCAPE", "ARROW_UP": "UP", "ARROW_DOWN": "DOWN"}

JAVA_LOCATORS = {
    "id": "By.id",
    "name": "By.name",
    "css": "By.cssSelector",
    "xpath": "By.xpath",
    "link": "By.linkText",
    "partial_link": "By.partialLinkText",
}


class JavaSeleniumTemplate(BaseTemplate):
    """Template for Java Selenium tests."""

    language = "java"
    framework = "selenium"
    file_extension = ".java"
    indent = "    "

    def generate_imports(self, parallel: bool) -> str:
        """Generate Java imports."""
        imports = [
            "import org.junit.jupiter.api.AfterEach;",
            "import org.junit.jupiter.api.BeforeEach;",
            "import org.junit.jupiter.api.Test;",
            "import org.openqa.selenium.By;",
            "import org.openqa.selenium.Dimension;",
            "import org.openqa.selenium.JavascriptExecutor;",
            "import org.openqa.selenium.Keys;",
            "import org.openqa.selenium.WebDriver;",
            "import org.openqa.selenium.WebElement;",
            "import org.openqa.selenium.chrome.ChromeDriver;",
            "import org.openqa.selenium.interactions.Actions;",
            "import org.openqa.selenium.support.ui.ExpectedConditions;",
            "import org.openqa.selenium.support.ui.Select;",
            "import org.openqa.selenium.support.ui.WebDriverWait;",
            "import java.time.Duration;",
            "import java.util.HashMap;",
            "import java.util.Map;",
            "import static org.junit.jupiter.api.Assertions.*;",
        ]
        if parallel:
            imports[3:3] = [
                "import org.junit.jupiter.api.parallel.Execution;",
                "import org.junit.jupiter.api.parallel.ExecutionMode;",
            ]
        return "\n".join(imports)

    def generate_class_header(self, name: str, project: Project, parallel: bool) -> str:
        """Generate Java class header."""
        class_name = self.config.get("test_class_name") or self._class_name(name)

        lines = [
            "",
            "/**",
            f" * Generated from: {name}",
            " */",
        ]
        if parallel:
            lines.append("@Execution(ExecutionMode.CONCURRENT)")

        lines.extend([
            f"public class {class_name} {{",
            f'    private static final String BASE_URL = "{self.escape_string(project.url)}";',
            "",
            "    private WebDriver driver;",
            "    private Map<String, Object> vars;",
            "",
            "    @BeforeEach",
            "    public void setUp() {",
            "        driver = new ChromeDriver();",
            "        vars = new HashMap<String, Object>();",
            "    }",
            "",
            "    @AfterEach",
            "    public void tearDown() {",
            "        if (driver != null) {",
            "            driver.quit();",
            "        }",
            "    }",
            "",
        ])
        return "\n".join(lines)

    def generate_test_header(self, test: Test) -> str:
        return "\n".join([
            "    @Test",
            f"    public void {self.to_camel_case(test.name)}() {{",
        ])

    def generate_test_footer(self) -> str:
        return "    }\n"

    def generate_class_footer(self) -> str:
        return "}"

    def filename_for(self, name: str) -> str:
        return f"{self._class_name(name)}{self.file_extension}"

    def _class_name(self, name: str) -> str:
        class_name = self.to_pascal_case(name)
        if class_name[0].isdigit():
            class_name = f"_{class_name}"
        return class_name if class_name.endswith("Test") else f"{class_name}Test"

    def _get_locator(self, target: str) -> str:
        """Convert a recorded locator to a Java Selenium locator."""
        strategy, value = self.parse_locator(target)
        return f'{JAVA_LOCATORS[strategy]}("{self.escape_string(value)}")'

    def _find(self, target: str) -> str:
        return f"driver.findElement({self._get_locator(target)})"

    def generate_command_code(self, command: Command, project: Project) -> str | None:
        """Generate code for a single command."""
        name = command.command
        target = command.target
        value = command.value
        pad = self.indent * 2

        if name == "open":
            url = self.resolve_url(target, project.url)
            return f'{pad}driver.get("{self.escape_string(url)}");'

        if name in ("click", "clickAt"):
            return f"{pad}{self._find(target)}.click();"

        if name in ("doubleClick", "doubleClickAt"):
            return f"{pad}new Actions(driver).doubleClick({self._find(target)}).perform();"

        if name == "type":
            return f'{pad}{self._find(target)}.sendKeys("{self.escape_string(value)}");'

        if name == "sendKeys":
            args = []
            for is_key, text in self.split_keys(value):
                if is_key:
                    args.append(f"Keys.{SELENIUM_KEYS.get(text, text)}")
                else:
                    args.append(f'"{self.escape_string(text)}"')
            keys = ", ".join(args) or '""'
            return f"{pad}{self._find(target)}.sendKeys({keys});"

        if name == "select":
            kind, option = self.select_option(value)
            if kind == "index":
                method = f"selectByIndex({self.pause_ms(option)})"
            elif kind == "label":
                method = f'selectByVisibleText("{self.escape_string(option)}")'
            else:
                method = f'selectByValue("{self.escape_string(option)}")'
            return f"{pad}new Select({self._find(target)}).{method};"

        if name in ("check", "uncheck"):
            negate = "!" if name == "check" else ""
            return "\n".join([
                f"{pad}{{",
                f"{pad}    WebElement element = {self._find(target)};",
                f"{pad}    if ({negate}element.isSelected()) {{",
                f"{pad}        element.click();",
                f"{pad}    }}",
                f"{pad}}}",
            ])

        if name == "mouseOver":
            return f"{pad}new Actions(driver).moveToElement({self._find(target)}).perform();"

        if name == "pause":
            return "\n".join([
                f"{pad}try {{",
                f"{pad}    Thread.sleep({self.pause_ms(target or value)});",
                f"{pad}}} catch (InterruptedException e) {{",
                f"{pad}    Thread.currentThread().interrupt();",
                f"{pad}}}",
            ])

        if name == "setWindowSize":
            width, height = self.window_size(target)
            return f"{pad}driver.manage().window().setSize(new Dimension({width}, {height}));"

        if name in ("runScript", "executeScript"):
            call = f'((JavascriptExecutor) driver).executeScript("{self.escape_string(target)}")'
            if name == "executeScript" and value:
                return f'{pad}vars.put("{self.escape_string(value)}", {call});'
            return f"{pad}{call};"

        if name in ("assertText", "verifyText"):
            return f'{pad}assertEquals("{self.escape_string(value)}", {self._find(target)}.getText());'

        if name == "assertTitle":
            return f'{pad}assertEquals("{self.escape_string(target)}", driver.getTitle());'

        if name == "assertValue":
            return f'{pad}assertEquals("{self.escape_string(value)}", {self._find(target)}.getAttribute("value"));'

        if name == "assertElementPresent":
            return f"{pad}assertFalse(driver.findElements({self._get_locator(target)}).isEmpty());"

        if name == "assertElementNotPresent":
            return f"{pad}assertTrue(driver.findElements({self._get_locator(target)}).isEmpty());"

        if name == "waitForElementVisible":
            timeout = self.pause_ms(value or "30000")
            return (
                f"{pad}new WebDriverWait(driver, Duration.ofMillis({timeout}))\n"
                f"{pad}    .until(ExpectedConditions.visibilityOfElementLocated({self._get_locator(target)}));"
            )

        if name == "echo":
            return f'{pad}System.out.println("{self.escape_string(target)}");'

        if name == "close":
            return f"{pad}driver.close();"

        if name == "submit":
            return f"{pad}{self._find(target)}.submit();"

        if name == "store":
            return f'{pad}vars.put("{self.escape_string(value)}", "{self.escape_string(target)}");'

        return None


default = JavaSeleniumTemplate()
