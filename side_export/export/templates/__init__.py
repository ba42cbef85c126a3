"""Built-in export formats."""

from .base import BaseTemplate
from .java_selenium import JavaSeleniumTemplate
from .python_selenium import PythonSeleniumTemplate
from .typescript_playwright import TypeScriptPlaywrightTemplate

__all__ = [
    "BaseTemplate",
    "PythonSeleniumTemplate",
    "TypeScriptPlaywrightTemplate",
    "JavaSeleniumTemplate",
]
