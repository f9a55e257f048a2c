# File: page_scout/parser/__init__.py
"""page_scout.parser: Разбор HTML, llms.txt и robots.txt."""

from .html_parser import ParsedDocument, parse_html
from .llms_parser import LlmsDoc, parse_llms_txt

__all__ = ["ParsedDocument", "parse_html", "LlmsDoc", "parse_llms_txt"]
