"""Presentation backends and document generators (scripted, HTML)."""

from .base import SurveyBackend
from .html_document import HtmlOptions, generate_html, save_html_file
from .scripted import ScriptedBackend

__all__ = ["SurveyBackend", "ScriptedBackend", "HtmlOptions", "generate_html", "save_html_file"]
