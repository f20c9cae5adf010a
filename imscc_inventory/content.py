"""Resolve a resource's analysis target into a parsed HTML document."""
from __future__ import annotations

from typing import Callable, Dict, Optional

from bs4 import BeautifulSoup

from .models import AnalysisType, Resource
from .xmltools import first_text, parse_xml_or_none


def _unwrap(element_name: str) -> Callable[[str, str], str]:
    """Strategy for XML wrappers that carry escaped HTML in one element."""
    def strategy(raw: str, label: str) -> str:
        doc = parse_xml_or_none(raw, label)
        return first_text(doc, element_name) or ''
    return strategy


ANALYSIS_STRATEGIES: Dict[AnalysisType, Callable[[str, str], str]] = {
    AnalysisType.HTML: lambda raw, label: raw,
    AnalysisType.XML: _unwrap('description'),
    AnalysisType.DISCUSSION_XML: _unwrap('text'),
}


def analysis_markup(resource: Resource, file_contents: Dict[str, str]) -> Optional[str]:
    """HTML to analyse for `resource`, or None when it has no analysis file in the package."""
    if not resource.analysis_href:
        return None
    raw = file_contents.get(resource.analysis_href)
    if not raw:
        return None
    strategy = ANALYSIS_STRATEGIES[AnalysisType(resource.analysis_type)]
    return strategy(raw, resource.analysis_href)


def load_analysis_document(resource: Resource,
                           file_contents: Dict[str, str]) -> Optional[BeautifulSoup]:
    markup = analysis_markup(resource, file_contents)
    if markup is None:
        return None
    return BeautifulSoup(markup, 'html.parser')
