"""
Accessibility audit orchestration.

The audit engine itself is external. Anything with a coroutine
``run(fragment_html, profile)`` returning AuditResults (or an axe-style
mapping with violations / passes / incomplete / inapplicable) will do.
One failing resource is logged and skipped; the scan carries on.
"""
from __future__ import annotations

import importlib
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Sequence, Union

from bs4 import BeautifulSoup

from .config import AnalysisConfig
from .content import load_analysis_document
from .models import AUDIT_CATEGORIES, AccessibilityFinding, AuditResults, Resource

logger = logging.getLogger(__name__)


class AuditEngine(Protocol):
    async def run(self, fragment: str, profile: Sequence[str]
                  ) -> Union[AuditResults, Mapping[str, Any]]:
        ...


def load_audit_engine(target: str) -> AuditEngine:
    """Import 'package.module:factory' and call the factory for an engine."""
    module_name, sep, attr = target.partition(':')
    if not sep or not module_name or not attr:
        raise ValueError(f"audit engine must look like 'module:factory', got {target!r}")
    factory = getattr(importlib.import_module(module_name), attr)
    return factory()


def audit_fragment(doc: BeautifulSoup) -> Optional[str]:
    """Body markup worth auditing, or None for an empty body."""
    body = doc.body or doc
    markup = body.decode_contents()
    if not markup.strip() or body.find(True) is None:
        return None
    return markup


def flatten_results(results: AuditResults, resource: Resource) -> List[AccessibilityFinding]:
    findings: List[AccessibilityFinding] = []
    for category in AUDIT_CATEGORIES:
        for rule in getattr(results, category):
            findings.append(AccessibilityFinding(
                type=category,
                parent_resource_identifier=resource.identifier,
                parent_resource_title=resource.title,
                parent_resource_type=resource.clarified_type,
                parent_resource_published=resource.published,
                parent_resource_module_title=resource.module_title,
                rule=rule,
            ))
    return findings


async def audit_resource(resource: Resource, doc: BeautifulSoup, engine: AuditEngine,
                         config: AnalysisConfig) -> Optional[List[AccessibilityFinding]]:
    fragment = audit_fragment(doc)
    if fragment is None:
        return None
    try:
        results = await engine.run(fragment, config.audit_profile)
        if isinstance(results, Mapping):
            results = AuditResults.from_dict(results)
        findings = flatten_results(results, resource)
    except Exception as e:
        logger.warning("Accessibility scan skipped for %s: %s", resource.title, e)
        return None
    resource.accessibility_results = findings
    return findings


async def check_accessibility(resources: Iterable[Resource], file_contents: Dict[str, str],
                              engine: AuditEngine,
                              config: Optional[AnalysisConfig] = None) -> None:
    config = config or AnalysisConfig()
    for resource in resources:
        doc = load_analysis_document(resource, file_contents)
        if doc is None:
            continue
        await audit_resource(resource, doc, engine, config)
