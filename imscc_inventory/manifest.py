"""
Manifest inventory builder.

Purpose
-------
Walk the <resource> declarations of a Canvas-exported imsmanifest.xml and
turn the ones a reviewer cares about into typed Resource records.

How a declaration is handled
----------------------------
1) Supporting resources (quiz settings, discussion settings) are resolved
   for the whole manifest first, so a settings holder is never listed on
   its own no matter where it is declared.
2) Exclusions: LTI links, question banks, the course-settings sentinel
   and web_resources/ files are skipped.
3) Classification: an ordered table of (predicate, clarified type,
   builder). Predicates are exclusive by construction: the syllabus
   predicate keys on the identifier suffix and every other predicate
   refuses that suffix, and the rest key on disjoint type families.
   The table checks each rule's exemplar against all predicates when
   it is built.
4) Anything the table does not match is dropped.
"""
from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Set, Tuple

from bs4 import BeautifulSoup

from .config import (
    ACTIVE,
    AVAILABLE,
    MANIFEST_PATH,
    UNTITLED,
    WEB_RESOURCES_PREFIX,
    AnalysisConfig,
)
from .errors import MissingPackageEntryError, UnresolvedDependencyError
from .models import (
    ANNOUNCEMENT,
    ASSIGNMENT,
    DISCUSSION,
    MODULE_LINK,
    PAGE,
    QUIZ,
    SURVEY,
    SYLLABUS,
    AnalysisType,
    Resource,
)
from .xmltools import first_text, iter_named, parse_xml, parse_xml_or_none

logger = logging.getLogger(__name__)

# Raw manifest type strings
LTI_TYPE = 'imsbasiclti_xmlv1p3'
WEBLINK_TYPE = 'imswl_xmlv1p1'
WEBCONTENT_TYPE = 'webcontent'
LEARNING_APP_TYPE_HINT = 'associatedcontent/imscc_xmlv1p1/learning-application-resource'
QTI_TYPE_HINT = 'imsqti_xmlv1p2/imscc_xmlv1p1/assessment'
DISCUSSION_TYPE_HINT = 'imsdt_xmlv1p1'

# href / identifier markers
QUESTION_BANK_HINT = 'non_cc_assessments'
COURSE_SETTINGS_SENTINEL = 'canvas_export.txt'
COURSE_SETTINGS_PREFIX = 'course_settings/'
WIKI_CONTENT_PREFIX = 'wiki_content/'
SYLLABUS_ID_SUFFIX = '_syllabus'
ASSIGNMENT_SETTINGS_SUFFIX = 'assignment_settings.xml'


@dataclass(frozen=True)
class ManifestEntry:
    """The parts of one manifest <resource> that classification looks at."""

    identifier: str
    type: str
    href: Optional[str] = None
    file_href: Optional[str] = None
    dependency_ref: Optional[str] = None
    position: int = 0

    @classmethod
    def from_element(cls, el: ET.Element, position: int) -> "ManifestEntry":
        file_el = el.find('{*}file')
        dep_el = el.find('{*}dependency')
        return cls(
            identifier=el.get('identifier') or '',
            type=el.get('type') or '',
            href=el.get('href') or None,
            file_href=(file_el.get('href') or None) if file_el is not None else None,
            dependency_ref=(dep_el.get('identifierref') or None) if dep_el is not None else None,
            position=position,
        )

    @property
    def source_href(self) -> Optional[str]:
        return self.file_href or self.href


def read_manifest_entries(manifest_text: str) -> List[ManifestEntry]:
    root = parse_xml(manifest_text)
    entries: List[ManifestEntry] = []
    for position, el in enumerate(iter_named(root, 'resource')):
        entry = ManifestEntry.from_element(el, position)
        if not entry.identifier:
            logger.warning("Manifest resource #%d has no identifier; skipped", position)
            continue
        entries.append(entry)
    return entries


# ---------------------------------------------------------------------------
# Scan state
# ---------------------------------------------------------------------------

class ManifestScan:
    """One pass over the manifest: entries, package text and the supporting-resource set."""

    def __init__(self, entries: Sequence[ManifestEntry], file_contents: Dict[str, str],
                 config: AnalysisConfig) -> None:
        self.entries = list(entries)
        self.file_contents = file_contents
        self.config = config
        self.supporting: Set[str] = set()
        self.resolved: Dict[str, Optional[ManifestEntry]] = {}
        self.by_id: Dict[str, ManifestEntry] = {}
        for entry in self.entries:
            self.by_id.setdefault(entry.identifier, entry)

    def read(self, path: Optional[str]) -> Optional[str]:
        if not path:
            return None
        return self.file_contents.get(path)

    def xml(self, path: Optional[str]) -> Optional[ET.Element]:
        return parse_xml_or_none(self.read(path), path or '')

    def html(self, path: Optional[str]) -> Optional[BeautifulSoup]:
        text = self.read(path)
        if text is None:
            return None
        return BeautifulSoup(text, 'html.parser')


def resolve_supporting(entry: ManifestEntry, scan: ManifestScan) -> Optional[ManifestEntry]:
    """Find the settings holder a quiz/discussion depends on and mark it as supporting.

    Returns None when there is no dependency or its file is not in the package.
    """
    if entry.identifier in scan.resolved:
        return scan.resolved[entry.identifier]
    ref = entry.dependency_ref
    target = scan.by_id.get(ref) if ref else None
    if ref and target is None:
        raise UnresolvedDependencyError(entry.identifier, ref)
    if target is not None and (not target.href or target.href not in scan.file_contents):
        logger.warning("Supporting resource %s for %s has no file in the package (%s)",
                       ref, entry.identifier, target.href)
        target = None
    if target is not None:
        scan.supporting.add(target.identifier)
    scan.resolved[entry.identifier] = target
    return target


# ---------------------------------------------------------------------------
# Exclusions
# ---------------------------------------------------------------------------

EXCLUSION_RULES: Tuple[Tuple[str, Callable[[ManifestEntry], bool]], ...] = (
    ('external tool', lambda e: e.type == LTI_TYPE),
    ('question bank', lambda e: QUESTION_BANK_HINT in (e.href or '')),
    ('course settings', lambda e: COURSE_SETTINGS_SENTINEL in (e.href or '')),
    ('web resource file', lambda e: e.type == WEBCONTENT_TYPE
        and (e.href or '').startswith(WEB_RESOURCES_PREFIX)),
)


def exclusion_reason(entry: ManifestEntry) -> Optional[str]:
    for reason, predicate in EXCLUSION_RULES:
        if predicate(entry):
            return reason
    return None


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------

def type_family(content_type: str) -> Optional[str]:
    """Collapse a raw manifest type onto one family; families never overlap."""
    if content_type == WEBLINK_TYPE:
        return 'weblink'
    if content_type == WEBCONTENT_TYPE:
        return 'webcontent'
    if QTI_TYPE_HINT in content_type:
        return 'assessment'
    if DISCUSSION_TYPE_HINT in content_type:
        return 'discussion'
    if LEARNING_APP_TYPE_HINT in content_type:
        return 'learning-application'
    return None


def is_syllabus(e: ManifestEntry) -> bool:
    return e.identifier.endswith(SYLLABUS_ID_SUFFIX) and bool(e.href)


def _family(e: ManifestEntry, family: str) -> bool:
    return not e.identifier.endswith(SYLLABUS_ID_SUFFIX) and type_family(e.type) == family


def is_module_link(e: ManifestEntry) -> bool:
    return _family(e, 'weblink') and bool(e.file_href)


def is_page(e: ManifestEntry) -> bool:
    return _family(e, 'webcontent') and (e.href or '').startswith(WIKI_CONTENT_PREFIX)


def is_assignment(e: ManifestEntry) -> bool:
    href = e.href or ''
    return (_family(e, 'learning-application')
            and href.endswith('html')
            and not href.startswith(COURSE_SETTINGS_PREFIX))


def is_quiz_or_survey(e: ManifestEntry) -> bool:
    return _family(e, 'assessment')


def is_discussion(e: ManifestEntry) -> bool:
    return _family(e, 'discussion')


# ---------------------------------------------------------------------------
# Builders (one per table row)
# ---------------------------------------------------------------------------

def _xml_title(doc: Optional[ET.Element]) -> str:
    title = (first_text(doc, 'title') or '').strip()
    return title or UNTITLED


def _html_title(soup: Optional[BeautifulSoup]) -> str:
    if soup is None or soup.title is None:
        return UNTITLED
    return soup.title.get_text().strip() or UNTITLED


def _text_equals(doc: Optional[ET.Element], name: str, literal: str) -> bool:
    return (first_text(doc, name) or '').strip() == literal


def _resource(entry: ManifestEntry, clarified_type: str, title: str, published: bool,
              analysis_href: Optional[str],
              analysis_type: AnalysisType = AnalysisType.HTML,
              identifier_ref: Optional[str] = None) -> Resource:
    return Resource(
        identifier=entry.identifier,
        title=title,
        identifier_ref=identifier_ref,
        published=published,
        clarified_type=clarified_type,
        content_type=entry.type,
        analysis_href=analysis_href,
        analysis_type=analysis_type,
    )


def build_module_link(entry: ManifestEntry, scan: ManifestScan) -> Optional[Resource]:
    # weblink XML is scanned as markup: its <url href> is the link
    doc = scan.xml(entry.file_href)
    return _resource(entry, MODULE_LINK, _xml_title(doc), False, entry.file_href)


def build_syllabus(entry: ManifestEntry, scan: ManifestScan) -> Optional[Resource]:
    # No structured status exists for the syllabus; it is always listed as published.
    source = entry.source_href
    return _resource(entry, SYLLABUS, _html_title(scan.html(source)), True, source)


def build_page(entry: ManifestEntry, scan: ManifestScan) -> Optional[Resource]:
    source = entry.source_href
    soup = scan.html(source)
    published = False
    if soup is not None:
        meta = soup.find('meta', attrs={'name': 'workflow_state'})
        published = meta is not None and meta.get('content') == ACTIVE
    return _resource(entry, PAGE, _html_title(soup), published, source)


def build_assignment(entry: ManifestEntry, scan: ManifestScan) -> Optional[Resource]:
    prefix = f'{entry.identifier}/'
    settings_href = next((name for name in scan.file_contents
                          if name.startswith(prefix) and name.endswith(ASSIGNMENT_SETTINGS_SUFFIX)),
                         None)
    content_href = next((name for name in scan.file_contents
                         if name.startswith(prefix) and name.endswith('.html')),
                        None)
    settings = scan.xml(settings_href)
    return _resource(entry, ASSIGNMENT, _xml_title(settings),
                     _text_equals(settings, 'workflow_state', ACTIVE), content_href)


def build_quiz(entry: ManifestEntry, scan: ManifestScan) -> Optional[Resource]:
    support = resolve_supporting(entry, scan)
    if support is None:
        return None
    meta = scan.xml(support.href)
    clarified = SURVEY if _text_equals(meta, 'quiz_type', 'survey') else QUIZ
    return _resource(entry, clarified, _xml_title(meta),
                     _text_equals(meta, 'available', AVAILABLE),
                     support.href, AnalysisType.XML, identifier_ref=entry.dependency_ref)


def build_discussion(entry: ManifestEntry, scan: ManifestScan) -> Optional[Resource]:
    support = resolve_supporting(entry, scan)
    if support is None:
        return None
    topic_href = f'{entry.identifier}.xml'
    if scan.read(topic_href) is None:
        logger.warning("Discussion %s has no topic document %s; skipped", entry.identifier, topic_href)
        return None
    topic = scan.xml(topic_href)
    settings = scan.xml(support.href)
    clarified = ANNOUNCEMENT if _text_equals(settings, 'type', 'announcement') else DISCUSSION
    return _resource(entry, clarified, _xml_title(topic),
                     _text_equals(settings, 'workflow_state', ACTIVE),
                     topic_href, AnalysisType.DISCUSSION_XML, identifier_ref=entry.dependency_ref)


# ---------------------------------------------------------------------------
# Classification table
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ResourceRule:
    name: str
    predicate: Callable[[ManifestEntry], bool]
    build: Callable[[ManifestEntry, ManifestScan], Optional[Resource]]
    exemplar: ManifestEntry
    resolves_dependency: bool = False


class ClassificationTable:
    def __init__(self, rules: Sequence[ResourceRule]) -> None:
        self.rules: Tuple[ResourceRule, ...] = tuple(rules)
        for rule in self.rules:
            hits = [r.name for r in self.rules if r.predicate(rule.exemplar)]
            if hits != [rule.name]:
                raise ValueError(f"classification rule {rule.name!r} is not exclusive: "
                                 f"its exemplar matches {hits}")

    def match(self, entry: ManifestEntry) -> Optional[ResourceRule]:
        for rule in self.rules:
            if rule.predicate(entry):
                return rule
        return None


CLASSIFICATION = ClassificationTable([
    ResourceRule(MODULE_LINK, is_module_link, build_module_link,
                 ManifestEntry('l1', WEBLINK_TYPE, file_href='l1.xml')),
    ResourceRule(SYLLABUS, is_syllabus, build_syllabus,
                 ManifestEntry('c1_syllabus', LEARNING_APP_TYPE_HINT,
                               href='course_settings/syllabus.html')),
    ResourceRule(PAGE, is_page, build_page,
                 ManifestEntry('p1', WEBCONTENT_TYPE, href='wiki_content/p1.html')),
    ResourceRule(ASSIGNMENT, is_assignment, build_assignment,
                 ManifestEntry('a1', LEARNING_APP_TYPE_HINT, href='a1/a1.html')),
    ResourceRule(QUIZ, is_quiz_or_survey, build_quiz,
                 ManifestEntry('q1', QTI_TYPE_HINT, dependency_ref='q1_meta'),
                 resolves_dependency=True),
    ResourceRule(DISCUSSION, is_discussion, build_discussion,
                 ManifestEntry('d1', DISCUSSION_TYPE_HINT, dependency_ref='d1_meta'),
                 resolves_dependency=True),
])


# ---------------------------------------------------------------------------
# Inventory
# ---------------------------------------------------------------------------

def collect_supporting_resources(scan: ManifestScan,
                                 table: ClassificationTable = CLASSIFICATION) -> Set[str]:
    """First pass: mark every settings holder before anything is classified."""
    for entry in scan.entries:
        if exclusion_reason(entry):
            continue
        rule = table.match(entry)
        if rule is None or not rule.resolves_dependency:
            continue
        support = resolve_supporting(entry, scan)
        if support is not None and support.position < entry.position:
            logger.warning("Supporting resource %s is declared before its referencer %s",
                           support.identifier, entry.identifier)
    return scan.supporting


def find_out_of_order_supporting(manifest_text: str) -> List[Tuple[str, str]]:
    """(referencer, supporting) pairs where the settings holder is declared first."""
    entries = read_manifest_entries(manifest_text)
    by_id: Dict[str, ManifestEntry] = {}
    for entry in entries:
        by_id.setdefault(entry.identifier, entry)
    pairs: List[Tuple[str, str]] = []
    for entry in entries:
        if not entry.dependency_ref or not (is_quiz_or_survey(entry) or is_discussion(entry)):
            continue
        target = by_id.get(entry.dependency_ref)
        if target is not None and target.position < entry.position:
            pairs.append((entry.identifier, target.identifier))
    return pairs


def inventory_manifest(file_contents: Dict[str, str],
                       config: Optional[AnalysisConfig] = None) -> List[Resource]:
    """Classify the manifest's resources.

    Raises MissingPackageEntryError if imsmanifest.xml is absent and
    UnresolvedDependencyError if a quiz/discussion depends on an undeclared resource.
    """
    config = config or AnalysisConfig()
    manifest_text = file_contents.get(MANIFEST_PATH)
    if not manifest_text:
        raise MissingPackageEntryError(MANIFEST_PATH)

    scan = ManifestScan(read_manifest_entries(manifest_text), file_contents, config)
    collect_supporting_resources(scan)

    resources: List[Resource] = []
    seen: Set[str] = set()
    for entry in scan.entries:
        if entry.identifier in scan.supporting:
            continue
        if entry.identifier in seen:
            logger.warning("Duplicate resource identifier %s; later declaration ignored",
                           entry.identifier)
            continue
        reason = exclusion_reason(entry)
        if reason:
            logger.debug("Skipping %s (%s)", entry.identifier, reason)
            continue
        rule = CLASSIFICATION.match(entry)
        if rule is None:
            logger.debug("Skipping %s: unclassified type %r", entry.identifier, entry.type)
            continue
        resource = rule.build(entry, scan)
        if resource is None:
            continue
        seen.add(resource.identifier)
        resources.append(resource)

    return resources
