"""
Inventory data model.

Resources come from the manifest, modules from module_meta.xml. The two
trees only meet through identifiers: a ModuleItem names its backing
resource in `identifier_ref` and never holds the Resource itself.
Extracted objects and audit findings point back at their resource the
same way (`parent_resource_identifier`).
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple


class AnalysisType(str, enum.Enum):
    """How a resource's analysis file turns into an HTML fragment."""

    HTML = "html"                      # the file is the HTML
    XML = "xml"                        # HTML escaped inside <description>
    DISCUSSION_XML = "discussion_xml"  # HTML escaped inside <text>


# Clarified types (closed set) -------------------------------------------------
MODULE_LINK = "module-link"
SYLLABUS = "syllabus"
PAGE = "page"
ASSIGNMENT = "assignment"
QUIZ = "quiz"
SURVEY = "survey"
DISCUSSION = "discussion"
ANNOUNCEMENT = "announcement"

CLARIFIED_TYPES = frozenset({
    MODULE_LINK, SYLLABUS, PAGE, ASSIGNMENT, QUIZ, SURVEY, DISCUSSION, ANNOUNCEMENT,
})

# Module items carry this until reconciliation finds their resource.
PENDING_TYPE = "tbd"

# Link targets
COURSE_LINK = "course"
INSTITUTION_LINK = "institution"
EXTERNAL_LINK = "external"

READABLE_TYPES: Dict[str, str] = {
    "contextmodulesubheader": "header",
    "externalurl": "link",
    MODULE_LINK: "link",
    SYLLABUS: "syllabus",
    PAGE: "page",
    ASSIGNMENT: "assignment",
    QUIZ: "quiz",
    SURVEY: "survey",
    DISCUSSION: "discussion",
    ANNOUNCEMENT: "announcement",
}

EXTENSION_COMMON_NAMES: Dict[str, str] = {
    ".ppt": "PowerPoint (ppt)",
    ".pptx": "PowerPoint (pptx)",
    ".doc": "Word (doc)",
    ".docx": "Word (docx)",
    ".xls": "Excel (xls)",
    ".xlsx": "Excel (xlsx)",
    ".csv": "CSV (csv)",
    ".jpg": "Image (jpg)",
    ".jpeg": "Image (jpeg)",
    ".png": "Image (png)",
    ".gif": "Image (gif)",
    ".mp4": "Video (mp4)",
    ".mp3": "Audio (mp3)",
    ".pdf": "PDF",
    ".txt": "Text File",
    ".zip": "ZIP Archive",
    ".rar": "RAR Archive",
}


def readable_type(clarified_type: Optional[str]) -> Optional[str]:
    """Display label for a clarified type or a raw module content type."""
    if clarified_type is None:
        return None
    return READABLE_TYPES.get(clarified_type.lower())


# Extracted content objects ---------------------------------------------------

@dataclass
class LinkObject:
    url: str
    text: str
    type: str
    parent_resource_identifier: str


@dataclass
class FileObject:
    href: str
    parent_anchor_text: str
    parent_resource_identifier: str
    extension: Optional[str] = None

    @property
    def extension_label(self) -> Optional[str]:
        if self.extension is None:
            return None
        return EXTENSION_COMMON_NAMES.get(self.extension.lower(), self.extension.lower())


@dataclass
class VideoObject:
    title: str
    platform: str
    type: str  # 'embed' or 'link'
    src: str
    transcript_or_caption_mentioned: bool
    parent_resource_identifier: str


# Audit engine contract --------------------------------------------------------

AUDIT_CATEGORIES: Tuple[str, ...] = ("violations", "passes", "incomplete", "inapplicable")


@dataclass
class AuditNode:
    html: str
    target: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AuditNode":
        target = data.get("target") or []
        if isinstance(target, str):
            target = [target]
        return cls(html=data.get("html", ""), target=[str(t) for t in target])


@dataclass
class AuditRule:
    """One rule outcome as reported by the audit engine."""

    id: str
    help: str = ""
    help_url: str = ""
    impact: Optional[str] = None
    description: str = ""
    tags: List[str] = field(default_factory=list)
    nodes: List[AuditNode] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AuditRule":
        # axe-style keys (helpUrl) and snake_case are both accepted
        return cls(
            id=data["id"],
            help=data.get("help", ""),
            help_url=data.get("helpUrl", data.get("help_url", "")),
            impact=data.get("impact"),
            description=data.get("description", ""),
            tags=list(data.get("tags") or []),
            nodes=[AuditNode.from_dict(n) for n in data.get("nodes") or []],
        )


@dataclass
class AuditResults:
    violations: List[AuditRule] = field(default_factory=list)
    passes: List[AuditRule] = field(default_factory=list)
    incomplete: List[AuditRule] = field(default_factory=list)
    inapplicable: List[AuditRule] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AuditResults":
        return cls(**{
            category: [AuditRule.from_dict(r) for r in data.get(category) or []]
            for category in AUDIT_CATEGORIES
        })


@dataclass
class AccessibilityFinding:
    """An audit rule outcome tagged with its category and a snapshot of its resource."""

    type: str
    parent_resource_identifier: str
    parent_resource_title: str
    parent_resource_type: Optional[str]
    parent_resource_published: bool
    parent_resource_module_title: Optional[str]
    rule: AuditRule

    @property
    def nodes_html(self) -> List[str]:
        return [node.html for node in self.rule.nodes]


# Inventory ----------------------------------------------------------------------

@dataclass
class Resource:
    identifier: str
    title: str
    identifier_ref: Optional[str]
    published: bool
    clarified_type: Optional[str]
    content_type: str
    analysis_href: Optional[str] = None
    analysis_type: AnalysisType = AnalysisType.HTML
    module_title: Optional[str] = None
    links: List[LinkObject] = field(default_factory=list)
    videos: List[VideoObject] = field(default_factory=list)
    attachments: List[FileObject] = field(default_factory=list)
    accessibility_results: Optional[List[AccessibilityFinding]] = None


@dataclass
class ModuleItem:
    identifier: str
    title: str
    identifier_ref: Optional[str]
    module_title: str
    published: bool
    indent: int
    clarified_type: str
    content_type: str


@dataclass
class Module:
    identifier: str
    title: str
    published: bool
    items: List[ModuleItem] = field(default_factory=list)


class CourseInventory:
    """Resources keyed by identifier plus the ordered module outline.

    Module items reference resources through this store, never directly.
    """

    def __init__(self, resources: Iterable[Resource], modules: Iterable[Module]) -> None:
        self._resources: Dict[str, Resource] = {}
        for resource in resources:
            if resource.identifier in self._resources:
                raise ValueError(f"duplicate resource identifier {resource.identifier!r}")
            self._resources[resource.identifier] = resource
        self.modules: List[Module] = list(modules)
        self.dangling_items: List[ModuleItem] = []
        # (referencer, supporting) pairs declared in the "wrong" order
        self.out_of_order_supporting: List[Tuple[str, str]] = []

    @property
    def resources(self) -> List[Resource]:
        return list(self._resources.values())

    def resource(self, identifier: Optional[str]) -> Optional[Resource]:
        if identifier is None:
            return None
        return self._resources.get(identifier)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._resources

    def __len__(self) -> int:
        return len(self._resources)

    def module_items(self) -> Iterator[ModuleItem]:
        for module in self.modules:
            yield from module.items

    def all_links(self) -> List[LinkObject]:
        return [link for r in self._resources.values() for link in r.links]

    def all_attachments(self) -> List[FileObject]:
        return [f for r in self._resources.values() for f in r.attachments]

    def all_videos(self) -> List[VideoObject]:
        return [v for r in self._resources.values() for v in r.videos]

    def all_findings(self) -> List[AccessibilityFinding]:
        return [
            finding
            for r in self._resources.values()
            for finding in (r.accessibility_results or [])
        ]
