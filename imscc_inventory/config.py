"""Package paths, heuristics tables and the AnalysisConfig bundle."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

# Well-known package entries ---------------------------------------------------
MANIFEST_PATH = "imsmanifest.xml"
MODULE_META_PATH = "course_settings/module_meta.xml"

# Binary course files; never decoded or inventoried as standalone resources.
WEB_RESOURCES_PREFIX = "web_resources/"

# Placeholders ------------------------------------------------------------------
UNTITLED = "untitled"
UNTITLED_MODULE = "untitled module"
UNTITLED_ITEM = "untitled item"
UNKNOWN_CONTENT_TYPE = "unknown"
TITLE_NOT_FOUND = "(REMEDIATE: Title Not Found)"
PHANTOM_LINK = "(REMEDIATE: Phantom Link)"

# Canvas status literals
ACTIVE = "active"
AVAILABLE = "true"

# Link classification -----------------------------------------------------------
DEFAULT_INSTITUTION_DOMAINS: Tuple[str, ...] = ("osu.edu", "ohio-state.edu")

# Video providers: (platform, url fragments). Later rows win when several match,
# so the generic external-tool launcher stays last.
DEFAULT_VIDEO_PLATFORMS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("youtube", ("www.youtube.com/embed/", "www.youtube.com/watch", "youtu.be")),
    ("vimeo", ("player.vimeo.com", "vimeo.com")),
    ("mediasite", (
        "https://mediasite.osu.edu/mediasite/lti/home/coverplay",
        "mediasite.osu.edu/mediasite/play",
    )),
    ("echo360", ("echo360.com/media",)),
    ("panopto", ("osucon.hosted.panopto.com",)),
    ("instructure", ("instructuremedia.com", "media_attachments_iframe")),
    ("external_tools", ("external_tools",)),
)

# Accessibility audit rule-set profile
DEFAULT_AUDIT_PROFILE: Tuple[str, ...] = ("wcag2a", "wcag2aa", "wcag21a", "wcag21aa")


def normalize_domain(domain: str) -> str:
    return domain.strip().lower().lstrip(".")


@dataclass
class AnalysisConfig:
    """Tunables shared by every pipeline stage."""

    institution_domains: Tuple[str, ...] = DEFAULT_INSTITUTION_DOMAINS
    video_platforms: Tuple[Tuple[str, Tuple[str, ...]], ...] = DEFAULT_VIDEO_PLATFORMS
    audit_profile: Tuple[str, ...] = field(default=DEFAULT_AUDIT_PROFILE)

    def __post_init__(self) -> None:
        self.institution_domains = tuple(
            d for d in (normalize_domain(x) for x in self.institution_domains) if d
        )
        self.audit_profile = tuple(self.audit_profile)
