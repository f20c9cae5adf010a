"""
Content object extraction.

Three independent scans over a resource's analysis document:

- links: <a href> and weblink <url href>, minus in-page anchors, mailto
  and Canvas file links; each tagged course / institution / external.
- file attachments: anchors carrying a Canvas file-link class.
- videos: <video>, <iframe> and <a> whose source matches a known
  provider. Neighbouring markup is checked for a "transcript" or
  "caption" mention; that is a hint for reviewers, not a compliance check.

Every object carries only its parent resource's identifier.
"""
from __future__ import annotations

import re
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
from urllib.parse import urlsplit

from bs4 import BeautifulSoup, Tag

from .config import PHANTOM_LINK, TITLE_NOT_FOUND, AnalysisConfig
from .content import load_analysis_document
from .models import (
    COURSE_LINK,
    EXTERNAL_LINK,
    INSTITUTION_LINK,
    FileObject,
    LinkObject,
    Resource,
    VideoObject,
)

FILE_LINK_CLASSES = ('instructure_file_link', 'instructure_scribd_file')

# Canvas export placeholder tokens for in-course targets
COURSE_LINK_PREFIXES = ('$CANVAS', '$IMS-CC-FILEBASE$')
COURSE_LINK_MARKERS = ('$WIKI_REFERENCE$',)

EXTENSION_RE = re.compile(r'\.[A-Za-z0-9]+$')
TRANSCRIPT_RE = re.compile(r'transcript|caption', re.IGNORECASE)


def _has_class(tag: Tag, names: Sequence[str]) -> bool:
    classes = tag.get('class') or []
    if isinstance(classes, str):
        classes = classes.split()
    return any(c in names for c in classes)


def _hostname(href: str) -> str:
    try:
        return (urlsplit(href).hostname or '').lower()
    except ValueError:
        return ''


def classify_link(href: str, institution_domains: Iterable[str]) -> str:
    if href.startswith(COURSE_LINK_PREFIXES) or any(m in href for m in COURSE_LINK_MARKERS):
        return COURSE_LINK
    host = _hostname(href)
    if host and any(host == d or host.endswith('.' + d) for d in institution_domains):
        return INSTITUTION_LINK
    return EXTERNAL_LINK


def find_links(doc: BeautifulSoup, resource_identifier: str,
               config: AnalysisConfig) -> List[LinkObject]:
    links: List[LinkObject] = []
    candidates = doc.find_all('a', href=True) + doc.find_all('url', href=True)
    for tag in candidates:
        href = tag['href']
        if (not href
                or href.startswith('#')
                or href.startswith('mailto')
                or _has_class(tag, FILE_LINK_CLASSES)):
            continue
        links.append(LinkObject(
            url=href,
            text=tag.get_text().strip(),
            type=classify_link(href, config.institution_domains),
            parent_resource_identifier=resource_identifier,
        ))
    return links


def file_extension(href: str) -> Optional[str]:
    """'.pdf' for '.../notes.pdf?download=1'; None when the last segment has no suffix."""
    path = re.split(r'[?#]', href, maxsplit=1)[0]
    m = EXTENSION_RE.search(path.rsplit('/', 1)[-1])
    return m.group(0) if m else None


def find_file_attachments(doc: BeautifulSoup, resource_identifier: str,
                          config: AnalysisConfig) -> List[FileObject]:
    attachments: List[FileObject] = []
    for a in doc.find_all('a'):
        if not _has_class(a, FILE_LINK_CLASSES):
            continue
        href = a.get('href') or ''
        attachments.append(FileObject(
            href=href,
            parent_anchor_text=a.get_text().strip() or PHANTOM_LINK,
            parent_resource_identifier=resource_identifier,
            extension=file_extension(href),
        ))
    return attachments


# Videos ----------------------------------------------------------------------

def video_platform(src: str, platforms: Sequence[Tuple[str, Sequence[str]]]) -> Optional[str]:
    """Provider name for `src`; the last matching table row wins."""
    lowered = src.lower()
    match = None
    for platform, fragments in platforms:
        if any(fragment.lower() in lowered for fragment in fragments):
            match = platform
    return match


def _element_sibling(siblings) -> Optional[Tag]:
    for node in siblings:
        if isinstance(node, Tag):
            return node
    return None


def transcript_or_caption_mentioned(el: Tag) -> bool:
    """Look around the carrier (or its enclosing <p>): one sibling back, two forward."""
    root = el.parent if el.parent is not None and el.parent.name == 'p' else el
    previous = _element_sibling(root.previous_siblings)
    following = _element_sibling(root.next_siblings)
    after = _element_sibling(following.next_siblings) if following is not None else None
    adjacent = ' '.join(n.decode_contents() for n in (previous, following, after) if n is not None)
    return bool(TRANSCRIPT_RE.search(adjacent))


def _video_candidates(doc: BeautifulSoup, config: AnalysisConfig):
    """Yield (element, title, src, platform, kind) for every potential carrier."""
    for el in doc.find_all('video'):
        source = el.find('source')
        src = (source.get('src') if source is not None else None) or el.get('src') or ''
        yield el, el.get('title') or TITLE_NOT_FOUND, src, 'instructure', 'embed'
    for el in doc.find_all('iframe'):
        src = el.get('src') or ''
        yield (el, el.get('title') or TITLE_NOT_FOUND, src,
               video_platform(src, config.video_platforms), 'embed')
    for el in doc.find_all('a'):
        src = el.get('href') or ''
        yield (el, el.get_text() or TITLE_NOT_FOUND, src,
               video_platform(src, config.video_platforms), 'link')


def find_videos(doc: BeautifulSoup, resource_identifier: str,
                config: AnalysisConfig) -> List[VideoObject]:
    videos: List[VideoObject] = []
    for el, title, src, platform, kind in _video_candidates(doc, config):
        if platform is None:
            continue
        videos.append(VideoObject(
            title=title,
            platform=platform,
            type=kind,
            src=src,
            transcript_or_caption_mentioned=transcript_or_caption_mentioned(el),
            parent_resource_identifier=resource_identifier,
        ))
    return videos


# Resource level ----------------------------------------------------------------

def extract_objects(resource: Resource, doc: BeautifulSoup, config: AnalysisConfig) -> None:
    """Replace the resource's links, attachments and videos with what `doc` contains."""
    resource.links = find_links(doc, resource.identifier, config)
    resource.attachments = find_file_attachments(doc, resource.identifier, config)
    resource.videos = find_videos(doc, resource.identifier, config)


def identify_objects(resources: Iterable[Resource], file_contents: Dict[str, str],
                     config: Optional[AnalysisConfig] = None) -> None:
    config = config or AnalysisConfig()
    for resource in resources:
        doc = load_analysis_document(resource, file_contents)
        if doc is None:
            continue
        extract_objects(resource, doc, config)
