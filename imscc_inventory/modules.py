"""Module inventory builder: course_settings/module_meta.xml -> Module/ModuleItem tree."""
from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Dict, List, Optional

from .config import (
    ACTIVE,
    MODULE_META_PATH,
    UNKNOWN_CONTENT_TYPE,
    UNTITLED_ITEM,
    UNTITLED_MODULE,
    AnalysisConfig,
)
from .errors import MissingPackageEntryError
from .models import PENDING_TYPE, Module, ModuleItem
from .xmltools import child_text, iter_named, parse_xml


def parse_indent(text: Optional[str]) -> int:
    try:
        value = int((text or '').strip())
    except ValueError:
        return 0
    return max(value, 0)


def _status(el: ET.Element) -> bool:
    return (child_text(el, 'workflow_state') or '').strip() == ACTIVE


def read_module_item(el: ET.Element, module_title: str) -> ModuleItem:
    ref = (child_text(el, 'identifierref') or '').strip()
    return ModuleItem(
        identifier=el.get('identifier') or '',
        title=(child_text(el, 'title') or '').strip() or UNTITLED_ITEM,
        identifier_ref=ref or None,
        module_title=module_title,
        published=_status(el),
        indent=parse_indent(child_text(el, 'indent')),
        clarified_type=PENDING_TYPE,
        content_type=(child_text(el, 'content_type') or '').strip() or UNKNOWN_CONTENT_TYPE,
    )


def inventory_modules(file_contents: Dict[str, str],
                      config: Optional[AnalysisConfig] = None) -> List[Module]:
    """Read the module outline. Raises MissingPackageEntryError if module_meta.xml is absent."""
    text = file_contents.get(MODULE_META_PATH)
    if not text:
        raise MissingPackageEntryError(MODULE_META_PATH)

    root = parse_xml(text)
    modules: List[Module] = []
    for module_el in iter_named(root, 'module'):
        title = (child_text(module_el, 'title') or '').strip() or UNTITLED_MODULE
        modules.append(Module(
            identifier=module_el.get('identifier') or '',
            title=title,
            published=_status(module_el),
            items=[read_module_item(item_el, title) for item_el in iter_named(module_el, 'item')],
        ))
    return modules
