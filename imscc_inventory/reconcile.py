"""Cross-link module items and manifest resources by identifier."""
from __future__ import annotations

from typing import Dict, Iterable, List

from .models import Module, ModuleItem, Resource


def reconcile(modules: Iterable[Module], resources: Iterable[Resource]) -> List[ModuleItem]:
    """Stamp types and module titles across the two trees, in place.

    For each item whose identifier_ref names a resource: the item takes the
    resource's clarified type (or its own raw content type when the resource
    has none) and the resource takes the item's module title. Items whose
    reference resolves to nothing keep their placeholder type and are
    returned; items without a reference (headers) are neither.
    """
    index: Dict[str, Resource] = {r.identifier: r for r in resources}
    dangling: List[ModuleItem] = []
    for module in modules:
        for item in module.items:
            if item.identifier_ref is None:
                continue
            resource = index.get(item.identifier_ref)
            if resource is None:
                dangling.append(item)
                continue
            item.clarified_type = resource.clarified_type or item.content_type
            resource.module_title = item.module_title
    return dangling
