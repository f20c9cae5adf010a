"""Printed end-of-run summary of a CourseInventory."""
from __future__ import annotations

from collections import Counter
from typing import List, Optional, Tuple

from .models import AUDIT_CATEGORIES, CourseInventory, readable_type
from .config import PHANTOM_LINK


class InventoryReport:
    def __init__(self, inventory: CourseInventory) -> None:
        resources = inventory.resources
        self.resource_count: int = len(resources)
        self.published_count: int = sum(1 for r in resources if r.published)
        self.by_type: Counter = Counter(
            readable_type(r.clarified_type) or (r.clarified_type or 'unknown') for r in resources
        )
        self.module_count: int = len(inventory.modules)
        self.item_count: int = sum(len(m.items) for m in inventory.modules)
        # (module title, item title, identifierref)
        self.dangling: List[Tuple[str, str, Optional[str]]] = [
            (i.module_title, i.title, i.identifier_ref) for i in inventory.dangling_items
        ]
        self.out_of_order: List[Tuple[str, str]] = list(inventory.out_of_order_supporting)

        self.links_by_type: Counter = Counter(link.type for link in inventory.all_links())
        attachments = inventory.all_attachments()
        self.attachment_count: int = len(attachments)
        self.phantom_links: int = sum(1 for f in attachments if f.parent_anchor_text == PHANTOM_LINK)
        videos = inventory.all_videos()
        self.video_count: int = len(videos)
        self.videos_without_transcript: int = sum(
            1 for v in videos if not v.transcript_or_caption_mentioned
        )
        self.audited: int = sum(1 for r in resources if r.accessibility_results is not None)
        self.findings_by_type: Counter = Counter(f.type for f in inventory.all_findings())

    def print_summary(self) -> None:
        print("\n=== IMSCC Course Inventory Summary ===")
        print(f"- Resources: {self.resource_count} ({self.published_count} published)")
        for label, count in sorted(self.by_type.items()):
            print(f"    • {label}: {count}")

        print(f"- Modules: {self.module_count} ({self.item_count} items)")
        if self.dangling:
            print("- Module items whose reference did not resolve:")
            for module_title, title, ref in self.dangling:
                print(f"    • [{module_title}] {title} -> {ref}")

        if self.out_of_order:
            print("- Supporting resources declared before their referencer:")
            for referencer, supporting in self.out_of_order:
                print(f"    • {supporting} (used by {referencer})")

        print(f"- Links: {sum(self.links_by_type.values())}")
        for link_type, count in sorted(self.links_by_type.items()):
            print(f"    • {link_type}: {count}")

        print(f"- File attachments: {self.attachment_count}")
        if self.phantom_links:
            print(f"    • phantom links (no anchor text): {self.phantom_links}")

        print(f"- Videos: {self.video_count}")
        if self.videos_without_transcript:
            print(f"    • no transcript/caption mentioned nearby: {self.videos_without_transcript}")

        if self.audited:
            print(f"- Accessibility audit ({self.audited} resources audited):")
            for category in AUDIT_CATEGORIES:
                print(f"    • {category}: {self.findings_by_type.get(category, 0)}")

        print("======================================\n")
