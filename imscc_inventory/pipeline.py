"""End-to-end analysis of one course package."""
from __future__ import annotations

import logging
from typing import Optional

from .archive import extract_imscc
from .audit import AuditEngine, audit_resource
from .config import MANIFEST_PATH, AnalysisConfig
from .content import load_analysis_document
from .extract import extract_objects
from .manifest import find_out_of_order_supporting, inventory_manifest
from .models import CourseInventory
from .modules import inventory_modules
from .reconcile import reconcile

logger = logging.getLogger(__name__)


async def analyze_package(blob: bytes, config: Optional[AnalysisConfig] = None,
                          audit_engine: Optional[AuditEngine] = None) -> CourseInventory:
    """Inventory, reconcile, extract and (optionally) audit an .imscc package.

    Resources are processed one at a time: a document is parsed, scanned and
    audited before the next one is loaded. Missing manifest or module
    metadata aborts the whole analysis.
    """
    config = config or AnalysisConfig()

    # 1) Decompress
    file_contents = await extract_imscc(blob)

    # 2) Inventory both trees (either one missing is fatal)
    resources = inventory_manifest(file_contents, config)
    modules = inventory_modules(file_contents, config)
    inventory = CourseInventory(resources, modules)
    inventory.out_of_order_supporting = find_out_of_order_supporting(file_contents[MANIFEST_PATH])

    # 3) Reconcile
    inventory.dangling_items = reconcile(inventory.modules, inventory.resources)

    # 4) Extract and audit, resource by resource
    for resource in inventory.resources:
        doc = load_analysis_document(resource, file_contents)
        if doc is None:
            continue
        extract_objects(resource, doc, config)
        if audit_engine is not None:
            await audit_resource(resource, doc, audit_engine, config)

    logger.info("Analyzed %d resources in %d modules", len(inventory), len(inventory.modules))
    return inventory
