"""Inventory and content analysis for exported Canvas course packages (.imscc)."""
from .archive import extract_imscc, find_first_imscc, read_package
from .audit import AuditEngine, check_accessibility, load_audit_engine
from .config import AnalysisConfig
from .errors import MissingPackageEntryError, UnresolvedDependencyError
from .extract import identify_objects
from .manifest import find_out_of_order_supporting, inventory_manifest
from .models import (
    AccessibilityFinding,
    AnalysisType,
    AuditNode,
    AuditResults,
    AuditRule,
    CourseInventory,
    FileObject,
    LinkObject,
    Module,
    ModuleItem,
    Resource,
    VideoObject,
    readable_type,
)
from .modules import inventory_modules
from .pipeline import analyze_package
from .reconcile import reconcile
from .report import InventoryReport

__version__ = "0.1.0"

__all__ = [
    "AccessibilityFinding",
    "AnalysisConfig",
    "AnalysisType",
    "AuditEngine",
    "AuditNode",
    "AuditResults",
    "AuditRule",
    "CourseInventory",
    "FileObject",
    "InventoryReport",
    "LinkObject",
    "MissingPackageEntryError",
    "Module",
    "ModuleItem",
    "Resource",
    "UnresolvedDependencyError",
    "VideoObject",
    "analyze_package",
    "check_accessibility",
    "extract_imscc",
    "find_first_imscc",
    "find_out_of_order_supporting",
    "identify_objects",
    "inventory_manifest",
    "inventory_modules",
    "load_audit_engine",
    "read_package",
    "readable_type",
    "reconcile",
]
