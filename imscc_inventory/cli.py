"""
analyze-imscc

Usage
-----
$ analyze-imscc
  (prompts for the input file/dir)

Or:
$ analyze-imscc --input /path/to/course.imscc --institution-domain example.edu

If --input is a directory, the first *.imscc (then *.zip) in it is used.
Accessibility auditing runs only when --audit-engine names a factory,
e.g. ``--audit-engine mypkg.axe_bridge:make_engine``.
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .archive import find_first_imscc
from .audit import load_audit_engine
from .config import DEFAULT_INSTITUTION_DOMAINS, AnalysisConfig
from .pipeline import analyze_package
from .report import InventoryReport


def setup_logger(verbose: bool = False) -> logging.Logger:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        stream=sys.stderr,
    )
    return logging.getLogger('imscc_inventory')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Inventory an exported Canvas course package (.imscc): resources, modules, "
                    "links, attachments, videos and accessibility findings.")
    parser.add_argument('--input', '-i', type=str,
                        help="Path to .imscc/.zip file OR a directory containing one")
    parser.add_argument('--institution-domain', action='append', dest='institution_domains',
                        metavar='DOMAIN',
                        help="Domain whose links count as institutional (repeatable; default: "
                             + ", ".join(DEFAULT_INSTITUTION_DOMAINS) + ")")
    parser.add_argument('--audit-engine', type=str, metavar='MODULE:FACTORY',
                        help="Factory returning an accessibility audit engine")
    parser.add_argument('--verbose', '-v', action='store_true', help="Debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    setup_logger(args.verbose)

    if args.input:
        input_path = Path(args.input)
    else:
        raw = input("Enter path to .imscc file OR a directory containing it: ").strip()
        input_path = Path(raw)

    imscc = find_first_imscc(input_path)
    if not imscc or not imscc.exists():
        print("Error: Could not find a .imscc/.zip at that location.", file=sys.stderr)
        sys.exit(2)

    config = AnalysisConfig()
    if args.institution_domains:
        config = AnalysisConfig(institution_domains=tuple(args.institution_domains))

    try:
        engine = load_audit_engine(args.audit_engine) if args.audit_engine else None
        inventory = asyncio.run(analyze_package(imscc.read_bytes(), config, engine))
    except Exception as e:
        print(f"FAILED: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Analyzed: {imscc}")
    InventoryReport(inventory).print_summary()


if __name__ == '__main__':
    main()
