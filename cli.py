"""
Console workflow: screen every PDF in a folder against one domain.

    python cli.py --domain fullstack --folder ./resumes

Missing ``--domain`` / ``--folder`` values are asked for interactively. One
``Domain_Report_<name>.docx`` is written per screened resume.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional, Set

from parsers.pdf import list_pdf_files
from reports.docx_report import write_report
from schemas import ScreeningResult
from screening.config import configure_logging, load_settings
from screening.errors import GatewayError
from screening.llm_gateway import LLMGateway, build_gateway
from screening.orchestrator import screen_batch
from screening.skills import load_catalog

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Screen PDF resumes against a domain skill profile.")
    parser.add_argument("--domain", help="Domain id, e.g. fullstack")
    parser.add_argument("--folder", help="Folder containing PDF resumes")
    parser.add_argument("--output-dir", default=".", help="Where to write the .docx reports (default: current dir)")
    parser.add_argument("--json", dest="json_path", help="Also write all results to this JSON file")
    parser.add_argument("--no-reports", action="store_true", help="Skip writing .docx reports")
    parser.add_argument("--log-level", help="Logging level (default: LOG_LEVEL or INFO)")
    return parser


def _ask(prompt: str) -> str:
    return input(f"\n{prompt}\n>> ").strip()


def _print_summary(results: List[ScreeningResult], unsaved: Set[str]) -> None:
    width = max(len(r.file_name) for r in results)
    print()
    print(f"{'File'.ljust(width)}  Score  Selected")
    for r in results:
        status = "ERROR" if r.is_error else ("YES" if r.selected else "NO")
        note = "  (report not written)" if r.file_name in unsaved else ""
        print(f"{r.file_name.ljust(width)}  {r.match_score:>5}  {status}{note}")


def main(argv: Optional[List[str]] = None, gateway: Optional[LLMGateway] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings()
    configure_logging(args.log_level or settings.log_level)
    catalog = load_catalog(settings.domain_skills_file)

    domain = args.domain or _ask(f"Enter Domain ({'/'.join(catalog.domains)}):")
    if domain not in catalog:
        print("Invalid domain!")
        return 1
    domain = domain.strip().lower()

    folder = args.folder or _ask("Enter Resume Folder Path:")
    try:
        pdfs = list_pdf_files(folder)
    except OSError as e:
        print(f"Error: {e}")
        return 1
    if not pdfs:
        print("No PDF files found!")
        return 1
    print(f"\nFound {len(pdfs)} resumes...\n")

    try:
        gateway = gateway or build_gateway(settings)
    except GatewayError as e:
        print(f"Error: {e}")
        return 1

    unsaved: Set[str] = set()

    def save(result: ScreeningResult) -> None:
        if args.no_reports or result.is_error:
            return
        try:
            write_report(result, args.output_dir)
        except OSError:
            logger.exception(f"Could not write report for {result.file_name}")
            unsaved.add(result.file_name)

    results = screen_batch([(p.name, p) for p in pdfs], domain, catalog, gateway, on_result=save)
    _print_summary(results, unsaved)

    if args.json_path:
        with open(args.json_path, "w", encoding="utf-8") as f:
            json.dump([r.model_dump(by_alias=True) for r in results], f, indent=2)
        print(f"\nResults saved to {args.json_path}")

    failed = sum(1 for r in results if r.is_error)
    if failed:
        print(f"\n{failed} of {len(results)} resume(s) could not be screened.")
    if unsaved:
        print(f"\n{len(unsaved)} report(s) could not be written to {args.output_dir}.")
    print("\nDomain Screening Completed!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
