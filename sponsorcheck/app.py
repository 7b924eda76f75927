import argparse
import json
import sys
from pathlib import Path
from typing import Optional, Tuple

from . import __version__
from .analyzer import Verdict, analyze
from .config import Settings, load_settings
from .extract import extract_job_id
from .logger import get_logger
from .monitor import PageMonitor
from .page import Page
from .timers import ManualScheduler
from .urls import is_job_page


def _read_text(path: Optional[str]) -> str:
    if not path or path == "-":
        return sys.stdin.read()
    input_path = Path(path)
    if not input_path.exists():
        raise SystemExit(f"Input file not found: {input_path}")
    return input_path.read_text(encoding="utf-8")


def print_verdict(verdict: Verdict, as_json: bool = False) -> None:
    if as_json:
        print(json.dumps(verdict.to_dict(), indent=2, ensure_ascii=False))
        return
    print(f"Status: {verdict.message} ({verdict.status.value})")
    print(f"Confidence: {verdict.confidence.label}")
    if verdict.cited_phrase:
        print(f"Cited: {verdict.cited_phrase}")
    if verdict.evidence:
        print("Evidence:")
        for e in verdict.evidence:
            print(f" - [{e.tier.name.lower()}] {e.phrase}")


def cmd_analyze(args: argparse.Namespace, settings: Settings) -> None:
    text = _read_text(args.input)
    print_verdict(analyze(text), as_json=args.json)


def scan_page(html: str, url: str, settings: Settings) -> Tuple[Page, Optional[Verdict]]:
    """Run the monitor over a saved page until its first cycle has settled."""
    page = Page(html, url)
    scheduler = ManualScheduler()
    monitor = PageMonitor(page, scheduler, settings=settings)
    monitor.attach()
    scheduler.advance(settings.retry_delay * settings.max_extraction_retries + settings.highlight_delay)
    verdict = monitor.state.verdict
    monitor.detach()
    return page, verdict


def cmd_scan(args: argparse.Namespace, settings: Settings) -> None:
    html_path = Path(args.html)
    if not html_path.exists():
        raise SystemExit(f"HTML file not found: {html_path}")
    html = html_path.read_text(encoding="utf-8")

    page, verdict = scan_page(html, args.url, settings)
    print(f"Job: {extract_job_id(page) or 'unknown'}")
    if verdict is None:
        reason = "no description found" if is_job_page(args.url) else "not a job page"
        print(f"No verdict ({reason}).")
        raise SystemExit(2)
    print_verdict(verdict, as_json=args.json)

    if args.output:
        out = Path(args.output)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(str(page.soup), encoding="utf-8")
        if not args.json:
            print(f"Rendered page written to {out}")


def main(argv=None):
    try:
        settings = load_settings()
    except ValueError as e:
        raise SystemExit(str(e))
    parser = argparse.ArgumentParser(prog="sponsorcheck", description="Visa sponsorship checker for job postings")
    parser.add_argument("--version", action="store_true", help="Show version")

    subparsers = parser.add_subparsers(dest="command")
    ana = subparsers.add_parser("analyze", help="Classify a job description text file (or stdin)")
    ana.add_argument("--input", help="Path to a text file with the description (default: stdin)")
    ana.add_argument("--json", action="store_true", help="Print the verdict as JSON")
    ana.set_defaults(func=cmd_analyze)

    scn = subparsers.add_parser("scan", help="Extract, classify and badge a saved job page")
    scn.add_argument("--html", required=True, help="Path to the saved HTML page")
    scn.add_argument("--url", required=True, help="URL the page was saved from")
    scn.add_argument("--output", help="Write the page with badge and highlights to this path")
    scn.add_argument("--json", action="store_true", help="Print the verdict as JSON")
    scn.set_defaults(func=cmd_scan)

    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    get_logger(
        level=settings.log_level,
        log_dir=Path(settings.log_dir) if settings.log_dir else None,
        enable_file=bool(settings.log_dir),
        enable_console=not getattr(args, "json", False),
    )

    if hasattr(args, "func"):
        args.func(args, settings)
        return

    parser.print_help()


if __name__ == "__main__":
    main()
