"""
CLI (Command Line Interface).

    unisport scrape [--csv out.csv] [--pickle out.pkl] [--raw-dir DIR]
    unisport courses
    unisport extract <course_page.html>
    unisport show <dataset.csv|dataset.pkl>

Note:
- scrape/courses go to the network, extract/show only read local files
- diagnostics go through logging, results are printed as plain text
"""

from __future__ import annotations

import argparse
import logging
import pickle
from pathlib import Path

from unisport.config import ScrapeConfig, load_config
from unisport.dataset import iter_records, read_dataset, write_dataset
from unisport.errors import ScrapeError
from unisport.extract import extract_index, extract_records
from unisport.fetch import Fetcher
from unisport.logger import setup_logging
from unisport.model import CoursePage
from unisport.pipeline import load_index, run_pipeline
from unisport.tree import parse_html


def _processed_dir() -> Path:
    """
    Default output directory for scraped datasets.
    """
    base_dir = Path(__file__).resolve().parent
    return base_dir / "data" / "processed"


def _config_from_args(args: argparse.Namespace) -> ScrapeConfig:
    config = load_config(args.config) if args.config else ScrapeConfig()
    config = config.with_overrides(
        index_url=args.index_url,
        base_url=args.base_url,
        timeout=args.timeout,
        max_workers=args.workers,
    )
    if args.verify_all:
        config = config.with_overrides(insecure_hosts=())
    return config


def _print_records(df) -> None:
    for rec in iter_records(df):
        print(f"{rec.course} | {rec.level} | {rec.day} | {rec.time} | {rec.period} | {rec.price}")


def _cmd_scrape(args: argparse.Namespace) -> int:
    """
    Run the whole pipeline and export the dataset.
    """
    config = _config_from_args(args)
    result = run_pipeline(config, raw_dir=args.raw_dir)

    csv_path = args.csv
    if csv_path is None and args.pickle is None:
        csv_path = _processed_dir() / "courses.csv"

    for p in write_dataset(result.dataset, csv_path=csv_path, pickle_path=args.pickle):
        print(f"Written: {p}")

    print(f"Courses: {len(result.courses)}  free: {len(result.free)}  failed: {len(result.failures)}")
    print(f"Rows: {len(result.dataset)}")
    for url, reason in result.failures.items():
        print(f"- {url}: {reason}")
    return 0


def _cmd_courses(args: argparse.Namespace) -> int:
    """
    List course names and links of the index page.
    """
    config = _config_from_args(args)
    index = load_index(config, Fetcher(config))
    refs = extract_index(index, config.selectors)

    if not refs:
        print("No courses found.")
        return 0

    for ref in refs:
        print(f"{ref.name} | {config.base_url}{ref.href}")
    return 0


def _cmd_extract(args: argparse.Namespace) -> int:
    """
    Extract the sessions of one saved course page.
    """
    html_path = Path(args.file)
    try:
        html = html_path.read_text(encoding="utf-8")
    except OSError as e:
        print(f"Cannot read {html_path}: {e}")
        return 1

    config = ScrapeConfig()
    page = CoursePage(name=html_path.stem, url=str(html_path), document=parse_html(html, source=str(html_path)))
    df = extract_records(page, config.selectors, args.marker or config.currency_marker)

    if df.empty:
        print("No sessions.")
        return 0

    _print_records(df)
    return 0


def _cmd_show(args: argparse.Namespace) -> int:
    """
    Print a previously exported dataset.
    """
    try:
        df = read_dataset(args.file)
    except (OSError, ValueError, EOFError, pickle.UnpicklingError) as e:
        print(f"Cannot read {args.file}: {e}")
        return 1

    print(f"Rows: {len(df)}  courses: {df['Course'].nunique() if len(df) else 0}")
    _print_records(df)
    return 0


def _add_network_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--config", type=Path, default=None, help="JSON file with config overrides")
    p.add_argument("--index-url", type=str, default=None, help="URL of the course index page")
    p.add_argument("--base-url", type=str, default=None, help="Prefix for relative course links")
    p.add_argument("--timeout", type=float, default=None, help="Request timeout in seconds")
    p.add_argument("--workers", type=int, default=None, help="Parallel course page downloads")
    p.add_argument("--verify-all", action="store_true", help="Verify TLS certificates for every host")


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="unisport", description="University sports course scraper")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    parser.add_argument("--log-file", type=Path, default=None, help="Also log to this file")
    sub = parser.add_subparsers(dest="command", required=True)

    p_scrape = sub.add_parser("scrape", help="Scrape all courses into one dataset")
    _add_network_args(p_scrape)
    p_scrape.add_argument("--csv", type=Path, default=None, help="CSV output file")
    p_scrape.add_argument("--pickle", type=Path, default=None, help="Pickled DataFrame output file")
    p_scrape.add_argument("--raw-dir", type=Path, default=None, help="Also save fetched course pages here")

    p_courses = sub.add_parser("courses", help="List courses of the index page")
    _add_network_args(p_courses)

    p_extract = sub.add_parser("extract", help="Extract sessions from a saved course page")
    p_extract.add_argument("file", type=str, help="HTML file of one course page")
    p_extract.add_argument("--marker", type=str, default=None, help="Currency marker (default: €)")

    p_show = sub.add_parser("show", help="Print an exported dataset (.csv or .pkl)")
    p_show.add_argument("file", type=str, help="Dataset file")

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else logging.INFO, log_file=args.log_file)

    handlers = {
        "scrape": _cmd_scrape,
        "courses": _cmd_courses,
        "extract": _cmd_extract,
        "show": _cmd_show,
    }
    handler = handlers.get(args.command)
    if handler is None:
        raise SystemExit(2)

    try:
        raise SystemExit(handler(args))
    except ScrapeError as e:
        print(f"Error: {e}")
        raise SystemExit(1)
