from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from shipdoc.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from shipdoc.excel.reader import MalformedSourceError
from shipdoc.excel.writer import export_template_rows
from shipdoc.logging.init import log_summary, set_debug, setup_logging
from shipdoc.services.mapping_proposal import MappingProposalError
from shipdoc.services.orchestrator import ProcessingError, process_all, scan_excel_files
from shipdoc.services.order_pipeline import parse_orders
from shipdoc.services.summary import render_summary_line
from shipdoc.services.template_parser import parse_template

"""CLI entrypoint.

Default run:
- Load config/shipdoc.yml
- Generate one shipment document per order export in source_directory
- Print the SUMMARY line; exit 0 (all success) / 2 (any invalid or failed file) / 1 (fatal)

``--template`` handles a marketplace product template instead (field list as
JSON, or a filled copy of the template with ``--listings``).
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="shipdoc", description="Order export -> carrier shipment document generator")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Config file (default: %(default)s)")
    p.add_argument("--inspect-data", action="store_true", help="Print headers, mapping & first rows then exit")
    p.add_argument("--template", type=Path, help="Parse a product template workbook")
    p.add_argument("--listings", type=Path, help="With --template: JSON list of {field code: value} to export")
    p.add_argument("--out", type=Path, help="With --template: output file (default: stdout for the field list)")
    return p.parse_args(argv)


def _run_template(args: argparse.Namespace, logger) -> int:
    try:
        template = parse_template(args.template)
    except MalformedSourceError as e:
        logger.error(f"template: {e}")
        return EXIT_FATAL

    if args.listings is not None:
        if args.out is None:
            logger.error("--listings requires --out")
            return EXIT_FATAL
        try:
            listings = json.loads(args.listings.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"listings: {e}")
            return EXIT_FATAL
        if not isinstance(listings, list):
            logger.error("listings: expected a JSON list of objects")
            return EXIT_FATAL
        bad = [i for i, item in enumerate(listings) if not isinstance(item, dict)]
        if bad:
            logger.error(f"listings: items {bad} are not JSON objects")
            return EXIT_FATAL
        try:
            args.out.write_bytes(export_template_rows(args.template, template.columns, listings))
        except OSError as e:
            logger.error(f"export: cannot write {args.out}: {e}")
            return EXIT_FATAL
        logger.info(f"exported {len(listings)} listings to {args.out}")
        return EXIT_SUCCESS_ALL

    payload = json.dumps([c.to_dict() for c in template.columns], ensure_ascii=False, indent=2)
    if args.out is None:
        print(payload)
    else:
        args.out.write_text(payload + "\n", encoding="utf-8")
        logger.info(f"wrote {len(template.columns)} fields to {args.out}")
    return EXIT_SUCCESS_ALL


def _inspect_data(cfg) -> int:
    try:
        excel_files = scan_excel_files(Path(cfg.source_directory))
    except ProcessingError as e:
        print(f"inspect: {e}")
        return EXIT_FATAL
    if not excel_files:
        print("inspect: no .xlsx files")
        return EXIT_SUCCESS_ALL
    mapping_file = Path(cfg.mapping_file) if cfg.mapping_file else None
    for f in excel_files:
        print(f"FILE: {f.name}")
        try:
            parsed = parse_orders(f, mapping_file=mapping_file)
        except (MalformedSourceError, MappingProposalError) as e:
            print(f"  read_error: {e}")
            continue
        print(f"  headers={parsed.headers}")
        print(f"  mapping={parsed.mapping}")
        for raw, row in list(zip(parsed.raw_rows, parsed.rows))[:3]:
            print(f"  row {raw.row_number}: {row}")
        print(f"  validation_errors={len(parsed.errors)}")
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # NOTE: None のときのみ sys.argv を読む (テストの main([]) で pytest の引数を拾わないため)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)

    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    if args.template is not None:
        return _run_template(args, logger)

    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.inspect_data:
        return _inspect_data(cfg)

    logger.info(f"Processing files from: {cfg.source_directory}")
    try:
        result = process_all(cfg)
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    total_files = result.success_files + result.failed_files
    summary_line = render_summary_line(total_files, result)
    # log_summary が "SUMMARY " を付与するので先頭を除く
    log_summary(summary_line.removeprefix("SUMMARY "))

    if result.failed_files > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
