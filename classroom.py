#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Classroom roster (SQLite)

Commands:
  init                Create the schema and seed cohorts/instructors/students/exercises
  report              Run join reports and print them to the console
  export              Write one report as a flat CSV

Notes:
- The DB path comes from ROSTER_DB_PATH or config.yaml (db_path).
- Every report folds its join rows into a deduplicated object graph before printing;
  --strict makes conflicting values for the same entity an error instead of a warning.
"""

import argparse
import logging
import sys

import pandas as pd

from roster.logs import LogContext
from roster.services import config_svc, render_svc, report_svc
from roster.services.schema_svc import ensure_schema, init_db


def cmd_init(args):
    log = LogContext("INIT_DB", user="cli")
    try:
        res = init_db(log, seeds_dir=args.seeds, reset=args.reset)
    except Exception as e:
        log.write("ERROR", str(e))
        raise
    log.write("OK")
    created = ", ".join(f"{k}={v}" for k, v in res["created"].items())
    print(f"DB initialized and seeded ({created}; skipped={res['skipped']}).")


def cmd_report(args):
    ensure_schema()
    names = args.names or [r["name"] for r in report_svc.list_reports()]
    unknown = [n for n in names if n not in report_svc.REPORTS]
    if unknown:
        raise SystemExit(f"Unknown report: {', '.join(unknown)}")
    sep = config_svc.get_config()["list_separator"]
    strict = True if args.strict else None
    for name in names:
        log = LogContext("REPORT_RUN", user="cli")
        log.set_payload({"name": name, "strict": strict})
        try:
            graph = report_svc.build_report(name, strict)
        except Exception as e:
            log.write("ERROR", str(e))
            raise
        log.set_graph(name, graph)
        log.write("OK")

        print(f"== {report_svc.REPORTS[name].title} ==")
        for line in render_svc.render(name, graph, separator=sep):
            print(line)
        for c in graph.conflicts:
            print(f"[WARN] {c}", file=sys.stderr)
        print()


def cmd_export(args):
    ensure_schema()
    graph = report_svc.build_report(args.name, True if args.strict else None)
    df = pd.DataFrame(render_svc.flatten(args.name, graph))
    df.to_csv(args.out, index=False, encoding="utf-8")
    print(f"Exported {len(df)} rows of {args.name} to {args.out}")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Classroom roster (SQLite)")
    ap.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = ap.add_subparsers(dest="cmd", required=True)

    p = sub.add_parser("init", help="create schema and seed fixtures")
    p.add_argument("--seeds", default=None, help="directory holding the seed CSVs (default: seeds/)")
    p.add_argument("--reset", action="store_true", help="wipe roster tables before seeding")
    p.set_defaults(func=cmd_init)

    p = sub.add_parser("report", help="print reports")
    p.add_argument("names", nargs="*", metavar="NAME", help="report names (default: all)")
    p.add_argument("--strict", action="store_true")
    p.set_defaults(func=cmd_report)

    p = sub.add_parser("export", help="export one report to CSV")
    p.add_argument("name", choices=list(report_svc.REPORTS))
    p.add_argument("--out", required=True)
    p.add_argument("--strict", action="store_true")
    p.set_defaults(func=cmd_export)
    return ap


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    args.func(args)


if __name__ == "__main__":
    main()
