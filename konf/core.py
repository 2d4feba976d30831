#!/usr/bin/env python
#
# Command line tool to parse a Kconfig file and output the parsed
# document in canonical Kconfig form or as JSON.
#
# SPDX-FileCopyrightText: 2025 Espressif Systems (Shanghai) CO LTD
# SPDX-License-Identifier: Apache-2.0
import argparse
import json
import os
import sys
import tempfile

from konf import __version__
from konf.ast import Document
from konf.errors import KconfigParseError
from konf.parser import parse_file
from konf.printer import dump
from konf.printer import to_dict
from konf.report import ParseReport


class FatalError(RuntimeError):
    """
    Class for runtime errors (not caused by bugs but by user input).
    """

    pass


def write_kconfig(document: Document, filename: str) -> None:
    with open(filename, "w", encoding="utf-8") as f:
        f.write(dump(document))


def write_json(document: Document, filename: str) -> None:
    with open(filename, "w", encoding="utf-8") as f:
        json.dump(to_dict(document), f, indent=4)
        f.write("\n")


OUTPUT_FORMATS = {
    "kconfig": write_kconfig,
    "json": write_json,
}

REPORT_FORMATS = ("text", "json", "none")


def update_if_changed(source: str, destination: str) -> None:
    with open(source, "r", encoding="utf-8") as f:
        source_contents = f.read()

    if os.path.exists(destination):
        with open(destination, "r", encoding="utf-8") as f:
            dest_contents = f.read()
        if source_contents == dest_contents:
            return  # nothing to update

    with open(destination, "w", encoding="utf-8") as f:
        f.write(source_contents)


def write_outputs(document: Document, outputs) -> None:
    for output_type, filename in outputs:
        with tempfile.NamedTemporaryFile(prefix="konf_tmp", delete=False) as f:
            temp_file = f.name
        try:
            output_function = OUTPUT_FORMATS[output_type]
            output_function(document, temp_file)
            update_if_changed(temp_file, filename)
        finally:
            try:
                os.remove(temp_file)
            except OSError:
                pass


def print_report(report: ParseReport, report_format: str, report_file=None) -> None:
    if report_format == "text":
        report.print_report(report_file)
    elif report_format == "json":
        report.output_json(report_file)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="konf v%s - Kconfig parser" % __version__,
        prog="konf",
    )

    parser.add_argument("kconfig", help="Kconfig file to parse", nargs="?", default="Kconfig")

    parser.add_argument(
        "--output",
        nargs=2,
        action="append",
        help="Write output file (format and output filename). "
        "Without any --output, the document is printed to stdout in kconfig format.",
        metavar=("FORMAT", "FILENAME"),
        default=[],
    )

    parser.add_argument(
        "--report",
        choices=REPORT_FORMATS,
        default="text",
        help="Format of the parse report printed to stderr (or to --report-file)",
    )

    parser.add_argument("--report-file", help="Write the parse report to this file instead of stderr", default=None)

    parser.add_argument(
        "--env",
        action="append",
        default=[],
        help="Environment to set before parsing (e.g. KONF_REPORT_VERBOSITY=verbose)",
        metavar="NAME=VAL",
    )

    parser.add_argument("--encoding", default="utf-8", help="Encoding of the Kconfig file")
    args = parser.parse_args(argv)

    for fmt, _ in args.output:
        if fmt not in OUTPUT_FORMATS.keys():
            raise FatalError("Format '%s' not recognised. Known formats: %s" % (fmt, ", ".join(OUTPUT_FORMATS)))

    try:
        args.env = [(name, value) for (name, value) in (e.split("=", 1) for e in args.env)]
    except ValueError:
        raise FatalError("--env arguments must each contain =. To unset an environment variable, use 'ENV='")

    for name, value in args.env:
        os.environ[name] = value

    if not os.path.isfile(args.kconfig):
        raise FatalError("Kconfig file not found: %s" % args.kconfig)

    report = ParseReport(args.kconfig)
    try:
        document = parse_file(args.kconfig, encoding=args.encoding)
    except UnicodeDecodeError as e:
        raise FatalError("Cannot decode %s as %s: %s" % (args.kconfig, args.encoding, e))
    except KconfigParseError as e:
        report.add_error(e)
        if args.report == "none":
            print(e.explain(), file=sys.stderr)
        else:
            print_report(report, args.report, args.report_file)
        return 1

    report.inspect(document)
    print_report(report, args.report, args.report_file)

    if args.output:
        write_outputs(document, args.output)
    else:
        sys.stdout.write(dump(document))
    return 0
