# SPDX-FileCopyrightText: 2025 Espressif Systems (Shanghai) CO LTD
# SPDX-License-Identifier: Apache-2.0

"""
Parse report.

The parser itself accepts every structurally valid document (duplicate names, empty names, ...).
ParseReport collects observations about such documents, which may be interesting for the user,
and prints them at the end as one report.
"""

import json
import os
import textwrap
from abc import ABC
from abc import abstractmethod
from collections import Counter
from typing import Dict
from typing import List
from typing import Optional
from typing import Set

from rich import print as rprint
from rich.box import HORIZONTALS
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .ast import Config
from .ast import Document
from .errors import KconfigParseError
from .printer import config_summary

STATUS_NONE = 0
STATUS_OK = 1
STATUS_OK_WITH_INFO = 2
STATUS_WARNING = 3
STATUS_ERROR = 4

_INDENT = " " * 4
VERBOSITY_QUIET = "quiet"  # Report only if there is an error
VERBOSITY_DEFAULT = "default"  # Report standard information
VERBOSITY_VERBOSE = "verbose"  # Report everything every time
VERBOSITY_ENV_VAR = "KONF_REPORT_VERBOSITY"

AREA_TITLE_STYLE = "bold blue"
INFO_STRING_STYLE = "italic"
SUBTITLE_STYLE = "bold"


class Area(ABC):
    """
    Abstract class holding the base structure of every area in the report.
    """

    def __init__(self, title: str, info_string: str):
        """
        title:
        info_string:
            Both are used to describe the area in the report.
            Title is printed every time specific area is printed, info string provides additional information
            about the area, which may further help to understand the issue.
        """
        self.title: str = title
        self.info_string: str = info_string

    @abstractmethod
    def add_record(self, **kwargs) -> None:
        pass

    @abstractmethod
    def report_severity(self) -> int:
        """
        If given area has nothing to report, STATUS_OK should be returned.
        Otherwise, STATUS_OK_WITH_INFO, STATUS_WARNING or STATUS_ERROR should be returned,
        depending how severe record in given area is.
        """
        pass

    @abstractmethod
    def rows(self) -> List[str]:
        pass

    def print(self, verbosity: str) -> Optional[Table]:
        if self.report_severity() == STATUS_OK:
            return None

        table = Table(title=self.title, title_justify="left", show_header=False, title_style=AREA_TITLE_STYLE)
        table.box = HORIZONTALS
        table.add_column("", justify="left", no_wrap=True)
        if verbosity == VERBOSITY_VERBOSE and self.info_string:
            table.add_row(self.info_string, style=INFO_STRING_STYLE)
        for row in self.rows():
            table.add_row(escape(row))
        return table

    def return_json(self) -> Optional[dict]:
        if self.report_severity() == STATUS_OK:
            return None
        ret_json: Dict = dict()
        ret_json["title"] = self.title
        ret_json["severity"] = self.severity_to_str(self.report_severity())
        ret_json["data"] = self.rows()
        return ret_json

    @staticmethod
    def severity_to_str(severity: int) -> str:
        if severity == STATUS_OK:
            return "OK"
        elif severity == STATUS_OK_WITH_INFO:
            return "Info"
        elif severity == STATUS_WARNING:
            return "Warning"
        else:
            return "Error"


class MultipleDefinitionArea(Area):
    """
    Multiple definition: two or more config blocks with the same name.
    The grammar allows it, the blocks are kept in the document in their original order.
    """

    def __init__(self):
        super().__init__(
            title="Multiple Config Definitions",
            info_string=textwrap.dedent(
                """\
                Multiple definitions of the same config name are allowed by the grammar.
                However, it may happen that two different files accidentally define the same name.
                """
            ),
        )
        self.multiple_definitions: Dict[str, int] = dict()

    def add_record(self, **kwargs) -> None:
        """
        kwargs:
            name: str
            occurrences: int
        """
        self.multiple_definitions[kwargs["name"]] = kwargs["occurrences"]

    def report_severity(self) -> int:
        return STATUS_OK if not self.multiple_definitions else STATUS_OK_WITH_INFO

    def rows(self) -> List[str]:
        return [f"{name}: defined {count} times" for name, count in self.multiple_definitions.items()]


class EmptyNameArea(Area):
    """
    Configs without a name. Such configs cannot be referenced by anything.
    """

    def __init__(self):
        super().__init__(
            title="Unnamed Configs",
            info_string="Config keyword is not followed by a name consisting of A-Z and _ characters.",
        )
        self.positions: List[int] = list()

    def add_record(self, **kwargs) -> None:
        """
        kwargs:
            position: int (1-based position of the item in the document)
        """
        self.positions.append(kwargs["position"])

    def report_severity(self) -> int:
        return STATUS_OK if not self.positions else STATUS_WARNING

    def rows(self) -> List[str]:
        return [f"item #{position} has an empty name" for position in self.positions]


class MissingTypeArea(Area):
    """
    Configs without any type declaration.
    """

    def __init__(self):
        super().__init__(title="Configs Without Type", info_string="")
        self.names: List[str] = list()

    def add_record(self, **kwargs) -> None:
        self.names.append(kwargs["name"])

    def report_severity(self) -> int:
        return STATUS_OK if not self.names else STATUS_OK_WITH_INFO

    def rows(self) -> List[str]:
        return [name or "<unnamed>" for name in self.names]


class MiscArea(Area):
    """
    All the messages not related to the other areas.
    """

    def __init__(self):
        super().__init__(title="Miscellaneous", info_string="")
        self.messages: Set[str] = set()
        self.severity = STATUS_OK_WITH_INFO

    def add_record(self, **kwargs) -> None:
        """
        kwargs:
            message: str
            severity: int (optional)
        """
        if "message" not in kwargs.keys():
            raise AttributeError("Message must be specified for MiscArea.")
        self.messages.add(str(kwargs["message"]))
        self.severity = max(self.severity, kwargs.get("severity", STATUS_OK_WITH_INFO))

    def report_severity(self) -> int:
        return STATUS_OK if not self.messages else self.severity

    def rows(self) -> List[str]:
        return [f"* {message}" for message in sorted(self.messages)]


class ParseReport:
    """
    By add_record() method, new records are added to the report.
    Every time, it is needed to specify report area for given record.

    Records about the document itself are collected by inspect().
    A parse error is recorded by add_error(); the status of the report is then STATUS_ERROR.
    """

    def __init__(self, filename: str, verbosity: Optional[str] = None) -> None:
        self.filename = filename
        self.verbosity: str = verbosity or os.getenv(VERBOSITY_ENV_VAR, VERBOSITY_DEFAULT)
        self.document: Optional[Document] = None
        self.error: Optional[KconfigParseError] = None

        self.areas = (MultipleDefinitionArea(), EmptyNameArea(), MissingTypeArea(), MiscArea())
        self.area_to_instance: Dict[type, Area] = {area.__class__: area for area in self.areas}

    @property
    def status(self) -> int:
        if self.error:
            return STATUS_ERROR
        return max(area.report_severity() for area in self.areas) or STATUS_OK

    def add_record(self, area, **kwargs):
        self.area_to_instance[area].add_record(**kwargs)

    def add_error(self, error: KconfigParseError) -> None:
        self.error = error

    def inspect(self, document: Document) -> None:
        self.document = document
        occurrences = Counter(config.name for config in document.configs if config.name)
        for name, count in occurrences.items():
            if count > 1:
                self.add_record(MultipleDefinitionArea, name=name, occurrences=count)

        for position, item in enumerate(document.items, start=1):
            if not isinstance(item, Config):
                continue
            if not item.name:
                self.add_record(EmptyNameArea, position=position)
            if not item.fields:
                self.add_record(MissingTypeArea, name=item.name)

        if not document.mainmenus:
            self.add_record(MiscArea, message=f'No mainmenu found, using default title "{document.title}".')
        elif len(document.mainmenus) > 1:
            self.add_record(
                MiscArea, message=f'Multiple mainmenu entries found, the last one ("{document.title}") is used.'
            )

    def _make_header(self) -> Table:
        header_table = Table(title_style="bold", show_header=False)
        header_table.box = None
        header_table.add_column("Configuration", justify="left")
        header_table.add_row(f"File: {escape(self.filename)}")
        header_table.add_row(f"Verbosity: {self.verbosity}")
        if self.document is not None and self.verbosity == VERBOSITY_VERBOSE:
            header_table.add_row(f"Title: {escape(self.document.title)}")
            header_table.add_row(f"Configs parsed: {len(self.document.configs)}")

        status = self.status
        if status == STATUS_OK:
            header_table.add_row("Status: Finished successfully", style="green")
        elif status == STATUS_OK_WITH_INFO:
            header_table.add_row("Status: Finished with notifications", style="green_yellow")
        elif status == STATUS_WARNING:
            header_table.add_row("Status: Finished with warnings", style="yellow")
        else:
            header_table.add_row("Status: Failed", style="red")
            if self.error is not None:
                for line in self.error.explain().splitlines():
                    header_table.add_row(escape(line), style="red")

        header_table.add_row("")
        return header_table

    def _make_configs_table(self) -> Optional[Table]:
        if self.document is None or self.verbosity != VERBOSITY_VERBOSE:
            return None
        table = Table(title="Configs", title_justify="left", show_header=False, title_style=AREA_TITLE_STYLE)
        table.box = HORIZONTALS
        table.add_column("", justify="left", no_wrap=True)
        for config in self.document.configs:
            table.add_row(escape(config_summary(config)))
        return table

    def print_report(self, file: Optional[str] = None) -> None:
        if self.verbosity == VERBOSITY_QUIET and self.status != STATUS_ERROR:
            return

        report_table = Table(title="Kconfig Parse Report", title_style="bold", show_header=False, title_justify="left")
        report_table.box = HORIZONTALS
        report_table.add_column("Configuration", justify="center", no_wrap=False)
        report_table.add_row(self._make_header())

        for area in self.areas:
            sub_report = area.print(verbosity=self.verbosity)
            if sub_report:
                report_table.add_row(sub_report)
        configs_table = self._make_configs_table()
        if configs_table:
            report_table.add_row(configs_table)

        if not file:
            console = Console(stderr=True)
            console.print(report_table)
        else:
            with open(file, "w", encoding="utf-8") as f:
                rprint(report_table, file=f)

    def return_json(self) -> dict:
        report_json: Dict = dict()
        report_json["header"] = dict()
        report_json["header"]["report_type"] = "konf"
        report_json["header"]["file"] = self.filename
        report_json["header"]["verbosity"] = self.verbosity
        report_json["header"]["status"] = Area.severity_to_str(self.status)
        if self.document is not None:
            report_json["header"]["title"] = self.document.title
            report_json["header"]["configs"] = len(self.document.configs)
        if self.error is not None:
            report_json["header"]["error"] = {
                "message": self.error.msg,
                "offset": self.error.offset,
                "line": self.error.lineno,
                "column": self.error.col,
            }

        report_json["areas"] = list()
        for area in self.areas:
            area_json = area.return_json()
            if area_json:
                report_json["areas"].append(area_json)
        return report_json

    def output_json(self, file: Optional[str] = None) -> None:
        report_json = self.return_json()
        if not file:
            console = Console(stderr=True)
            console.print_json(json.dumps(report_json))
        else:
            with open(file, "w+", encoding="utf-8") as f:
                json.dump(report_json, f, indent=4)
