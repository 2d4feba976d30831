# SPDX-FileCopyrightText: 2025 Espressif Systems (Shanghai) CO LTD
# SPDX-License-Identifier: Apache-2.0
from .ast import Config
from .ast import Document
from .ast import Field
from .ast import Item
from .ast import MainMenu
from .ast import TypeDecl
from .ast import TypeKind
from .errors import KconfigError
from .errors import KconfigParseError
from .errors import KconfigSyntaxError
from .errors import StringDecodeError
from .parser import Parser
from .parser import decode_string
from .parser import parse
from .parser import parse_file

__version__ = "0.1.0"

__all__ = [
    "Config",
    "Document",
    "Field",
    "Item",
    "MainMenu",
    "TypeDecl",
    "TypeKind",
    "KconfigError",
    "KconfigParseError",
    "KconfigSyntaxError",
    "StringDecodeError",
    "Parser",
    "decode_string",
    "parse",
    "parse_file",
]
