# SPDX-FileCopyrightText: 2025 Espressif Systems (Shanghai) CO LTD
# SPDX-License-Identifier: Apache-2.0
"""
Abstract syntax tree produced by the Kconfig parser.

All nodes are immutable. A Document owns its items, every Config owns its fields
and every string is a decoded ``str`` with no reference to the parsed input.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional
from typing import Tuple
from typing import Union

DEFAULT_TITLE = "configuration"


class TypeKind(Enum):
    """
    Type of a config option. Values are the keywords used in Kconfig files,
    declared in the order in which the grammar tries them.
    """

    BOOL = "bool"
    DEF_BOOL = "def_bool"
    DEF_TRISTATE = "def_tristate"
    INT = "int"
    HEX = "hex"
    STRING = "string"
    TRISTATE = "tristate"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class TypeDecl:
    kind: TypeKind
    description: str


# Type declaration is the only field a config block can carry.
Field = TypeDecl


@dataclass(frozen=True)
class MainMenu:
    title: str


@dataclass(frozen=True)
class Config:
    """
    Config block. The name consists only of A-Z and "_" and it can be empty,
    as the grammar allows it. Whether an empty name is acceptable is up to the consumer.
    """

    name: str
    fields: Tuple[Field, ...] = ()

    @property
    def type(self) -> Optional[TypeKind]:
        """
        Type of the config, taken from its first type declaration (None if there is none).
        """
        for field in self.fields:
            if isinstance(field, TypeDecl):
                return field.kind
        return None


Item = Union[MainMenu, Config]


@dataclass(frozen=True)
class Document:
    items: Tuple[Item, ...] = ()

    @property
    def title(self) -> str:
        """
        Title of the last mainmenu in the document or DEFAULT_TITLE if there is no mainmenu.
        """
        title = DEFAULT_TITLE
        for item in self.items:
            if isinstance(item, MainMenu):
                title = item.title
        return title

    @property
    def mainmenus(self) -> Tuple[MainMenu, ...]:
        return tuple(item for item in self.items if isinstance(item, MainMenu))

    @property
    def configs(self) -> Tuple[Config, ...]:
        return tuple(item for item in self.items if isinstance(item, Config))

    def find(self, name: str) -> Tuple[Config, ...]:
        """
        Return all config blocks with given name, in document order (duplicates are kept).
        """
        return tuple(config for config in self.configs if config.name == name)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)
