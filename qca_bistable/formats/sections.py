"""
Parser for the sectioned text format used by QCADesigner design files and
engine settings files.

    [NAME]
    key=value
    1 2 3
    [SUB]
    ...
    [#SUB]
    [#NAME]

A section holds settings or integer data rows, plus its sub-sections
grouped by name in file order.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from ..exceptions import ParseError

logger = logging.getLogger(__name__)


@dataclass
class Section:
    name: str
    settings: Dict[str, str] = field(default_factory=dict)
    data: List[List[int]] = field(default_factory=list)
    subsections: Dict[str, List["Section"]] = field(default_factory=dict)

    def has_settings(self, *names: str) -> bool:
        """True if the section has settings and every named one is present."""
        if not self.settings:
            return False
        return all(self.settings.get(n) is not None for n in names)

    def has_subsections(self, *names: str) -> bool:
        return all(self.subsections.get(n) for n in names)

    def first(self, name: str) -> Optional["Section"]:
        group = self.subsections.get(name)
        return group[0] if group else None

    def group(self, name: str) -> List["Section"]:
        return self.subsections.get(name, [])

    def add(self, section: "Section"):
        self.subsections.setdefault(section.name, []).append(section)


class _Lines:
    """Line cursor that skips blank lines and tracks 1-based line numbers."""

    def __init__(self, lines: Iterable[str]):
        self._lines = [(n, line.strip()) for n, line in enumerate(lines, 1)]
        self._lines = [(n, line) for n, line in self._lines if line]
        self._pos = 0

    def peek(self):
        return self._lines[self._pos] if self._pos < len(self._lines) else (None, None)

    def next(self):
        item = self.peek()
        self._pos += 1
        return item


def parse_sections(lines: Iterable[str]) -> Section:
    """Parses a whole file into a nameless root section holding the top-level sections."""
    cursor = _Lines(lines)
    root = Section("")
    while cursor.peek()[1] is not None:
        root.add(_parse_section(cursor))
    return root


def parse_file(filename: str) -> Section:
    with open(filename, "r", encoding="utf-8", errors="replace") as f:
        return parse_sections(f)


def _parse_section(cursor: _Lines) -> Section:
    line_number, line = cursor.next()
    if not line.startswith("[") or line.startswith("[#"):
        raise ParseError(f"Was expecting an opening section tag, but found: {line}", line_number)
    if not line.endswith("]"):
        raise ParseError("Was expecting an ending ']'.", line_number)

    section = Section(line[1:-1])
    while True:
        line_number, line = cursor.peek()
        if line is None:
            raise ParseError(f"Was expecting a closing tag for '{section.name}', but the file ended.")

        if line.startswith("[#"):
            cursor.next()
            if line != f"[#{section.name}]":
                raise ParseError(f"Was expecting a closing tag for '{section.name}', but found: {line}", line_number)
            return section

        if line.startswith("["):
            section.add(_parse_section(cursor))
            continue

        cursor.next()
        if line[0].isdigit():
            if section.settings:
                raise ParseError(f"Data line in settings section '{section.name}'.", line_number)
            section.data.append(_parse_data_line(line, line_number))
        else:
            if section.data:
                raise ParseError(f"Setting line in data section '{section.name}'.", line_number)
            key, value = _parse_setting_line(line, line_number)
            section.settings[key] = value


def _parse_data_line(line: str, line_number: int) -> List[int]:
    row = []
    for piece in line.split():
        try:
            row.append(int(piece))
        except ValueError:
            raise ParseError(f"Was expecting an integer, but found '{piece}'.", line_number) from None
    return row


def _parse_setting_line(line: str, line_number: int):
    key, sep, value = line.partition("=")
    if not sep:
        raise ParseError(f"Was expecting an '=' in: {line}", line_number)
    return key.strip(), value.strip()
