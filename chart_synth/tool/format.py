"""Library for formatting output."""

from abc import ABC, abstractmethod
import json
import sys
from typing import Any, Generator, TextIO

from chart_synth.manifest import dump_yaml

PADDING = 4


def column_format_string(rows: list[list[str]]) -> str:
    """Produce a format string based on max width of columns."""
    widths = [max(len(str(value)) for value in column) for column in zip(*rows)]
    return "".join(f"{{:{width + PADDING}}}" for width in widths)


def format_columns(
    headers: list[str], rows: list[list[str]]
) -> Generator[str, None, None]:
    """Yield the header and rows aligned in columns."""
    data = [headers] + rows
    if format_string := column_format_string(data):
        for row in data:
            yield format_string.format(*[str(x) for x in row])


class StructFormatter(ABC):
    """A formatter that writes a list of objects as lines of text."""

    @abstractmethod
    def format(self, data: list[dict[str, Any]]) -> Generator[str, None, None]:
        """Yield the output lines for the data objects."""

    def print(self, data: list[dict[str, Any]], file: TextIO | None = None) -> None:
        """Write the data objects, to stdout unless a file is given."""
        output = file if file is not None else sys.stdout
        for line in self.format(data):
            print(line, file=output)


class PrintFormatter(StructFormatter):
    """A formatter that prints human readable columns."""

    def __init__(self, keys: list[str] | None = None):
        """Initialize the PrintFormatter with optional keys to print."""
        self._keys = keys

    def format(self, data: list[dict[str, Any]]) -> Generator[str, None, None]:
        if not data:
            return
        keys = self._keys if self._keys is not None else list(data[0])
        rows = [[str(row.get(key, "")) for key in keys] for row in data]
        yield from format_columns([key.upper() for key in keys], rows)


class YamlFormatter(StructFormatter):
    """A formatter that writes a yaml document per object."""

    def format(self, data: list[dict[str, Any]]) -> Generator[str, None, None]:
        yield from dump_yaml(data).splitlines()


class JsonFormatter(StructFormatter):
    """A formatter that writes the objects as a json list."""

    def format(self, data: list[dict[str, Any]]) -> Generator[str, None, None]:
        yield from json.dumps(data, indent=4, sort_keys=False).splitlines()
