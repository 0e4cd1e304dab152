from __future__ import annotations
"""Line-oriented console output and formatting helpers."""
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, TextIO

from .models import StoreItem


def format_size(size: int | None) -> str:
    if size is None or size < 0:
        return "-"
    suffixes = ["B", "KB", "MB", "GB", "TB"]
    value = float(size)
    for suffix in suffixes:
        if value < 1024 or suffix == suffixes[-1]:
            return f"{value:.1f} {suffix}" if suffix != "B" else f"{int(value)} {suffix}"
        value /= 1024
    return f"{size} B"


@dataclass
class ExtensionTotals:
    size: int = 0
    count: int = 0


@dataclass
class ListingInfo:
    """Totals accumulated while printing a listing."""

    total_size: int = 0
    total_count: int = 0
    per_extension: dict[str, ExtensionTotals] = field(default_factory=dict)

    def add(self, item: StoreItem) -> None:
        size = max(item.size, 0)
        self.total_count += 1
        self.total_size += size
        name = item.key.rsplit("/", 1)[-1]
        if "." in name:
            ext = name[name.rindex("."):]
            totals = self.per_extension.setdefault(ext, ExtensionTotals())
            totals.size += size
            totals.count += 1

    def lines(self) -> list[str]:
        lines = ["", "--- Info:"]
        for ext in sorted(self.per_extension):
            totals = self.per_extension[ext]
            lines.append(f"{ext:<5} - size: {format_size(totals.size):<9} count: {totals.count}")
        lines.append("")
        lines.append(f"total size: {format_size(self.total_size)}   total count: {self.total_count}")
        return lines


class Reporter:
    """Prints one line per copy event."""

    def __init__(self, stream: TextIO | None = None):
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        return self._stream or sys.stdout

    def line(self, text: str = "") -> None:
        print(text, file=self.stream)

    def lines(self, texts: Iterable[str]) -> None:
        for text in texts:
            self.line(text)

    def uploading(self, source: Path, url: str, content_type: str) -> None:
        self.line(f"{'Uploading':11} {str(source):50} --> {url}   (content-type: {content_type})")

    def downloading(self, url: str, destination: Path) -> None:
        self.line(f"{'Downloading':20} {url:40} to {destination}")

    def skipped(self, label: str, target: str) -> None:
        self.line(f"{f'Skip ({label})':20} {target}")

    def excluded(self, target: str) -> None:
        self.line(f"{'Excludes':20} {target}")

    def deleted(self, url: str) -> None:
        self.line(f"{'Deleted':20} {url}")
