"""Version 3 source map assembly with Base64 VLQ encoded mappings."""

from __future__ import annotations

import json
from dataclasses import dataclass

_BASE64 = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
_VLQ_SHIFT = 5
_VLQ_CONTINUATION = 1 << _VLQ_SHIFT
_VLQ_MASK = _VLQ_CONTINUATION - 1


def encode_vlq(value: int) -> str:
    vlq = (-value << 1) | 1 if value < 0 else value << 1
    out: list[str] = []
    while True:
        digit = vlq & _VLQ_MASK
        vlq >>= _VLQ_SHIFT
        if vlq:
            digit |= _VLQ_CONTINUATION
        out.append(_BASE64[digit])
        if not vlq:
            return "".join(out)


def decode_vlq(segment: str) -> list[int]:
    values: list[int] = []
    shift = 0
    value = 0
    for ch in segment:
        digit = _BASE64.index(ch)
        value += (digit & _VLQ_MASK) << shift
        if digit & _VLQ_CONTINUATION:
            shift += _VLQ_SHIFT
            continue
        values.append(-(value >> 1) if value & 1 else value >> 1)
        value = 0
        shift = 0
    return values


@dataclass(frozen=True)
class Mapping:
    generated_line: int  # 1-based
    generated_column: int  # 0-based
    source: str | None = None
    original_line: int | None = None  # 1-based
    original_column: int | None = None
    name: str | None = None


class SourceMapGenerator:
    def __init__(self, file: str | None = None) -> None:
        self.file = file
        self.mappings: list[Mapping] = []
        self._sources: dict[str, int] = {}
        self._names: dict[str, int] = {}
        self._contents: dict[str, str] = {}

    def add_mapping(
        self,
        generated_line: int,
        generated_column: int,
        source: str | None = None,
        original_line: int | None = None,
        original_column: int | None = None,
        name: str | None = None,
    ) -> None:
        if self.mappings:
            prev = self.mappings[-1]
            if (generated_line, generated_column) <= (prev.generated_line, prev.generated_column):
                raise ValueError(
                    f"mapping at {generated_line}:{generated_column} does not advance past "
                    f"{prev.generated_line}:{prev.generated_column}"
                )
        if source is not None:
            self._sources.setdefault(source, len(self._sources))
            if name is not None:
                self._names.setdefault(name, len(self._names))
        self.mappings.append(
            Mapping(generated_line, generated_column, source, original_line, original_column, name)
        )

    def set_source_content(self, source: str, content: str) -> None:
        self._sources.setdefault(source, len(self._sources))
        self._contents[source] = content

    @property
    def sources(self) -> list[str]:
        return list(self._sources)

    @property
    def names(self) -> list[str]:
        return list(self._names)

    def _encode_mappings(self) -> str:
        lines: list[str] = []
        segments: list[str] = []
        current_line = 1
        prev_source = prev_orig_line = prev_orig_col = prev_name = 0
        prev_gen_col = 0
        for m in self.mappings:
            while current_line < m.generated_line:
                lines.append(",".join(segments))
                segments = []
                current_line += 1
                prev_gen_col = 0
            segment = encode_vlq(m.generated_column - prev_gen_col)
            prev_gen_col = m.generated_column
            if m.source is not None:
                source_idx = self._sources[m.source]
                orig_line = (m.original_line or 1) - 1
                orig_col = m.original_column or 0
                segment += encode_vlq(source_idx - prev_source)
                segment += encode_vlq(orig_line - prev_orig_line)
                segment += encode_vlq(orig_col - prev_orig_col)
                prev_source, prev_orig_line, prev_orig_col = source_idx, orig_line, orig_col
                if m.name is not None:
                    name_idx = self._names[m.name]
                    segment += encode_vlq(name_idx - prev_name)
                    prev_name = name_idx
            segments.append(segment)
        lines.append(",".join(segments))
        return ";".join(lines)

    def to_dict(self) -> dict:
        data: dict = {"version": 3}
        if self.file is not None:
            data["file"] = self.file
        data["sources"] = self.sources
        if self._contents:
            data["sourcesContent"] = [self._contents.get(s) for s in self._sources]
        data["names"] = self.names
        data["mappings"] = self._encode_mappings()
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))
