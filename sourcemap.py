"""Read and write the mappings of version 3 source maps"""

from bisect import bisect
from collections import defaultdict
from dataclasses import dataclass, field
from functools import partial
from itertools import count
from typing import (
    Iterable,
    List,
    Literal,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    TypedDict,
    Union,
)

from base64vlq import base64vlq_decode, base64vlq_encode

Segment = Tuple[int, ...]

# generated column only; with source position; with source position and name
_SEGMENT_SIZES = (1, 4, 5)


class autoindex(defaultdict):
    def __init__(self, *args, **kwargs):
        super().__init__(partial(next, count()), *args, **kwargs)


class JSONSourceMap(TypedDict, total=False):
    version: Literal[3]
    file: Optional[str]
    sourceRoot: Optional[str]
    sources: List[str]
    sourcesContent: Optional[List[Optional[str]]]
    names: List[str]
    mappings: str


def decode_mappings(mappings: str) -> List[List[Segment]]:
    """Split a mappings string into lines of decoded (relative) segments

    Raises ValueError for segments that are not valid VLQ, or that do not
    hold 1, 4 or 5 fields.
    """
    lines = []
    for gline, vlqs in enumerate(mappings.split(";")):
        segments = []
        for vlq in vlqs.split(","):
            if not vlq:
                continue
            segment = base64vlq_decode(vlq)
            if segment is None:
                raise ValueError(
                    f"Invalid mapping segment {vlq!r} on generated line {gline}"
                )
            if len(segment) not in _SEGMENT_SIZES:
                raise ValueError(
                    f"Mapping segment {vlq!r} on generated line {gline} has "
                    f"{len(segment)} fields, expected 1, 4 or 5"
                )
            segments.append(segment)
        lines.append(segments)
    return lines


def encode_mappings(lines: Iterable[Iterable[Sequence[int]]]) -> str:
    """Join lines of relative segments into a mappings string"""
    return ";".join(
        ",".join(base64vlq_encode(segment) for segment in segments)
        for segments in lines
    )


@dataclass(frozen=True)
class SourceMapping:
    line: int
    column: int
    source: Optional[str] = None
    source_line: Optional[int] = None
    source_column: Optional[int] = None
    name: Optional[str] = None
    source_content: Optional[str] = None

    def __post_init__(self):
        if self.source is not None and (
            self.source_line is None or self.source_column is None
        ):
            raise TypeError(
                "Invalid source mapping; missing line and column for source file"
            )
        if self.name is not None and self.source is None:
            raise TypeError(
                "Invalid source mapping; name entry without source location info"
            )

    @property
    def content_line(self) -> Optional[str]:
        if self.source_line is None or self.source_line < 0:
            return None
        try:
            return self.source_content.splitlines()[self.source_line]
        except (AttributeError, TypeError, IndexError):
            return None


def _lookup(table: Sequence, idx: int, what: str, gline: int):
    if not 0 <= idx < len(table):
        raise ValueError(
            f"Mapping on generated line {gline} refers to {what} index {idx}, "
            f"but only {len(table)} are listed"
        )
    return table[idx]


@dataclass(frozen=True)
class SourceMap:
    file: Optional[str]
    source_root: Optional[str]
    entries: Mapping[Tuple[int, int], SourceMapping]
    _index: List[Tuple[int, ...]] = field(default_factory=list)

    def __repr__(self) -> str:
        parts = []
        if self.file is not None:
            parts += [f"file={self.file!r}"]
        if self.source_root is not None:
            parts += [f"source_root={self.source_root!r}"]
        parts += [f"len={len(self.entries)}"]
        return f"<SourceMap({', '.join(parts)})>"

    def __iter__(self):
        """Entries in generated order"""
        entries = self.entries
        for gline, cols in enumerate(self._index):
            for col in cols:
                yield entries[gline, col]

    @classmethod
    def from_json(cls, smap: JSONSourceMap) -> "SourceMap":
        if not isinstance(smap, dict):
            raise ValueError("Source map must be a JSON object")
        if smap.get("version") != 3:
            raise ValueError("Only version 3 sourcemaps are supported")
        entries, index = {}, []
        spos = npos = sline = scol = 0
        sources, names = smap.get("sources", []), smap.get("names", [])
        contents = smap.get("sourcesContent") or []
        mappings = smap.get("mappings", "")
        if not isinstance(mappings, str):
            raise ValueError("Source map mappings must be a string")
        for gline, segments in enumerate(decode_mappings(mappings)):
            cols = []
            gcol = 0
            for gcd, *ref in segments:
                gcol += gcd
                kwargs = {}
                if ref:
                    sd, sld, scd, *namedelta = ref
                    spos, sline, scol = spos + sd, sline + sld, scol + scd
                    kwargs = {
                        "source": _lookup(sources, spos, "source", gline),
                        "source_line": sline,
                        "source_column": scol,
                        "source_content": contents[spos]
                        if spos < len(contents)
                        else None,
                    }
                    if namedelta:
                        npos += namedelta[0]
                        kwargs["name"] = _lookup(names, npos, "name", gline)
                if (gline, gcol) not in entries:
                    cols.append(gcol)
                entries[gline, gcol] = SourceMapping(line=gline, column=gcol, **kwargs)
            index.append(tuple(sorted(cols)))

        return cls(smap.get("file"), smap.get("sourceRoot"), entries, index)

    def to_json(self) -> JSONSourceMap:
        content, lines = [], []
        sources, names = autoindex(), autoindex()
        entries = self.entries
        spos = sline = scol = npos = 0
        for gline, cols in enumerate(self._index):
            gcol = 0
            segments = []
            for col in cols:
                entry = entries[gline, col]
                ds, gcol = [col - gcol], col

                if entry.source is not None:
                    if entry.source not in sources:
                        content.append(entry.source_content)
                    ds += (
                        sources[entry.source] - spos,
                        entry.source_line - sline,
                        entry.source_column - scol,
                    )
                    spos, sline, scol = (spos + ds[1], sline + ds[2], scol + ds[3])
                    if entry.name is not None:
                        ds += (names[entry.name] - npos,)
                        npos += ds[-1]
                segments.append(ds)
            lines.append(segments)

        encoded = {
            "version": 3,
            "sources": [s for s, _ in sorted(sources.items(), key=lambda si: si[1])],
            "sourcesContent": content,
            "names": [n for n, _ in sorted(names.items(), key=lambda ni: ni[1])],
            "mappings": encode_mappings(lines),
        }
        if self.file is not None:
            encoded["file"] = self.file
        if self.source_root is not None:
            encoded["sourceRoot"] = self.source_root
        return encoded

    def __getitem__(self, idx: Union[int, Tuple[int, int]]) -> SourceMapping:
        try:
            l, c = idx
        except TypeError:
            l, c = idx, 0
        try:
            return self.entries[l, c]
        except KeyError:
            # find the closest column
            if not 0 <= l < len(self._index) or not (cols := self._index[l]):
                raise IndexError(idx) from None
            cidx = bisect(cols, c)
            return self.entries[l, cols[cidx and cidx - 1]]
