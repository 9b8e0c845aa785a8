"""Path utilities: container path value type and boundary normalization.

These helpers centralize the rules used across the resolver and the request
schemas:
- A path is an ordered list of segments; ``/a//b/`` and ``/a/b`` are equal;
- ``/``, the empty string and whitespace/slash-only strings denote the root;
- Case/whitespace normalization happens at the boundary only
  (``normalize_segment``/``normalize_pathname``); the core accepts segments
  as given.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Optional

from app.packages.inventory.core.constants import MAX_SEGMENT_LENGTH
from app.packages.inventory.core.exceptions import ValidationError

_WHITESPACE_RE = re.compile(r"\s+")


def parse_segments(path: str | None) -> list[str]:
    """Split ``path`` on ``/`` and drop empty (or whitespace-only) segments."""
    if not path:
        return []
    return [segment for segment in path.split("/") if segment.strip()]


def format_path(segments: Iterable[str]) -> str:
    return "/" + "/".join(segments)


def validate_segment(segment: str) -> None:
    """Reject a container name that could not round-trip through a pathname."""
    if not segment or not segment.strip() or "/" in segment:
        raise ValidationError("容器名称不能为空且不能包含 '/'", data={"segment": segment})
    if segment in (".", ".."):
        raise ValidationError("路径段不能为 '.' 或 '..'", data={"segment": segment})
    if len(segment) > MAX_SEGMENT_LENGTH:
        raise ValidationError(
            f"路径段长度不能超过 {MAX_SEGMENT_LENGTH} 个字符",
            data={"segment": segment[:32]},
        )


@dataclass(frozen=True)
class ContainerPath:
    """Ordered segment list addressing a container from the virtual root."""

    segments: tuple[str, ...] = ()

    @classmethod
    def parse(cls, path: str | None) -> "ContainerPath":
        return cls(tuple(parse_segments(path)))

    @property
    def is_root(self) -> bool:
        return not self.segments

    @property
    def name(self) -> Optional[str]:
        return self.segments[-1] if self.segments else None

    @property
    def parent(self) -> "ContainerPath":
        return ContainerPath(self.segments[:-1])

    def child(self, name: str) -> "ContainerPath":
        return ContainerPath(self.segments + tuple(parse_segments(name)))

    def __len__(self) -> int:
        return len(self.segments)

    def __str__(self) -> str:
        return format_path(self.segments)


def normalize_segment(name: str) -> str:
    """Lowercase, trim and collapse inner whitespace runs into ``_``."""
    return _WHITESPACE_RE.sub("_", (name or "").strip().lower())


def normalize_pathname(path: str | None) -> str:
    """Boundary normalization of a full pathname, e.g. ``/Garage/Shelf 1`` -> ``/garage/shelf_1``."""
    return format_path(normalize_segment(segment) for segment in parse_segments(path))


def normalize_search_query(query: str | None) -> str:
    # 搜索时尾部 '/' 有含义（列出子容器），归一化后需要保留
    raw = (query or "").strip()
    normalized = normalize_pathname(raw)
    if raw.endswith("/") and normalized != "/":
        normalized += "/"
    return normalized


def split_search_query(query: str | None) -> tuple[ContainerPath, Optional[str]]:
    """Split an autocomplete query into ``(parent path, partial term)``.

    - ``/`` (or blank)          -> (root, None): list root-level containers;
    - ``/a/b/``                 -> (/a/b, None): list children of ``b``;
    - ``/a/b`` (``b`` partial)  -> (/a, "b"): filter children of ``a``.
    """
    raw = (query or "").strip()
    segments = parse_segments(raw)
    if not segments:
        return ContainerPath(), None
    if raw.endswith("/"):
        return ContainerPath(tuple(segments)), None
    return ContainerPath(tuple(segments[:-1])), segments[-1]
