# -*- coding: utf-8 -*-
"""
分页集合数据结构

功能：
- 定义链接（Link）及其关系类型（Relation）
- 定义单页结果 IterableWithMarker
- 从 "next" 链接中解析下一页的 marker
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, Iterable, Iterator, Optional, Tuple, TypeVar
from urllib.parse import parse_qs, urlsplit

logger = logging.getLogger(__name__)

T = TypeVar('T')


class MalformedPaginationError(ValueError):
    """分页元数据无法解析（存在 next 链接但没有可用的 marker）"""


class Relation(Enum):
    """链接关系类型"""
    SELF = "self"
    BOOKMARK = "bookmark"
    DESCRIBEDBY = "describedby"
    ALTERNATE = "alternate"
    NEXT = "next"
    PREVIOUS = "previous"
    UNRECOGNIZED = "UNRECOGNIZED"

    @classmethod
    def from_value(cls, value: Optional[str]) -> 'Relation':
        if value:
            for relation in cls:
                if relation.value == value.lower():
                    return relation
        return cls.UNRECOGNIZED


@dataclass(frozen=True)
class Link:
    """资源链接"""
    relation: Relation
    href: str
    type: Optional[str] = None

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'Link':
        return cls(
            relation=Relation.from_value(data.get('rel')),
            href=data.get('href', ''),
            type=data.get('type'),
        )


@dataclass(frozen=True)
class IterableWithMarker(Generic[T]):
    """
    单页结果

    items 为当前页的有序结果，next_marker 为 None 表示没有下一页。
    """
    items: Tuple[T, ...] = field(default_factory=tuple)
    next_marker: Optional[str] = None

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def is_last(self) -> bool:
        return self.next_marker is None


def next_marker_from_links(links: Iterable[Link]) -> Optional[str]:
    """
    从链接集合中解析下一页的 marker

    Args:
        links: 当前页的链接集合

    Returns:
        marker 字符串；没有 next 链接时返回 None

    Raises:
        MalformedPaginationError: next 链接中没有可用的 marker 参数
    """
    for link in links:
        if link.relation is not Relation.NEXT:
            continue
        query = urlsplit(link.href).query
        markers = parse_qs(query).get('marker')
        if not markers or not markers[0]:
            logger.error(f"next 链接中缺少 marker 参数: {link.href}")
            raise MalformedPaginationError(f"next 链接中缺少 marker 参数: {link.href}")
        return markers[0]
    return None


class PaginatedCollection(IterableWithMarker[T]):
    """
    带链接元数据的分页集合

    next_marker 在构造时从 links 中解析，links 原样保留。
    """

    def __init__(self, items: Iterable[T], links: Iterable[Link] = ()):
        links = tuple(links)
        super().__init__(items=tuple(items), next_marker=next_marker_from_links(links))
        object.__setattr__(self, 'links', links)

    def __repr__(self) -> str:
        return f"PaginatedCollection(items={len(self.items)}, next_marker={self.next_marker!r})"
