# -*- coding: utf-8 -*-
"""
分页模块

功能：
- 单页结果与链接元数据（marker 解析）
- 惰性分页迭代器与按作用域续取的分页器
"""

from .collection import (
    IterableWithMarker,
    Link,
    MalformedPaginationError,
    PaginatedCollection,
    Relation,
    next_marker_from_links,
)
from .paged_iterable import FetchPage, PagedIterator, PageState, ScopedPager

__all__ = [
    'IterableWithMarker',
    'Link',
    'MalformedPaginationError',
    'PaginatedCollection',
    'Relation',
    'next_marker_from_links',
    'FetchPage',
    'PagedIterator',
    'PageState',
    'ScopedPager',
]
