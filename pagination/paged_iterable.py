# -*- coding: utf-8 -*-
"""
分页续取（continuation）模块

功能：
- 把多次分页 API 调用合并为一个惰性、有限、只能前进的序列
- 隐藏 marker 传递细节，调用方只需迭代
- 按作用域（zone/region）固定续取函数，后续页无需重复提供
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable, Generic, Iterator, Optional, TypeVar

from pagination.collection import IterableWithMarker

logger = logging.getLogger(__name__)

T = TypeVar('T')

# marker（首页为 None） -> 单页结果
FetchPage = Callable[[Optional[str]], IterableWithMarker]

_END = object()


class PageState(Enum):
    """分页状态"""
    HAS_MORE = "has_more"      # 还需要继续拉取
    EXHAUSTED = "exhausted"    # 不再拉取（最后一页的结果可能仍在消费）


class PagedIterator(Generic[T]):
    """
    惰性分页迭代器

    功能：
    - 首次 next() 之前不发起任何请求
    - 内存中只保留当前页
    - 每个 marker 只拉取一次，按产生顺序传递
    - 拉取异常原样抛出，不重试

    不可重启：迭代结束后再次迭代不会产生任何元素。
    """

    def __init__(self, fetch: FetchPage, first_page: Optional[IterableWithMarker] = None, name: str = "list"):
        """
        初始化分页迭代器

        Args:
            fetch: 拉取函数，参数为 marker（首页为 None）
            first_page: 已拉取的首页（可选），提供时直接从该页开始
            name: 用于日志的名称
        """
        self._fetch = fetch
        self._name = name
        self._page: Optional[IterableWithMarker] = first_page
        self._items: Iterator[T] = iter(first_page) if first_page is not None else iter(())
        self._started = first_page is not None
        self._seed_pending = first_page is not None
        self.fetch_count = 0

    @property
    def state(self) -> PageState:
        if not self._started:
            return PageState.HAS_MORE
        if self._page is not None and self._page.next_marker is not None:
            return PageState.HAS_MORE
        return PageState.EXHAUSTED

    def _advance(self) -> bool:
        """拉取下一页，没有下一页时返回 False"""
        if self.state is PageState.EXHAUSTED:
            return False

        marker = self._page.next_marker if self._page is not None else None
        logger.debug(f"[分页] {self._name}: 拉取第 {self.fetch_count + 1} 页, marker={marker}")
        self._seed_pending = False
        page = self._fetch(marker)
        self.fetch_count += 1
        self._started = True
        self._page = page
        self._items = iter(page)
        return True

    def pages(self) -> Iterator[IterableWithMarker]:
        """
        按页迭代

        与按元素迭代共享同一状态，二者不要混用。
        """
        if self._seed_pending:
            # 构造时传入的首页，只产出一次
            self._seed_pending = False
            yield self._page
        while self._advance():
            yield self._page

    def __iter__(self) -> 'PagedIterator[T]':
        return self

    def __next__(self) -> T:
        while True:
            item = next(self._items, _END)
            if item is not _END:
                return item
            self._seed_pending = False
            if not self._advance():
                logger.debug(f"[分页] {self._name}: 已结束，共拉取 {self.fetch_count} 页")
                raise StopIteration

    def __repr__(self) -> str:
        return f"PagedIterator({self._name}, state={self.state.value}, fetch_count={self.fetch_count})"


class ScopedPager(ABC, Generic[T]):
    """
    按作用域续取的分页器

    作用域（zone/region）在创建续取函数时捕获一次，之后每一页都复用；
    请求选项中除 marker 以外的参数在各页之间保持不变。
    """

    @abstractmethod
    def marker_to_next_for_scope(self, scope: str, options: Any = None) -> FetchPage:
        """
        返回该作用域的续取函数

        Args:
            scope: 作用域，如 zone
            options: 原始请求选项

        Returns:
            marker -> 单页结果 的函数
        """
        pass

    def apply(self, first_page: IterableWithMarker, scope: str, options: Any = None) -> PagedIterator[T]:
        """
        从已拉取的首页构造分页迭代器

        Args:
            first_page: 已拉取的首页
            scope: 作用域
            options: 首页使用的请求选项
        """
        fetch = self.marker_to_next_for_scope(scope, options)
        return PagedIterator(fetch, first_page=first_page, name=_describe(fetch, scope))

    def paged(self, scope: str, options: Any = None) -> PagedIterator[T]:
        """构造完全惰性的分页迭代器（首页也在迭代时才拉取）"""
        fetch = self.marker_to_next_for_scope(scope, options)
        return PagedIterator(fetch, name=_describe(fetch, scope))


def _describe(fetch: FetchPage, scope: str) -> str:
    return f"{getattr(fetch, '__name__', fetch)}@{scope}"
