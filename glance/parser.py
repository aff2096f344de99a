# -*- coding: utf-8 -*-
"""
Glance 镜像列表响应解析模块

功能：
- 把 {"images": [...], "images_links": [...]} 解析为分页集合
- 提供按 zone 续取的镜像分页器
"""

import logging
from typing import Any, Callable, Mapping, Optional

from glance.domain import Image, ImageDetails
from glance.options import ListImageOptions
from pagination.collection import Link, PaginatedCollection
from pagination.paged_iterable import FetchPage, ScopedPager

logger = logging.getLogger(__name__)


def _parse_collection(payload: Mapping[str, Any], item_parser: Callable) -> PaginatedCollection:
    if not isinstance(payload, Mapping):
        raise ValueError(f"响应格式错误: 期望 JSON 对象，实际为 {type(payload).__name__}")
    if 'images' not in payload:
        raise ValueError("响应格式错误: 缺少 'images' 字段")

    images = [item_parser(item) for item in payload['images'] or []]
    links = [Link.from_json(link) for link in payload.get('images_links') or []]
    return PaginatedCollection(images, links)


def parse_images(payload: Mapping[str, Any]) -> PaginatedCollection:
    """
    解析 GET /images 响应

    Raises:
        ValueError: 响应格式错误
        MalformedPaginationError: next 链接中没有 marker
    """
    return _parse_collection(payload, Image.from_json)


def parse_image_details(payload: Mapping[str, Any]) -> PaginatedCollection:
    """
    解析 GET /images/detail 响应

    Raises:
        ValueError: 响应格式错误
        MalformedPaginationError: next 链接中没有 marker
    """
    return _parse_collection(payload, ImageDetails.from_json)


class ImageDetailsPager(ScopedPager[ImageDetails]):
    """按 zone 续取镜像详情列表"""

    def __init__(self, glance_api):
        if glance_api is None:
            raise ValueError("glance_api 不能为空")
        self.api = glance_api

    def marker_to_next_for_scope(self, scope: str, options: Optional[ListImageOptions] = None) -> FetchPage:
        image_api = self.api.get_image_api_for_zone(scope)
        base = options or ListImageOptions()

        def list_in_detail(marker: Optional[str]) -> PaginatedCollection:
            return image_api.list_in_detail(base if marker is None else base.with_marker(marker))

        return list_in_detail


class ImagePager(ScopedPager[Image]):
    """按 zone 续取镜像列表"""

    def __init__(self, glance_api):
        if glance_api is None:
            raise ValueError("glance_api 不能为空")
        self.api = glance_api

    def marker_to_next_for_scope(self, scope: str, options: Optional[ListImageOptions] = None) -> FetchPage:
        image_api = self.api.get_image_api_for_zone(scope)
        base = options or ListImageOptions()

        def list_images(marker: Optional[str]) -> PaginatedCollection:
            return image_api.list(base if marker is None else base.with_marker(marker))

        return list_images
