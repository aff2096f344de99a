# -*- coding: utf-8 -*-
"""
OpenStack Glance v1 镜像 API 客户端模块

功能：
- 按 zone 管理 Glance endpoint
- 调用镜像列表 / 详情列表 / 镜像元数据接口
- 提供跨页惰性迭代（marker 续取）
"""

import logging
from typing import Dict, List, Optional

import requests

from glance.domain import ImageDetails
from glance.options import ListImageOptions
from glance.parser import ImageDetailsPager, ImagePager, parse_image_details, parse_images
from pagination.collection import PaginatedCollection
from pagination.paged_iterable import PagedIterator

logger = logging.getLogger(__name__)


class ImageApi:
    """
    单个 zone 的 Glance 镜像 API

    功能：
    - GET /images、GET /images/detail 单页查询
    - HEAD /images/{id} 获取镜像元数据
    - HTTP / JSON 解析异常原样抛出，不重试
    """

    def __init__(self, endpoint: str, session: requests.Session, zone: str, timeout: int = 30):
        """
        初始化镜像 API

        Args:
            endpoint: Glance v1 endpoint（如 'https://glance.example.com/v1'）
            session: 已配置认证头的 requests.Session
            zone: 所属 zone（用于日志）
            timeout: 请求超时时间（秒）
        """
        self.endpoint = endpoint.rstrip('/')
        self.session = session
        self.zone = zone
        self.timeout = timeout

    def _get_json(self, path: str, options: Optional[ListImageOptions]) -> dict:
        params = (options or ListImageOptions()).to_query_params()
        url = f"{self.endpoint}{path}"
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            logger.error(f"Glance API 调用异常 zone={self.zone}, url={url}, params={params}: {e}")
            raise

    def list(self, options: Optional[ListImageOptions] = None) -> PaginatedCollection:
        """
        列出镜像（单页）

        Args:
            options: 查询选项

        Returns:
            PaginatedCollection[Image]
        """
        page = parse_images(self._get_json('/images', options))
        logger.debug(f"Glance 镜像列表: zone={self.zone}, 本页 {len(page)} 个, next_marker={page.next_marker}")
        return page

    def list_in_detail(self, options: Optional[ListImageOptions] = None) -> PaginatedCollection:
        """
        列出镜像详情（单页）

        Args:
            options: 查询选项

        Returns:
            PaginatedCollection[ImageDetails]
        """
        page = parse_image_details(self._get_json('/images/detail', options))
        logger.debug(f"Glance 镜像详情列表: zone={self.zone}, 本页 {len(page)} 个, next_marker={page.next_marker}")
        return page

    def get(self, image_id: str) -> Optional[ImageDetails]:
        """
        获取镜像元数据

        Args:
            image_id: 镜像 ID

        Returns:
            ImageDetails，镜像不存在返回 None
        """
        url = f"{self.endpoint}/images/{image_id}"
        try:
            response = self.session.head(url, timeout=self.timeout)
            if response.status_code == 404:
                logger.debug(f"镜像不存在: zone={self.zone}, image_id={image_id}")
                return None
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Glance API 调用异常 zone={self.zone}, url={url}: {e}")
            raise
        return ImageDetails.from_headers(response.headers)


class GlanceApi:
    """
    Glance API 入口

    功能：
    - 按 zone 提供 ImageApi
    - 提供按 zone 的跨页惰性迭代
    """

    def __init__(
        self,
        endpoints: Dict[str, str],
        auth_token: Optional[str] = None,
        timeout: int = 30,
        session: Optional[requests.Session] = None
    ):
        """
        初始化 Glance API

        Args:
            endpoints: zone -> Glance endpoint
            auth_token: Keystone token（可选），作为 X-Auth-Token 请求头
            timeout: 请求超时时间（秒）
            session: 自定义 requests.Session（可选）
        """
        if not endpoints:
            raise ValueError("endpoints 不能为空")
        self.endpoints = dict(endpoints)
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.setdefault('Accept', 'application/json')
        if auth_token:
            self.session.headers['X-Auth-Token'] = auth_token
        logger.debug(f"Glance 客户端初始化成功，zones: {sorted(self.endpoints)}")

    def get_configured_zones(self) -> List[str]:
        return sorted(self.endpoints)

    def get_image_api_for_zone(self, zone: str) -> ImageApi:
        """
        获取指定 zone 的 ImageApi

        Raises:
            ValueError: zone 未配置
        """
        if zone not in self.endpoints:
            raise ValueError(f"未配置的 zone: {zone}，可用 zone: {', '.join(self.get_configured_zones())}")
        return ImageApi(self.endpoints[zone], self.session, zone, self.timeout)

    def list_all(self, zone: str, options: Optional[ListImageOptions] = None) -> PagedIterator:
        """按 zone 惰性迭代所有镜像"""
        return ImagePager(self).paged(zone, options)

    def list_in_detail_all(self, zone: str, options: Optional[ListImageOptions] = None) -> PagedIterator:
        """
        按 zone 惰性迭代所有镜像详情

        迭代时才发起请求；除 marker 外的过滤参数在各页之间保持不变。

        Args:
            zone: zone 名称
            options: 首页查询选项

        Returns:
            PagedIterator[ImageDetails]
        """
        return ImageDetailsPager(self).paged(zone, options)
