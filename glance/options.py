# -*- coding: utf-8 -*-
"""
Glance 镜像列表查询选项

功能：
- 定义镜像列表过滤、排序和分页参数
- 转换为 Glance v1 查询参数
- 翻页时仅替换 marker，其余参数保持不变
"""

from dataclasses import dataclass, replace
from typing import Dict, Optional

from glance.domain import ImageStatus


VALID_SORT_DIRS = ('asc', 'desc')


@dataclass(frozen=True)
class ListImageOptions:
    """
    镜像列表查询选项（不可变）

    所有字段默认为 None，表示不传该参数。
    """
    name: Optional[str] = None
    status: Optional[ImageStatus] = None
    container_format: Optional[str] = None
    disk_format: Optional[str] = None
    size_min: Optional[int] = None
    size_max: Optional[int] = None
    sort_key: Optional[str] = None
    sort_dir: Optional[str] = None
    limit: Optional[int] = None
    marker: Optional[str] = None

    def __post_init__(self):
        if self.sort_dir is not None and self.sort_dir not in VALID_SORT_DIRS:
            raise ValueError(f"sort_dir 必须是以下值之一: {', '.join(VALID_SORT_DIRS)}")
        if self.limit is not None and self.limit <= 0:
            raise ValueError(f"limit 必须是正整数: {self.limit}")
        for key in ('size_min', 'size_max'):
            value = getattr(self, key)
            if value is not None and value < 0:
                raise ValueError(f"{key} 不能为负数: {value}")

    def with_marker(self, marker: Optional[str]) -> 'ListImageOptions':
        """返回仅替换 marker 的副本"""
        return replace(self, marker=marker)

    def to_query_params(self) -> Dict[str, str]:
        """
        转换为查询参数

        Returns:
            查询参数字典，未设置的字段不会出现
        """
        params: Dict[str, str] = {}
        for key in ('name', 'container_format', 'disk_format', 'sort_key', 'sort_dir', 'marker'):
            value = getattr(self, key)
            if value is not None:
                params[key] = value
        if self.status is not None:
            params['status'] = self.status.value
        for key in ('size_min', 'size_max', 'limit'):
            value = getattr(self, key)
            if value is not None:
                params[key] = str(value)
        return params
