# -*- coding: utf-8 -*-
"""
Glance v1 镜像领域对象模块

功能：
- 定义镜像（Image）和镜像详情（ImageDetails）
- 定义镜像状态（ImageStatus）
- 从 JSON / HEAD 响应头解析镜像
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from pagination.collection import Link


class ImageStatus(Enum):
    """镜像状态"""
    ACTIVE = "active"
    SAVING = "saving"
    QUEUED = "queued"
    KILLED = "killed"
    PENDING_DELETE = "pending_delete"
    DELETED = "deleted"
    UNRECOGNIZED = "UNRECOGNIZED"

    @classmethod
    def from_value(cls, value: Optional[str]) -> 'ImageStatus':
        if value:
            for status in cls:
                if status.value == value.lower():
                    return status
        return cls.UNRECOGNIZED


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    解析 ISO 8601 时间戳

    兼容 "2012-05-23T16:04:01Z" 和不带时区的 "2012-05-23T16:04:01.000000"。
    """
    if not value:
        return None
    text = value.strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    return datetime.fromisoformat(text)


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == '':
        return None
    return int(value)


def _optional_bool(value: Any) -> Optional[bool]:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    return str(value).lower() == 'true'


@dataclass(frozen=True)
class Image:
    """镜像（列表接口返回的精简信息）"""
    id: str
    name: Optional[str] = None
    links: Tuple[Link, ...] = field(default_factory=tuple)

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> 'Image':
        return cls(
            id=data['id'],
            name=data.get('name'),
            links=tuple(Link.from_json(link) for link in data.get('links') or []),
        )


@dataclass(frozen=True)
class ImageDetails(Image):
    """镜像详情"""
    container_format: Optional[str] = None
    disk_format: Optional[str] = None
    size: Optional[int] = None
    checksum: Optional[str] = None
    min_disk: Optional[int] = None
    min_ram: Optional[int] = None
    location: Optional[str] = None
    owner: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None
    status: ImageStatus = ImageStatus.UNRECOGNIZED
    is_public: Optional[bool] = None
    properties: Dict[str, str] = field(default_factory=dict, hash=False, compare=True)

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> 'ImageDetails':
        return cls(
            id=data['id'],
            name=data.get('name'),
            links=tuple(Link.from_json(link) for link in data.get('links') or []),
            container_format=data.get('container_format'),
            disk_format=data.get('disk_format'),
            size=_optional_int(data.get('size')),
            checksum=data.get('checksum'),
            min_disk=_optional_int(data.get('min_disk')),
            min_ram=_optional_int(data.get('min_ram')),
            location=data.get('location'),
            owner=data.get('owner'),
            created_at=parse_timestamp(data.get('created_at')),
            updated_at=parse_timestamp(data.get('updated_at')),
            deleted_at=parse_timestamp(data.get('deleted_at')),
            status=ImageStatus.from_value(data.get('status')),
            is_public=_optional_bool(data.get('is_public')),
            properties=dict(data.get('properties') or {}),
        )

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> 'ImageDetails':
        """
        从 HEAD /images/{id} 的 x-image-meta-* 响应头解析镜像详情

        Args:
            headers: 响应头（大小写不敏感的映射）
        """
        meta: Dict[str, str] = {}
        properties: Dict[str, str] = {}
        for key, value in headers.items():
            lower = key.lower()
            if lower.startswith('x-image-meta-property-'):
                properties[lower[len('x-image-meta-property-'):]] = value
            elif lower.startswith('x-image-meta-'):
                meta[lower[len('x-image-meta-'):].replace('-', '_')] = value
        if 'id' not in meta:
            raise ValueError("响应头中缺少 x-image-meta-id")
        meta['properties'] = properties
        return cls.from_json(meta)
