# -*- coding: utf-8 -*-
"""
OpenStack Glance 镜像模块

功能：
- 镜像领域对象与列表查询选项
- 分页响应解析与按 zone 续取
- Glance v1 HTTP 客户端
"""

from .domain import Image, ImageDetails, ImageStatus
from .options import ListImageOptions
from .parser import ImageDetailsPager, ImagePager, parse_image_details, parse_images
from .client import GlanceApi, ImageApi

__all__ = [
    'Image',
    'ImageDetails',
    'ImageStatus',
    'ListImageOptions',
    'ImageDetailsPager',
    'ImagePager',
    'parse_image_details',
    'parse_images',
    'GlanceApi',
    'ImageApi',
]
