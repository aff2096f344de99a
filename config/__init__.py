# -*- coding: utf-8 -*-
"""
配置模块

功能：
- 加载 Exporter YAML 配置
- 应用环境变量覆盖
"""

from .loader import (
    AwsConfig,
    ExporterConfig,
    GlanceConfig,
    ServerConfig,
    load_config,
    print_config,
)

__all__ = [
    'AwsConfig',
    'ExporterConfig',
    'GlanceConfig',
    'ServerConfig',
    'load_config',
    'print_config',
]
