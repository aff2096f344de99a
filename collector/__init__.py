# -*- coding: utf-8 -*-
"""
Prometheus Collector 模块

功能：
- 汇总 CloudWatch 指标统计和 Glance 镜像数量
- 暴露 Prometheus 格式的指标
"""

from .collector import MetricsCollector
from .result import CollectResult, CollectStatus
