# -*- coding: utf-8 -*-
"""
CloudWatch 指标统计模块

功能：
- 构建 GetMetricStatistics 查询选项
- 调用 CloudWatch API 获取统计数据
- 从配置加载指标查询
"""

from .domain import (
    MAX_STATISTICS,
    Datapoint,
    Dimension,
    GetMetricStatistics,
    GetMetricStatisticsBuilder,
    GetMetricStatisticsResponse,
    Statistics,
    Unit,
)
from .client import CloudWatchClient
from .loader import load_metric_queries

__all__ = [
    'MAX_STATISTICS',
    'Datapoint',
    'Dimension',
    'GetMetricStatistics',
    'GetMetricStatisticsBuilder',
    'GetMetricStatisticsResponse',
    'Statistics',
    'Unit',
    'CloudWatchClient',
    'load_metric_queries',
]
