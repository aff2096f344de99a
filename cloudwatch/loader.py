# -*- coding: utf-8 -*-
"""
CloudWatch 指标查询加载模块

功能：
- 把配置文件中的 metric_queries 列表转换为 GetMetricStatistics
- 读取失败时给出带索引的明确错误
"""

from typing import Any, Dict, List

from cloudwatch.domain import Dimension, GetMetricStatistics, Statistics, Unit


def load_metric_queries(entries: List[Dict[str, Any]]) -> List[GetMetricStatistics]:
    """
    加载指标查询配置

    Args:
        entries: 查询配置列表，每项包含 namespace, metric_name, dimensions,
            statistics, period, unit

    Returns:
        GetMetricStatistics 列表（不含时间窗口，由调用方在查询时设置）

    Raises:
        ValueError: 配置格式错误
    """
    if entries is None:
        return []
    if not isinstance(entries, list):
        raise ValueError("配置格式错误: 'metric_queries' 必须是列表类型")

    queries = []
    for idx, entry in enumerate(entries):
        try:
            queries.append(_parse_metric_query(entry))
        except (KeyError, ValueError) as e:
            raise ValueError(f"配置格式错误: 'metric_queries[{idx}]': {e}")
    return queries


def _parse_metric_query(entry: Dict[str, Any]) -> GetMetricStatistics:
    """
    解析单个查询配置

    Raises:
        KeyError: 缺少必填字段
        ValueError: 字段值无效
    """
    if not isinstance(entry, dict):
        raise ValueError("查询配置必须是字典类型")

    for required in ('namespace', 'metric_name'):
        if required not in entry:
            raise KeyError(f"缺少必填字段: {required}")

    builder = (GetMetricStatistics.builder()
               .namespace(str(entry['namespace']))
               .metric_name(str(entry['metric_name'])))

    dimensions = entry.get('dimensions') or {}
    if not isinstance(dimensions, dict):
        raise ValueError("dimensions 必须是字典类型")
    for name, value in dimensions.items():
        builder.dimension(Dimension(str(name), str(value)))

    statistics = entry.get('statistics') or ['Average']
    if not isinstance(statistics, list):
        raise ValueError("statistics 必须是列表类型")
    builder.statistics(Statistics.from_value(s) for s in statistics)

    if 'period' in entry:
        builder.period(entry['period'])

    if entry.get('unit') is not None:
        unit = Unit.from_value(entry['unit'])
        if unit is Unit.UNRECOGNIZED:
            raise ValueError(f"未知的单位: {entry['unit']}")
        builder.unit(unit)

    return builder.build()
