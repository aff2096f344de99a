# -*- coding: utf-8 -*-
"""
CloudWatch GetMetricStatistics 领域对象模块

功能：
- 定义维度（Dimension）、统计方式（Statistics）、单位（Unit）
- 提供 GetMetricStatistics 不可变查询选项及其 Builder
- 解析 GetMetricStatistics 响应中的数据点
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple, Union


# CloudWatch 单次请求最多支持 5 种统计方式
MAX_STATISTICS = 5

DEFAULT_PERIOD = 60


@dataclass(frozen=True)
class Dimension:
    """指标维度（名称/值）"""
    name: str
    value: str

    def to_request_param(self) -> Dict[str, str]:
        return {'Name': self.name, 'Value': self.value}


class Statistics(Enum):
    """统计方式"""
    SAMPLE_COUNT = "SampleCount"
    AVERAGE = "Average"
    SUM = "Sum"
    MINIMUM = "Minimum"
    MAXIMUM = "Maximum"

    @classmethod
    def from_value(cls, value: str) -> 'Statistics':
        """
        根据 AWS 名称解析统计方式

        Raises:
            ValueError: 未知的统计方式
        """
        for statistic in cls:
            if statistic.value == value:
                return statistic
        raise ValueError(f"未知的统计方式: {value}")


class Unit(Enum):
    """CloudWatch StandardUnit"""
    SECONDS = "Seconds"
    MICROSECONDS = "Microseconds"
    MILLISECONDS = "Milliseconds"
    BYTES = "Bytes"
    KILOBYTES = "Kilobytes"
    MEGABYTES = "Megabytes"
    GIGABYTES = "Gigabytes"
    TERABYTES = "Terabytes"
    BITS = "Bits"
    KILOBITS = "Kilobits"
    MEGABITS = "Megabits"
    GIGABITS = "Gigabits"
    TERABITS = "Terabits"
    PERCENT = "Percent"
    COUNT = "Count"
    BYTES_PER_SECOND = "Bytes/Second"
    KILOBYTES_PER_SECOND = "Kilobytes/Second"
    MEGABYTES_PER_SECOND = "Megabytes/Second"
    GIGABYTES_PER_SECOND = "Gigabytes/Second"
    TERABYTES_PER_SECOND = "Terabytes/Second"
    BITS_PER_SECOND = "Bits/Second"
    KILOBITS_PER_SECOND = "Kilobits/Second"
    MEGABITS_PER_SECOND = "Megabits/Second"
    GIGABITS_PER_SECOND = "Gigabits/Second"
    TERABITS_PER_SECOND = "Terabits/Second"
    COUNT_PER_SECOND = "Count/Second"
    NONE = "None"
    UNRECOGNIZED = "UNRECOGNIZED"

    @classmethod
    def from_value(cls, value: Optional[str]) -> Optional['Unit']:
        """解析响应中的单位，未知单位返回 UNRECOGNIZED"""
        if value is None:
            return None
        for unit in cls:
            if unit.value == value:
                return unit
        return cls.UNRECOGNIZED


def _statistic_order(statistic: Statistics) -> int:
    return list(Statistics).index(statistic)


@dataclass(frozen=True)
class GetMetricStatistics:
    """
    获取指标统计数据的查询选项（不可变）

    通过 GetMetricStatistics.builder() 构建，构建完成后可在多线程间只读共享。
    """
    metric_name: str
    namespace: str
    dimensions: FrozenSet[Dimension] = frozenset()
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    period: int = DEFAULT_PERIOD
    statistics: FrozenSet[Statistics] = frozenset()
    unit: Optional[Unit] = None

    @staticmethod
    def builder() -> 'GetMetricStatisticsBuilder':
        """返回一个新的 Builder"""
        return GetMetricStatisticsBuilder()

    def with_time_range(self, start_time: Optional[datetime], end_time: Optional[datetime]) -> 'GetMetricStatistics':
        """返回替换了时间窗口的副本"""
        return replace(self, start_time=start_time, end_time=end_time)

    def to_request_params(self) -> Dict[str, Any]:
        """
        转换为 boto3 get_metric_statistics 的请求参数

        未设置的 start_time / end_time / unit 不会出现在参数中。

        Returns:
            请求参数字典
        """
        params: Dict[str, Any] = {
            'Namespace': self.namespace,
            'MetricName': self.metric_name,
            'Period': self.period,
            'Statistics': [s.value for s in sorted(self.statistics, key=_statistic_order)],
            'Dimensions': [
                d.to_request_param()
                for d in sorted(self.dimensions, key=lambda d: (d.name, d.value))
            ],
        }
        if self.start_time is not None:
            params['StartTime'] = self.start_time
        if self.end_time is not None:
            params['EndTime'] = self.end_time
        if self.unit is not None:
            params['Unit'] = self.unit.value
        return params


class GetMetricStatisticsBuilder:
    """
    GetMetricStatistics 的构建器

    功能：
    - 所有 setter 返回 self，支持链式调用
    - dimension(s) / statistic(s) 为累加语义（多次调用取并集）
    - build() 校验必填字段并生成不可变快照

    非线程安全：单个线程构建，build() 之后共享结果。
    """

    def __init__(self):
        # 累加型字段使用 dict 保持首次出现顺序并去重
        self._dimensions: Dict[Dimension, None] = {}
        self._statistics: Dict[Statistics, None] = {}
        self._start_time: Optional[datetime] = None
        self._end_time: Optional[datetime] = None
        self._metric_name: Optional[str] = None
        self._namespace: Optional[str] = None
        self._period: int = DEFAULT_PERIOD
        self._unit: Optional[Unit] = None

    def dimensions(self, dimensions: Iterable[Dimension]) -> 'GetMetricStatisticsBuilder':
        """
        追加一组描述指标的维度

        Args:
            dimensions: 维度集合

        Returns:
            self
        """
        if dimensions is None:
            raise ValueError("dimensions 不能为空")
        for dimension in dimensions:
            self.dimension(dimension)
        return self

    def dimension(self, dimension: Dimension) -> 'GetMetricStatisticsBuilder':
        """追加一个维度"""
        if dimension is None:
            raise ValueError("dimension 不能为空")
        if not isinstance(dimension, Dimension):
            raise ValueError(f"dimension 必须是 Dimension 类型: {dimension!r}")
        self._dimensions[dimension] = None
        return self

    def end_time(self, end_time: Optional[datetime]) -> 'GetMetricStatisticsBuilder':
        """
        最后一个数据点的时间戳（不包含）

        Args:
            end_time: 结束时间，None 表示不指定
        """
        self._end_time = end_time
        return self

    def metric_name(self, metric_name: str) -> 'GetMetricStatisticsBuilder':
        self._metric_name = metric_name
        return self

    def namespace(self, namespace: str) -> 'GetMetricStatisticsBuilder':
        self._namespace = namespace
        return self

    def period(self, period: int) -> 'GetMetricStatisticsBuilder':
        """数据点粒度（秒）"""
        self._period = period
        return self

    def start_time(self, start_time: Optional[datetime]) -> 'GetMetricStatisticsBuilder':
        """
        第一个数据点的时间戳（包含）

        Args:
            start_time: 开始时间，None 表示不指定
        """
        self._start_time = start_time
        return self

    def statistics(self, statistics: Iterable[Union[Statistics, str]]) -> 'GetMetricStatisticsBuilder':
        """追加一组统计方式"""
        if statistics is None:
            raise ValueError("statistics 不能为空")
        for statistic in statistics:
            self.statistic(statistic)
        return self

    def statistic(self, statistic: Union[Statistics, str]) -> 'GetMetricStatisticsBuilder':
        """追加一个统计方式（最多 5 种），字符串按 AWS 名称转换"""
        if statistic is None:
            raise ValueError("statistic 不能为空")
        if isinstance(statistic, str):
            statistic = Statistics.from_value(statistic)
        elif not isinstance(statistic, Statistics):
            raise ValueError(f"statistic 必须是 Statistics 类型: {statistic!r}")
        self._statistics[statistic] = None
        return self

    def unit(self, unit: Optional[Unit]) -> 'GetMetricStatisticsBuilder':
        self._unit = unit
        return self

    def build(self) -> GetMetricStatistics:
        """
        根据当前 Builder 内容生成 GetMetricStatistics

        Returns:
            不可变的 GetMetricStatistics

        Raises:
            ValueError: metric_name / namespace 缺失、period 非正整数或统计方式超过 5 种
        """
        if self._metric_name is None:
            raise ValueError("metric_name 不能为空")
        if self._namespace is None:
            raise ValueError("namespace 不能为空")
        if isinstance(self._period, bool) or not isinstance(self._period, int) or self._period <= 0:
            raise ValueError(f"period 必须是正整数: {self._period!r}")
        # Statistics 共 5 个成员，与 MAX_STATISTICS 相同；仅在上限调低时触发
        if len(self._statistics) > MAX_STATISTICS:
            raise ValueError(
                f"statistics 最多 {MAX_STATISTICS} 种，当前 {len(self._statistics)} 种"
            )

        return GetMetricStatistics(
            metric_name=self._metric_name,
            namespace=self._namespace,
            dimensions=frozenset(self._dimensions),
            start_time=self._start_time,
            end_time=self._end_time,
            period=self._period,
            statistics=frozenset(self._statistics),
            unit=self._unit,
        )


@dataclass(frozen=True)
class Datapoint:
    """单个统计数据点"""
    timestamp: datetime
    sample_count: Optional[float] = None
    average: Optional[float] = None
    sum: Optional[float] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    unit: Optional[Unit] = None

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'Datapoint':
        return cls(
            timestamp=data['Timestamp'],
            sample_count=data.get('SampleCount'),
            average=data.get('Average'),
            sum=data.get('Sum'),
            minimum=data.get('Minimum'),
            maximum=data.get('Maximum'),
            unit=Unit.from_value(data.get('Unit')),
        )

    def value(self, statistic: Statistics) -> Optional[float]:
        """读取某个统计方式的值"""
        return {
            Statistics.SAMPLE_COUNT: self.sample_count,
            Statistics.AVERAGE: self.average,
            Statistics.SUM: self.sum,
            Statistics.MINIMUM: self.minimum,
            Statistics.MAXIMUM: self.maximum,
        }[statistic]


@dataclass(frozen=True)
class GetMetricStatisticsResponse:
    """GetMetricStatistics 响应（数据点按时间升序）"""
    label: Optional[str]
    datapoints: Tuple[Datapoint, ...] = field(default_factory=tuple)

    @classmethod
    def from_json(cls, response: Dict[str, Any]) -> 'GetMetricStatisticsResponse':
        datapoints: List[Datapoint] = [
            Datapoint.from_json(d) for d in response.get('Datapoints', [])
        ]
        datapoints.sort(key=lambda d: d.timestamp)
        return cls(label=response.get('Label'), datapoints=tuple(datapoints))

    def latest(self) -> Optional[Datapoint]:
        """返回最新的数据点，无数据返回 None"""
        if not self.datapoints:
            return None
        return self.datapoints[-1]

    def __len__(self) -> int:
        return len(self.datapoints)

    def __iter__(self):
        return iter(self.datapoints)
