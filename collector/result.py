# -*- coding: utf-8 -*-
"""
采集结果数据结构

功能：
- 定义单次采集结果的状态和原因
- 统一管理 CloudWatch 指标和 Glance 镜像的采集结果
"""

from dataclasses import dataclass, field
from typing import Optional, Dict
from enum import Enum


class CollectStatus(Enum):
    """采集状态"""
    SUCCESS = "success"    # 成功获取数据
    SKIPPED = "skipped"    # 跳过采集（有明确原因，如 CloudWatch 无数据）
    FAILED = "failed"      # 采集失败


@dataclass
class CollectResult:
    """单次采集结果"""
    source: str                      # 数据来源：cloudwatch / glance
    name: str                        # 采集项名称，如 "AWS/EC2/CPUUtilization" 或 zone
    status: CollectStatus            # 采集状态
    labels: Dict[str, str] = field(default_factory=dict)  # 指标 labels
    values: Dict[str, float] = field(default_factory=dict)  # 采集值（success 时）
    reason: Optional[str] = None     # 状态原因（skipped 时必须有）
    error: Optional[str] = None      # 错误信息（failed 时）
    error_type: Optional[str] = None  # 错误类型，用于错误计数

    def is_success(self) -> bool:
        """判断是否成功"""
        return self.status == CollectStatus.SUCCESS

    def is_skipped(self) -> bool:
        """判断是否跳过"""
        return self.status == CollectStatus.SKIPPED

    def is_failed(self) -> bool:
        """判断是否失败"""
        return self.status == CollectStatus.FAILED
