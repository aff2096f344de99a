# -*- coding: utf-8 -*-
"""
定时任务模块

功能：
- 定时刷新 CloudWatch 指标与 Glance 镜像数据
"""

from .scheduler import RefreshScheduler

__all__ = ['RefreshScheduler']
