"""
Polaris API 层 - 原子能力封装

每个类对应一组服务端接口，只负责 URL 与查询参数的构造和响应解码:
- CommonAPI: 项目 / 分支 / 运行记录 (common-object service)
- IssueAPI: issue 查询
- TriageAPI: triage 查询与更新
- CodeAnalysisAPI: 代码分析事件与源码
"""

from .code_analysis import CodeAnalysisAPI
from .common import CommonAPI
from .issues import IssueAPI
from .triage import TriageAPI

__all__ = [
    "CommonAPI",
    "IssueAPI",
    "TriageAPI",
    "CodeAnalysisAPI",
]
