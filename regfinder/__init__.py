# regfinder/__init__.py

"""
regfinder: 门级网表候选寄存器搜索

- 在门级网表中按时钟 / 控制信号对 flip-flop 分组
- 识别 round-based 寄存器（输出经组合逻辑回灌自身输入）
- 识别一级流水线的输入 / 输出寄存器对
- 输出：
    - 去重、排好序的 RegisterCandidate 列表
    - <prefix>.candidates.json
"""

from .candidate import RegisterCandidate
from .errors import (
    CandidateError, ConfigError, NetlistError, RegFinderError, SearchCancelled, SearchTimeout,
)
from .search import CandidateFinder, SearchOptions, find_candidates

__all__ = [
    "RegisterCandidate",
    "CandidateFinder",
    "SearchOptions",
    "find_candidates",
    "RegFinderError",
    "CandidateError",
    "ConfigError",
    "NetlistError",
    "SearchCancelled",
    "SearchTimeout",
]
