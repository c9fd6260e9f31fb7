# regfinder/errors.py


class RegFinderError(Exception):
    """regfinder 所有异常的基类。"""


class CandidateError(RegFinderError, ValueError):
    """RegisterCandidate 构造前置条件不满足（空寄存器、宽度不一致等）。"""


class NetlistError(RegFinderError):
    """网表句柄无效，整次搜索无法进行。"""


class ConfigError(RegFinderError):
    """配置文件或门库描述格式错误。"""


class SearchCancelled(RegFinderError):
    """搜索在两个分组之间被外部取消。"""


class SearchTimeout(SearchCancelled):
    pass
