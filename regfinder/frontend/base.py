# regfinder/frontend/base.py
from abc import ABC, abstractmethod
from ..config import Config
from ..netlist.graph import Netlist
from ..netlist.library import GateLibrary


class FrontendBase(ABC):
    """网表前端抽象接口：负责生成 Netlist。"""

    def __init__(self, cfg: Config, library: GateLibrary):
        self.cfg = cfg
        self.library = library

    @abstractmethod
    def build_netlist(self) -> Netlist:
        """构建并返回 Netlist。"""
        raise NotImplementedError
