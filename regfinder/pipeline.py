# regfinder/pipeline.py
import logging
from typing import List, Optional

from .candidate import RegisterCandidate
from .config import Config, load_config
from .frontend import FrontendBase, ToyFrontend, VerilogFrontend
from .netlist.graph import Netlist
from .netlist.library import GateLibrary, default_library
from .report import dump_candidates, pretty_print_candidates
from .search import CandidateFinder, SearchOptions

logger = logging.getLogger(__name__)


class RegisterSearch:
    def __init__(self, cfg: Config):
        self.cfg = cfg
        if cfg.library is None:
            self.library = default_library()
        else:
            self.library = GateLibrary.from_dict(cfg.library)
        self.options = SearchOptions.from_dict(cfg.search)
        self.netlist: Optional[Netlist] = None

    @classmethod
    def from_file(cls, config_path: str) -> "RegisterSearch":
        cfg = load_config(config_path)
        return cls(cfg)

    def make_frontend(self) -> FrontendBase:
        if self.cfg.frontend == "verilog":
            return VerilogFrontend(self.cfg, self.library)
        return ToyFrontend(self.cfg, self.library)

    def run(self, out_prefix: Optional[str] = "out", show: bool = True) -> List[RegisterCandidate]:
        # 1) 前端构建网表
        self.netlist = self.make_frontend().build_netlist()
        logger.info(self.netlist.summary())

        # 2) 候选搜索
        finder = CandidateFinder(self.netlist, self.library, self.options)
        cands = finder.find()
        if finder.skipped:
            logger.warning("%d flip-flops skipped due to missing pin classification", len(finder.skipped))

        # 3) 输出
        if show:
            pretty_print_candidates(cands)
        if out_prefix and self.cfg.output.get("json", True):
            path = out_prefix + ".candidates.json"
            dump_candidates(cands, self.netlist.name, path)
            logger.info("wrote %s", path)

        print(f"[INFO] Register candidates found: {len(cands)}")
        return cands
