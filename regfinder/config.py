# regfinder/config.py
from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional
import yaml

from .errors import ConfigError


@dataclass
class Config:
    frontend: str = "toy"  # "toy" or "verilog"
    netlist_files: List[str] = field(default_factory=list)
    netlist_filelist: Optional[str] = None
    top_module: Optional[str] = None
    defines: List[str] = field(default_factory=list)
    library: Optional[Dict[str, Any]] = None   # None 表示用内置 default_library()
    search: Dict[str, Any] = field(default_factory=dict)
    output: Dict[str, Any] = field(default_factory=dict)


def load_config(path: str) -> Config:
    with open(path) as f:
        cfg_raw = yaml.safe_load(f) or {}
    if not isinstance(cfg_raw, dict):
        raise ConfigError(f"{path}: top level must be a mapping")
    return config_from_dict(cfg_raw)


def config_from_dict(cfg_raw: Dict[str, Any]) -> Config:
    frontend = cfg_raw.get("frontend", "toy")
    netlist_cfg = cfg_raw.get("netlist") or {}
    if frontend not in ("toy", "verilog"):
        raise ConfigError(f"unknown frontend '{frontend}'")
    if frontend == "verilog":
        if "top_module" not in netlist_cfg:
            raise ConfigError("netlist.top_module is required for the verilog frontend")
        if not netlist_cfg.get("files") and not netlist_cfg.get("filelist"):
            raise ConfigError("netlist.files or netlist.filelist is required for the verilog frontend")
    return Config(
        frontend=frontend,
        netlist_files=list(netlist_cfg.get("files", [])),
        netlist_filelist=netlist_cfg.get("filelist"),
        top_module=netlist_cfg.get("top_module"),
        defines=netlist_cfg.get("defines", []),
        library=cfg_raw.get("library"),
        search=cfg_raw.get("search") or {},
        output=cfg_raw.get("output") or {},
    )
