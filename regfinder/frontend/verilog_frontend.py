# regfinder/frontend/verilog_frontend.py
from __future__ import annotations
import logging
import re
from pathlib import Path
from typing import Dict, List, Optional

# Pyverilog
from pyverilog.vparser.parser import parse
from pyverilog.vparser.ast import (
    Assign, Decl, Identifier, InstanceList, Input, Inout, IntConst, ModuleDef,
    Node, Output, Pointer,
)

from .base import FrontendBase
from ..netlist.graph import Gate, Netlist
from ..netlist.library import KIND_COMB, GateTypeSpec

logger = logging.getLogger(__name__)

ASSIGN_TYPE = "$assign"
_BIT_RE = re.compile(r"^(.*)\[(\d+)\]$")


def _literal_to_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    text = value.strip()
    if not text:
        return None
    try:
        return int(text, 0)
    except ValueError:
        if "'" in text:
            _, encoded = text.split("'", 1)
            if not encoded:
                return None
            base_char = encoded[0].lower()
            digits = encoded[1:].replace("_", "")
            base_map = {"h": 16, "d": 10, "b": 2, "o": 8}
            base = base_map.get(base_char, 10)
            try:
                return int(digits or "0", base)
            except ValueError:
                return None
        return None


class VerilogFrontend(FrontendBase):
    """
    基于 Pyverilog 的门级 Verilog 前端：
    - 解析 filelist / files 中的所有 Verilog
    - 从 top_module 开始展开层次，每个标准单元实例生成一个 Gate
    - pin 方向由门库的 outputs 决定
    - `assign a = b ^ c;` 作为一个组合门 $assign 处理
    - 位选 x[3] 展开成名为 "x[3]" 的 net
    注意：Pyverilog 的预处理依赖 iverilog。
    """

    def build_netlist(self) -> Netlist:
        files = self._collect_files()
        for path in files:
            if not Path(path).exists():
                raise FileNotFoundError(f"netlist source not found: {path}")

        logger.info("parsing %d verilog file(s)", len(files))
        ast, _ = parse(files, preprocess_define=self.cfg.defines or None, debug=False)

        modules: Dict[str, ModuleDef] = {
            d.name: d for d in ast.description.definitions if isinstance(d, ModuleDef)
        }
        top = modules.get(self.cfg.top_module)
        if top is None:
            raise RuntimeError(f"top module '{self.cfg.top_module}' not found in {files}")

        if self.library.cells.get(ASSIGN_TYPE) is None:
            self.library.add_cell(GateTypeSpec(ASSIGN_TYPE, KIND_COMB, outputs=["Y"]))

        nl = Netlist(top.name)
        self._assign_count = 0
        self._declare_top_ports(nl, top)
        self._elaborate(nl, modules, top, prefix="", port_map={})
        logger.info(nl.summary())
        return nl

    # ---------- filelist 工具 ----------

    def _collect_files(self) -> List[str]:
        files = list(self.cfg.netlist_files)
        if self.cfg.netlist_filelist:
            files.extend(self._load_filelist(self.cfg.netlist_filelist))
        return files

    def _load_filelist(self, path: str) -> List[str]:
        files = []
        base = Path(path).parent
        with open(path) as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith("#") or line.startswith("//"):
                    continue
                # 简化：只要不是 +define/-I 等选项，都认为是文件
                if line.startswith("+") or line.startswith("-"):
                    continue
                p = Path(line)
                files.append(str(p if p.is_absolute() else base / p))
        return files

    # ---------- 端口 ----------

    def _declare_top_ports(self, nl: Netlist, top: ModuleDef) -> None:
        decls = [getattr(p, "first", None) for p in top.portlist.ports]
        for item in top.items:
            if isinstance(item, Decl):
                decls.extend(item.list)
        for decl in decls:
            if not isinstance(decl, (Input, Output, Inout)):
                continue
            is_in = isinstance(decl, (Input, Inout))
            is_out = isinstance(decl, (Output, Inout))
            for name in self._bit_names(decl):
                nl.add_net(name, is_input=is_in, is_output=is_out)

    def _bit_names(self, decl) -> List[str]:
        width = getattr(decl, "width", None)
        if width is None:
            return [decl.name]
        msb = _literal_to_int(getattr(width.msb, "value", None))
        lsb = _literal_to_int(getattr(width.lsb, "value", None))
        if msb is None or lsb is None:
            return [decl.name]
        lo, hi = min(msb, lsb), max(msb, lsb)
        return [f"{decl.name}[{i}]" for i in range(lo, hi + 1)]

    @staticmethod
    def _module_port_names(mod: ModuleDef) -> List[str]:
        names = []
        for port in mod.portlist.ports:
            first = getattr(port, "first", None)   # ANSI 风格是 Ioport(first, second)
            names.append(first.name if first is not None else port.name)
        return names

    # ---------- 层次展开 ----------

    def _elaborate(self, nl: Netlist, modules: Dict[str, ModuleDef], mod: ModuleDef,
                   prefix: str, port_map: Dict[str, str]) -> None:
        for item in mod.items:
            if isinstance(item, InstanceList):
                for inst in item.instances:
                    if inst.module in modules:
                        self._elaborate_submodule(nl, modules, inst, prefix, port_map)
                    else:
                        self._add_cell(nl, inst, prefix, port_map)
            elif isinstance(item, Assign):
                self._add_assign(nl, item, prefix, port_map)

    def _elaborate_submodule(self, nl, modules, inst, prefix, port_map) -> None:
        child = modules[inst.module]
        child_ports = self._module_port_names(child)
        child_map: Dict[str, str] = {}
        for idx, arg in enumerate(inst.portlist):
            portname = arg.portname
            if portname is None:
                if idx >= len(child_ports):
                    logger.warning("%s%s: too many positional connections", prefix, inst.name)
                    break
                portname = child_ports[idx]
            net_name = self._resolve(arg.argname, prefix, port_map)
            if net_name is not None:
                child_map[portname] = net_name
        self._elaborate(nl, modules, child, f"{prefix}{inst.name}.", child_map)

    def _add_cell(self, nl: Netlist, inst, prefix: str, port_map: Dict[str, str]) -> Gate:
        gate = nl.add_gate(f"{prefix}{inst.name}", inst.module)
        outputs = set(self.library.output_pins(inst.module))
        for arg in inst.portlist:
            if arg.portname is None:
                logger.warning("%s: positional connection on cell %s ignored", gate.name, inst.module)
                continue
            net_name = self._resolve(arg.argname, prefix, port_map)
            if net_name is None:
                continue
            net = nl.add_net(net_name)
            if arg.portname in outputs:
                nl.connect_source(net, gate, arg.portname)
            else:
                nl.connect_destination(net, gate, arg.portname)
        return gate

    def _add_assign(self, nl: Netlist, item: Assign, prefix: str, port_map: Dict[str, str]) -> None:
        lhs = self._resolve(item.left.var, prefix, port_map)
        if lhs is None:
            logger.warning("unsupported assign target %s", item.left.var)
            return
        gate = nl.add_gate(f"{prefix}{ASSIGN_TYPE}{self._assign_count}", ASSIGN_TYPE)
        self._assign_count += 1
        nl.connect_source(nl.add_net(lhs), gate, "Y")
        for idx, leaf in enumerate(self._leaves(item.right.var)):
            src = self._resolve(leaf, prefix, port_map)
            if src is not None:
                nl.connect_destination(nl.add_net(src), gate, f"A{idx}")

    def _leaves(self, node: Node) -> List[Node]:
        if isinstance(node, (Identifier, Pointer)):
            return [node]
        res: List[Node] = []
        for c in node.children():
            res.extend(self._leaves(c))
        return res

    # ---------- 名字解析 ----------

    def _resolve(self, node: Optional[Node], prefix: str, port_map: Dict[str, str]) -> Optional[str]:
        if node is None:
            return None
        if isinstance(node, IntConst):
            return f"const:{node.value}"   # 常量不带层次前缀
        if isinstance(node, Identifier):
            return self._map_name(node.name, prefix, port_map)
        if isinstance(node, Pointer) and isinstance(node.var, Identifier):
            bit = _literal_to_int(getattr(node.ptr, "value", None))
            if bit is None:
                return None
            return self._map_name(f"{node.var.name}[{bit}]", prefix, port_map)
        logger.warning("unsupported connection expression %s", node.__class__.__name__)
        return None

    @staticmethod
    def _map_name(name: str, prefix: str, port_map: Dict[str, str]) -> str:
        if name in port_map:
            return port_map[name]
        m = _BIT_RE.match(name)
        if m and m.group(1) in port_map:
            return f"{port_map[m.group(1)]}[{m.group(2)}]"
        return f"{prefix}{name}"
