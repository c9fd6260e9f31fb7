# regfinder/netlist/library.py

from __future__ import annotations
import fnmatch
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from ..errors import ConfigError
from .graph import Gate

KIND_FF = "ff"
KIND_COMB = "combinational"

RulePred = Callable[[str], bool]

DEFAULT_OUTPUT_PINS = ["Y", "Z", "ZN", "Q", "QN", "O", "X", "OUT"]


@dataclass
class GateTypeSpec:
    """
    单个门类型的分类信息：
      - kind: "ff" / "combinational" / 其它（latch、ram 等，遍历时视为边界）
      - pins: role -> pin 名列表，role 如 clock / data_in / data_out / enable / reset / set
      - outputs: 输出 pin 名，前端据此确定 pin 方向
    """
    name: str
    kind: str = KIND_COMB
    pins: Dict[str, List[str]] = field(default_factory=dict)
    outputs: List[str] = field(default_factory=list)

    @property
    def is_ff(self) -> bool:
        return self.kind == KIND_FF

    @property
    def is_combinational(self) -> bool:
        return self.kind == KIND_COMB

    def pins_for(self, role: str) -> List[str]:
        return self.pins.get(role, [])


def _as_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value]


def _spec_from_dict(name: str, raw: Dict[str, Any]) -> GateTypeSpec:
    if not isinstance(raw, dict):
        raise ConfigError(f"gate type '{name}' must be a mapping, got {type(raw).__name__}")
    pins = {role: _as_list(p) for role, p in (raw.get("pins") or {}).items()}
    outputs = _as_list(raw.get("outputs"))
    # ff 的 data_out 一定是输出
    for pin in pins.get("data_out", []):
        if pin not in outputs:
            outputs.append(pin)
    return GateTypeSpec(
        name=name,
        kind=raw.get("kind", KIND_COMB),
        pins=pins,
        outputs=outputs,
    )


def _build_rule_predicate(rtype: str, val: str) -> RulePred:
    if rtype == "exact":
        def _p(name, v=val):
            return name == v
    elif rtype == "prefix":
        def _p(name, v=val):
            return name.startswith(v)
    elif rtype == "regex":
        pat = re.compile(val)
        def _p(name, p=pat):
            return bool(p.search(name))
    elif rtype == "glob":
        def _p(name, v=val):
            return fnmatch.fnmatchcase(name, v)
    elif rtype == "substr":
        def _p(name, v=val):
            return v in name
    else:
        raise ConfigError(f"unknown gate rule type '{rtype}'")
    return _p


class GateLibrary:
    """
    门类型分类器：先查精确条目，再按顺序匹配规则（prefix / substr / regex / glob），
    都不命中时回落到 default_kind。
    """

    def __init__(self,
                 cells: Optional[Dict[str, GateTypeSpec]] = None,
                 rules: Optional[List[Tuple[RulePred, Dict[str, Any]]]] = None,
                 default_kind: str = KIND_COMB,
                 default_output_pins: Optional[Iterable[str]] = None):
        self.cells: Dict[str, GateTypeSpec] = dict(cells or {})
        self.rules: List[Tuple[RulePred, Dict[str, Any]]] = list(rules or [])
        self.default_kind = default_kind
        self.default_output_pins = list(default_output_pins or [])
        self._cache: Dict[str, GateTypeSpec] = {}

    @classmethod
    def from_dict(cls, raw: Optional[Dict[str, Any]]) -> "GateLibrary":
        """
        raw 格式示例：
          default_kind: combinational
          default_output_pins: [Y, Z, ZN, Q, QN]
          cells:
            DFFR_X1: {kind: ff, pins: {clock: CK, data_in: D, data_out: [Q, QN], reset: RN}}
          rules:
            - {type: prefix, value: DFF, kind: ff, pins: {clock: CLK, data_in: D, data_out: Q}}
        """
        raw = raw or {}
        cells = {name: _spec_from_dict(name, spec) for name, spec in (raw.get("cells") or {}).items()}
        rules = []
        for r in raw.get("rules") or []:
            val = r.get("value", "")
            if not val:
                continue
            rules.append((_build_rule_predicate(r.get("type", "substr"), val), r))
        return cls(
            cells=cells,
            rules=rules,
            default_kind=raw.get("default_kind", KIND_COMB),
            default_output_pins=_as_list(raw.get("default_output_pins", DEFAULT_OUTPUT_PINS)),
        )

    def add_cell(self, spec: GateTypeSpec) -> None:
        self.cells[spec.name] = spec
        self._cache.pop(spec.name, None)

    def lookup(self, gate_type: str) -> GateTypeSpec:
        spec = self._cache.get(gate_type)
        if spec is not None:
            return spec
        spec = self.cells.get(gate_type)
        if spec is None:
            for pred, raw in self.rules:
                if pred(gate_type):
                    spec = _spec_from_dict(gate_type, raw)
                    break
        if spec is None:
            spec = GateTypeSpec(name=gate_type, kind=self.default_kind)
        self._cache[gate_type] = spec
        return spec

    def is_ff(self, gate: Gate) -> bool:
        return self.lookup(gate.type).is_ff

    def is_combinational(self, gate: Gate) -> bool:
        return self.lookup(gate.type).is_combinational

    def output_pins(self, gate_type: str) -> List[str]:
        spec = self.lookup(gate_type)
        return spec.outputs or self.default_output_pins

    def pins_for(self, gate: Gate, role: str) -> List[str]:
        return self.lookup(gate.type).pins_for(role)


def default_library() -> GateLibrary:
    """内置一份常见标准单元命名的门库，config 里不写 library 时使用。"""
    return GateLibrary.from_dict({
        "default_kind": KIND_COMB,
        "default_output_pins": DEFAULT_OUTPUT_PINS,
        "rules": [
            {"type": "regex", "value": r"^(DFF|FDR|FDC|FDE|FD$)", "kind": KIND_FF,
             "outputs": ["Q", "QN"],
             "pins": {"clock": ["CLK", "CK", "C"], "data_in": ["D"], "data_out": ["Q", "QN"],
                      "enable": ["E", "EN", "CE"], "reset": ["R", "RN", "RST", "CLR"],
                      "set": ["S", "SN", "SET", "PRE"]}},
            {"type": "prefix", "value": "SDFF", "kind": KIND_FF,
             "outputs": ["Q", "QN"],
             "pins": {"clock": ["CLK", "CK"], "data_in": ["D"], "data_out": ["Q", "QN"],
                      "enable": ["SE"], "reset": ["RN"], "set": ["SN"]}},
            {"type": "regex", "value": r"^(LATCH|DLH|DLL|LD)", "kind": "latch"},
        ],
    })
