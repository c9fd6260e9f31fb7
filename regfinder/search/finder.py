# regfinder/search/finder.py

from __future__ import annotations
import logging
import threading
import time
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional, Set, Tuple

from ..candidate import RegisterCandidate
from ..errors import ConfigError, NetlistError, SearchCancelled, SearchTimeout
from ..netlist.graph import Gate, Net, Netlist
from ..netlist.library import GateLibrary
from ..netlist.traversal import NetlistTraversal

logger = logging.getLogger(__name__)

GroupKey = Tuple[Any, ...]


@dataclass
class SearchOptions:
    control_roles: List[str] = field(default_factory=list)  # clock 之外还必须共享 net 的 pin role
    check_gate_type: bool = False
    max_comb_depth: Optional[int] = 16
    min_register_size: int = 1
    timeout: Optional[float] = None   # 秒
    workers: int = 1

    @classmethod
    def from_dict(cls, raw: Optional[Dict[str, Any]]) -> "SearchOptions":
        raw = dict(raw or {})
        unknown = set(raw) - set(cls.__dataclass_fields__)
        if unknown:
            raise ConfigError(f"unknown search options: {sorted(unknown)}")
        opts = cls(**raw)
        opts.validate()
        return opts

    def validate(self) -> None:
        if self.max_comb_depth is not None and self.max_comb_depth < 0:
            raise ConfigError("max_comb_depth must be >= 0")
        if self.min_register_size < 1:
            raise ConfigError("min_register_size must be >= 1")
        if self.workers < 1:
            raise ConfigError("workers must be >= 1")
        if "clock" in self.control_roles:
            raise ConfigError("'clock' is always shared, do not list it in control_roles")


@dataclass
class _FlipFlop:
    gate: Gate
    data_in: List[Net]
    key: GroupKey


class CandidateFinder:
    """
    候选寄存器搜索：
      1) 枚举网表中所有 ff
      2) 按 clock net（以及配置的控制信号 net / 门类型）分组
      3) 组内每个 ff 反向穿过组合逻辑求 sequential fan-in（只认 ff 的 data_out pin）
      4) 反馈环上的门 → round-based；环驱动的下游门与环构成流水线候选，其余按级分层，相邻两级构成流水线候选
      5) 全部结果去重并排序
    """

    def __init__(self, netlist: Netlist, library: GateLibrary,
                 options: Optional[SearchOptions] = None):
        self.netlist = netlist
        self.library = library
        self.options = options or SearchOptions()
        self.options.validate()
        self.skipped: List[Gate] = []   # 分类信息不全而被跳过的 ff

    # ===== 入口 ==============================================================

    def find(self, cancel_event: Optional[threading.Event] = None) -> List[RegisterCandidate]:
        self._check_netlist()
        deadline = None
        if self.options.timeout is not None:
            deadline = time.monotonic() + self.options.timeout

        groups = self._group_flip_flops()
        logger.info("%d flip-flop groups in %s", len(groups), self.netlist.name)

        def _evaluate(item: Tuple[GroupKey, List[_FlipFlop]]) -> List[RegisterCandidate]:
            if cancel_event is not None and cancel_event.is_set():
                raise SearchCancelled("candidate search cancelled")
            if deadline is not None and time.monotonic() > deadline:
                raise SearchTimeout(f"candidate search exceeded {self.options.timeout}s")
            key, members = item
            return self._evaluate_group(key, members)

        items = list(groups.items())
        if self.options.workers > 1 and len(items) > 1:
            with ThreadPoolExecutor(max_workers=self.options.workers) as pool:
                per_group = list(pool.map(_evaluate, items))
        else:
            per_group = [_evaluate(item) for item in items]

        # 去重 + 排序必须在单线程里一次性完成
        unique = set()
        for cands in per_group:
            unique.update(cands)
        result = sorted(unique)
        logger.info("found %d register candidates", len(result))
        return result

    def _check_netlist(self) -> None:
        if self.netlist is None:
            raise NetlistError("netlist is None")
        gates = getattr(self.netlist, "gates", None)
        if not isinstance(gates, dict):
            raise NetlistError(f"object of type {type(self.netlist).__name__} is not a netlist")
        if not gates:
            raise NetlistError(f"netlist '{self.netlist.name}' contains no gates")

    # ===== 分组 ==============================================================

    def _resolve_nets(self, gate: Gate, role: str) -> List[Net]:
        nets = []
        for pin in self.library.pins_for(gate, role):
            net = gate.get_net(pin)
            if net is not None:
                nets.append(net)
        return nets

    def _classify(self, gate: Gate) -> Optional[_FlipFlop]:
        lib = self.library
        if not lib.pins_for(gate, "data_in") or not lib.pins_for(gate, "data_out"):
            logger.warning("skipping %s (%s): no data pins in gate library", gate.name, gate.type)
            self.skipped.append(gate)
            return None

        data_in = self._resolve_nets(gate, "data_in")
        data_out = self._resolve_nets(gate, "data_out")
        if not data_in or not data_out:
            logger.warning("skipping %s (%s): data pins not connected", gate.name, gate.type)
            self.skipped.append(gate)
            return None

        clock = self._resolve_nets(gate, "clock")
        if not clock:
            logger.debug("excluding %s: no clock connected", gate.name)
            return None

        key: List[Any] = [clock[0].id]
        for role in self.options.control_roles:
            nets = self._resolve_nets(gate, role)
            key.append(tuple(sorted(n.id for n in nets)) or None)
        if self.options.check_gate_type:
            key.append(gate.type)
        return _FlipFlop(gate=gate, data_in=data_in, key=tuple(key))

    def _group_flip_flops(self) -> Dict[GroupKey, List[_FlipFlop]]:
        self.skipped = []
        groups: Dict[GroupKey, List[_FlipFlop]] = defaultdict(list)
        traversal = NetlistTraversal(self.netlist)
        for gate in traversal.find_gates(self.library.is_ff):
            ff = self._classify(gate)
            if ff is not None:
                groups[ff.key].append(ff)
        return dict(sorted(groups.items(), key=lambda kv: kv[1][0].gate.id))

    # ===== 组内分析 ==========================================================

    def _is_data_output(self, gate: Gate, pin: str) -> bool:
        """只有 ff 的 data_out pin 才算 sequential 源，scan-out 等其它输出不算。"""
        return self.library.is_ff(gate) and pin in self.library.pins_for(gate, "data_out")

    def _fan_in(self, members: List[_FlipFlop]) -> Dict[Gate, Set[Gate]]:
        """组内每个 ff 的 sequential fan-in，只保留同组成员。"""
        traversal = NetlistTraversal(self.netlist)
        in_group = {ff.gate for ff in members}
        fan_in: Dict[Gate, Set[Gate]] = {}
        for ff in members:
            found = traversal.collect_backward(
                ff.data_in,
                stop_pred=self._is_data_output,
                pass_pred=self.library.is_combinational,
                max_depth=self.options.max_comb_depth,
            )
            fan_in[ff.gate] = found & in_group
        return fan_in

    def _evaluate_group(self, key: GroupKey, members: List[_FlipFlop]) -> List[RegisterCandidate]:
        group = frozenset(ff.gate for ff in members)
        fan_in = self._fan_in(members)
        out: List[RegisterCandidate] = []

        loop = _cyclic_gates(group, fan_in)
        if loop == group:
            self._emit(out, group)
            return out
        if loop:
            logger.debug("group %s: %d of %d gates lie on a feedback loop",
                         key, len(loop), len(group))
            self._emit(out, loop)

        rest = group - loop
        if loop:
            # 环寄存器作为输入级，驱动下游只由它供数的门
            self._emit_stage(out, key, "loop", loop, rest, fan_in)

        stages = _stages(rest, fan_in)
        for k in range(len(stages) - 1):
            self._emit_stage(out, key, f"stage {k}", stages[k], stages[k + 1], fan_in)

        if not out:
            logger.debug("group %s (%d gates): no register pattern", key, len(group))
        return out

    def _emit(self, out: List[RegisterCandidate], in_reg: FrozenSet[Gate],
              out_reg: Optional[FrozenSet[Gate]] = None) -> None:
        if len(in_reg) < self.options.min_register_size:
            return
        out.append(RegisterCandidate(in_reg, out_reg))

    def _emit_stage(self, out: List[RegisterCandidate], key: GroupKey, label: str,
                    src: FrozenSet[Gate], dst: FrozenSet[Gate],
                    fan_in: Dict[Gate, Set[Gate]]) -> None:
        in_reg, out_reg = _stage_pair(src, dst, fan_in)
        if not in_reg or not out_reg:
            return
        if len(in_reg) != len(out_reg):
            logger.debug("group %s: %s width mismatch (%d vs %d)",
                         key, label, len(in_reg), len(out_reg))
            return
        self._emit(out, in_reg, out_reg)


def _cyclic_gates(group: FrozenSet[Gate], fan_in: Dict[Gate, Set[Gate]]) -> FrozenSet[Gate]:
    """
    组内位于反馈环上的门：fan-in 图中大小 > 1 的强连通分量，加上自环的门。
    迭代版 Tarjan，按 gate id 顺序访问保证结果确定。
    """
    index: Dict[Gate, int] = {}
    low: Dict[Gate, int] = {}
    on_stack: Set[Gate] = set()
    stack: List[Gate] = []
    cyclic: Set[Gate] = set()
    counter = 0

    def _preds(g: Gate) -> List[Gate]:
        return sorted(fan_in[g] & group, key=lambda p: p.id)

    for root in sorted(group, key=lambda g: g.id):
        if root in index:
            continue
        work = [(root, iter(_preds(root)))]
        index[root] = low[root] = counter
        counter += 1
        stack.append(root)
        on_stack.add(root)
        while work:
            g, it = work[-1]
            nxt = next(it, None)
            if nxt is not None:
                if nxt not in index:
                    index[nxt] = low[nxt] = counter
                    counter += 1
                    stack.append(nxt)
                    on_stack.add(nxt)
                    work.append((nxt, iter(_preds(nxt))))
                elif nxt in on_stack:
                    low[g] = min(low[g], index[nxt])
                continue
            work.pop()
            if work:
                parent = work[-1][0]
                low[parent] = min(low[parent], low[g])
            if low[g] == index[g]:
                scc = []
                while True:
                    m = stack.pop()
                    on_stack.discard(m)
                    scc.append(m)
                    if m is g:
                        break
                if len(scc) > 1 or g in fan_in[g]:
                    cyclic.update(scc)
    return frozenset(cyclic)


def _stages(rest: FrozenSet[Gate], fan_in: Dict[Gate, Set[Gate]]) -> List[FrozenSet[Gate]]:
    """
    rest 在组内是无环的（环上的门已由 _cyclic_gates 剥离）。
    level(g) = 0 若 g 在 rest 内无 fan-in，否则 1 + max(level(pred))。
    """
    level: Dict[Gate, int] = {}
    pending = sorted(rest, key=lambda g: g.id)
    while pending:
        progressed = []
        for g in pending:
            preds = fan_in[g] & rest
            if all(p in level for p in preds):
                level[g] = 1 + max((level[p] for p in preds), default=-1)
                progressed.append(g)
        if not progressed:
            raise RuntimeError("cycle in acyclic remainder")
        pending = [g for g in pending if g not in level]

    if not level:
        return []
    stages: List[Set[Gate]] = [set() for _ in range(max(level.values()) + 1)]
    for g, lvl in level.items():
        stages[lvl].add(g)
    return [frozenset(s) for s in stages]


def _stage_pair(src: FrozenSet[Gate], dst: FrozenSet[Gate],
                fan_in: Dict[Gate, Set[Gate]]) -> Tuple[FrozenSet[Gate], FrozenSet[Gate]]:
    """O = dst 中只由 src 驱动的门；I = src 中实际驱动了 O 的门。"""
    out_reg = frozenset(g for g in dst if fan_in[g] and fan_in[g] <= src)
    in_reg = frozenset(p for g in out_reg for p in fan_in[g])
    return in_reg, out_reg


def find_candidates(netlist: Netlist, library: GateLibrary,
                    options: Optional[SearchOptions] = None) -> List[RegisterCandidate]:
    return CandidateFinder(netlist, library, options).find()
