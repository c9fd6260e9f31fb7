# regfinder/candidate.py

from __future__ import annotations
from functools import total_ordering
from typing import Any, Dict, FrozenSet, Iterable, Optional, Tuple

from .errors import CandidateError
from .netlist.graph import Gate, Netlist


def _id_key(reg: FrozenSet[Gate]) -> Tuple[int, ...]:
    return tuple(sorted(g.id for g in reg))


@total_ordering
class RegisterCandidate:
    """
    候选寄存器：
      - round-based：输入寄存器 == 输出寄存器，每个周期回灌自身
      - pipelined：一轮流水线的输入寄存器与输出寄存器

    只持有网表中 Gate 的引用（frozenset），不拷贝门数据；网表必须比候选活得久。
    RegisterCandidate() 不带参数时是占位状态，finder 不会产生这种对象。
    """

    __slots__ = ("_netlist", "_size", "_is_round_based", "_in_reg", "_out_reg", "_key")

    def __init__(self,
                 in_reg: Optional[Iterable[Gate]] = None,
                 out_reg: Optional[Iterable[Gate]] = None):
        if in_reg is None:
            if out_reg is not None:
                raise CandidateError("output register given without an input register")
            self._netlist: Optional[Netlist] = None
            self._size = 0
            self._is_round_based = False
            self._in_reg: FrozenSet[Gate] = frozenset()
            self._out_reg: FrozenSet[Gate] = frozenset()
            self._key: Tuple = (0, (), ())
            return

        in_set = frozenset(in_reg)
        out_set = in_set if out_reg is None else frozenset(out_reg)

        if not in_set:
            raise CandidateError("input register must not be empty")
        if not out_set:
            raise CandidateError("output register must not be empty")
        if len(in_set) != len(out_set):
            raise CandidateError(
                f"input and output register differ in size ({len(in_set)} != {len(out_set)})"
            )

        netlists = {id(g.netlist) for g in in_set | out_set}
        if len(netlists) != 1:
            raise CandidateError("register gates belong to more than one netlist")

        self._netlist = next(iter(in_set)).netlist
        self._size = len(in_set)
        self._is_round_based = in_set == out_set
        self._in_reg = in_set
        self._out_reg = in_set if self._is_round_based else out_set
        in_key = _id_key(in_set)
        self._key = (self._size, in_key, in_key if self._is_round_based else _id_key(out_set))

    # ===== 访问器 ============================================================

    def get_netlist(self) -> Netlist:
        if self._netlist is None:
            raise CandidateError("placeholder candidate has no netlist")
        return self._netlist

    def get_size(self) -> int:
        return self._size

    def is_round_based(self) -> bool:
        return self._is_round_based

    def get_input_reg(self) -> FrozenSet[Gate]:
        return self._in_reg

    def get_output_reg(self) -> FrozenSet[Gate]:
        return self._out_reg

    netlist = property(get_netlist)
    size = property(get_size)
    round_based = property(is_round_based)
    in_reg = property(get_input_reg)
    out_reg = property(get_output_reg)

    # ===== 比较 ==============================================================
    # 排序键：(size, in_reg 的 gate id 序列, out_reg 的 gate id 序列)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RegisterCandidate):
            return NotImplemented
        return self._key == other._key

    def __lt__(self, other: "RegisterCandidate") -> bool:
        if not isinstance(other, RegisterCandidate):
            return NotImplemented
        return self._key < other._key

    def __hash__(self) -> int:
        return hash(self._key)

    def __repr__(self) -> str:
        if self._netlist is None:
            return "RegisterCandidate(<placeholder>)"
        kind = "round" if self._is_round_based else "pipelined"
        return f"RegisterCandidate(size={self._size}, {kind}, in={list(self._key[1])}, out={list(self._key[2])})"

    def to_dict(self) -> Dict[str, Any]:
        in_gates = sorted(self._in_reg, key=lambda g: g.id)
        out_gates = sorted(self._out_reg, key=lambda g: g.id)
        return {
            "size": self._size,
            "round_based": self._is_round_based,
            "in_reg": [g.name for g in in_gates],
            "out_reg": [g.name for g in out_gates],
        }
