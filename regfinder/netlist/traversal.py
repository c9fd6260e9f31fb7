# regfinder/netlist/traversal.py

from __future__ import annotations
from collections import deque
from typing import Callable, Iterable, List, Optional, Set

from .graph import Gate, Net, Netlist


GatePred = Callable[[Gate], bool]
EndpointPred = Callable[[Gate, str], bool]


class NetlistTraversal:
    """
    针对 Netlist 的通用遍历：
      - 按谓词筛选门
      - 沿 net 反向 BFS，穿过满足 pass_pred 的门，在满足 stop_pred(gate, pin) 的驱动端收集终点
    遍历深度按穿过的门个数计，max_depth=None 表示不限。
    """

    def __init__(self, netlist: Netlist):
        self.netlist = netlist

    # ===== 公共基础方法 =====================================================

    def find_gates(self, pred: GatePred) -> List[Gate]:
        """按谓词筛选门，按 id 顺序返回。"""
        return sorted(self.netlist.get_gates(pred), key=lambda g: g.id)

    def collect_backward(
        self,
        start_nets: Iterable[Net],
        stop_pred: EndpointPred,
        pass_pred: GatePred,
        max_depth: Optional[int] = None,
    ) -> Set[Gate]:
        """
        从 start_nets 出发反向走到驱动门：
          - 驱动端 (gate, pin) 满足 stop_pred：记录 gate，不再展开
          - 满足 pass_pred：穿过它继续走它的输入 net
          - 其它门（latch / ram / 未知边界）：丢弃
        """
        found: Set[Gate] = set()
        visited: Set[int] = set()
        q = deque((net, 0) for net in start_nets)

        while q:
            net, depth = q.popleft()
            for src, pin in net.sources:
                if stop_pred(src, pin):
                    found.add(src)
                    continue
                if src.id in visited or not pass_pred(src):
                    continue
                if max_depth is not None and depth + 1 > max_depth:
                    continue
                visited.add(src.id)
                for nxt in src.get_fan_in_nets():
                    q.append((nxt, depth + 1))

        return found

