# regfinder/netlist/graph.py

from __future__ import annotations
from typing import Callable, Dict, List, Optional, Tuple


Endpoint = Tuple["Gate", str]   # (gate, pin)


class Net:
    def __init__(self, net_id: int, name: str, is_input: bool = False, is_output: bool = False):
        self.id = net_id
        self.name = name
        self.is_input = is_input      # 顶层输入端口
        self.is_output = is_output    # 顶层输出端口
        self.sources: List[Endpoint] = []
        self.destinations: List[Endpoint] = []

    def get_source_gates(self) -> List["Gate"]:
        return [g for g, _ in self.sources]

    def __repr__(self) -> str:
        return f"Net({self.id}, {self.name!r})"


class Gate:
    def __init__(self, gate_id: int, name: str, gate_type: str, netlist: "Netlist"):
        self.id = gate_id
        self.name = name
        self.type = gate_type
        self.netlist = netlist
        self.in_pins: Dict[str, Net] = {}
        self.out_pins: Dict[str, Net] = {}

    def get_fan_in_net(self, pin: str) -> Optional[Net]:
        return self.in_pins.get(pin)

    def get_fan_out_net(self, pin: str) -> Optional[Net]:
        return self.out_pins.get(pin)

    def get_fan_in_nets(self) -> List[Net]:
        return list(self.in_pins.values())

    def get_net(self, pin: str) -> Optional[Net]:
        """按 pin 名取所连 net，不区分输入/输出方向。"""
        net = self.get_fan_in_net(pin)
        if net is None:
            net = self.get_fan_out_net(pin)
        return net

    def __repr__(self) -> str:
        return f"Gate({self.id}, {self.name!r}, {self.type})"


class Netlist:
    """
    门级网表：节点 = Gate，边 = Net。
    gate / net 的 id 按插入顺序递增，作为稳定标识用于排序。
    """

    def __init__(self, name: str = "top"):
        self.name = name
        self.gates: Dict[int, Gate] = {}
        self.nets: Dict[int, Net] = {}
        self.name_to_gate: Dict[str, int] = {}
        self.name_to_net: Dict[str, int] = {}

    # 根据名字获取 / 创建节点
    def add_gate(self, name: str, gate_type: str) -> Gate:
        gate_id = self.name_to_gate.get(name)
        if gate_id is not None:
            return self.gates[gate_id]
        gate_id = len(self.gates)
        gate = Gate(gate_id, name, gate_type, self)
        self.gates[gate_id] = gate
        self.name_to_gate[name] = gate_id
        return gate

    def add_net(self, name: str, is_input: bool = False, is_output: bool = False) -> Net:
        net_id = self.name_to_net.get(name)
        if net_id is not None:
            net = self.nets[net_id]
            net.is_input = net.is_input or is_input
            net.is_output = net.is_output or is_output
            return net
        net_id = len(self.nets)
        net = Net(net_id, name, is_input=is_input, is_output=is_output)
        self.nets[net_id] = net
        self.name_to_net[name] = net_id
        return net

    def get_gate_by_name(self, name: str) -> Optional[Gate]:
        gate_id = self.name_to_gate.get(name)
        return None if gate_id is None else self.gates[gate_id]

    def get_net_by_name(self, name: str) -> Optional[Net]:
        net_id = self.name_to_net.get(name)
        return None if net_id is None else self.nets[net_id]

    def get_gates(self, pred: Optional[Callable[[Gate], bool]] = None) -> List[Gate]:
        if pred is None:
            return list(self.gates.values())
        return [g for g in self.gates.values() if pred(g)]

    def connect_source(self, net: Net, gate: Gate, pin: str) -> None:
        """gate 的输出 pin 驱动 net。"""
        gate.out_pins[pin] = net
        net.sources.append((gate, pin))

    def connect_destination(self, net: Net, gate: Gate, pin: str) -> None:
        """net 接到 gate 的输入 pin。"""
        gate.in_pins[pin] = net
        net.destinations.append((gate, pin))

    def summary(self) -> str:
        return f"Netlist {self.name}: {len(self.gates)} gates, {len(self.nets)} nets"
