from __future__ import annotations

from typing import List, Optional

from regfinder.netlist.graph import Gate, Net, Netlist


def add_ff(nl: Netlist, name: str, clk: Optional[Net], d: Optional[Net], q: Optional[Net],
           gate_type: str = "DFF", rst: Optional[Net] = None) -> Gate:
    ff = nl.add_gate(name, gate_type)
    if clk is not None:
        nl.connect_destination(clk, ff, "CLK")
    if d is not None:
        nl.connect_destination(d, ff, "D")
    if q is not None:
        nl.connect_source(q, ff, "Q")
    if rst is not None:
        nl.connect_destination(rst, ff, "R")
    return ff


def add_comb(nl: Netlist, name: str, gate_type: str, inputs: List[Net], out: Net) -> Gate:
    g = nl.add_gate(name, gate_type)
    for idx, net in enumerate(inputs):
        nl.connect_destination(net, g, f"A{idx}")
    nl.connect_source(out, g, "Y")
    return g


def round_register(nl: Netlist, prefix: str, width: int, clk: Net,
                   rst: Optional[Net] = None) -> List[Gate]:
    """reg[i] <= reg[i] ^ in[i]"""
    gates = []
    for i in range(width):
        q = nl.add_net(f"{prefix}_q[{i}]")
        d = nl.add_net(f"{prefix}_d[{i}]")
        ext = nl.add_net(f"{prefix}_in[{i}]", is_input=True)
        gates.append(add_ff(nl, f"{prefix}_reg[{i}]", clk, d, q, rst=rst))
        add_comb(nl, f"{prefix}_xor[{i}]", "XOR2", [q, ext], d)
    return gates


def pipeline_stage(nl: Netlist, prefix: str, width: int, clk: Net):
    """out[i] <= in_reg[i] & in_reg[i+1]，in_reg 由外部输入直接驱动。"""
    in_gates, in_qs = [], []
    for i in range(width):
        q = nl.add_net(f"{prefix}_a[{i}]")
        din = nl.add_net(f"{prefix}_din[{i}]", is_input=True)
        in_gates.append(add_ff(nl, f"{prefix}_in_reg[{i}]", clk, din, q))
        in_qs.append(q)
    out_gates = []
    for i in range(width):
        d = nl.add_net(f"{prefix}_b_next[{i}]")
        q = nl.add_net(f"{prefix}_b[{i}]", is_output=True)
        add_comb(nl, f"{prefix}_and[{i}]", "AND2", [in_qs[i], in_qs[(i + 1) % width]], d)
        out_gates.append(add_ff(nl, f"{prefix}_out_reg[{i}]", clk, d, q))
    return in_gates, out_gates
