# regfinder/frontend/toy_frontend.py
from .base import FrontendBase
from ..netlist.graph import Netlist


class ToyFrontend(FrontendBase):
    """
    Toy 前端：不读文件，直接在内存里搭一个玩具网表，用于调通全流程。
      state[i] <= state[i] ^ key[i]           (8 bit，round-based)
      stage1[i] <= stage0[i] & stage0[i+1]    (4 bit，一级流水线)
    门类型使用 default_library() 能识别的名字 DFF / XOR2 / AND2。
    """

    def build_netlist(self) -> Netlist:
        nl = Netlist("toy")
        clk = nl.add_net("clk", is_input=True)
        clk2 = nl.add_net("clk2", is_input=True)

        for i in range(8):
            ff = nl.add_gate(f"state_reg[{i}]", "DFF")
            xor = nl.add_gate(f"state_xor[{i}]", "XOR2")
            q = nl.add_net(f"state[{i}]")
            d = nl.add_net(f"state_next[{i}]")
            key = nl.add_net(f"key[{i}]", is_input=True)
            nl.connect_destination(clk, ff, "CLK")
            nl.connect_source(q, ff, "Q")
            nl.connect_destination(q, xor, "A")
            nl.connect_destination(key, xor, "B")
            nl.connect_source(d, xor, "Y")
            nl.connect_destination(d, ff, "D")

        stage0 = []
        for i in range(4):
            ff = nl.add_gate(f"stage0_reg[{i}]", "DFF")
            din = nl.add_net(f"din[{i}]", is_input=True)
            q = nl.add_net(f"stage0[{i}]")
            nl.connect_destination(clk2, ff, "CLK")
            nl.connect_destination(din, ff, "D")
            nl.connect_source(q, ff, "Q")
            stage0.append(q)

        for i in range(4):
            ff = nl.add_gate(f"stage1_reg[{i}]", "DFF")
            and_gate = nl.add_gate(f"stage1_and[{i}]", "AND2")
            d = nl.add_net(f"stage1_next[{i}]")
            q = nl.add_net(f"stage1[{i}]", is_output=True)
            nl.connect_destination(stage0[i], and_gate, "A")
            nl.connect_destination(stage0[(i + 1) % 4], and_gate, "B")
            nl.connect_source(d, and_gate, "Y")
            nl.connect_destination(clk2, ff, "CLK")
            nl.connect_destination(d, ff, "D")
            nl.connect_source(q, ff, "Q")

        return nl
