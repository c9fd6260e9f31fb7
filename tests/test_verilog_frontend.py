from __future__ import annotations

import shutil
import textwrap
from pathlib import Path

import pytest

pytest.importorskip("pyverilog")

from regfinder.config import Config
from regfinder.frontend import VerilogFrontend
from regfinder.netlist.library import default_library
from regfinder.search import SearchOptions, find_candidates

NETLIST = textwrap.dedent("""
    module bit_slice (clk, k, q);
      input clk;
      input k;
      output q;
      wire d;
      XOR2 u_xor (.A(q), .B(k), .Y(d));
      DFF u_ff (.CLK(clk), .D(d), .Q(q));
    endmodule

    module top (clk, key, din, state, dout);
      input clk;
      input [3:0] key;
      input [1:0] din;
      output [3:0] state;
      output [1:0] dout;
      wire [1:0] a;
      wire [1:0] b;
      wire n0;

      bit_slice s0 (.clk(clk), .k(key[0]), .q(state[0]));
      bit_slice s1 (.clk(clk), .k(key[1]), .q(state[1]));
      bit_slice s2 (.clk(clk), .k(key[2]), .q(state[2]));
      bit_slice s3 (clk, key[3], state[3]);

      DFF a0 (.CLK(clk), .D(din[0]), .Q(a[0]));
      DFF a1 (.CLK(clk), .D(din[1]), .Q(a[1]));
      assign n0 = a[0] ^ a[1];
      AND2 g0 (.A(a[0]), .B(a[1]), .Y(b[0]));
      DFF o0 (.CLK(clk), .D(b[0]), .Q(dout[0]));
      DFF o1 (.CLK(clk), .D(n0), .Q(dout[1]));
    endmodule
""")


def _frontend(tmp_path: Path, top: str = "top") -> VerilogFrontend:
    if shutil.which("iverilog") is None:
        pytest.skip("iverilog (needed by the Pyverilog preprocessor) is not available in PATH")
    src = tmp_path / "netlist.v"
    src.write_text(NETLIST)
    filelist = tmp_path / "netlist.f"
    filelist.write_text("# gate-level netlist\n+define+SYNTH\nnetlist.v\n")
    cfg = Config(frontend="verilog", netlist_filelist=str(filelist), top_module=top)
    return VerilogFrontend(cfg, default_library())


def test_hierarchy_is_flattened(tmp_path):
    nl = _frontend(tmp_path).build_netlist()

    assert nl.name == "top"
    ff = nl.get_gate_by_name("s3.u_ff")
    assert ff is not None and ff.type == "DFF"
    # positional connection of s3 maps q -> state[3]
    assert ff.get_fan_out_net("Q").name == "state[3]"
    assert nl.get_net_by_name("key[2]").is_input
    assert nl.get_net_by_name("dout[1]").is_output


def test_assign_becomes_combinational_gate(tmp_path):
    nl = _frontend(tmp_path).build_netlist()

    n0 = nl.get_net_by_name("n0")
    (src, pin), = n0.sources
    assert src.type == "$assign"
    drivers = {g.name for net in src.get_fan_in_nets() for g in net.get_source_gates()}
    assert drivers == {"a0", "a1"}


def test_candidates_from_verilog(tmp_path):
    nl = _frontend(tmp_path).build_netlist()

    cands = find_candidates(nl, default_library(), SearchOptions(max_comb_depth=4))

    assert len(cands) == 2
    pipe, state = cands
    assert not pipe.is_round_based()
    assert {g.name for g in pipe.get_input_reg()} == {"a0", "a1"}
    assert {g.name for g in pipe.get_output_reg()} == {"o0", "o1"}
    assert state.is_round_based()
    assert {g.name for g in state.get_input_reg()} == {f"s{i}.u_ff" for i in range(4)}


def test_missing_top_module(tmp_path):
    with pytest.raises(RuntimeError):
        _frontend(tmp_path, top="nope").build_netlist()


def test_missing_source_file(tmp_path):
    cfg = Config(frontend="verilog", netlist_files=[str(tmp_path / "absent.v")], top_module="top")
    with pytest.raises(FileNotFoundError):
        VerilogFrontend(cfg, default_library()).build_netlist()

