from __future__ import annotations

import itertools

import pytest

from regfinder.candidate import RegisterCandidate
from regfinder.errors import CandidateError
from regfinder.netlist.graph import Netlist


def _gates(nl: Netlist, prefix: str, n: int):
    return [nl.add_gate(f"{prefix}{i}", "DFF") for i in range(n)]


def test_round_based_construction(netlist):
    reg = set(_gates(netlist, "r", 5))
    c = RegisterCandidate(reg)

    assert c.is_round_based()
    assert c.get_input_reg() == reg
    assert c.get_output_reg() == reg
    assert c.get_size() == 5
    assert c.get_netlist() is netlist


def test_pipelined_construction(netlist):
    ins = _gates(netlist, "i", 3)
    outs = _gates(netlist, "o", 3)
    c = RegisterCandidate(ins, outs)

    assert not c.is_round_based()
    assert c.get_size() == 3
    assert c.in_reg == frozenset(ins)
    assert c.out_reg == frozenset(outs)


def test_pair_with_identical_sets_is_round_based(netlist):
    reg = _gates(netlist, "r", 4)
    c = RegisterCandidate(reg, list(reversed(reg)))
    assert c.is_round_based()
    assert c == RegisterCandidate(reg)


@pytest.mark.parametrize("args", [
    (set(),),
    (set(), set()),
    ([], None),
])
def test_empty_register_rejected(args):
    with pytest.raises(CandidateError):
        RegisterCandidate(*args)


def test_empty_output_register_rejected(netlist):
    with pytest.raises(CandidateError):
        RegisterCandidate(_gates(netlist, "i", 2), [])


def test_size_mismatch_rejected(netlist):
    with pytest.raises(CandidateError):
        RegisterCandidate(_gates(netlist, "i", 3), _gates(netlist, "o", 2))


def test_gates_from_different_netlists_rejected(netlist):
    other = Netlist("other")
    with pytest.raises(CandidateError):
        RegisterCandidate(_gates(netlist, "i", 2), _gates(other, "o", 2))


def test_placeholder_has_no_netlist():
    c = RegisterCandidate()
    assert c.get_size() == 0
    with pytest.raises(CandidateError):
        c.get_netlist()


def test_ordering_by_size_then_ids(netlist):
    g = _gates(netlist, "g", 6)
    small = RegisterCandidate(g[4:6])
    a = RegisterCandidate(g[0:3])
    b = RegisterCandidate(g[1:4])

    assert small < a < b
    assert sorted([b, a, small]) == [small, a, b]


def test_pipelined_candidates_with_same_input_stay_distinct(netlist):
    g = _gates(netlist, "g", 6)
    c1 = RegisterCandidate(g[0:2], g[2:4])
    c2 = RegisterCandidate(g[0:2], g[4:6])

    assert c1 != c2
    assert c1 < c2
    assert len({c1, c2}) == 2


def test_equality_and_order_are_consistent(netlist):
    g = _gates(netlist, "g", 5)
    cands = [
        RegisterCandidate(g[0:2]),
        RegisterCandidate([g[1], g[0]]),
        RegisterCandidate(g[0:2], g[2:4]),
        RegisterCandidate(g[2:4], g[0:2]),
        RegisterCandidate(g[0:3]),
        RegisterCandidate([g[4]]),
    ]
    for a in cands:
        assert a == a
    for a, b in itertools.product(cands, repeat=2):
        assert (a == b) == (b == a)
        if a == b:
            assert hash(a) == hash(b)
            assert not a < b and not b < a
        else:
            # 严格全序：不相等的两个候选必有先后
            assert (a < b) != (b < a)
    for a, b, c in itertools.product(cands, repeat=3):
        if a < b and b < c:
            assert a < c


def test_to_dict_lists_gate_names_in_id_order(netlist):
    g = _gates(netlist, "g", 4)
    d = RegisterCandidate([g[3], g[1]], [g[0], g[2]]).to_dict()
    assert d == {
        "size": 2,
        "round_based": False,
        "in_reg": ["g1", "g3"],
        "out_reg": ["g0", "g2"],
    }
