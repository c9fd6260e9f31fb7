# regfinder/report.py
import json
from typing import List

from .candidate import RegisterCandidate


def dump_candidates(cands: List[RegisterCandidate], netlist_name: str, path: str) -> None:
    data = {"netlist": netlist_name, "candidates": []}
    for c in cands:
        data["candidates"].append(c.to_dict())
    with open(path, "w") as f:
        json.dump(data, f, indent=2)


def pretty_print_candidates(cands: List[RegisterCandidate], max_gates: int = 8) -> None:
    """简易打印候选，方便调试和人工检查。"""
    if not cands:
        print("[REGFINDER] No register candidates found.")
        return

    for idx, c in enumerate(cands):
        kind = "round-based" if c.is_round_based() else "pipelined"
        print(f"[CANDIDATE #{idx}] size={c.get_size()} {kind}")
        d = c.to_dict()
        print(f"  in : {_shorten(d['in_reg'], max_gates)}")
        if not c.is_round_based():
            print(f"  out: {_shorten(d['out_reg'], max_gates)}")
        print()


def _shorten(names: List[str], limit: int) -> str:
    if len(names) <= limit:
        return " ".join(names)
    return " ".join(names[:limit]) + f" ... (+{len(names) - limit})"
