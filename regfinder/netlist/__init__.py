
from .graph import Gate, Net, Netlist
from .library import GateLibrary, GateTypeSpec, default_library
from .traversal import NetlistTraversal

__all__ = ["Gate", "Net", "Netlist", "GateLibrary", "GateTypeSpec", "default_library", "NetlistTraversal"]
