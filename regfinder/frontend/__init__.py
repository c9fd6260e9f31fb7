
from .base import FrontendBase
from .toy_frontend import ToyFrontend
from .verilog_frontend import VerilogFrontend

__all__ = ["FrontendBase", "ToyFrontend", "VerilogFrontend"]
