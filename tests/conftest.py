import pytest

from regfinder.netlist.graph import Netlist
from regfinder.netlist.library import default_library


@pytest.fixture
def library():
    return default_library()


@pytest.fixture
def netlist():
    return Netlist("test")
