import textwrap

import pytest

from regfinder.config import config_from_dict, load_config
from regfinder.errors import ConfigError


def test_load_verilog_config(tmp_path):
    path = tmp_path / "cfg.yml"
    path.write_text(textwrap.dedent("""
        frontend: verilog
        netlist:
          files: [top.v]
          top_module: top
        search:
          control_roles: [reset]
          max_comb_depth: 8
        output:
          json: false
    """))
    cfg = load_config(str(path))
    assert cfg.frontend == "verilog"
    assert cfg.netlist_files == ["top.v"]
    assert cfg.top_module == "top"
    assert cfg.library is None
    assert cfg.search == {"control_roles": ["reset"], "max_comb_depth": 8}
    assert cfg.output == {"json": False}


def test_empty_config_defaults_to_toy(tmp_path):
    path = tmp_path / "cfg.yml"
    path.write_text("")
    cfg = load_config(str(path))
    assert cfg.frontend == "toy"
    assert cfg.search == {}


@pytest.mark.parametrize("raw", [
    {"frontend": "edif"},
    {"frontend": "verilog", "netlist": {"files": ["a.v"]}},
    {"frontend": "verilog", "netlist": {"top_module": "top"}},
])
def test_invalid_config_rejected(raw):
    with pytest.raises(ConfigError):
        config_from_dict(raw)


def test_non_mapping_rejected(tmp_path):
    path = tmp_path / "cfg.yml"
    path.write_text("- a\n- b\n")
    with pytest.raises(ConfigError):
        load_config(str(path))
