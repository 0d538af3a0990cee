import pytest

from config import SimConfig
from core.keystore import build_key_material


@pytest.fixture(scope="session")
def keys():
    return build_key_material()


@pytest.fixture
def fast_config(tmp_path):
    """Zero-delay configuration writing its reports under tmp_path."""
    def _make(**overrides):
        base = dict(
            nodes=20,
            workers=4,
            tamper_percent=0.0,
            fail_percent=0.0,
            payload_bytes=64,
            node_jitter_ms=0,
            net_ta_node=(0, 0),
            net_node_mw=(0, 0),
            db_delay=(0, 0),
            out_file=str(tmp_path / "perf.csv"),
            summary_file=str(tmp_path / "final.txt"),
        )
        base.update(overrides)
        return SimConfig(**base)
    return _make
