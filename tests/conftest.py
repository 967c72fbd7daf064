from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def isolate_home_config(tmp_path, monkeypatch):
    """Keep any user-level vcu configuration out of the tests.

    The default configuration directory is redirected to an empty
    temporary directory and ``VCU_CONFIG`` is cleared, so tests see no
    configuration unless they write one.
    """
    config_dir = tmp_path / "vc_unified_home"
    monkeypatch.delenv("VCU_CONFIG", raising=False)
    monkeypatch.setattr(
        "vc_unified.config.loader._get_config_directory",
        lambda: Path(config_dir),
    )
    yield config_dir
