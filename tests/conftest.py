from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from icestream.schema import Config, build_config  # noqa: E402


@pytest.fixture
def cfg() -> Config:
    """Reference configuration of the box model."""

    return build_config()


@pytest.fixture
def short_cfg() -> Config:
    """Reference physics over a 200-year horizon."""

    return build_config(t_final=200.0)
