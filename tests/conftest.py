import sys
from pathlib import Path

import pytest

# Ensure 'src' is on sys.path for test imports without installing the package
ROOT = Path(__file__).resolve().parents[1]
src = ROOT / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))

from strata.config import Settings  # noqa: E402


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def small_settings() -> Settings:
    """Settings with small layers so world tests stay fast."""
    s = Settings()
    s.terrain.width = 48
    s.terrain.height = 48
    s.cave.width = 30
    s.cave.height = 20
    s.dungeon.width = 40
    s.dungeon.height = 30
    s.world.entrance_cooldown = 2.0
    return s


@pytest.fixture(autouse=True)
def _clear_strata_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("STRATA_CONFIG", "STRATA_SEED", "STRATA_WIDTH", "STRATA_HEIGHT", "STRATA_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
