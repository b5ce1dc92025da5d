from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterator

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from tikaz.infrastructure.db import session as db_session
from tikaz.infrastructure.db.models import contact as _contact_models  # noqa: F401
from tikaz.infrastructure.db.models import order as _order_models  # noqa: F401
from tikaz.infrastructure.db.models.restaurant import Base
from tikaz.infrastructure.db.repositories.restaurant_repo import SqlAlchemyRestaurantRepository
from tikaz.infrastructure.messaging import redis_client
from tikaz.tools.seed import SAMPLE_RESTAURANTS, build_restaurant


@pytest.fixture(autouse=True)
def integration_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'tikaz.db'}")
    monkeypatch.setenv("OTEL_SDK_DISABLED", "true")
    monkeypatch.setenv("RESTAURANT_UTC_OFFSET_HOURS", "4")
    monkeypatch.delenv("REDIS_URL", raising=False)
    monkeypatch.delenv("SMTP_HOST", raising=False)

    db_session._build_engine.cache_clear()
    redis_client._build_client.cache_clear()

    engine = db_session.get_engine()
    Base.metadata.create_all(engine)
    repository = SqlAlchemyRestaurantRepository(engine)
    for data in SAMPLE_RESTAURANTS:
        repository.add(build_restaurant(data))

    yield

    engine.dispose()
    db_session._build_engine.cache_clear()
