import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.schemas.schedule import ScheduleConfig
from app.services.slot_codec import SlotCodec


@pytest.fixture()
def client():
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def config():
    return ScheduleConfig(teacher_names={"rajeshmaths080910": "Rajesh Kumar"})


@pytest.fixture()
def codec(config):
    return SlotCodec.from_config(config)
