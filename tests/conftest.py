import os

import pytest
from fastapi.testclient import TestClient

from hl7_processor.main import create_app


ADT_A01 = (
    "MSH|^~\\&|SEND|SENDER|RECV|RECEIVER|202001011200||ADT^A01|MSG00001|P|2.5\r"
    "PID|1||12345^^^HOSP^MR||Doe^John\r"
    "PV1|1|I\r"
)


@pytest.fixture(scope="session", autouse=True)
def set_env():
    os.environ.setdefault("LOG_LEVEL", "INFO")


@pytest.fixture()
def app():
    return create_app()


@pytest.fixture()
def client(app):
    return TestClient(app)


@pytest.fixture()
def sample_adt() -> str:
    return ADT_A01
