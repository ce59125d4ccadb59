"""Shared fixtures for the unit tests.

No test talks to a real NebulaGraph instance: statement builders get a
``MagicMock`` standing in for ``NebulaClient``, the gateway tests fake the
nebula3 connection pool and session, and the MCP tool tests mock ``execute``
on the server's shared client.
"""

from typing import List
from unittest.mock import MagicMock

import pytest

from nebula_mcp_server.config import Config, load_config
from nebula_mcp_server.nebula.client import NebulaClient, ResultTable


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep the developer's environment and .env file out of the tests."""
    for name in list(Config.model_fields):
        alias = Config.model_fields[name].alias
        if alias:
            monkeypatch.delenv(alias, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def config() -> Config:
    return load_config(
        NEBULA_HOSTS="127.0.0.1",
        NEBULA_USER="root",
        NEBULA_PASSWORD="nebula",
        NEBULA_SPACE="test_space",
    )


@pytest.fixture
def client() -> MagicMock:
    """A NebulaClient double; tests queue results on ``client.execute``."""
    fake = MagicMock(spec=NebulaClient)
    fake.execute.return_value = ResultTable()
    return fake


def statements(client: MagicMock) -> List[str]:
    """Every statement passed to ``client.execute``, in call order."""
    return [call.args[0] for call in client.execute.call_args_list]


@pytest.fixture
def executed():
    return statements


@pytest.fixture
def mcp_client(monkeypatch) -> MagicMock:
    """Client double whose ``execute`` is patched onto the MCP server's shared client.

    The shared instances are built from the environment when
    ``mcp_instance`` is first imported, so the connection settings are set
    before the import.
    """
    monkeypatch.setenv("NEBULA_HOSTS", "127.0.0.1")
    monkeypatch.setenv("NEBULA_USER", "root")
    monkeypatch.setenv("NEBULA_SPACE", "test_space")
    from nebula_mcp_server import mcp_instance

    fake = MagicMock(spec=NebulaClient)
    fake.execute.return_value = ResultTable()
    monkeypatch.setattr(mcp_instance.nebula_client, "execute", fake.execute)
    return fake
