"""Pytest fixtures for sexpstream tests."""

import pytest

from sexpstream import config as config_module
from sexpstream.events import EventRecorder
from sexpstream.writer import BufferSink, Writer

# Written by Writer: start_list, three write_list calls, end_list
SAMPLE_DOCUMENT = b"""(config
\t(name "demo app")
\t(size 3 4)
\t(tags a b c))"""

MESSY_DOCUMENT = b"""
(config (name   "demo app")
  (size 3
        4)   (tags a b c)
)
"""


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep real user/project config files out of every test."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setattr(config_module, "USER_CONFIG_PATH", home / "config.toml")
    # Stops the upward project-config search at the test directory
    (tmp_path / ".git").mkdir()
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def recorder():
    return EventRecorder()


@pytest.fixture
def sink():
    return BufferSink()


@pytest.fixture
def writer(sink):
    return Writer(sink)


@pytest.fixture
def sample_file(tmp_path):
    path = tmp_path / "sample.sexp"
    path.write_bytes(SAMPLE_DOCUMENT)
    return path


@pytest.fixture
def sample_document():
    return SAMPLE_DOCUMENT


@pytest.fixture
def messy_document():
    return MESSY_DOCUMENT
