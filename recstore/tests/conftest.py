from __future__ import annotations

import dataclasses

import pytest

from recstore.config import StoreConfig, load_config
from recstore.runtime.context import Env
from recstore.runtime.storage_api import MemoryBackend


@pytest.fixture(autouse=True)
def _fresh_config_cache():
    yield
    load_config.cache_clear()


def make_config(**overrides) -> StoreConfig:
    """Defaults from load_config() with selected fields replaced."""
    return dataclasses.replace(load_config(), **overrides)


@pytest.fixture()
def env() -> Env:
    return Env()


@pytest.fixture()
def backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture()
def lib_env(env: Env) -> Env:
    from recstore.examples import library

    library.initialize(env)
    return env
