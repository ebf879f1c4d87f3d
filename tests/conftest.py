from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest

from src.lib.settings import INSTALL_PREFIX_ENV, KEEP_FILES_ENV, LOG_LEVEL_ENV

FIXTURES = Path(__file__).resolve().parent / "fixtures"


@pytest.fixture(autouse=True)
def clean_devkit_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (INSTALL_PREFIX_ENV, KEEP_FILES_ENV, LOG_LEVEL_ENV):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def ddl_script() -> Path:
    return FIXTURES / "sql" / "ddl" / "beerdb.simple.sql"


@pytest.fixture()
def data_script() -> Path:
    return FIXTURES / "sql" / "data" / "beerdb.simple.sql"


@pytest.fixture()
def template_source() -> Path:
    return FIXTURES / "templates" / "set1"


@pytest.fixture()
def in_tmp_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    monkeypatch.chdir(tmp_path)
    yield tmp_path
