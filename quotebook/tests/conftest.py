import os
import sys
import sqlite3
import pytest
from pathlib import Path

# Ensure project root on sys.path
_THIS_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _THIS_DIR.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from quotebook.errors import NetworkError


class DummyProvider:
    def __init__(self, quotes=None):
        self.quotes = list(quotes or [])
        self.calls = 0

    async def fetch_random_quote(self):
        self.calls += 1
        if not self.quotes:
            raise NetworkError("quote_api_unreachable: no more quotes")
        item = self.quotes.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture(scope="session")
def tmp_db_path(tmp_path_factory):
    path = tmp_path_factory.mktemp("db") / "quotedb_test.db"
    # Point quotebook to this temp DB
    os.environ["QUOTEBOOK_DB_PATH"] = str(path)
    from quotebook.logs import ensure_log_schema
    from quotebook.services.config_svc import ensure_default_config
    from quotebook.services.quote_store import QuoteStore
    QuoteStore().initialize()
    ensure_log_schema()
    ensure_default_config()
    return str(path)


@pytest.fixture(autouse=True)
def _clean_db(tmp_db_path):
    # Safety: ensure we only ever wipe the temp DB, never a real one
    assert os.environ.get("QUOTEBOOK_DB_PATH") == tmp_db_path, "Refusing to clean non-temp DB"
    conn = sqlite3.connect(tmp_db_path)
    try:
        for t in ("line", "operation_log", "config"):
            conn.execute(f"DELETE FROM {t}")
        conn.commit()
    finally:
        conn.close()
    from quotebook.services.config_svc import ensure_default_config
    ensure_default_config()
    yield


@pytest.fixture()
def store(tmp_db_path):
    from quotebook.services.quote_store import QuoteStore
    return QuoteStore()


@pytest.fixture()
def flaky_store(tmp_db_path):
    """Store whose writes succeed but whose scans fail once `fail_scans` is set."""
    from quotebook.errors import StorageFault
    from quotebook.services.quote_store import QuoteStore

    class ScanFailsAfterInit(QuoteStore):
        fail_scans = False

        def scan_all(self):
            if self.fail_scans:
                raise StorageFault("scan_failed: disk I/O error")
            return super().scan_all()

    return ScanFailsAfterInit()


@pytest.fixture()
def provider():
    return DummyProvider()


@pytest.fixture()
def speaker():
    from quotebook.providers.speech import InMemorySpeaker
    return InMemorySpeaker()


@pytest.fixture()
def book(store, provider, speaker):
    from quotebook.services.quote_book import QuoteBook
    return QuoteBook(store=store, provider=provider, speaker=speaker)


@pytest.fixture()
def client(book):
    from quotebook.api import create_app
    from fastapi.testclient import TestClient
    app = create_app(book=book, fetch_on_startup=False)
    with TestClient(app) as c:
        yield c
