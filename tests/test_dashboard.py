import os

import pytest
from streamlit.testing.v1 import AppTest

DASHBOARD = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "dashboard.py")


@pytest.fixture
def app(monkeypatch):
    for var in ("DATABASE_URL", "DB_USER", "DB_PASSWORD", "DB_HOST", "DB_PORT", "DB_NAME"):
        monkeypatch.delenv(var, raising=False)
    return AppTest.from_file(DASHBOARD, default_timeout=60)


def test_store_session_reused_across_reruns(app):
    app.run()
    assert not app.exception
    store = app.session_state["store"]

    app.run()
    assert not app.exception
    assert app.session_state["store"] is store
    assert app.session_state["store"].session is store.session
