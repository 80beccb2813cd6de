import time

import pytest


@pytest.fixture
def taipei_tz(monkeypatch):
    """Run the test with the local zone set to UTC+8."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is unavailable on this platform")
    monkeypatch.setenv("TZ", "Asia/Taipei")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


class FakeSession(dict):
    """dict with attribute access, like st.session_state."""

    def __getattr__(self, name):
        try:
            return self[name]
        except KeyError:
            raise AttributeError(name)

    def __setattr__(self, name, value):
        self[name] = value


class FakeStreamlit:
    def __init__(self, **state):
        self.session_state = FakeSession(state)
        self.messages = []

    def warning(self, text):
        self.messages.append(("warning", text))

    def error(self, text):
        self.messages.append(("error", text))


@pytest.fixture
def fake_st(monkeypatch):
    """Swap a module's `st` for a FakeStreamlit seeded with session state."""
    def install(module, **state):
        fake = FakeStreamlit(**state)
        monkeypatch.setattr(module, "st", fake)
        return fake
    return install
