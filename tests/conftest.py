import os

import pytest


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Run every test in an empty directory with no CONFIG* variables.

    The dotenv source writes straight into ``os.environ``, so the whole
    environment is restored afterwards.
    """
    saved = dict(os.environ)
    for name in list(os.environ):
        if name == "CONFIG" or name.startswith(("CONFIG__", "MY_APP__", "PREFIX__")):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    yield
    os.environ.clear()
    os.environ.update(saved)
