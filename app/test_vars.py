import importlib


def test_defaults(monkeypatch):
    for name in (
        "PORT",
        "UPSTREAM_ORIGIN",
        "UPSTREAM_TIMEOUT",
        "UPSTREAM_PROBE_TIMEOUT",
        "CORS_ORIGINS",
    ):
        monkeypatch.delenv(name, raising=False)
    import app.vars as vars_module

    importlib.reload(vars_module)

    assert vars_module.PORT == 3000
    assert vars_module.UPSTREAM_ORIGIN == "https://cutoolsfree.fun"
    assert vars_module.UPSTREAM_TIMEOUT == 15.0
    assert vars_module.UPSTREAM_PROBE_TIMEOUT == 8.0
    assert vars_module.CORS_ORIGINS == ["*"]


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("UPSTREAM_ORIGIN", "http://upstream.test/")
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test")
    import app.vars as vars_module

    importlib.reload(vars_module)

    assert vars_module.PORT == 8080
    assert vars_module.UPSTREAM_ORIGIN == "http://upstream.test"
    assert vars_module.CORS_ORIGINS == ["http://a.test", "http://b.test"]

    monkeypatch.undo()
    importlib.reload(vars_module)
