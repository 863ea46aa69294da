import pytest

from kudokit import webhook


def test_functions_called_in_order_with_manager():
    calls = []
    manager = object()
    webhook.add_to_manager(
        manager,
        [lambda m: calls.append(("a", m)), lambda m: calls.append(("b", m))],
    )
    assert calls == [("a", manager), ("b", manager)]


def test_first_error_stops_the_run():
    calls = []

    def failing(_):
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        webhook.add_to_manager(
            "mgr", [calls.append, failing, calls.append]
        )
    assert calls == ["mgr"]


def test_default_uses_module_registry(monkeypatch):
    seen = []
    monkeypatch.setattr(webhook, "ADD_TO_MANAGER_FUNCS", [seen.append])
    result = webhook.add_to_manager("manager")
    assert result is None
    assert seen == ["manager"]


def test_default_registry_error_is_raised(monkeypatch):
    def failing(_):
        raise ValueError("registry failure")

    monkeypatch.setattr(webhook, "ADD_TO_MANAGER_FUNCS", [failing])
    with pytest.raises(ValueError, match="registry failure"):
        webhook.add_to_manager("manager")


def test_empty_list_returns_none():
    result = webhook.add_to_manager("manager", [])
    assert result is None