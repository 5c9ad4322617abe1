from datasprint import manage
from datasprint.services.users import user_store


def test_promote_admin(register, capsys):
    register()
    assert manage.main(["promote-admin", "A@x.com"]) == 0
    assert "lead@datasprint" in capsys.readouterr().out
    assert user_store.get_by_username("lead@datasprint").role == "admin"


def test_promote_unknown_admin(capsys):
    assert manage.main(["promote-admin", "ghost@x.com"]) == 1
    assert "not found" in capsys.readouterr().out


def test_flush_with_confirmation(register, monkeypatch):
    register()
    monkeypatch.setattr("builtins.input", lambda prompt: "no")
    assert manage.main(["flush"]) == 1
    assert user_store.get_by_username("lead@datasprint") is not None

    assert manage.main(["flush", "--yes"]) == 0
    assert user_store.get_by_username("lead@datasprint") is None
