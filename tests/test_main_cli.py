"""
Initial super admin setup from the command line.
"""
from __future__ import annotations

import main
from models import AdminModel, UserModel


def test_create_initial_admin_once(database):
    assert main.create_initial_admin(database, "root", "pw-123", "Root") is True
    assert main.create_initial_admin(database, "root", "pw-123", "Root") is False

    session = database.session()
    try:
        account = session.query(UserModel).filter(UserModel.username == "root").one()
        profile = session.query(AdminModel).filter(AdminModel.user_id == account.user_id).one()
    finally:
        session.close()
    assert account.is_active is True
    assert account.role == "admin"
    assert profile.super_admin is True


def test_main_uses_env_password(tmp_path, monkeypatch, capsys):
    monkeypatch.setattr(main, "ADMIN_PASSWORD", "from-env")
    url = f"sqlite:///{tmp_path}/cli.db"

    assert main.main(["--username", "boss", "--database-url", url]) == 0
    assert "created" in capsys.readouterr().out
    assert main.main(["--username", "boss", "--database-url", url]) == 0
    assert "already exists" in capsys.readouterr().out
