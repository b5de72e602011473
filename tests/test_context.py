from fake_imap_client import FakeIMAPClient
from imapbridge.webapp.context import AccountRegistry, build_tools

ENV = {
    "MAIL_IMAP_DEFAULT_HOST": "imap.example.com",
    "MAIL_IMAP_DEFAULT_USER": "me",
    "MAIL_IMAP_DEFAULT_PASS": "pw",
    "MAIL_IMAP_WORK_HOST": "imap.work.example.com",
    "MAIL_IMAP_WORK_USER": "me@work",
    "MAIL_IMAP_WORK_PASS": "pw2",
    "MAIL_IMAP_WORK_PORT": "1993",
}


def test_registry_builds_clients_lazily():
    built = []

    def factory(config):
        built.append(config)
        return FakeIMAPClient()

    registry = AccountRegistry(ENV, client_factory=factory)
    assert sorted(registry) == ["default", "work"]
    assert built == []

    client = registry["work"]
    assert registry["work"] is client
    assert [c.port for c in built] == [1993]


def test_registry_missing_account():
    registry = AccountRegistry(ENV, client_factory=lambda cfg: FakeIMAPClient())
    assert "personal" not in registry
    assert "bad:id" not in registry


def test_build_tools_from_environ():
    tools = build_tools({**ENV, "MAIL_IMAP_CURSOR_MAX_ENTRIES": "3", "MAIL_IMAP_WRITE_ENABLED": "1"})
    assert tools.settings.write_enabled is True
    assert tools.cursor_store.max_entries == 3
    result = tools.list_accounts()
    assert [a["account_id"] for a in result.data["accounts"]] == ["default", "work"]
