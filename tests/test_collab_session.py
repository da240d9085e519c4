import pytest

from turtlescout.collab_session import CollabSession, NoPriorSessionError, parse_collab_link


@pytest.mark.parametrize(
    "link",
    [
        "/scout/abc123/pw987/",
        "/scout/abc123/pw987",
        "/abc123/pw987",
        "abc123/pw987",
        "  /scout/abc123/pw987/  \n",
        "https://scout.wobbuffet.net/scout/abc123/pw987",
        "scout.wobbuffet.net/scout/abc123/pw987",
        "scout.wobbuffet.net/scout/abc123/pw987/",
    ],
)
def test_parse_collab_link(link) -> None:
    assert parse_collab_link(link) == ("abc123", "pw987")


@pytest.mark.parametrize(
    "link",
    ["", "/scout/abc123/", "/scout/abc123", "abc123", "/scout/abc 123/pw987", "scout.wobbuffet.net/scout/abc123/", None],
)
def test_parse_collab_link_rejects_incomplete_links(link) -> None:
    assert parse_collab_link(link) is None


def test_join_stores_credentials() -> None:
    session = CollabSession()

    assert session.join("/scout/abc123/pw987/") == ("abc123", "pw987")
    assert session.is_active
    assert session.snapshot() == ("abc123", "pw987", True)


def test_failed_join_leaves_state_unchanged() -> None:
    session = CollabSession()
    session.join("/scout/abc123/pw987")
    session.leave()

    assert session.join("not a link") is None
    assert session.snapshot() == ("abc123", "pw987", False)


def test_rejoin_without_prior_session() -> None:
    session = CollabSession()

    with pytest.raises(NoPriorSessionError):
        session.rejoin()
    assert not session.is_active


def test_leave_keeps_credentials_for_rejoin() -> None:
    session = CollabSession()
    session.join("/scout/abc123/pw987")

    session.leave()
    session.leave()
    assert session.snapshot() == ("abc123", "pw987", False)

    session.rejoin()
    assert session.snapshot() == ("abc123", "pw987", True)


def test_sessions_are_independent() -> None:
    first = CollabSession()
    second = CollabSession()

    first.join("/scout/abc123/pw987")

    assert not second.is_active
    assert second.snapshot() == ("", "", False)
