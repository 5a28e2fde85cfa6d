from postboard.auth.session import create_session, destroy_session, load_session, sign_session, verify_session
from postboard.core.models import SESSIONS


def test_session_holds_user_snapshot_without_hash(db, make_user):
    user = make_user()
    sess = create_session(user)
    token = sign_session(sess.session_id)

    loaded = load_session(token)
    assert loaded is not None
    assert loaded.current_user["email"] == "alice@example.com"
    assert loaded.current_user["id"] == str(user["_id"])
    assert "passwordHash" not in loaded.current_user


def test_tampered_token_is_ignored(db):
    token = sign_session("abc")
    assert verify_session(token) == "abc"
    assert verify_session(token[:-2] + "xx") is None
    assert verify_session("") is None


def test_destroyed_session_no_longer_loads(db, make_user):
    sess = create_session(make_user())
    token = sign_session(sess.session_id)
    destroy_session(sess.session_id)
    assert load_session(token) is None
    assert db[SESSIONS].count_documents({}) == 0
