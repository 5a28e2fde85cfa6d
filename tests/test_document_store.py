import pytest
from bson import ObjectId

from postboard.core.errors import DocumentValidationError, UniqueConstraintError
from postboard.core.models import COMMENTS, POSTS, USERS, Comment, Post, User, public_user
from postboard.infra.document_store import (
    create_document,
    delete_by_id,
    find_by_id,
    populate,
    push_and_return,
    to_object_id,
)


def _user(username="alice", email="alice@example.com"):
    return create_document(User(username=username, email=email, password_hash="x"))


def test_create_user_normalises_email_and_omits_missing_avatar(db):
    doc = create_document(User(username=" alice ", email=" Alice@Example.COM ", password_hash="x"))
    stored = find_by_id(USERS, doc["_id"])
    assert stored["username"] == "alice"
    assert stored["email"] == "alice@example.com"
    assert "avatar" not in stored


def test_invalid_email_is_a_validation_error(db):
    with pytest.raises(DocumentValidationError) as exc:
        create_document(User(username="bob", email="not-an-email", password_hash="x"))
    assert "Please use a valid email address." in str(exc.value)
    assert exc.value.errors == {"email": "Please use a valid email address."}
    assert db[USERS].count_documents({}) == 0


def test_duplicate_email_or_username_is_rejected(db):
    _user()
    with pytest.raises(UniqueConstraintError):
        _user(username="other")
    with pytest.raises(UniqueConstraintError):
        _user(email="other@example.com")
    assert db[USERS].count_documents({}) == 1


def test_post_requires_content_and_creator(db):
    with pytest.raises(DocumentValidationError) as exc:
        create_document(Post(content="  ", creator_id=None))
    assert set(exc.value.errors) == {"content", "creatorId"}


def test_comment_requires_references(db):
    with pytest.raises(DocumentValidationError) as exc:
        create_document(Comment(content="hi", post_id=None, author_id=ObjectId()))
    assert set(exc.value.errors) == {"postId"}


def test_push_and_return_appends_in_order(db):
    u = _user()
    post = create_document(Post(content="hello", creator_id=u["_id"]))
    a, b = ObjectId(), ObjectId()
    push_and_return(POSTS, post["_id"], "comments", a)
    updated = push_and_return(POSTS, str(post["_id"]), "comments", b)
    assert updated["comments"] == [a, b]


def test_push_and_return_missing_post_returns_none(db):
    assert push_and_return(POSTS, ObjectId(), "comments", ObjectId()) is None
    assert push_and_return(POSTS, "nope", "comments", ObjectId()) is None


def test_populate_expands_single_and_list_references(db):
    u = _user()
    post = create_document(Post(content="hello", creator_id=u["_id"]))
    c1 = create_document(Comment(content="one", post_id=post["_id"], author_id=u["_id"]))
    c2 = create_document(Comment(content="two", post_id=post["_id"], author_id=u["_id"]))
    push_and_return(POSTS, post["_id"], "comments", c2["_id"])
    push_and_return(POSTS, post["_id"], "comments", ObjectId())  # dangling
    push_and_return(POSTS, post["_id"], "comments", c1["_id"])

    doc = find_by_id(POSTS, post["_id"])
    populate(doc, "creatorId", USERS)
    populate(doc, "comments", COMMENTS)

    assert doc["creatorId"]["username"] == "alice"
    assert [c["content"] for c in doc["comments"]] == ["two", "one"]


def test_delete_and_id_parsing(db):
    u = _user()
    assert to_object_id("garbage") is None
    assert to_object_id(str(u["_id"])) == u["_id"]
    assert delete_by_id(USERS, u["_id"])
    assert not delete_by_id(USERS, u["_id"])


def test_public_user_drops_password_hash(db):
    u = _user()
    pub = public_user(u)
    assert "passwordHash" not in pub
    assert pub["id"] == str(u["_id"])


def test_sessions_collection_has_ttl_index(db):
    from postboard.core.models import SESSION_MAX_AGE_SECONDS, SESSIONS

    info = db[SESSIONS].index_information()
    ttl = [i for i in info.values() if list(i["key"]) == [("createdAt", 1)]]
    assert ttl, info
    assert ttl[0]["expireAfterSeconds"] == SESSION_MAX_AGE_SECONDS
