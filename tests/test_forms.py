import pytest

from postboard.core.errors import FormError
from postboard.core.forms import (
    MISSING_LOGIN_FIELDS,
    MISSING_SIGNUP_FIELDS,
    WEAK_PASSWORD,
    LoginForm,
    SignupForm,
)


@pytest.mark.parametrize(
    "username,email,password",
    [("", "a@b.co", "Abc123"), ("bob", "", "Abc123"), ("bob", "a@b.co", ""), ("  ", "a@b.co", "Abc123")],
)
def test_signup_form_requires_all_fields(username, email, password):
    with pytest.raises(FormError) as exc:
        SignupForm(username=username, email=email, password=password).validate()
    assert str(exc.value) == MISSING_SIGNUP_FIELDS


def test_signup_form_checks_password_strength():
    with pytest.raises(FormError) as exc:
        SignupForm(username="bob", email="a@b.co", password="abcdef").validate()
    assert str(exc.value) == WEAK_PASSWORD


def test_signup_form_without_upload_has_no_avatar():
    form = SignupForm(username="bob", email="a@b.co", password="Abc123")
    form.validate()
    assert not form.has_avatar


def test_login_form_requires_both_fields():
    with pytest.raises(FormError) as exc:
        LoginForm(email="a@b.co", password="").validate()
    assert str(exc.value) == MISSING_LOGIN_FIELDS


@pytest.mark.parametrize(
    "next_url,expected",
    [
        ("/post/abc", "/post/abc"),
        ("", "/userProfile"),
        ("https://evil.example", "/userProfile"),
        ("//evil.example", "/userProfile"),
        ("/\\evil.example", "/userProfile"),
    ],
)
def test_login_form_only_follows_local_next(next_url, expected):
    assert LoginForm(email="a", password="b", next=next_url).safe_next("/userProfile") == expected
