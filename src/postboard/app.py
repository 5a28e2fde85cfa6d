# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import Depends, FastAPI, File, Form, Request, UploadFile
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from pymongo.errors import PyMongoError
from starlette.concurrency import run_in_threadpool

from postboard.auth.session import COOKIE_NAME, DEFAULT_MAX_AGE_SECONDS, create_session, destroy_session, sign_session
from postboard.auth.users import DUPLICATE_USER, authenticate, register_user
from postboard.core.errors import (
    AuthenticationError,
    DocumentValidationError,
    FormError,
    NotFoundError,
    UniqueConstraintError,
)
from postboard.core.forms import CommentForm, LoginForm, PostForm, SignupForm
from postboard.permissions import CurrentUser, cookie_settings, load_session_from_request, require_user
from postboard.services import upload_service
from postboard.services.comment_service import add_comment, check_comment
from postboard.services.post_service import check_post, create_post, get_post_detail, list_recent_posts
from postboard.services.upload_service import store_upload

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Something went wrong. Please try again later."
POST_NOT_FOUND = "This post does not exist."
PROFILE_PATH = "/userProfile"

app = FastAPI(title="Postboard")


@app.middleware("http")
async def _auth_middleware(request: Request, call_next):
    sess = await run_in_threadpool(load_session_from_request, request)
    request.state.session = sess
    request.state.user = CurrentUser.from_snapshot(sess.current_user) if sess else None
    return await call_next(request)


BASE_DIR = Path(__file__).resolve().parent

upload_service.UPLOAD_DIR.mkdir(parents=True, exist_ok=True)
app.mount("/static", StaticFiles(directory=str(BASE_DIR / "static")), name="static")
app.mount(upload_service.PUBLIC_PREFIX, StaticFiles(directory=str(upload_service.UPLOAD_DIR)), name="uploads")
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))


def _render(request: Request, template_name: str, ctx: dict | None = None, *, status_code: int = 200):
    """TemplateResponse wrapper injecting the current user."""
    base_ctx = {
        "current_user": getattr(request.state, "user", None),
        "error": "",
    }
    merged = {**base_ctx, **(ctx or {})}
    return templates.TemplateResponse(request, template_name, merged, status_code=status_code)


def _error_page(request: Request, message: str, status_code: int):
    return _render(request, "error.html", {"error": message}, status_code=status_code)


def _redirect_with_session(user_doc: dict, url: str) -> RedirectResponse:
    sess = create_session(user_doc)
    resp = RedirectResponse(url=url, status_code=303)
    resp.set_cookie(
        COOKIE_NAME,
        sign_session(sess.session_id),
        max_age=DEFAULT_MAX_AGE_SECONDS,
        **cookie_settings(),
    )
    return resp


@app.exception_handler(Exception)
async def _unhandled_error(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return _error_page(request, GENERIC_ERROR, 500)


# ------------------ Routes ------------------


@app.get("/", response_class=HTMLResponse)
def index(request: Request):
    return _render(request, "index.html", {"posts": list_recent_posts()})


@app.get("/signup", response_class=HTMLResponse)
def signup_get(request: Request):
    return _render(request, "auth/signup.html", {"form": {}})


@app.post("/signup")
async def signup_post(
    request: Request,
    username: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
    avatar: UploadFile | None = File(None),
):
    form = SignupForm(username=username, email=email, password=password, avatar=avatar)
    echo = {"username": username, "email": email}
    try:
        form.validate()
    except FormError as e:
        return _render(request, "auth/signup.html", {"form": echo, "error": str(e)}, status_code=400)

    stored = await store_upload(form.avatar) if form.has_avatar else None

    try:
        user = await run_in_threadpool(
            register_user,
            form.username,
            form.email,
            form.password,
            avatar=stored.public_url if stored else None,
        )
    except DocumentValidationError as e:
        return _render(request, "auth/signup.html", {"form": echo, "error": str(e)}, status_code=400)
    except UniqueConstraintError:
        return _render(request, "auth/signup.html", {"form": echo, "error": DUPLICATE_USER}, status_code=409)

    # New accounts are logged in straight away; the profile page is guarded.
    return await run_in_threadpool(_redirect_with_session, user, PROFILE_PATH)


@app.get("/login", response_class=HTMLResponse)
def login_get(request: Request, next: str = ""):
    form = LoginForm(email="", password="", next=next)
    if getattr(request.state, "user", None):
        return RedirectResponse(url=form.safe_next(PROFILE_PATH), status_code=303)
    return _render(request, "auth/login.html", {"next": next, "form": {}})


@app.post("/login")
def login_post(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    next: str = Form(""),
):
    form = LoginForm(email=email, password=password, next=next)
    ctx = {"next": next, "form": {"email": email}}
    try:
        form.validate()
    except FormError as e:
        return _render(request, "auth/login.html", {**ctx, "error": str(e)}, status_code=400)

    try:
        user = authenticate(form.email, form.password)
    except AuthenticationError as e:
        return _render(request, "auth/login.html", {**ctx, "error": str(e)}, status_code=401)

    return _redirect_with_session(user, form.safe_next(PROFILE_PATH))


@app.post("/logout")
def logout_post(request: Request, user=Depends(require_user)):
    sess = request.state.session
    destroy_session(sess.session_id)
    resp = RedirectResponse(url="/", status_code=303)
    resp.delete_cookie(COOKIE_NAME)
    return resp


@app.get("/userProfile", response_class=HTMLResponse)
def user_profile(request: Request, user=Depends(require_user)):
    return _render(request, "users/user-profile.html", {"user": user})


@app.get("/post-form", response_class=HTMLResponse)
def post_form_get(request: Request, user=Depends(require_user)):
    return _render(request, "post/post-form.html", {"form": {}})


@app.post("/post-form")
async def post_form_post(
    request: Request,
    content: str = Form(""),
    picName: str = Form(""),
    picPath: UploadFile | None = File(None),
    user=Depends(require_user),
):
    form = PostForm(content=content, pic_name=picName, pic_path=picPath)
    try:
        await run_in_threadpool(check_post, content=form.content, creator_id=user.id)
        stored = await store_upload(form.pic_path) if form.has_picture else None
        await run_in_threadpool(
            create_post,
            content=form.content,
            creator_id=user.id,
            pic_name=form.pic_name,
            pic_path=stored.public_url if stored else None,
        )
    except DocumentValidationError as e:
        echo = {"content": content, "picName": picName}
        return _render(request, "post/post-form.html", {"form": echo, "error": str(e)}, status_code=400)
    except Exception:
        logger.exception("Post creation failed for user %s", user.id)
        return _error_page(request, GENERIC_ERROR, 500)

    return RedirectResponse(url="/", status_code=303)


@app.get("/post/{post_id}", response_class=HTMLResponse)
def post_detail(request: Request, post_id: str, user=Depends(require_user)):
    try:
        post = get_post_detail(post_id)
    except NotFoundError as e:
        logger.warning("%s", e)
        return _error_page(request, POST_NOT_FOUND, 404)
    except PyMongoError:
        logger.exception("Could not load post %s", post_id)
        return _error_page(request, GENERIC_ERROR, 500)
    return _render(request, "post/post.html", {"postDetail": post})


@app.post("/post/{post_id}")
async def comment_post(
    request: Request,
    post_id: str,
    content: str = Form(""),
    imageName: str = Form(""),
    imagePath: UploadFile | None = File(None),
    user=Depends(require_user),
):
    form = CommentForm(content=content, image_name=imageName, image_path=imagePath)
    try:
        await run_in_threadpool(check_comment, post_id=post_id, author_id=user.id, content=form.content)
        stored = await store_upload(form.image_path) if form.has_image else None
        await run_in_threadpool(
            add_comment,
            post_id=post_id,
            author_id=user.id,
            content=form.content,
            image_name=form.image_name,
            image_path=stored.public_url if stored else None,
        )
    except DocumentValidationError as e:
        return _error_page(request, str(e), 400)
    except NotFoundError as e:
        logger.warning("%s", e)
        return _error_page(request, POST_NOT_FOUND, 404)
    except Exception:
        logger.exception("Comment creation failed on post %s", post_id)
        return _error_page(request, GENERIC_ERROR, 500)

    return RedirectResponse(url=f"/post/{post_id}", status_code=303)
