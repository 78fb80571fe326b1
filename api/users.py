"""
User account blueprint (mounted at /api/v1/user):
- POST  /register
- POST  /login
- POST  /logout            (access token required)
- POST  /refresh-token
- POST  /update-password   (access token required)
- PATCH /update-account    (access token required)
- GET   /current-user      (access token required)

Tokens are returned in the JSON body and set as httponly, secure cookies.
"""
from __future__ import annotations

from flask import Blueprint, request, g
from marshmallow import ValidationError

from api.extensions import get_auth_settings, get_session_manager
from api.responses import api_response
from models.schemas.user import (
    UserRegisterSchema,
    UserLoginSchema,
    RefreshTokenSchema,
    ChangePasswordSchema,
    UserUpdateSchema,
    UserOutSchema,
)
from utils.decorators import jwt_required, ACCESS_COOKIE

REFRESH_COOKIE = "refreshToken"

bp = Blueprint("users", __name__)

register_schema = UserRegisterSchema()
login_schema = UserLoginSchema()
refresh_schema = RefreshTokenSchema()
change_password_schema = ChangePasswordSchema()
update_schema = UserUpdateSchema()
user_out_schema = UserOutSchema()


def _cookie_options() -> dict:
    return {"httponly": True, "secure": get_auth_settings().cookie_secure}


def _set_token_cookies(response, tokens):
    options = _cookie_options()
    response.set_cookie(ACCESS_COOKIE, tokens.access_token, **options)
    response.set_cookie(REFRESH_COOKIE, tokens.refresh_token, **options)
    return response


def _clear_token_cookies(response):
    options = _cookie_options()
    response.delete_cookie(ACCESS_COOKIE, **options)
    response.delete_cookie(REFRESH_COOKIE, **options)
    return response


@bp.post("/register")
def register():
    """
    Register a new user.
    ---
    tags:
      - Users
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            username: { type: string }
            email: { type: string }
            password: { type: string }
    responses:
      201:
        description: Created
      400:
        description: Missing or invalid fields
      409:
        description: Username or email already registered
    """
    data = register_schema.load(request.get_json(silent=True) or {})
    user = get_session_manager().register(data["username"], data["email"], data["password"])
    return api_response(201, user_out_schema.dump(user), "User registered successfully")


@bp.post("/login")
def login():
    """
    Login with a username or an email; returns the user and both tokens.
    ---
    tags:
      - Users
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             identifier: { type: string, description: "username or email" }
             password: { type: string }
    responses:
      200:
        description: OK (tokens in body and cookies)
      400:
        description: Identifier missing
      401:
        description: Incorrect password
      404:
        description: User not found
    """
    data = login_schema.load(request.get_json(silent=True) or {})
    user, tokens = get_session_manager().login(data.get("identifier"), data.get("password"))
    response, status = api_response(
        200,
        {
            "user": user_out_schema.dump(user),
            "accessToken": tokens.access_token,
            "refreshToken": tokens.refresh_token,
        },
        "User logged in successfully",
    )
    return _set_token_cookies(response, tokens), status


@bp.post("/logout")
@jwt_required()
def logout():
    """
    Logout: clears the stored refresh token and the token cookies.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200:
        description: Logged out
      401:
        description: Unauthorized
    """
    get_session_manager().logout(g.current_user.id)
    response, status = api_response(200, {}, "User logged out successfully")
    return _clear_token_cookies(response), status


@bp.post("/refresh-token")
def refresh_token():
    """
    Rotate the session: exchange the current refresh token for a new pair.
    The token is read from the refreshToken cookie, else from the body.
    ---
    tags:
      - Users
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             refreshToken: { type: string }
    responses:
      200:
        description: New tokens
      401:
        description: Missing, invalid or superseded refresh token
    """
    incoming = request.cookies.get(REFRESH_COOKIE)
    if not incoming:
        try:
            incoming = refresh_schema.load(request.get_json(silent=True) or {}).get("refresh_token")
        except ValidationError:
            # a malformed body token is treated as no token at all
            incoming = None
    tokens = get_session_manager().refresh_session(incoming)
    response, status = api_response(
        200,
        {"accessToken": tokens.access_token, "refreshToken": tokens.refresh_token},
        "Access token refreshed successfully",
    )
    return _set_token_cookies(response, tokens), status


@bp.post("/update-password")
@jwt_required()
def update_password():
    """
    Change password; the current session stays valid.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             oldPassword: { type: string }
             newPassword: { type: string }
             confirmPassword: { type: string }
    responses:
      200:
        description: Password updated
      400:
        description: Passwords do not match
      401:
        description: Incorrect old password
    """
    data = change_password_schema.load(request.get_json(silent=True) or {})
    get_session_manager().change_password(
        g.current_user.id,
        data.get("old_password"),
        data.get("new_password"),
        data.get("confirm_password"),
    )
    return api_response(200, {}, "Password updated successfully")


@bp.patch("/update-account")
@jwt_required()
def update_account():
    """
    Update username and/or email (only supplied fields change).
    ---
    tags:
      - Users
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             username: { type: string }
             email: { type: string }
    responses:
      200:
        description: Updated user
      400:
        description: No field supplied
      409:
        description: Username or email already taken
    """
    data = update_schema.load(request.get_json(silent=True) or {})
    user = get_session_manager().update_profile(
        g.current_user.id, username=data.get("username"), email=data.get("email")
    )
    return api_response(200, {"user": user_out_schema.dump(user)}, "Account details updated successfully")


@bp.get("/current-user")
@jwt_required()
def current_user():
    """
    Get the authenticated user.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
    """
    user = get_session_manager().get_current_user(g.current_user)
    return api_response(200, {"user": user_out_schema.dump(user)}, "User found successfully")
