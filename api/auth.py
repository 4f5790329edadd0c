"""
Authentication blueprint (mounted at /api/auth):
- POST /login
- POST /mfa/verify
- POST /refresh-token
- POST /logout
- POST /password/reset-request
- POST /password/reset
- GET  /me

Views parse input with marshmallow and delegate to services.auth_service;
domain errors propagate to the handlers in api.errors.
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify, g

from models.schemas.auth import (
    LoginSchema,
    MfaVerifySchema,
    RefreshSchema,
    PasswordResetRequestSchema,
    PasswordResetSchema,
    UserOutSchema,
)
from services import auth_service
from services.errors import AuthenticationError, MISSING_TOKEN
from utils.decorators import bearer_token, jwt_required, rate_limited

bp = Blueprint("auth", __name__, url_prefix="/auth")

login_schema = LoginSchema()
mfa_verify_schema = MfaVerifySchema()
refresh_schema = RefreshSchema()
reset_request_schema = PasswordResetRequestSchema()
reset_schema = PasswordResetSchema()
user_out_schema = UserOutSchema()


def _payload() -> dict:
    return request.get_json(silent=True) or {}


@bp.post("/login")
@rate_limited("login")
def login():
    """
    Login: returns a token pair, or asks for the emailed verification code
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             username: { type: string, description: "username or e-mail" }
             password: { type: string }
    responses:
      200:
        description: "{token, refresh_token} or {requireMfa: true, mfa_token}"
      400:
        description: Validation error
      401:
        description: Invalid credentials, disabled or locked account
      429:
        description: Too many login requests from this client
    """
    data = login_schema.load(_payload())
    body = auth_service.login(data["username"], data["password"], ip_address=request.remote_addr)
    return jsonify(body), 200


@bp.post("/mfa/verify")
def verify_mfa():
    """
    Exchange a verification code for a token pair
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             code: { type: string, example: "123456" }
             mfa_token: { type: string, description: "challenge id returned by /login" }
    responses:
      200:
        description: OK (returns tokens)
      400:
        description: Missing code
      401:
        description: Invalid or expired code
      404:
        description: User not found
    """
    data = mfa_verify_schema.load(_payload())
    return jsonify(auth_service.verify_mfa(data["code"], data.get("mfa_token"))), 200


@bp.post("/refresh-token")
def refresh():
    """
    Use refresh token to obtain new access and refresh tokens (rotation)
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             refresh_token: { type: string }
    responses:
      200:
        description: OK (returns tokens)
      400:
        description: Missing refresh token
      401:
        description: Invalid, revoked or expired refresh token
      404:
        description: User not found or disabled
    """
    data = refresh_schema.load(_payload())
    return jsonify(auth_service.refresh(data["refresh_token"])), 200


@bp.post("/logout")
def logout():
    """
    logout: revokes the caller's token pair
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: Logged out (also when the token was already unusable)
      401:
        description: Missing bearer token
    """
    token = bearer_token()
    if not token:
        raise AuthenticationError(MISSING_TOKEN)
    return jsonify(auth_service.logout(token)), 200


@bp.post("/password/reset-request")
def password_reset_request():
    """
    Request a password reset link (same answer for unknown addresses)
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             email: { type: string }
    responses:
      200:
        description: Generic acknowledgement
      400:
        description: Invalid e-mail
    """
    data = reset_request_schema.load(_payload())
    return jsonify(auth_service.request_password_reset(data["email"])), 200


@bp.post("/password/reset")
def password_reset():
    """
    Set a new password with a reset token (single use)
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             token: { type: string }
             password: { type: string }
    responses:
      200:
        description: Password changed; existing sessions revoked
      400:
        description: Validation error
      401:
        description: Invalid, used or expired token
    """
    data = reset_schema.load(_payload())
    return jsonify(auth_service.reset_password(data["token"], data["password"])), 200


@bp.get("/me")
@jwt_required()
def me():
    """
    Get current user info.
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
    """
    return jsonify({"data": user_out_schema.dump(g.current_user)}), 200
