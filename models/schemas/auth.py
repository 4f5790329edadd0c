from marshmallow import Schema, EXCLUDE, fields, pre_load, validate

from models.schemas.common import strip_strings


def _norm_email(v):
    return v.strip().lower() if isinstance(v, str) else v


class RequestSchema(Schema):
    class Meta:
        unknown = EXCLUDE


def _required(field_cls, message, **kwargs):
    """A required, non-blank field that reports the same message for missing, null and empty."""
    return field_cls(
        required=True,
        validate=validate.Length(min=1, error=message),
        error_messages={"required": message, "null": message},
        **kwargs,
    )


class LoginSchema(RequestSchema):
    username = _required(fields.String, "Usuário ou e-mail é obrigatório")
    password = _required(fields.String, "Senha é obrigatória", load_only=True)

    @pre_load
    def strip(self, data, **kwargs):
        return strip_strings(data, "username", "password")


class MfaVerifySchema(RequestSchema):
    code = _required(fields.String, "Código de verificação é obrigatório")
    mfa_token = fields.String(load_default=None, allow_none=True)

    @pre_load
    def strip(self, data, **kwargs):
        code = data.get("code") if isinstance(data, dict) else None
        if isinstance(code, int) and not isinstance(code, bool):
            data = dict(data, code=str(code))
        return strip_strings(data, "code", "mfa_token")


class RefreshSchema(RequestSchema):
    refresh_token = _required(fields.String, "Refresh token não fornecido")

    @pre_load
    def strip(self, data, **kwargs):
        return strip_strings(data, "refresh_token")


class PasswordResetRequestSchema(RequestSchema):
    email = fields.Email(
        required=True,
        error_messages={"required": "E-mail inválido", "null": "E-mail inválido", "invalid": "E-mail inválido"},
    )

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data = dict(data, email=_norm_email(data["email"]))
        return data


class PasswordResetSchema(RequestSchema):
    token = _required(fields.String, "Token de redefinição é obrigatório")
    password = fields.String(
        required=True,
        load_only=True,
        error_messages={"required": "Senha é obrigatória", "null": "Senha é obrigatória"},
    )

    @pre_load
    def strip(self, data, **kwargs):
        return strip_strings(data, "token")


class UserOutSchema(Schema):
    id = fields.String(allow_none=False)
    username = fields.String()
    email = fields.String()
    is_active = fields.Boolean()
    mfa_enabled = fields.Boolean()
    created_at = fields.DateTime()
