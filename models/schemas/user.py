from marshmallow import Schema, fields, pre_load, validates_schema, ValidationError, EXCLUDE


# passwords are compared byte for byte, so only these are trimmed
TRIMMED_FIELDS = ("identifier", "username", "email", "refreshToken")


def _strip(v):
    return v.strip() if isinstance(v, str) else v


class _TrimmedSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    @pre_load
    def trim(self, data, **kwargs):
        if isinstance(data, dict):
            return {k: _strip(v) if k in TRIMMED_FIELDS else v for k, v in data.items()}
        return data


class UserRegisterSchema(_TrimmedSchema):
    username = fields.String(required=True)
    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True)


class UserLoginSchema(_TrimmedSchema):
    """Accepts ``identifier`` or, failing that, ``username`` / ``email``."""
    identifier = fields.String(load_default=None)
    username = fields.String(load_default=None)
    email = fields.String(load_default=None)
    password = fields.String(load_default=None, load_only=True)

    @pre_load
    def pick_identifier(self, data, **kwargs):
        if isinstance(data, dict) and not data.get("identifier"):
            data = dict(data)
            data["identifier"] = data.get("username") or data.get("email")
        return data


class RefreshTokenSchema(_TrimmedSchema):
    refresh_token = fields.String(data_key="refreshToken", load_default=None)


class ChangePasswordSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    old_password = fields.String(data_key="oldPassword", load_default=None)
    new_password = fields.String(data_key="newPassword", load_default=None)
    confirm_password = fields.String(data_key="confirmPassword", load_default=None)


class UserUpdateSchema(_TrimmedSchema):
    username = fields.String(allow_none=True)
    email = fields.Email(allow_none=True)

    @validates_schema
    def validate_not_blank(self, data, **kwargs):
        for key in ("username", "email"):
            if key in data and data[key] == "":
                raise ValidationError("Field may not be blank.", key)


class UserOutSchema(Schema):
    id = fields.String(allow_none=False)
    username = fields.String()
    email = fields.String()
    coins = fields.Integer()
    created_at = fields.DateTime(allow_none=True)
    updated_at = fields.DateTime(allow_none=True)
