from marshmallow import Schema, fields, pre_load

from models.schemas.common import validate_not_blank, validate_password_strength, validate_username


def _strip(data, key):
    if isinstance(data, dict) and isinstance(data.get(key), str):
        data = dict(data)
        data[key] = data[key].strip()
    return data


class RegisterSchema(Schema):
    username = fields.String(required=True, validate=validate_username)
    password = fields.String(required=True, load_only=True, validate=validate_password_strength)

    @pre_load
    def normalize(self, data, **kwargs):
        return _strip(data, "username")


class LoginSchema(Schema):
    username = fields.String(required=True, validate=validate_not_blank)
    password = fields.String(required=True, load_only=True, validate=validate_not_blank)

    @pre_load
    def normalize(self, data, **kwargs):
        return _strip(data, "username")


class UserOutSchema(Schema):
    id = fields.String(allow_none=False)
    username = fields.String(allow_none=False)
