from marshmallow import Schema, fields

from models.schemas.common import validate_not_blank
from models.schemas.user import UserOutSchema


class RefreshTokenSchema(Schema):
    refresh_token = fields.String(required=True, data_key="refreshToken", validate=validate_not_blank)


class LogoutSchema(Schema):
    access_token = fields.String(required=True, data_key="accessToken", validate=validate_not_blank)
    refresh_token = fields.String(required=True, data_key="refreshToken", validate=validate_not_blank)


class RefreshResponseSchema(Schema):
    access_token = fields.String(data_key="accessToken")
    refresh_token = fields.String(data_key="refreshToken")


class AuthResponseSchema(RefreshResponseSchema):
    user = fields.Nested(UserOutSchema)


class LogoutResponseSchema(Schema):
    message = fields.String()
    logged_out_at = fields.DateTime(data_key="loggedOutAt")
