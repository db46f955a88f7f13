from marshmallow import Schema, ValidationError, fields, validate, validates_schema

from models.schemas.common import validate_not_blank

GIT_URL_RE = r"^(https?://|git@|ssh://)\S+$"


class ProjectCreateSchema(Schema):
    name = fields.String(required=True, validate=[validate_not_blank, validate.Length(max=100)])
    git_url = fields.String(
        required=True,
        data_key="gitUrl",
        validate=[validate.Regexp(GIT_URL_RE, error="Invalid git URL."), validate.Length(max=500)],
    )


class ProjectUpdateSchema(Schema):
    name = fields.String(validate=[validate_not_blank, validate.Length(max=100)])
    git_url = fields.String(
        data_key="gitUrl",
        validate=[validate.Regexp(GIT_URL_RE, error="Invalid git URL."), validate.Length(max=500)],
    )

    @validates_schema
    def require_a_change(self, data, **kwargs):
        if "name" not in data and "git_url" not in data:
            raise ValidationError("Provide name or gitUrl to update.", field_name="_schema")


class ProjectOutSchema(Schema):
    id = fields.String()
    name = fields.String()
    git_url = fields.String(data_key="gitUrl")
    user_id = fields.String(data_key="userId")
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")
