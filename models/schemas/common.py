import re

from marshmallow import ValidationError

USERNAME_RE = re.compile(r"^[a-zA-Z0-9_-]+$")


def validate_username(value: str) -> None:
    if not 3 <= len(value) <= 50:
        raise ValidationError("Username must be between 3 and 50 characters long")
    if not USERNAME_RE.match(value):
        raise ValidationError("Username can only contain letters, numbers, underscores, and hyphens")


def validate_password_strength(value: str) -> None:
    if len(value) < 8:
        raise ValidationError("Password must be at least 8 characters long")
    if not (re.search(r"[a-z]", value) and re.search(r"[A-Z]", value) and re.search(r"\d", value)):
        raise ValidationError(
            "Password must contain at least one uppercase letter, one lowercase letter, and one number"
        )


def validate_not_blank(value: str) -> None:
    if not value or not value.strip():
        raise ValidationError("Field may not be blank.")
