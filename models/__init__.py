from models.user import User
from models.access_token import AccessToken
from models.refresh_token import RefreshToken
from models.project import Project
