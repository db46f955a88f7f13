from __future__ import annotations

from typing import Tuple

from flask import Blueprint, request, jsonify, g, abort, current_app

from api.errors import Conflict, Forbidden, NotFound
from api.transaction import transactional
from models.schemas.project import ProjectCreateSchema, ProjectOutSchema, ProjectUpdateSchema
from utils.decorators import jwt_required

MAX_LIMIT = 100
DUPLICATE_NAME = "A project with this name already exists"

bp = Blueprint("projects", __name__)

project_create_schema = ProjectCreateSchema()
project_update_schema = ProjectUpdateSchema()
project_out_schema = ProjectOutSchema()
projects_out_schema = ProjectOutSchema(many=True)


def parse_pagination() -> Tuple[int, int]:
    try:
        page = int(request.args.get("page", "1"))
        limit = int(request.args.get("limit", "10"))
        page = max(page, 1)
        limit = max(1, min(limit, MAX_LIMIT))
        return page, limit
    except ValueError:
        abort(400, description="page and limit must be integers")


def _daos():
    return current_app.extensions["daos"]


def _now():
    return current_app.extensions["clock"].now()


def find_owned_project(session, project_id: str):
    project = _daos().projects.find_by_id(session, project_id)
    if project is None:
        raise NotFound("Project not found")
    if project.user_id != g.current_user.user_id:
        raise Forbidden("Access denied")
    return project


@bp.post("/projects")
@jwt_required()
@transactional(status_code=201, schema=project_create_schema)
def create_project(session, data):
    """
    Create a project owned by the caller
    ---
    tags:
      - Projects
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          required: [name, gitUrl]
          properties:
            name: { type: string }
            gitUrl: { type: string }
    responses:
      201: { description: Created }
      400: { description: Validation error }
      401: { description: Unauthorized }
      409: { description: Name already used by another of your projects }
    """
    project = _daos().projects.create(
        session, g.current_user.user_id, data["name"], data["git_url"], _now()
    )
    if project is None:
        raise Conflict(DUPLICATE_NAME)
    return project_out_schema.dump(project)


@bp.get("/projects")
@jwt_required()
def list_projects():
    """
    List the caller's projects
    ---
    tags:
      - Projects
    security:
      - Bearer: []
    parameters:
      - in: query
        name: page
        type: integer
      - in: query
        name: limit
        type: integer
    responses:
      200: { description: OK }
      401: { description: Unauthorized }
    """
    page, limit = parse_pagination()
    with current_app.extensions["db_storage"].reader() as session:
        rows, total = _daos().projects.list_for_user(session, g.current_user.user_id, page, limit)
        data = projects_out_schema.dump(rows)
    return jsonify(
        {
            "data": data,
            "meta": {"page": page, "limit": limit, "total": total},
        }
    )


@bp.get("/projects/<project_id>")
@jwt_required()
def get_project(project_id: str):
    """
    Get one project
    ---
    tags:
      - Projects
    security:
      - Bearer: []
    parameters:
      - in: path
        name: project_id
        type: string
        required: true
    responses:
      200: { description: OK }
      403: { description: Not the owner }
      404: { description: Not found }
    """
    with current_app.extensions["db_storage"].reader() as session:
        project = find_owned_project(session, project_id)
        data = project_out_schema.dump(project)
    return jsonify(data)


@bp.put("/projects/<project_id>")
@jwt_required()
@transactional(schema=project_update_schema)
def update_project(session, project_id: str, data):
    """
    Update name and/or gitUrl of a project
    ---
    tags:
      - Projects
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: path
        name: project_id
        type: string
        required: true
      - in: body
        name: body
        schema:
          type: object
          properties:
            name: { type: string }
            gitUrl: { type: string }
    responses:
      200: { description: OK }
      400: { description: Nothing to update }
      403: { description: Not the owner }
      404: { description: Not found }
      409: { description: Name already used by another of your projects }
    """
    project = find_owned_project(session, project_id)
    project = _daos().projects.update(session, project, data, _now())
    if project is None:
        raise Conflict(DUPLICATE_NAME)
    return project_out_schema.dump(project)


@bp.delete("/projects/<project_id>")
@jwt_required()
@transactional()
def delete_project(session, project_id: str):
    """
    Delete a project
    ---
    tags:
      - Projects
    security:
      - Bearer: []
    parameters:
      - in: path
        name: project_id
        type: string
        required: true
    responses:
      200: { description: Deleted }
      403: { description: Not the owner }
      404: { description: Not found }
    """
    project = find_owned_project(session, project_id)
    _daos().projects.delete(session, project)
    return {"message": "Project deleted", "id": project_id}
