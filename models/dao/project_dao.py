from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError

from models.db_errors import is_unique_violation
from models.project import Project

NAME_CONSTRAINT = ("uq_projects_user_name", "projects.user_id, projects.name")


class ProjectDAO:
    def create(self, session, user_id: str, name: str, git_url: str, now) -> Optional[Project]:
        """Insert a project; None when the owner already has one with this name."""
        project = Project(user_id=user_id, name=name, git_url=git_url, created_at=now, updated_at=now)
        session.session.add(project)
        if not self._flush(session):
            return None
        return project

    def find_by_id(self, session, project_id: str) -> Optional[Project]:
        return session.session.get(Project, project_id)

    def list_for_user(self, session, user_id: str, page: int, limit: int) -> Tuple[List[Project], int]:
        query = session.session.query(Project).filter(Project.user_id == user_id)
        total = query.count()
        rows = (
            query.order_by(Project.created_at.desc(), Project.id)
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return rows, total

    def update(self, session, project: Project, changes: dict, now) -> Optional[Project]:
        """Apply name/git_url changes; None on a name clash with another project of the owner."""
        for key in ("name", "git_url"):
            if key in changes:
                setattr(project, key, changes[key])
        project.updated_at = now
        if not self._flush(session):
            return None
        return project

    def delete(self, session, project: Project) -> None:
        session.session.delete(project)
        session.session.flush()

    @staticmethod
    def _flush(session) -> bool:
        # a failed flush leaves the transaction unusable; the caller raises and the coordinator aborts
        try:
            session.session.flush()
        except IntegrityError as err:
            if is_unique_violation(err, *NAME_CONSTRAINT):
                return False
            raise
        return True
