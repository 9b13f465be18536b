"""
Service layer for the project directory.
"""
import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.exceptions import DependencyUnavailable, InvalidState, NotFound, ValidationError
from models.load import Load
from models.project import Project, ProjectStatus
from schemas.project import ProjectCreate, ProjectUpdate

log = logging.getLogger(__name__)


class ProjectService:
    @staticmethod
    def _normalize_code(code: str) -> str:
        return (code or "").strip()

    @staticmethod
    def find_project(code: str, db: Session) -> Optional[Project]:
        try:
            return db.query(Project).filter(Project.code == ProjectService._normalize_code(code)).first()
        except SQLAlchemyError as exc:
            log.error("Project lookup failed for %s: %s", code, exc, exc_info=True)
            raise DependencyUnavailable("Project directory is unavailable")

    @staticmethod
    def get_project(code: str, db: Session) -> Project:
        project = ProjectService.find_project(code, db)
        if not project:
            raise NotFound(f"Project {code} not found")
        return project

    @staticmethod
    def require_active_project(code: str, db: Session) -> Project:
        """Precondition for every load operation that references a project code."""
        project = ProjectService.find_project(code, db)
        if not project or project.status != ProjectStatus.ACTIVE:
            raise NotFound(f"Project {code} not found or inactive")
        return project

    @staticmethod
    def list_projects(
        db: Session,
        status: Optional[ProjectStatus] = None,
        search: Optional[str] = None
    ) -> List[Project]:
        query = db.query(Project)
        if status:
            query = query.filter(Project.status == status)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(or_(Project.code.ilike(pattern), Project.name.ilike(pattern)))
        return query.order_by(Project.code.asc()).all()

    @staticmethod
    def create_project(data: ProjectCreate, db: Session, user_id: Optional[UUID]) -> Project:
        code = ProjectService._normalize_code(data.code)
        if not code:
            raise ValidationError("Project code is required")
        if ProjectService.find_project(code, db):
            raise ValidationError(f"Project code {code} already exists")

        project = Project(
            code=code,
            name=data.name.strip(),
            address=data.address,
            description=data.description,
            status=data.status,
            created_by=user_id
        )
        db.add(project)
        db.commit()
        db.refresh(project)
        log.info("Created project %s", code)
        return project

    @staticmethod
    def update_project(code: str, data: ProjectUpdate, db: Session) -> Project:
        project = ProjectService.get_project(code, db)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(project, field, value)
        db.commit()
        db.refresh(project)
        return project

    @staticmethod
    def count_loads(code: str, db: Session, include_inventory: bool = True) -> int:
        query = db.query(func.count(Load.id)).filter(Load.project_code == code)
        if not include_inventory:
            query = query.filter(Load.is_inventory.is_(False))
        return int(query.scalar() or 0)

    @staticmethod
    def delete_project(code: str, db: Session) -> None:
        project = ProjectService.get_project(code, db)
        load_count = ProjectService.count_loads(project.code, db)
        if load_count > 0:
            raise InvalidState(
                f"Cannot delete project {project.code}: it has {load_count} associated load(s)"
            )
        db.delete(project)
        db.commit()
        log.info("Deleted project %s", code)
