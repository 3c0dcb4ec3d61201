"""Project domain service."""

import logging
from decimal import Decimal
from typing import Optional

from billable.database.base import Database
from billable.domain import errors
from billable.domain.entities import Project as ProjectEntity, WorkStatus
from billable.domain.validation import check_minimum, check_present, raise_if_errors

logger = logging.getLogger(__name__)


class ProjectService:
    """Service for managing projects."""

    def __init__(self, db: Database):
        """Initialize project service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_project(
        self, client_id: int, name: str, hourly_rate: Optional[Decimal] = None, active: bool = True
    ) -> int:
        """Create a project for a client.

        Args:
            client_id: Owning client ID
            name: Project name (used as the invoice line description)
            hourly_rate: Optional rate overriding the client's rate
            active: Whether new work can be logged on it

        Returns:
            Project ID

        Raises:
            NotFoundError: If client doesn't exist
            ValidationError: If name is blank or rate is negative
        """
        if self.db.get_client(client_id) is None:
            raise errors.NotFoundError(errors.client_not_found(client_id))

        field_errors: dict[str, list[str]] = {}
        check_present(field_errors, "name", name)
        check_minimum(field_errors, "hourly_rate", hourly_rate)
        raise_if_errors(field_errors)

        project_id = self.db.create_project(
            client_id=client_id, name=name.strip(), hourly_rate=hourly_rate, active=active
        )
        logger.info("Created project %s (%s) for client %s", project_id, name, client_id)
        return project_id

    def get_project(self, project_id: int) -> Optional[ProjectEntity]:
        """Get project by ID."""
        return self.db.get_project(project_id)

    def list_projects(self, client_id: Optional[int] = None) -> list[ProjectEntity]:
        """List projects, optionally for one client."""
        return self.db.list_projects(client_id=client_id)

    def delete_project(self, project_id: int) -> None:
        """Delete a project and its unbilled work.

        Raises:
            NotFoundError: If project doesn't exist
            DependencyError: If any of its work has been invoiced
        """
        if self.db.get_project(project_id) is None:
            raise errors.NotFoundError(errors.project_not_found(project_id))

        invoiced = self.db.list_work_entries(project_id=project_id, status=WorkStatus.INVOICED.value)
        if invoiced:
            raise errors.DependencyError(errors.project_delete_blocked())

        self.db.delete_project(project_id)
        logger.info("Deleted project %s", project_id)
