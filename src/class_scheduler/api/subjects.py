'''
API endpoints for the subject catalog.
'''
from typing import Annotated
from fastapi import APIRouter, Depends

from ..database import models as db_models
from ..models import subject as subject_models
from ..services.security import verify_token_and_get_user
from ..services.subject_service import SubjectService


class SubjectsAPI:
    """
    A class to encapsulate the subject catalog endpoints.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/api/subjects",
            tags=["Subjects"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
                "",
                self.list_subjects,
                methods=["GET"],
                response_model=list[subject_models.SubjectRead])
        self.router.add_api_route(
                "",
                self.create_subject,
                methods=["POST"],
                response_model=subject_models.SubjectRead)
        self.router.add_api_route(
                "/{subject_id}",
                self.update_subject,
                methods=["PUT"],
                response_model=subject_models.SubjectRead)

    async def list_subjects(
        self,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)],
        subject_service: Annotated[SubjectService, Depends(SubjectService)]
    ):
        """
        Retrieves every subject. Open to any authenticated user.
        """
        return await subject_service.get_all(current_user)

    async def create_subject(
        self,
        subject_data: subject_models.SubjectCreate,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)],
        subject_service: Annotated[SubjectService, Depends(SubjectService)]
    ):
        """
        Creates a subject. `durations` and `pricePerDuration` may be sent as
        the free text of the admin form.
        **This endpoint is restricted to Admins only.**
        """
        return await subject_service.create_subject(subject_data, current_user)

    async def update_subject(
        self,
        subject_id: int,
        subject_data: subject_models.SubjectUpdate,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)],
        subject_service: Annotated[SubjectService, Depends(SubjectService)]
    ):
        return await subject_service.update_subject(subject_id, subject_data, current_user)


subjects_api = SubjectsAPI()
router = subjects_api.router
