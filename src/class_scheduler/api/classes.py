'''
API endpoints for classes and the expansion of their recurrence pattern
into appointments.
'''
from typing import Annotated, Any, List
from fastapi import APIRouter, Depends

from ..database import models as db_models
from ..models import classes as class_models
from ..models import appointment as appointment_models
from ..services.security import verify_token_and_get_user
from ..services.class_service import ClassService
from ..services.appointment_service import AppointmentService


class ClassesAPI:
    """
    A class to encapsulate the class endpoints.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/api/classes",
            tags=["Classes"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
                "",
                self.list_classes,
                methods=["GET"],
                response_model=List[class_models.ClassReadRoleBased])
        self.router.add_api_route(
                "",
                self.create_class,
                methods=["POST"],
                response_model=class_models.ClassDetailRead)
        self.router.add_api_route(
                "/{class_id}",
                self.get_class,
                methods=["GET"],
                response_model=class_models.ClassDetailRoleBased)
        self.router.add_api_route(
                "/{class_id}",
                self.update_class,
                methods=["PATCH"],
                response_model=class_models.ClassDetailRoleBased)
        self.router.add_api_route(
                "/{class_id}/appointments",
                self.generate_appointments,
                methods=["POST"],
                response_model=list[appointment_models.AppointmentRead])

    async def list_classes(
        self,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)],
        class_service: Annotated[ClassService, Depends(ClassService)]
    ) -> List[Any]:
        """
        Retrieves the classes visible to the current user.
        Admins receive the enriched view with roster and appointments.
        """
        return await class_service.get_all(current_user)

    async def create_class(
        self,
        class_data: class_models.ClassCreate,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)],
        class_service: Annotated[ClassService, Depends(ClassService)],
        appointment_service: Annotated[AppointmentService, Depends(AppointmentService)]
    ):
        """
        Creates a class with its roster. With `generateAppointments` set,
        the recurrence pattern is expanded in the same request.
        **This endpoint is restricted to Admins only.**
        """
        new_class = await class_service.create_class(class_data, current_user)
        if class_data.generate_appointments:
            await appointment_service.generate_for_class(new_class.id, current_user)
            return await class_service.get_class(new_class.id, current_user)
        return new_class

    async def get_class(
        self,
        class_id: int,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)],
        class_service: Annotated[ClassService, Depends(ClassService)]
    ):
        return await class_service.get_class(class_id, current_user)

    async def update_class(
        self,
        class_id: int,
        update_data: class_models.ClassUpdate,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)],
        class_service: Annotated[ClassService, Depends(ClassService)]
    ):
        """
        Admins update dates, notes, prices and the active flag; the class
        teacher may only update teacher notes.
        """
        return await class_service.update_class(class_id, update_data, current_user)

    async def generate_appointments(
        self,
        class_id: int,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)],
        appointment_service: Annotated[AppointmentService, Depends(AppointmentService)]
    ):
        """
        Creates every occurrence of the class's recurrence pattern that is
        not stored yet, and returns the new appointments.
        **This endpoint is restricted to Admins only.**
        """
        return await appointment_service.generate_for_class(class_id, current_user)


classes_api = ClassesAPI()
router = classes_api.router
