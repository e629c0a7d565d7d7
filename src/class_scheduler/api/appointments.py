'''
API endpoints for appointments (single class sessions).
'''
from typing import Annotated
from fastapi import APIRouter, Depends

from ..database import models as db_models
from ..models import appointment as appointment_models
from ..services.security import verify_token_and_get_user
from ..services.appointment_service import AppointmentService


class AppointmentsAPI:
    """
    A class to encapsulate the appointment endpoints.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/api/appointments",
            tags=["Appointments"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
                "",
                self.list_appointments,
                methods=["GET"],
                response_model=list[appointment_models.AppointmentRead])
        self.router.add_api_route(
                "",
                self.create_appointment,
                methods=["POST"],
                response_model=appointment_models.AppointmentRead)
        self.router.add_api_route(
                "/{appointment_id}/attendance",
                self.record_attendance,
                methods=["POST"],
                response_model=appointment_models.AppointmentRead)
        self.router.add_api_route(
                "/{appointment_id}",
                self.update_appointment,
                methods=["PATCH"],
                response_model=appointment_models.AppointmentRead)

    async def list_appointments(
        self,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)],
        appointment_service: Annotated[AppointmentService, Depends(AppointmentService)]
    ):
        """
        Retrieves the appointments of every class visible to the current user.
        """
        return await appointment_service.get_all(current_user)

    async def create_appointment(
        self,
        appointment_data: appointment_models.AppointmentCreate,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)],
        appointment_service: Annotated[AppointmentService, Depends(AppointmentService)]
    ):
        """
        Creates an appointment with a fresh meeting link and notifies the
        class teacher and students.
        **This endpoint is restricted to Admins only.**
        """
        return await appointment_service.create_appointment(appointment_data, current_user)

    async def record_attendance(
        self,
        appointment_id: int,
        attendance_data: appointment_models.AttendanceUpdate,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)],
        appointment_service: Annotated[AppointmentService, Depends(AppointmentService)]
    ):
        return await appointment_service.record_attendance(appointment_id, attendance_data, current_user)

    async def update_appointment(
        self,
        appointment_id: int,
        update_data: appointment_models.AppointmentUpdate,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)],
        appointment_service: Annotated[AppointmentService, Depends(AppointmentService)]
    ):
        """
        Updates notes, ratings, the assignment or the status. The fields a
        caller may set depend on their role.
        """
        return await appointment_service.update_appointment(appointment_id, update_data, current_user)


appointments_api = AppointmentsAPI()
router = appointments_api.router
