# app/system_models/appointment_model/appointment_schemas.py
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from app.system_models.appointment_model.appointment_model import AppointmentStatus
from app.system_models.doctor_model.doctor_schemas import DoctorSummary
from app.system_models.patient_model.patient_schemas import PatientDetail


class AppointmentStatusUpdate(BaseModel):
    status: AppointmentStatus


class AppointmentResponse(BaseModel):
    id: str
    patient_id: str
    doctor_id: str
    date: date
    time: str
    symptoms: str
    status: AppointmentStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class AppointmentDetailResponse(AppointmentResponse):
    patient: PatientDetail
    doctor: DoctorSummary
