

# Register all models here

# System models
from app.system_models.doctor_model.doctor_model import Doctor
from app.system_models.patient_model.patient_model import Patient
from app.system_models.appointment_model.appointment_model import Appointment
from app.system_models.prescription_model.prescription_model import Prescription
from app.system_models.prescription_history_model.prescription_history_model import PrescriptionHistory
