"""
Directorio de doctores y especialidades.

Búsqueda en memoria por id, sobre la lista que provee el backend. Nunca
modifica los registros: las cotizaciones solo los referencian por id.
"""

from cotizaciones.schemas.common import CamelModel
from cotizaciones.schemas.directory import (
    CatalogService,
    Doctor,
    DoctorPaymentType,
    Specialty,
)


class Directory(CamelModel):
    doctors: list[Doctor] = []
    specialties: list[Specialty] = []

    def doctor(self, doctor_id: str) -> Doctor | None:
        return next((d for d in self.doctors if d.id == doctor_id), None)

    def specialty(self, specialty_id: str) -> Specialty | None:
        return next((s for s in self.specialties if s.id == specialty_id), None)

    def catalog_entry(
        self, service_id: str
    ) -> tuple[Specialty, CatalogService] | None:
        """Especialidad y servicio de catálogo para un id de servicio."""
        for specialty in self.specialties:
            for service in specialty.services:
                if service.id == service_id:
                    return specialty, service
        return None

    def available_services(
        self, specialty_ids: list[str]
    ) -> list[tuple[Specialty, CatalogService]]:
        """Servicios de catálogo de las especialidades seleccionadas."""
        return [
            (specialty, service)
            for specialty in self.specialties
            if specialty.id in specialty_ids
            for service in specialty.services
        ]

    def eligible_doctors(self, specialty_ids: list[str]) -> list[Doctor]:
        """Doctores con al menos una de las especialidades seleccionadas."""
        return [
            d for d in self.doctors
            if any(sid in specialty_ids for sid in d.specialty_ids)
        ]


def earns_commission_on(doctor: Doctor, specialty_id: str) -> bool:
    """Un doctor recibe comisión en una línea si cobra por comisión y tiene la especialidad."""
    return (
        doctor.payment_type == DoctorPaymentType.COMMISSION
        and specialty_id in doctor.specialty_ids
    )
