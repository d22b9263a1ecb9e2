"""
Fixtures compartidas para Pytest.
Cotización de ejemplo, directorio de doctores y cliente HTTP.
"""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from cotizaciones.main import app
from cotizaciones.schemas.quotation import Quotation
from cotizaciones.services.directory import Directory


@pytest.fixture
def quotation_payload() -> dict:
    """
    Cotización tal como la entrega el backend (camelCase).

    Limpieza 100 × 2 = 200 → doc-1 20 % (40), doc-2 fijo 30
    Brackets 300 × 1 = 300 → doc-1 10 % (30)
    Total 500, comisiones 100 (doc-1 70, doc-2 30).
    """
    return {
        "id": "q-1",
        "clientName": "María Quispe",
        "phone": "70012345",
        "date": "2025-03-04",
        "services": [
            {
                "serviceId": "svc-1",
                "serviceName": "Limpieza",
                "specialtyId": "sp-1",
                "specialtyName": "Odontología General",
                "unitPrice": 100,
                "quantity": 2,
                "commissions": [
                    {"doctorId": "doc-1", "mode": "percentage", "percentage": 20, "amount": 40},
                    {"doctorId": "doc-2", "mode": "fixedAmount", "percentage": 15, "amount": 30},
                ],
            },
            {
                "serviceId": "svc-3",
                "serviceName": "Brackets",
                "specialtyId": "sp-2",
                "specialtyName": "Ortodoncia",
                "unitPrice": 300,
                "quantity": 1,
                "commissions": [
                    {"doctorId": "doc-1", "mode": "percentage", "percentage": 10, "amount": 30},
                ],
            },
        ],
        "payments": [],
    }


@pytest.fixture
def quotation(quotation_payload: dict) -> Quotation:
    return Quotation.model_validate(quotation_payload)


@pytest.fixture
def directory() -> Directory:
    """doc-1 y doc-2 cobran por comisión; doc-3 tiene sueldo."""
    return Directory.model_validate({
        "specialties": [
            {
                "id": "sp-1",
                "name": "Odontología General",
                "services": [
                    {"id": "svc-1", "name": "Limpieza", "price": 100},
                    {"id": "svc-2", "name": "Resina", "price": 150},
                ],
            },
            {
                "id": "sp-2",
                "name": "Ortodoncia",
                "services": [{"id": "svc-3", "name": "Brackets", "price": 300}],
            },
        ],
        "doctors": [
            {"id": "doc-1", "name": "Dr. Rojas", "specialtyIds": ["sp-1", "sp-2"], "paymentType": "comision"},
            {"id": "doc-2", "name": "Dra. Flores", "specialtyIds": ["sp-1"], "paymentType": "comision"},
            {"id": "doc-3", "name": "Dr. Mamani", "specialtyIds": ["sp-1"], "paymentType": "sueldo"},
        ],
    })


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Cliente HTTP de test sobre la app ASGI."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
