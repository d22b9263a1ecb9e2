"""
Forma de la cotización para el exportador PDF.
El renderizado del PDF lo hace el frontend; aquí solo se fijan los datos.
"""

from cotizaciones.config import Settings, get_settings
from cotizaciones.schemas.document import DocumentLine, QuotationDocument
from cotizaciones.schemas.quotation import Quotation
from cotizaciones.services.quotation_ledger import compute_service_subtotal, compute_total


def document_file_name(quotation: Quotation) -> str:
    return f"cotizacion-{quotation.client_name}-{quotation.date.isoformat()}.pdf"


def build_quotation_document(
    quotation: Quotation, settings: Settings | None = None
) -> QuotationDocument:
    settings = settings or get_settings()
    lines = [
        DocumentLine(
            service_name=service.service_name,
            specialty_name=service.specialty_name,
            unit_price=service.unit_price,
            quantity=service.quantity,
            subtotal=compute_service_subtotal(service),
        )
        for service in quotation.services
    ]
    return QuotationDocument(
        business_name=settings.BUSINESS_NAME,
        quotation_id=quotation.id,
        date=quotation.date,
        client_name=quotation.client_name,
        phone=quotation.phone,
        lines=lines,
        total=compute_total(quotation),
        currency_label=settings.CURRENCY_LABEL,
        compact_layout=len(lines) > settings.COMPACT_LAYOUT_THRESHOLD,
        file_name=document_file_name(quotation),
    )
