"""Forma estable de la cotización que consume el exportador PDF."""

from datetime import date

from cotizaciones.schemas.common import CamelModel


class DocumentLine(CamelModel):
    service_name: str
    specialty_name: str
    unit_price: int
    quantity: int
    subtotal: int


class QuotationDocument(CamelModel):
    title: str = "COTIZACIÓN"
    business_name: str
    quotation_id: str
    date: date
    client_name: str
    phone: str
    lines: list[DocumentLine]
    total: int
    currency_label: str
    compact_layout: bool
    file_name: str
