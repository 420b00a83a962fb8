"""
Servicio de generación de PDF.
Genera el Reporte 606 y las facturas con la plantilla del usuario.
Los documentos se devuelven en memoria; el endpoint decide cómo servirlos.
"""
import os
from io import BytesIO
from typing import Optional, Sequence
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import letter, landscape
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch, cm
from reportlab.platypus import (
    SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle,
    Image, HRFlowable
)
from reportlab.lib.enums import TA_CENTER, TA_RIGHT

from ..core.config import get_dominican_time, get_bucket_path
from ..utils.formatters import format_currency, format_date
from .report_service import Report606Entry, Report606Summary

# Fuentes estándar disponibles en reportlab sin registrar TTF
BASE_FONTS = {
    'helvetica': ('Helvetica', 'Helvetica-Bold'),
    'arial': ('Helvetica', 'Helvetica-Bold'),
    'times': ('Times-Roman', 'Times-Bold'),
    'times new roman': ('Times-Roman', 'Times-Bold'),
    'times-roman': ('Times-Roman', 'Times-Bold'),
    'courier': ('Courier', 'Courier-Bold'),
}

STATUS_LABELS = {
    'pending': 'Pendiente',
    'partially_paid': 'Parcialmente pagada',
    'paid': 'Pagada',
    'overdue': 'Vencida',
    'cancelled': 'Cancelada',
}


class PDFGenerator:
    """
    Generador de PDF con la personalización de la plantilla de factura.
    """

    def __init__(self, template: Optional[dict] = None):
        self.config = template or {}
        self.font, self.font_bold = BASE_FONTS.get(
            (self.config.get('font_family') or 'Helvetica').lower(),
            BASE_FONTS['helvetica']
        )
        self.font_size = self.config.get('font_size') or 12
        self.primary = self._color(self.config.get('primary_color') or '#3b82f6')
        self.secondary = self._color(self.config.get('secondary_color') or '#6b7280')
        self.styles = getSampleStyleSheet()
        self._setup_custom_styles()

    def _setup_custom_styles(self):
        self.styles.add(ParagraphStyle(
            name='DocTitle',
            parent=self.styles['Heading1'],
            fontName=self.font_bold,
            fontSize=self.font_size + 6,
            textColor=self.primary,
            alignment=TA_RIGHT,
            spaceAfter=6
        ))

        self.styles.add(ParagraphStyle(
            name='ReportTitle',
            parent=self.styles['Heading1'],
            fontName=self.font_bold,
            fontSize=16,
            textColor=self.primary,
            alignment=TA_CENTER,
            spaceAfter=12
        ))

        self.styles.add(ParagraphStyle(
            name='SectionTitle',
            parent=self.styles['Heading2'],
            fontName=self.font_bold,
            fontSize=self.font_size,
            textColor=self.primary,
            spaceBefore=10,
            spaceAfter=6
        ))

        self.styles.add(ParagraphStyle(
            name='Body',
            parent=self.styles['Normal'],
            fontName=self.font,
            fontSize=self.font_size - 2,
            leading=self.font_size + 1
        ))

        self.styles.add(ParagraphStyle(
            name='BodyRight',
            parent=self.styles['Normal'],
            fontName=self.font,
            fontSize=self.font_size - 2,
            alignment=TA_RIGHT
        ))

        self.styles.add(ParagraphStyle(
            name='Footer',
            parent=self.styles['Normal'],
            fontName=self.font,
            fontSize=8,
            textColor=colors.grey,
            alignment=TA_CENTER
        ))

    @staticmethod
    def _hex_to_rgb(hex_color: str) -> tuple:
        """Convierte color hexadecimal a RGB."""
        hex_color = hex_color.lstrip('#')
        return tuple(int(hex_color[i:i+2], 16) for i in (0, 2, 4))

    def _color(self, hex_color: str) -> colors.Color:
        r, g, b = self._hex_to_rgb(hex_color)
        return colors.Color(r/255, g/255, b/255)

    def _watermark(self, text: str, pagesize):
        def add_watermark(canvas, doc):
            """Marca de agua diagonal en cada página."""
            canvas.saveState()
            canvas.setFont(self.font_bold, 60)
            r, g, b = self._hex_to_rgb(self.config.get('secondary_color') or '#6b7280')
            canvas.setFillColor(colors.Color(r/255, g/255, b/255, alpha=0.15))
            page_width, page_height = pagesize
            canvas.translate(page_width / 2, page_height / 2)
            canvas.rotate(45)
            canvas.drawCentredString(0, 0, text)
            canvas.restoreState()
        return add_watermark

    def _stored_image(self, bucket: str, path: Optional[str], width, height):
        """Imagen guardada en el almacenamiento; None si no existe."""
        if not path:
            return None
        full_path = os.path.join(get_bucket_path(bucket), path)
        if not os.path.isfile(full_path):
            return None
        return Image(full_path, width=width, height=height, kind='proportional')

    def _build(self, elements: list, pagesize, watermark: Optional[str] = None) -> bytes:
        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=pagesize,
            rightMargin=1*cm,
            leftMargin=1*cm,
            topMargin=1.5*cm,
            bottomMargin=1.5*cm
        )
        if watermark:
            add_watermark = self._watermark(watermark, pagesize)
            doc.build(elements, onFirstPage=add_watermark, onLaterPages=add_watermark)
        else:
            doc.build(elements)
        return buffer.getvalue()

    # ===================== REPORTE 606 =====================

    def generate_report_606_pdf(
        self,
        summary: Report606Summary,
        entries: Sequence[Report606Entry],
        company: Optional[dict] = None
    ) -> bytes:
        """
        Reporte 606 en formato horizontal: encabezado de la empresa,
        tabla de compras y resumen de totales.
        """
        company = company or {}
        elements = []

        elements.append(Paragraph(
            'Formato de Envío de Compras de Bienes y Servicios (606)',
            self.styles['ReportTitle']
        ))

        period = f"{summary.period[4:6]}/{summary.period[:4]}"
        header = [
            ['Empresa:', company.get('name') or '-', 'Período:', period],
            ['RNC:', company.get('rnc') or '-', 'Desde / Hasta:',
             f"{format_date(summary.start_date)} - {format_date(summary.end_date)}"],
        ]
        header_table = Table(header, colWidths=[1.2*inch, 4*inch, 1.4*inch, 2.5*inch])
        header_table.setStyle(TableStyle([
            ('FONTNAME', (0, 0), (-1, -1), self.font),
            ('FONTNAME', (0, 0), (0, -1), self.font_bold),
            ('FONTNAME', (2, 0), (2, -1), self.font_bold),
            ('FONTSIZE', (0, 0), (-1, -1), 9),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 4),
        ]))
        elements.append(header_table)
        elements.append(Spacer(1, 0.2*inch))

        elements.extend(self._build_606_entries(entries))
        elements.extend(self._build_606_summary(summary))
        elements.extend(self._build_footer())

        return self._build(elements, landscape(letter))

    def _build_606_entries(self, entries: Sequence[Report606Entry]) -> list:
        elements = []

        data = [[
            'Línea', 'Fecha', 'RNC', 'Proveedor', 'Tipo', 'NCF', 'NCF Mod.',
            'Monto', 'ITBIS', 'ITBIS Ret.', 'Forma Pago', 'Total'
        ]]
        for entry in entries:
            data.append([
                str(entry.line),
                format_date(entry.date) if entry.date else '-',
                entry.rnc,
                entry.supplier_name[:28],
                entry.doc_type,
                entry.ncf,
                entry.ncf_modified,
                format_currency(entry.base_amount),
                format_currency(entry.itbis_amount),
                format_currency(entry.itbis_retenido),
                entry.payment_method,
                format_currency(entry.total_amount),
            ])

        if not entries:
            data.append(['', 'No hay registros para el período seleccionado'] + [''] * 10)

        table = Table(data, repeatRows=1)
        style = [
            ('FONTNAME', (0, 0), (-1, -1), self.font),
            ('FONTNAME', (0, 0), (-1, 0), self.font_bold),
            ('FONTSIZE', (0, 0), (-1, -1), 7),
            ('BACKGROUND', (0, 0), (-1, 0), self.primary),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
            ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
            ('ALIGN', (7, 1), (9, -1), 'RIGHT'),
            ('ALIGN', (11, 1), (11, -1), 'RIGHT'),
            ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.Color(0.96, 0.96, 0.96)]),
        ]
        if not entries:
            style.append(('SPAN', (1, 1), (-1, 1)))
        table.setStyle(TableStyle(style))

        elements.append(table)
        elements.append(Spacer(1, 0.3*inch))
        return elements

    def _build_606_summary(self, summary: Report606Summary) -> list:
        elements = [Paragraph('Resumen', self.styles['SectionTitle'])]

        data = [
            ['Total de registros:', str(summary.total_records)],
            ['Monto facturado:', format_currency(summary.total_base_amount)],
            ['ITBIS facturado:', format_currency(summary.total_itbis_amount)],
            ['ITBIS retenido:', format_currency(summary.total_itbis_retenido)],
            ['ITBIS percibido:', format_currency(summary.total_itbis_percibido)],
            ['Retención ISR:', format_currency(summary.total_isr)],
            ['TOTAL:', format_currency(summary.total_amount)],
        ]
        table = Table(data, colWidths=[2.5*inch, 2*inch], hAlign='RIGHT')
        table.setStyle(TableStyle([
            ('FONTNAME', (0, 0), (-1, -1), self.font),
            ('FONTNAME', (0, 0), (0, -1), self.font_bold),
            ('FONTNAME', (0, -1), (-1, -1), self.font_bold),
            ('FONTSIZE', (0, 0), (-1, -1), 9),
            ('ALIGN', (1, 0), (1, -1), 'RIGHT'),
            ('LINEABOVE', (0, -1), (-1, -1), 1, self.primary),
            ('TEXTCOLOR', (0, -1), (-1, -1), self.primary),
        ]))
        elements.append(table)
        elements.append(Spacer(1, 0.3*inch))
        return elements

    # ===================== FACTURA =====================

    def generate_invoice_pdf(self, invoice: dict) -> bytes:
        """
        Factura con la plantilla del usuario.

        invoice: invoice_number, ncf, date, due_date, status, client{},
        items[], subtotal, tax_rate, tax_amount, total, notes
        """
        elements = []
        elements.extend(self._build_invoice_header(invoice))
        elements.extend(self._build_client_section(invoice.get('client') or {}))
        elements.extend(self._build_items_section(invoice))
        elements.extend(self._build_totals_section(invoice))

        if self.config.get('show_payment_info'):
            elements.extend(self._build_payment_section())

        if self.config.get('terms_and_conditions'):
            elements.append(Paragraph('<b>Términos y Condiciones:</b>', self.styles['Body']))
            elements.append(Paragraph(escape(self.config['terms_and_conditions']), self.styles['Body']))
            elements.append(Spacer(1, 0.2*inch))

        if invoice.get('notes'):
            elements.append(Paragraph(f"<b>Notas:</b> {escape(invoice['notes'])}", self.styles['Body']))
            elements.append(Spacer(1, 0.2*inch))

        if self.config.get('show_signature'):
            elements.extend(self._build_signature_section())

        if self.config.get('show_footer', True):
            elements.extend(self._build_footer(self.config.get('footer_text')))

        watermark = None
        if self.config.get('show_watermark'):
            watermark = self.config.get('watermark_text') or 'PAGADO'

        return self._build(elements, letter, watermark)

    def _build_invoice_header(self, invoice: dict) -> list:
        company = [
            Paragraph(f"<b>{escape(self.config.get('company_name') or '')}</b>", self.styles['Body']),
            Paragraph(f"RNC: {self.config.get('company_rnc') or '-'}", self.styles['Body']),
        ]
        if self.config.get('company_address'):
            company.append(Paragraph(escape(self.config['company_address']), self.styles['Body']))
        if self.config.get('company_phone'):
            company.append(Paragraph(f"Tel: {self.config['company_phone']}", self.styles['Body']))
        if self.config.get('company_email'):
            company.append(Paragraph(f"Email: {self.config['company_email']}", self.styles['Body']))

        if self.config.get('show_logo', True):
            logo = self._stored_image('logos', self.config.get('company_logo'), 2*inch, 0.9*inch)
            if logo:
                company.insert(0, logo)

        status = invoice.get('status') or 'pending'
        title = [
            Paragraph('FACTURA', self.styles['DocTitle']),
            Paragraph(f"No. {invoice.get('invoice_number', '')}", self.styles['BodyRight']),
            Paragraph(f"NCF: {invoice.get('ncf') or '-'}", self.styles['BodyRight']),
            Paragraph(f"Fecha: {format_date(invoice.get('date'))}", self.styles['BodyRight']),
            Paragraph(f"Vence: {format_date(invoice.get('due_date'))}", self.styles['BodyRight']),
            Paragraph(f"Estado: {STATUS_LABELS.get(status, status)}", self.styles['BodyRight']),
        ]

        table = Table([[company, title]], colWidths=[4.2*inch, 3.2*inch])
        table.setStyle(TableStyle([('VALIGN', (0, 0), (-1, -1), 'TOP')]))

        return [
            table,
            Spacer(1, 0.15*inch),
            HRFlowable(width="100%", thickness=2, color=self.primary),
            Spacer(1, 0.15*inch),
        ]

    def _build_client_section(self, client: dict) -> list:
        elements = [Paragraph('Cliente', self.styles['SectionTitle'])]
        data = [
            ['Nombre:', client.get('name') or '-'],
            ['RNC/Cédula:', client.get('rnc') or '-'],
        ]
        if client.get('address'):
            data.append(['Dirección:', client['address']])
        if client.get('phone'):
            data.append(['Teléfono:', client['phone']])

        table = Table(data, colWidths=[1.5*inch, 5.5*inch])
        table.setStyle(TableStyle([
            ('FONTNAME', (0, 0), (-1, -1), self.font),
            ('FONTNAME', (0, 0), (0, -1), self.font_bold),
            ('FONTSIZE', (0, 0), (-1, -1), self.font_size - 2),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 3),
        ]))
        elements.append(table)
        elements.append(Spacer(1, 0.2*inch))
        return elements

    def _build_items_section(self, invoice: dict) -> list:
        tax_rate = invoice.get('tax_rate', 0.18)
        data = [['Cantidad', 'Descripción', 'Precio Unitario', 'ITBIS', 'Total']]

        for item in invoice.get('items', []):
            amount = item.get('amount', item['quantity'] * item['price'])
            itbis = amount * tax_rate if item.get('taxable', True) else 0
            quantity = item['quantity']
            data.append([
                f"{quantity:g}",
                Paragraph(escape(item['description']), self.styles['Body']),
                format_currency(item['price']),
                format_currency(itbis),
                format_currency(amount + itbis),
            ])

        table = Table(data, colWidths=[0.8*inch, 3.2*inch, 1.2*inch, 1*inch, 1.2*inch], repeatRows=1)
        table.setStyle(TableStyle([
            ('FONTNAME', (0, 0), (-1, -1), self.font),
            ('FONTNAME', (0, 0), (-1, 0), self.font_bold),
            ('FONTSIZE', (0, 0), (-1, -1), self.font_size - 2),
            ('BACKGROUND', (0, 0), (-1, 0), self.primary),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
            ('LINEBELOW', (0, 1), (-1, -1), 0.5, colors.lightgrey),
            ('ALIGN', (2, 1), (-1, -1), 'RIGHT'),
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 6),
            ('TOPPADDING', (0, 0), (-1, -1), 6),
        ]))
        return [table, Spacer(1, 0.2*inch)]

    def _build_totals_section(self, invoice: dict) -> list:
        rate_pct = f"{invoice.get('tax_rate', 0.18) * 100:g}%"
        data = [
            ['Subtotal:', format_currency(invoice.get('subtotal'))],
            [f'ITBIS ({rate_pct}):', format_currency(invoice.get('tax_amount'))],
            ['Total:', format_currency(invoice.get('total'))],
        ]
        table = Table(data, colWidths=[1.5*inch, 1.7*inch], hAlign='RIGHT')
        table.setStyle(TableStyle([
            ('FONTNAME', (0, 0), (-1, -1), self.font),
            ('FONTNAME', (0, -1), (-1, -1), self.font_bold),
            ('FONTSIZE', (0, 0), (-1, -1), self.font_size - 1),
            ('FONTSIZE', (0, -1), (-1, -1), self.font_size + 1),
            ('TEXTCOLOR', (0, -1), (-1, -1), self.primary),
            ('ALIGN', (1, 0), (1, -1), 'RIGHT'),
            ('LINEABOVE', (0, -1), (-1, -1), 1, self.secondary),
        ]))
        return [table, Spacer(1, 0.3*inch)]

    def _build_payment_section(self) -> list:
        elements = [Paragraph('Información de Pago', self.styles['SectionTitle'])]
        data = [
            ['Banco:', self.config.get('bank_name') or '-'],
            ['Cuenta:', self.config.get('bank_account') or '-'],
        ]
        if self.config.get('payment_instructions'):
            data.append(['Instrucciones:', Paragraph(escape(self.config['payment_instructions']), self.styles['Body'])])

        table = Table(data, colWidths=[1.5*inch, 5.5*inch])
        table.setStyle(TableStyle([
            ('FONTNAME', (0, 0), (-1, -1), self.font),
            ('FONTNAME', (0, 0), (0, -1), self.font_bold),
            ('FONTSIZE', (0, 0), (-1, -1), self.font_size - 2),
            ('BOX', (0, 0), (-1, -1), 0.5, colors.lightgrey),
            ('BACKGROUND', (0, 0), (-1, -1), colors.Color(0.96, 0.96, 0.96)),
        ]))
        elements.append(table)
        elements.append(Spacer(1, 0.2*inch))
        return elements

    def _build_signature_section(self) -> list:
        elements = [Spacer(1, 0.4*inch)]

        signature = self._stored_image('logos', self.config.get('signature_image'), 1.8*inch, 0.7*inch)
        if signature:
            signature.hAlign = 'RIGHT'
            elements.append(signature)

        elements.append(HRFlowable(width="35%", thickness=1, color=colors.black, hAlign='RIGHT'))
        elements.append(Paragraph(escape(self.config.get('signature_name') or ''), self.styles['BodyRight']))
        elements.append(Paragraph(escape(self.config.get('signature_title') or ''), self.styles['BodyRight']))
        elements.append(Spacer(1, 0.2*inch))
        return elements

    def _build_footer(self, footer_text: Optional[str] = None) -> list:
        """Pie de página con la hora de generación."""
        elements = [
            HRFlowable(width="100%", thickness=1, color=colors.grey),
            Spacer(1, 0.1*inch),
        ]

        if footer_text:
            elements.append(Paragraph(escape(footer_text), self.styles['Footer']))

        timestamp = get_dominican_time().strftime('%d/%m/%Y %H:%M:%S')
        elements.append(Paragraph(
            f'Documento generado el {timestamp} (Hora República Dominicana)',
            self.styles['Footer']
        ))
        return elements
