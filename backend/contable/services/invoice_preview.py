"""
Vista previa HTML de la plantilla de factura.
Recibe la configuración en el formato del editor (camelCase) y rellena
la factura con datos de ejemplo.
"""
from datetime import date
from html import escape
from typing import Optional


def _text(settings: dict, key: str, default) -> str:
    value = settings.get(key)
    return escape(str(value if value not in (None, "") else default))


def _add_one_year(today: date) -> date:
    try:
        return today.replace(year=today.year + 1)
    except ValueError:
        # 29 de febrero
        return today.replace(year=today.year + 1, day=28)


def generate_invoice_preview(settings: dict, today: Optional[date] = None) -> str:
    """HTML completo de la vista previa."""
    today = today or date.today()
    font_family = _text(settings, 'fontFamily', 'Arial')
    font_size = _text(settings, 'fontSize', 12)
    primary = _text(settings, 'primaryColor', '#3b82f6')
    secondary = _text(settings, 'secondaryColor', '#6b7280')

    watermark = ""
    if settings.get('showWatermark'):
        watermark = f'<div class="watermark">{_text(settings, "watermarkText", "PAGADO")}</div>'

    logo = ""
    if settings.get('showLogo') and settings.get('companyLogo'):
        logo = f'<img src="{escape(str(settings["companyLogo"]))}" alt="Logo" class="logo">'

    payment_info = ""
    if settings.get('showPaymentInfo'):
        payment_info = f"""
        <div class="payment-info">
          <h3>Información de Pago:</h3>
          <p><strong>Banco:</strong> {_text(settings, 'bankName', 'Banco Ejemplo')}</p>
          <p><strong>Cuenta:</strong> {_text(settings, 'bankAccount', '000-000000-0')}</p>
          <p><strong>Instrucciones:</strong> {_text(settings, 'paymentInstructions', 'Favor realizar el pago dentro de los próximos 30 días.')}</p>
        </div>"""

    signature = ""
    if settings.get('showSignature'):
        signature_image = ""
        if settings.get('signatureImage'):
            signature_image = f'<img src="{escape(str(settings["signatureImage"]))}" alt="Firma">'
        signature = f"""
        <div class="signature">
          {signature_image}
          <p>{_text(settings, 'signatureName', 'Nombre')}</p>
          <p>{_text(settings, 'signatureTitle', 'Cargo')}</p>
        </div>"""

    footer = ""
    if settings.get('showFooter'):
        footer = f"""
        <div class="footer">
          <p>{_text(settings, 'footerText', 'Gracias por su preferencia')}</p>
        </div>"""

    return f"""<!DOCTYPE html>
<html lang="es">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Vista Previa de Factura</title>
  <style>
    body {{
      font-family: {font_family}, sans-serif;
      font-size: {font_size}pt;
      color: #333;
      margin: 0;
      padding: 20px;
      background-color: #f9f9f9;
    }}
    .invoice-container {{
      max-width: 800px;
      margin: 0 auto;
      background-color: #fff;
      padding: 30px;
      box-shadow: 0 0 10px rgba(0, 0, 0, 0.1);
      position: relative;
    }}
    .header {{ display: flex; justify-content: space-between; margin-bottom: 30px; }}
    .company-info {{ flex: 1; }}
    .logo {{ max-width: 200px; max-height: 80px; }}
    .invoice-title {{ text-align: right; color: {primary}; }}
    .invoice-details {{ margin-bottom: 20px; border: 1px solid #ddd; padding: 10px; background-color: #f5f5f5; }}
    .client-info {{ margin-bottom: 20px; }}
    table {{ width: 100%; border-collapse: collapse; margin-bottom: 20px; }}
    th {{ background-color: {primary}; color: white; padding: 10px; text-align: left; }}
    td {{ padding: 10px; border-bottom: 1px solid #ddd; }}
    .totals {{ margin-left: auto; width: 300px; }}
    .totals td {{ padding: 5px; }}
    .grand-total {{ font-weight: bold; font-size: 1.2em; color: {primary}; }}
    .footer {{ margin-top: 30px; text-align: center; font-size: 0.9em; color: #666; border-top: 1px solid #ddd; padding-top: 10px; }}
    .signature {{ margin-top: 40px; text-align: right; }}
    .signature img {{ max-width: 150px; max-height: 60px; }}
    .watermark {{
      position: absolute;
      top: 50%;
      left: 50%;
      transform: translate(-50%, -50%) rotate(-45deg);
      font-size: 72px;
      opacity: 0.1;
      color: {secondary};
      pointer-events: none;
      z-index: 1;
    }}
    .payment-info {{ margin-top: 20px; padding: 10px; background-color: #f5f5f5; border: 1px solid #ddd; }}
    .terms {{ margin-top: 20px; font-size: 0.9em; }}
  </style>
</head>
<body>
  <div class="invoice-container">
    {watermark}
    <div class="header">
      <div class="company-info">
        {logo}
        <h2>{_text(settings, 'companyName', 'Mi Empresa')}</h2>
        <p>RNC: {_text(settings, 'companyRNC', '000000000')}</p>
        <p>{_text(settings, 'companyAddress', 'Dirección de la empresa')}</p>
        <p>Tel: {_text(settings, 'companyPhone', '(000) 000-0000')}</p>
        <p>Email: {_text(settings, 'companyEmail', 'info@empresa.com')}</p>
      </div>
      <div class="invoice-title">
        <h1>FACTURA</h1>
        <p>No. F-00001</p>
        <p>Fecha: {today.strftime('%d/%m/%Y')}</p>
      </div>
    </div>

    <div class="invoice-details">
      <p><strong>NCF:</strong> B0100000001</p>
      <p><strong>Válida hasta:</strong> {_add_one_year(today).strftime('%d/%m/%Y')}</p>
    </div>

    <div class="client-info">
      <h3>Cliente:</h3>
      <p><strong>Nombre:</strong> Cliente Ejemplo</p>
      <p><strong>RNC/Cédula:</strong> 000-0000000-0</p>
      <p><strong>Dirección:</strong> Calle Cliente #123, Ciudad</p>
      <p><strong>Teléfono:</strong> (000) 000-0000</p>
    </div>

    <table>
      <thead>
        <tr>
          <th>Cantidad</th>
          <th>Descripción</th>
          <th>Precio Unitario</th>
          <th>ITBIS</th>
          <th>Total</th>
        </tr>
      </thead>
      <tbody>
        <tr>
          <td>1</td>
          <td>Producto o servicio de ejemplo 1</td>
          <td>RD$ 1,000.00</td>
          <td>RD$ 180.00</td>
          <td>RD$ 1,180.00</td>
        </tr>
        <tr>
          <td>2</td>
          <td>Producto o servicio de ejemplo 2</td>
          <td>RD$ 500.00</td>
          <td>RD$ 180.00</td>
          <td>RD$ 1,180.00</td>
        </tr>
      </tbody>
    </table>

    <div class="totals">
      <table>
        <tr><td>Subtotal:</td><td>RD$ 2,000.00</td></tr>
        <tr><td>ITBIS (18%):</td><td>RD$ 360.00</td></tr>
        <tr class="grand-total"><td>Total:</td><td>RD$ 2,360.00</td></tr>
      </table>
    </div>
    {payment_info}
    <div class="terms">
      <p><strong>Términos y Condiciones:</strong></p>
      <p>{_text(settings, 'termsAndConditions', 'Todos los precios incluyen ITBIS. Pago a 30 días.')}</p>
    </div>
    {signature}
    {footer}
  </div>
</body>
</html>
"""
