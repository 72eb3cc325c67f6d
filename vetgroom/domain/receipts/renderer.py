"""
Receipt HTML rendering.

Plain f-string HTML sized for thermal printers (58mm / 80mm) or A4. Every
interpolated value goes through sanitize_string; money is Decimal with two
places.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from ...utils.sanitization import sanitize_string
from .schemas import ReceiptConfig, ReceiptLine

CENTS = Decimal("0.01")

PAPER_WIDTHS = {"58mm": "58mm", "80mm": "80mm", "a4": "210mm"}

THEME = {
    "text_primary": "#0f172a",
    "text_muted": "#64748b",
    "border": "#e2e8f0",
}


def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def format_money(amount: Decimal, currency: str) -> str:
    return f"${amount:,.2f} {sanitize_string(currency)}"


def compute_totals(items: list[ReceiptLine], config: ReceiptConfig) -> dict[str, Decimal]:
    subtotal = sum((to_money(i.unit_price) * i.quantity for i in items), Decimal("0"))
    subtotal = subtotal.quantize(CENTS, rounding=ROUND_HALF_UP)
    tax = Decimal("0.00")
    if config.show_tax:
        tax = (subtotal * Decimal(str(config.tax_rate))).quantize(CENTS, rounding=ROUND_HALF_UP)
    return {"subtotal": subtotal, "tax": tax, "total": subtotal + tax}


def _meta_row(label: str, value: Optional[str]) -> str:
    if not value:
        return ""
    return f'<tr><td class="label">{sanitize_string(label)}</td><td>{sanitize_string(value)}</td></tr>'


def render_receipt(
    config: ReceiptConfig,
    items: list[ReceiptLine],
    business_name: str,
    client_name: Optional[str] = None,
    pet_name: Optional[str] = None,
    staff_name: Optional[str] = None,
    date: Optional[str] = None,
    folio: Optional[str] = None,
    payment_method: Optional[str] = None,
) -> str:
    totals = compute_totals(items, config)
    accent = sanitize_string(config.accent_color)
    width = PAPER_WIDTHS[config.paper_width]

    logo = ""
    if config.logo_url:
        logo = f'<img class="logo" src="{sanitize_string(config.logo_url)}" alt="logo">'
    header = f'<p class="header-text">{sanitize_string(config.header_text)}</p>' if config.header_text else ""
    footer = f'<p class="footer">{sanitize_string(config.footer_text)}</p>' if config.footer_text else ""

    meta = "".join(
        [
            _meta_row("Folio", folio),
            _meta_row("Fecha", date),
            _meta_row("Cliente", client_name) if config.show_client else "",
            _meta_row("Mascota", pet_name) if config.show_pet else "",
            _meta_row("Atendió", staff_name) if config.show_staff else "",
            _meta_row("Pago", payment_method),
        ]
    )

    lines = "".join(
        f"<tr><td>{i.quantity} × {sanitize_string(i.description)}</td>"
        f'<td class="amount">{format_money(to_money(i.unit_price) * i.quantity, config.currency)}</td></tr>'
        for i in items
    )

    tax_row = ""
    if config.show_tax:
        rate = Decimal(str(config.tax_rate)) * 100
        tax_row = (
            f"<tr><td>IVA ({rate.normalize():f}%)</td>"
            f'<td class="amount">{format_money(totals["tax"], config.currency)}</td></tr>'
        )

    return f"""<!DOCTYPE html>
<html lang="es">
<head>
<meta charset="utf-8">
<title>Recibo {sanitize_string(folio)}</title>
<style>
  body {{ font-family: 'Courier New', monospace; color: {THEME['text_primary']}; margin: 0; }}
  .receipt {{ width: {width}; margin: 0 auto; padding: 8px; box-sizing: border-box; }}
  .logo {{ display: block; max-width: 60%; margin: 0 auto 8px; }}
  h1 {{ color: {accent}; font-size: 16px; text-align: center; margin: 4px 0; }}
  .header-text, .footer {{ text-align: center; font-size: 11px; color: {THEME['text_muted']}; }}
  table {{ width: 100%; border-collapse: collapse; font-size: 12px; }}
  .meta td.label {{ color: {THEME['text_muted']}; padding-right: 6px; }}
  .lines {{ border-top: 1px dashed {THEME['border']}; margin-top: 6px; }}
  .amount {{ text-align: right; white-space: nowrap; }}
  .total td {{ font-weight: bold; border-top: 1px solid {accent}; }}
</style>
</head>
<body>
<div class="receipt">
  {logo}
  <h1>{sanitize_string(business_name)}</h1>
  {header}
  <table class="meta">{meta}</table>
  <table class="lines">{lines}</table>
  <table class="totals">
    <tr><td>Subtotal</td><td class="amount">{format_money(totals['subtotal'], config.currency)}</td></tr>
    {tax_row}
    <tr class="total"><td>Total</td><td class="amount">{format_money(totals['total'], config.currency)}</td></tr>
  </table>
  {footer}
</div>
</body>
</html>"""
