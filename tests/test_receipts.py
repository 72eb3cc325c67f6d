"""Receipt templates and HTML rendering"""

from decimal import Decimal

from vetgroom.domain.receipts.renderer import compute_totals, format_money, render_receipt
from vetgroom.domain.receipts.schemas import ReceiptConfig, ReceiptLine
from vetgroom.models import Tenant, UserTenant


def _url(tenant, path=""):
    return f"/tenants/{tenant.id}/receipt-templates{path}"


def test_totals_use_two_decimal_places():
    items = [
        ReceiptLine(description="Baño", quantity=2, unit_price=199.995),
        ReceiptLine(description="Corte de uñas", quantity=1, unit_price=80),
    ]

    totals = compute_totals(items, ReceiptConfig())

    assert totals["subtotal"] == Decimal("480.00")
    assert totals["tax"] == Decimal("76.80")
    assert totals["total"] == Decimal("556.80")


def test_tax_can_be_hidden():
    totals = compute_totals([ReceiptLine(description="Consulta", unit_price=500)], ReceiptConfig(show_tax=False))

    assert totals["tax"] == Decimal("0.00")
    assert totals["total"] == Decimal("500.00")


def test_format_money():
    assert format_money(Decimal("1234.5"), "MXN") == "$1,234.50 MXN"


def test_render_escapes_every_value():
    html = render_receipt(
        ReceiptConfig(header_text="<b>Promo</b>"),
        [ReceiptLine(description="<script>alert(1)</script>", unit_price=100)],
        business_name="Perros & Gatos",
        client_name='Ana "la jefa"',
        pet_name="Rocky",
        folio="A-000001",
    )

    assert "<script>" not in html
    assert "&lt;script&gt;" in html
    assert "Perros &amp; Gatos" in html
    assert "&lt;b&gt;Promo&lt;/b&gt;" in html
    assert "Ana &quot;la jefa&quot;" in html
    assert "IVA (16%)" in html
    assert "$116.00 MXN" in html


def test_render_respects_visibility_flags():
    html = render_receipt(
        ReceiptConfig(show_client=False, show_staff=True, paper_width="58mm"),
        [ReceiptLine(description="Consulta", unit_price=300)],
        business_name="Clínica",
        client_name="Oculto",
        staff_name="Dra. Ana",
    )

    assert "Oculto" not in html
    assert "Dra. Ana" in html
    assert "width: 58mm" in html


def test_template_crud_bumps_version(api, tenant):
    created = api.post(
        _url(tenant),
        json={"name": "Recibo estándar", "config": {"accent_color": "#ff0000", "currency": "mxn"}},
    )
    assert created.status_code == 201
    template = created.json()
    assert template["version"] == 1
    assert template["tenantId"] == tenant.id
    assert template["config"]["accent_color"] == "#FF0000"
    assert template["config"]["currency"] == "MXN"

    updated = api.patch(_url(tenant, f"/{template['id']}"), json={"name": "Recibo térmico"})
    assert updated.json()["version"] == 2
    assert updated.json()["name"] == "Recibo térmico"

    assert api.delete(_url(tenant, f"/{template['id']}")).status_code == 200
    assert api.get(_url(tenant, f"/{template['id']}")).status_code == 404


def test_invalid_config_is_rejected(api, tenant):
    assert api.post(_url(tenant), json={"name": "X", "config": {"accent_color": "red"}}).status_code == 422
    assert api.post(_url(tenant), json={"name": "X", "config": {"tax_rate": 1.5}}).status_code == 422
    assert api.post(_url(tenant), json={"name": "X", "config": {"paper_width": "letter"}}).status_code == 422


def test_company_wide_templates_are_shared_with_sibling_tenants(api, db, tenant, admin_user):
    sibling = Tenant(company_id=tenant.company_id, name="Clínica Norte", subdomain="norte")
    db.add(sibling)
    db.flush()
    db.add(UserTenant(user_id=admin_user.id, tenant_id=sibling.id, role="admin"))
    db.commit()

    api.post(_url(tenant), json={"name": "Solo centro"})
    api.post(_url(tenant), json={"name": "Toda la empresa", "companyWide": True})

    names = [t["name"] for t in api.get(_url(sibling)).json()]
    assert names == ["Toda la empresa"]


def test_render_endpoint_returns_html(api, tenant):
    template = api.post(_url(tenant), json={"name": "Recibo"}).json()

    response = api.post(
        _url(tenant, f"/{template['id']}/render"),
        json={"client_name": "Laura", "items": [{"description": "Baño", "quantity": 1, "unit_price": 400}]},
    )

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "Clínica Centro" in response.text
    assert "$464.00 MXN" in response.text


def test_render_needs_at_least_one_line(api, tenant):
    template = api.post(_url(tenant), json={"name": "Recibo"}).json()

    response = api.post(_url(tenant, f"/{template['id']}/render"), json={"items": []})

    assert response.status_code == 422


def test_appointment_receipt(api, tenant, booking_day, make_appointment, grooming_service):
    appointment = make_appointment(booking_day, "10:00", 60, service_id=grooming_service.id)
    template = api.post(_url(tenant), json={"name": "Recibo", "config": {"show_tax": False}}).json()

    response = api.get(_url(tenant, f"/{template['id']}/appointments/{appointment.id}"))

    assert response.status_code == 200
    assert f"A-{appointment.id:06d}" in response.text
    assert "Baño y Corte" in response.text
    assert "Canela" in response.text
    assert "$450.00 MXN" in response.text
    assert "IVA" not in response.text
