"""Colonia lookup for the intake form"""

from vetgroom.models import Fraccionamiento


def _url(tenant):
    return f"/tenants/{tenant.id}/colonias"


def test_search_by_name_or_postal_code(api, db, tenant):
    db.add_all(
        [
            Fraccionamiento(tenant_id=tenant.id, name="Contry", postal_code="64860"),
            Fraccionamiento(tenant_id=tenant.id, name="Cumbres Elite", postal_code="64349"),
            Fraccionamiento(tenant_id=tenant.id, name="Mitras Centro", postal_code="64460", is_active=False),
        ]
    )
    db.commit()

    assert [c["name"] for c in api.get(_url(tenant)).json()] == ["Contry", "Cumbres Elite"]
    assert [c["name"] for c in api.get(_url(tenant), params={"q": "CUMB"}).json()] == ["Cumbres Elite"]
    assert [c["name"] for c in api.get(_url(tenant), params={"q": "6486"}).json()] == ["Contry"]
    assert api.get(_url(tenant), params={"q": "mitras"}).json() == []


def test_create_normalizes_name(api, tenant):
    response = api.post(_url(tenant), json={"name": "  valle   oriente ", "postalCode": "66269", "weight": 1.5})

    assert response.status_code == 201
    assert response.json()["name"] == "Valle Oriente"
    assert response.json()["weight"] == 1.5


def test_duplicate_name_conflicts(api, tenant):
    api.post(_url(tenant), json={"name": "Contry"})

    assert api.post(_url(tenant), json={"name": "CONTRY"}).status_code == 409


def test_create_validates_input(api, tenant):
    assert api.post(_url(tenant), json={"name": "Contry", "postalCode": "648"}).status_code == 422
    assert api.post(_url(tenant), json={"name": "Contry", "weight": 500}).status_code == 422


def test_staff_can_search_but_not_create(api, tenant, staff_user, login):
    login(staff_user)

    assert api.get(_url(tenant)).status_code == 200
    assert api.post(_url(tenant), json={"name": "Contry"}).status_code == 403
