"""Public catalog and admin category management."""

from __future__ import annotations

from storefront.extensions import db
from storefront.model import Category

from .conftest import auth_headers


def test_product_listing_hides_inactive(client, make_product):
    make_product("Visible", stock=1)
    hidden = make_product("Hidden", is_active=False)

    r = client.get("/api/products")
    names = [p["name"] for p in r.get_json()["data"]["products"]]
    assert names == ["Visible"]
    assert client.get(f"/api/products/{hidden.id}").status_code == 404


def test_product_search_and_category_filter(client, make_product):
    tools = Category(name="Tools")
    db.session.add(tools)
    db.session.commit()
    make_product("Hammer", category_id=tools.id)
    make_product("Mug")

    r = client.get("/api/products", query_string={"search": "ham"})
    assert [p["name"] for p in r.get_json()["data"]["products"]] == ["Hammer"]

    for category in (str(tools.id), "tools"):
        r = client.get("/api/products", query_string={"category": category})
        assert [p["name"] for p in r.get_json()["data"]["products"]] == ["Hammer"]


def test_product_price_is_a_string(client, make_product):
    p = make_product("Pen", "0.10")
    r = client.get(f"/api/products/{p.id}")
    assert r.get_json()["data"]["product"]["price"] == "0.10"


def test_category_crud(client, admin, user, make_product):
    h = auth_headers(admin)
    assert client.post("/api/categories", json={"name": "Books"}, headers=auth_headers(user)).status_code == 403

    r = client.post("/api/categories", json={"name": "Books"}, headers=h)
    assert r.status_code == 201
    cid = r.get_json()["data"]["category"]["id"]
    assert client.post("/api/categories", json={"name": "books"}, headers=h).status_code == 409

    make_product("Novel", category_id=cid)
    listed = client.get("/api/categories").get_json()["data"]["categories"]
    assert listed[0]["product_count"] == 1

    detail = client.get(f"/api/categories/{cid}").get_json()["data"]["category"]
    assert [p["name"] for p in detail["products"]] == ["Novel"]

    assert client.delete(f"/api/categories/{cid}", headers=h).status_code == 409


def test_admin_listing_includes_inactive_categories(client, admin, user, make_product):
    h = auth_headers(admin)
    db.session.add_all([
        Category(name="Garden", description="Outdoor tools"),
        Category(name="Archive", description="old stock", is_active=False),
        Category(name="Kitchen"),
    ])
    db.session.commit()
    make_product("Rake", category_id=Category.query.filter_by(name="Garden").one().id)

    assert client.get("/api/categories/admin/all", headers=auth_headers(user)).status_code == 403

    r = client.get("/api/categories/admin/all", headers=h)
    data = r.get_json()["data"]
    assert {c["name"] for c in data["categories"]} == {"Garden", "Archive", "Kitchen"}
    assert data["pagination"]["total"] == 3
    counts = {c["name"]: c["product_count"] for c in data["categories"]}
    assert counts == {"Garden": 1, "Archive": 0, "Kitchen": 0}

    r = client.get("/api/categories/admin/all", query_string={"search": "OLD"}, headers=h)
    assert [c["name"] for c in r.get_json()["data"]["categories"]] == ["Archive"]

    r = client.get("/api/categories/admin/all", query_string={"limit": 2, "page": 2}, headers=h)
    data = r.get_json()["data"]
    assert len(data["categories"]) == 1
    assert data["pagination"]["pages"] == 2


def test_deactivated_category_can_be_found_and_restored(client, admin):
    h = auth_headers(admin)
    cid = client.post("/api/categories", json={"name": "Toys"}, headers=h).get_json()["data"]["category"]["id"]

    r = client.put(f"/api/categories/{cid}", json={"is_active": "false"}, headers=h)
    assert r.get_json()["data"]["category"]["is_active"] is False
    assert client.get(f"/api/categories/{cid}").status_code == 404

    listed = client.get("/api/categories/admin/all", headers=h).get_json()["data"]["categories"]
    assert [c["id"] for c in listed] == [cid]

    client.put(f"/api/categories/{cid}", json={"is_active": True}, headers=h)
    assert client.get(f"/api/categories/{cid}").status_code == 200

    r = client.put(f"/api/categories/{cid}", json={"is_active": "maybe"}, headers=h)
    assert r.status_code == 400
    assert r.get_json()["data"]["field"] == "is_active"


def test_delete_category_with_only_inactive_products(client, admin, make_product):
    old = Category(name="Old")
    db.session.add(old)
    db.session.commit()
    make_product("Discontinued", category_id=old.id, is_active=False)

    r = client.delete(f"/api/categories/{old.id}", headers=auth_headers(admin))

    assert r.status_code == 200
    db.session.expire_all()
    assert db.session.get(Category, old.id).is_active is False
    assert [c["name"] for c in client.get("/api/categories").get_json()["data"]["categories"]] == []
