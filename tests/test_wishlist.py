from storefront.models.product import Product
from storefront.models.wishlist import WishlistItem


def test_add_list_and_remove(user_client, make_product):
    lamp = make_product(name="Lamp", price="30.00", category="Home")

    response = user_client.post("/wishlist", json={"product_id": lamp.id})
    assert response.status_code == 201
    assert response.json()["items"] == [{
        "product_id": lamp.id, "name": "Lamp", "price": 30.0, "image_url": None, "category": "Home",
    }]

    assert len(user_client.get("/wishlist").json()["items"]) == 1

    response = user_client.delete(f"/wishlist/{lamp.id}")
    assert response.status_code == 200
    assert response.json()["items"] == []


def test_adding_twice_is_idempotent(user_client, make_product, db):
    lamp = make_product(name="Lamp")

    first = user_client.post("/wishlist", json={"product_id": lamp.id})
    second = user_client.post("/wishlist", json={"product_id": lamp.id})

    assert (first.status_code, second.status_code) == (201, 200)
    assert len(second.json()["items"]) == 1
    assert db.query(WishlistItem).count() == 1


def test_add_unknown_product(user_client):
    assert user_client.post("/wishlist", json={"product_id": 777}).status_code == 404


def test_add_rejects_non_integer_product(user_client):
    response = user_client.post("/wishlist", json={"product_id": "lamp"})
    assert response.status_code == 400
    assert response.json()["kind"] == "validation_error"


def test_remove_missing_entry(user_client, make_product):
    lamp = make_product()
    assert user_client.delete(f"/wishlist/{lamp.id}").status_code == 404


def test_wishlist_requires_login(client):
    assert client.get("/wishlist").status_code == 401


def test_deleted_product_leaves_wishlist(user_client, make_product, db):
    lamp = make_product(name="Lamp")
    user_client.post("/wishlist", json={"product_id": lamp.id})

    db.query(Product).filter(Product.id == lamp.id).delete()
    db.commit()

    assert user_client.get("/wishlist").json()["items"] == []
