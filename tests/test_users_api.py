import uuid

from conftest import API, order_payload, token_for


class TestProfile:
    def test_first_request_provisions_vendedor(self, client):
        user_id = uuid.uuid4()
        headers = {"Authorization": f"Bearer {token_for(user_id, 'nueva@example.com')}"}

        r = client.get(f"{API}/users/me", headers=headers)

        assert r.status_code == 200
        body = r.json()
        assert body["id"] == str(user_id)
        assert body["role"] == "vendedor"
        assert body["name"] == "nueva"

    def test_invalid_token(self, client):
        r = client.get(f"{API}/users/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert r.status_code == 401

    def test_missing_token(self, client):
        assert client.get(f"{API}/users/me").status_code == 401

    def test_update_name(self, client, vendedor):
        _, headers = vendedor
        r = client.patch(f"{API}/users/me", json={"name": "  Camila  "}, headers=headers)
        assert r.status_code == 200
        assert r.json()["name"] == "Camila"

    def test_role_is_not_self_editable(self, client, vendedor):
        _, headers = vendedor
        r = client.patch(f"{API}/users/me", json={"role": "admin"}, headers=headers)
        assert r.status_code == 422


class TestAdmin:
    def test_non_admin_is_forbidden(self, client, facturador):
        _, headers = facturador
        r = client.get(f"{API}/users", headers=headers)
        assert r.status_code == 403
        assert r.json()["detail"]["kind"] == "forbidden"

    def test_list_with_role_filter(self, client, admin, make_user):
        _, headers = admin
        make_user("vendedor")
        make_user("vendedor")
        make_user("facturador")

        everyone = client.get(f"{API}/users", headers=headers).json()
        vendedores = client.get(f"{API}/users", params={"role": "vendedor"}, headers=headers).json()

        assert len(everyone) == 4
        assert len(vendedores) == 2

    def test_stats(self, client, admin, make_user):
        _, headers = admin
        make_user("vendedor")
        make_user("facturador")
        make_user("facturador")

        r = client.get(f"{API}/users/stats", headers=headers)

        assert r.json() == {"total": 4, "admins": 1, "facturadores": 2, "vendedores": 1}

    def test_change_role(self, client, admin, vendedor):
        _, headers = admin
        user, _ = vendedor
        r = client.patch(f"{API}/users/{user.id}/role", json={"role": "facturador"}, headers=headers)
        assert r.status_code == 200
        assert r.json()["role"] == "facturador"

    def test_unknown_role(self, client, admin, vendedor):
        _, headers = admin
        user, _ = vendedor
        r = client.patch(f"{API}/users/{user.id}/role", json={"role": "user"}, headers=headers)
        assert r.status_code == 422

    def test_last_admin_cannot_be_demoted(self, client, admin):
        user, headers = admin
        r = client.patch(f"{API}/users/{user.id}/role", json={"role": "vendedor"}, headers=headers)
        assert r.status_code == 400
        assert r.json()["detail"]["kind"] == "validation_error"

    def test_delete_user(self, client, admin, vendedor):
        _, headers = admin
        user, _ = vendedor
        assert client.delete(f"{API}/users/{user.id}", headers=headers).status_code == 204
        assert client.get(f"{API}/users/{user.id}", headers=headers).status_code == 404

    def test_user_with_orders_is_kept(self, client, admin, vendedor, customer, products):
        _, headers = admin
        user, vend_headers = vendedor
        client.post(
            f"{API}/orders",
            json=order_payload(customer, [(products[0], 1)]),
            headers=vend_headers,
        )

        r = client.delete(f"{API}/users/{user.id}", headers=headers)

        assert r.status_code == 400
        assert client.get(f"{API}/users/{user.id}", headers=headers).status_code == 200
