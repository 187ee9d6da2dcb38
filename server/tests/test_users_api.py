"""HTTP tests for the /api/users routes."""

from barsocial.db import users as users_db


def create_user(client, username="a", email="a@x.com", password="p"):
    response = client.post("/api/users", json={"username": username, "email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()


class TestCreateAndRead:
    def test_create_returns_generated_id(self, client):
        user = create_user(client)

        assert user["username"] == "a"
        assert len(user["id"]) == 24
        assert "password" not in user
        assert "password_hash" not in user

    def test_password_is_stored_hashed(self, client, db):
        user = create_user(client, password="secret")
        stored = db.users.find_one({"id": user["id"]})
        assert stored["password_hash"] != "secret"
        assert stored["password_hash"].startswith("$2")

    def test_create_with_missing_fields_is_400(self, client):
        response = client.post("/api/users", json={"username": "a"})

        assert response.status_code == 400
        body = response.json()
        assert body["status"] == 400
        assert "email" in body["message"]

    def test_create_with_invalid_email_is_400(self, client):
        response = client.post("/api/users", json={"username": "a", "email": "nope", "password": "p"})
        assert response.status_code == 400

    def test_get_user_expands_fav_teams_without_persisting(self, client, db, make_user):
        user = make_user()
        db.users.update_one({"id": user["id"]}, {"$set": {"favTeams": ["t1"]}})

        response = client.get(f"/api/users/{user['id']}")

        assert response.status_code == 200
        assert response.json()["favTeams"] == [{"id": "t1"}]
        assert db.users.find_one({"id": user["id"]})["favTeams"] == ["t1"]

    def test_get_unknown_user_is_404(self, client):
        response = client.get("/api/users/64c0a6f4e5b1a2c3d4e5ffff")

        assert response.status_code == 404
        assert response.json() == {
            "message": "User not found: 64c0a6f4e5b1a2c3d4e5ffff",
            "status": 404,
        }

    def test_list_users_paginates(self, client, make_user):
        created = [make_user() for _ in range(4)]

        first = client.get("/api/users", params={"limit": 2, "skip": 0}).json()
        second = client.get("/api/users", params={"limit": 2, "skip": 2}).json()

        assert [u["id"] for u in first + second] == [u["id"] for u in created]

    def test_list_users_rejects_negative_skip(self, client):
        response = client.get("/api/users", params={"skip": -1})
        assert response.status_code == 400

    def test_search_users(self, client, make_user):
        make_user("Alice")
        make_user("bob")

        response = client.get("/api/users/search", params={"keyword": "ali"})

        assert response.status_code == 200
        assert [u["username"] for u in response.json()] == ["Alice"]


class TestOwnerRoutes:
    def test_update_requires_token(self, client, make_user):
        user = make_user()
        response = client.put(f"/api/users/{user['id']}", json={"username": "x"})

        assert response.status_code == 401
        assert response.json()["status"] == 401

    def test_update_with_bad_token_is_401(self, client, make_user):
        user = make_user()
        response = client.put(
            f"/api/users/{user['id']}",
            json={"username": "x"},
            headers={"Authorization": "Bearer not-a-jwt"},
        )
        assert response.status_code == 401

    def test_update_other_user_is_403(self, client, make_user, auth):
        owner, intruder = make_user(), make_user()
        response = client.put(f"/api/users/{owner['id']}", json={"username": "x"}, headers=auth(intruder["id"]))

        assert response.status_code == 403
        assert users_db.get_user(owner["id"])["username"] != "x"

    def test_update_own_username(self, client, make_user, auth):
        user = make_user("old")
        response = client.put(f"/api/users/{user['id']}", json={"username": "new"}, headers=auth(user["id"]))

        assert response.status_code == 200
        assert response.json()["username"] == "new"

    def test_update_with_empty_body_keeps_user(self, client, make_user, auth):
        user = make_user("old")
        response = client.put(f"/api/users/{user['id']}", json={}, headers=auth(user["id"]))

        assert response.status_code == 200
        assert response.json()["username"] == "old"

    def test_update_rejects_empty_username(self, client, make_user, auth):
        user = make_user("old")
        response = client.put(f"/api/users/{user['id']}", json={"username": ""}, headers=auth(user["id"]))

        assert response.status_code == 400

    def test_update_unknown_user_is_404(self, client, auth):
        missing = "64c0a6f4e5b1a2c3d4e5ffff"
        response = client.put(f"/api/users/{missing}", json={"username": "x"}, headers=auth(missing))
        assert response.status_code == 404

    def test_delete_user_cleans_back_references(self, client, make_user, make_bar, auth):
        a, b = make_user(), make_user()
        bar = make_bar()
        client.put(f"/api/users/{a['id']}/following", json={"operation": "add", "user": b["id"]}, headers=auth(a["id"]))
        client.put(f"/api/users/{a['id']}/followingBars", json={"operation": "add", "barId": bar["id"]}, headers=auth(a["id"]))

        response = client.delete(f"/api/users/{a['id']}", headers=auth(a["id"]))

        assert response.status_code == 200
        assert response.json()["id"] == a["id"]
        assert client.get(f"/api/users/{a['id']}").status_code == 404
        assert users_db.get_user(b["id"])["followers"] == []
        assert client.get(f"/api/bars/{bar['id']}").json()["followers"] == []


class TestFavTeams:
    def test_add_then_remove_fav_team(self, client, auth):
        user = create_user(client)
        headers = auth(user["id"])

        added = client.put(f"/api/users/{user['id']}/favTeam", json={"operation": "add", "favTeamId": "team-9"}, headers=headers)
        assert added.status_code == 200
        assert added.json()["favTeams"] == ["team-9"]

        removed = client.put(f"/api/users/{user['id']}/favTeam", json={"operation": "remove", "favTeamId": "team-9"}, headers=headers)
        assert removed.status_code == 200
        assert removed.json()["favTeams"] == []

    def test_unknown_operation_is_400(self, client, make_user, auth):
        user = make_user()
        response = client.put(f"/api/users/{user['id']}/favTeam", json={"operation": "toggle", "favTeamId": "t"}, headers=auth(user["id"]))
        assert response.status_code == 400

    def test_storage_failure_is_wrapped(self, client, make_user, auth, monkeypatch):
        from barsocial.db import relationships

        def broken(user_id, team_id):
            raise RuntimeError("connection reset")

        monkeypatch.setattr(relationships, "add_fav_team", broken)
        user = make_user()

        response = client.put(f"/api/users/{user['id']}/favTeam", json={"operation": "add", "favTeamId": "t"}, headers=auth(user["id"]))

        assert response.status_code == 400
        assert response.json() == {"message": "Error adding the favorite team", "status": 400}


class TestFollowing:
    def test_follow_and_unfollow_user(self, client, make_user, auth):
        a, b = make_user("a"), make_user("b")
        headers = auth(a["id"])

        followed = client.put(f"/api/users/{a['id']}/following", json={"operation": "add", "user": b["id"]}, headers=headers)
        assert followed.status_code == 200
        assert followed.json()["following"] == [b["id"]]
        assert [u["username"] for u in client.get(f"/api/users/{b['id']}/followers").json()] == ["a"]
        assert [u["username"] for u in client.get(f"/api/users/{a['id']}/following").json()] == ["b"]

        unfollowed = client.put(f"/api/users/{a['id']}/following", json={"operation": "remove", "user": b["id"]}, headers=headers)
        assert unfollowed.json()["following"] == []
        assert client.get(f"/api/users/{b['id']}/followers").json() == []

    def test_self_follow_is_400(self, client, make_user, auth):
        a = make_user()
        response = client.put(f"/api/users/{a['id']}/following", json={"operation": "add", "user": a["id"]}, headers=auth(a["id"]))

        assert response.status_code == 400
        assert response.json()["message"] == "A user cannot follow itself"

    def test_follow_unknown_user_is_404(self, client, make_user, auth):
        a = make_user()
        response = client.put(
            f"/api/users/{a['id']}/following",
            json={"operation": "add", "user": "64c0a6f4e5b1a2c3d4e5ffff"},
            headers=auth(a["id"]),
        )
        assert response.status_code == 404

    def test_follow_on_behalf_of_another_user_is_403(self, client, make_user, auth):
        a, b = make_user(), make_user()
        response = client.put(f"/api/users/{a['id']}/following", json={"operation": "add", "user": b["id"]}, headers=auth(b["id"]))

        assert response.status_code == 403
        assert users_db.get_user(b["id"])["followers"] == []

    def test_follow_and_unfollow_bar(self, client, make_user, make_bar, auth):
        user, bar = make_user(), make_bar("Pub")
        headers = auth(user["id"])

        followed = client.put(f"/api/users/{user['id']}/followingBars", json={"operation": "add", "barId": bar["id"]}, headers=headers)
        assert followed.status_code == 200
        assert followed.json()["followingBars"] == [bar["id"]]
        assert client.get(f"/api/bars/{bar['id']}").json()["followers"] == [user["id"]]
        assert [b["name"] for b in client.get(f"/api/users/{user['id']}/followingBars").json()] == ["Pub"]

        unfollowed = client.put(f"/api/users/{user['id']}/followingBars", json={"operation": "remove", "barId": bar["id"]}, headers=headers)
        assert unfollowed.json()["followingBars"] == []
        assert client.get(f"/api/bars/{bar['id']}").json()["followers"] == []

    def test_follow_unknown_bar_is_404(self, client, make_user, auth):
        user = make_user()
        response = client.put(
            f"/api/users/{user['id']}/followingBars",
            json={"operation": "add", "barId": "64c0a6f4e5b1a2c3d4e5ffff"},
            headers=auth(user["id"]),
        )
        assert response.status_code == 404
        assert response.json()["message"].startswith("Bar not found")
