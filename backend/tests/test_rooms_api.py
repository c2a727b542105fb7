"""HTTP tests for the rooms API"""
from helpers import HOST, auth


def test_create_room_makes_creator_member(client):
    response = client.post("/api/rooms", json={"name": "Basement", "description": "After hours"}, headers=auth(HOST))
    assert response.status_code == 201
    room = response.json()
    assert room["created_by_id"] == HOST
    assert room["is_private"] is False

    detail = client.get(f"/api/rooms/{room['id']}", headers=auth("user-a")).json()
    assert detail["member_count"] == 1
    assert detail["active_session_id"] is None


def test_private_room_hidden_from_non_members(client):
    room = client.post("/api/rooms", json={"name": "VIP", "is_private": True}, headers=auth(HOST)).json()

    assert client.get(f"/api/rooms/{room['id']}", headers=auth("user-a")).status_code == 403
    assert client.get(f"/api/rooms/{room['id']}/members", headers=auth("user-a")).status_code == 403
    assert client.get(f"/api/rooms/{room['id']}", headers=auth(HOST)).status_code == 200


def test_missing_room(client):
    assert client.get("/api/rooms/missing", headers=auth(HOST)).status_code == 404
    assert client.get("/api/rooms/missing/members", headers=auth(HOST)).status_code == 404


def test_create_room_requires_name(client):
    assert client.post("/api/rooms", json={"name": ""}, headers=auth(HOST)).status_code == 422
