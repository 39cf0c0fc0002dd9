"""
HTTP tests for comments, nested and shallow.
"""

import pytest

from blogapi.auth.capabilities import Action, owner_only
from blogapi.core.models import EntityKind

from conftest import register


def _post(client, headers, title="Hello"):
    response = client.post("/api/posts", json={"title": title, "body": "World"}, headers=headers)
    return response.json()["data"]


def _comment(client, headers, post_id, body="Nice!"):
    response = client.post(f"/api/posts/{post_id}/comments", json={"body": body}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


# =============================================================================
# Nested routes
# =============================================================================


class TestNestedComments:
    def test_post_with_comment_scenario(self, client):
        token = register(client, "Alice", "alice@example.com")["authorization"]["token"]
        headers = {"Authorization": f"Bearer {token}"}
        
        post = _post(client, headers)
        comment = _comment(client, headers, post["id"])
        
        assert comment["post_id"] == post["id"]
        shown = client.get(f"/api/posts/{post['id']}", headers=headers).json()["data"]
        assert shown["comments"] == [comment]

    def test_list(self, client, alice):
        _, headers = alice
        first, second = _post(client, headers), _post(client, headers, title="Other")
        _comment(client, headers, first["id"], body="a")
        _comment(client, headers, second["id"], body="b")
        
        response = client.get(f"/api/posts/{first['id']}/comments", headers=headers)
        
        assert response.status_code == 200
        assert [c["body"] for c in response.json()["data"]] == ["a"]

    def test_list_for_missing_post(self, client, alice):
        _, headers = alice
        
        response = client.get("/api/posts/999/comments", headers=headers)
        
        assert response.status_code == 404
        assert response.json() == {"message": "Post 999 not found"}

    def test_create_on_missing_post(self, client, alice):
        _, headers = alice
        
        response = client.post("/api/posts/999/comments", json={"body": "Hi"}, headers=headers)
        
        assert response.status_code == 404

    def test_anyone_can_comment(self, client, alice, bob):
        _, headers = alice
        user, other = bob
        post = _post(client, headers)
        
        comment = _comment(client, other, post["id"])
        
        assert comment["user_id"] == user["id"]

    def test_create_requires_body(self, client, alice):
        _, headers = alice
        post = _post(client, headers)
        
        response = client.post(f"/api/posts/{post['id']}/comments", json={}, headers=headers)
        
        assert response.status_code == 422
        assert response.json()["errors"] == {"body": ["The body field is required."]}

    def test_show_scoped(self, client, alice):
        _, headers = alice
        post = _post(client, headers)
        comment = _comment(client, headers, post["id"])
        
        response = client.get(f"/api/posts/{post['id']}/comments/{comment['id']}", headers=headers)
        
        assert response.status_code == 200
        assert response.json()["data"] == comment

    def test_wrong_post_is_not_found(self, client, alice, bob):
        _, headers = alice
        _, other = bob
        first, second = _post(client, headers), _post(client, headers, title="Other")
        comment = _comment(client, headers, first["id"])
        
        url = f"/api/posts/{second['id']}/comments/{comment['id']}"
        
        # 404 for the owner and a stranger alike, never 403
        for h in (headers, other):
            assert client.get(url, headers=h).status_code == 404
            assert client.put(url, json={"body": "x"}, headers=h).status_code == 404
            assert client.delete(url, headers=h).status_code == 404
        assert client.get(f"/api/comments/{comment['id']}", headers=headers).status_code == 200

    @pytest.mark.parametrize("method", ["put", "patch"])
    def test_update_scoped(self, client, alice, method):
        _, headers = alice
        post = _post(client, headers)
        comment = _comment(client, headers, post["id"])
        
        response = getattr(client, method)(
            f"/api/posts/{post['id']}/comments/{comment['id']}",
            json={"body": "Edited"},
            headers=headers,
        )
        
        assert response.status_code == 200
        assert response.json()["data"]["body"] == "Edited"
        assert response.json()["data"]["post_id"] == post["id"]

    def test_delete_scoped(self, client, alice):
        _, headers = alice
        post = _post(client, headers)
        comment = _comment(client, headers, post["id"])
        url = f"/api/posts/{post['id']}/comments/{comment['id']}"
        
        assert client.delete(url, headers=headers).status_code == 204
        assert client.delete(url, headers=headers).status_code == 404
        assert client.get(f"/api/posts/{post['id']}/comments", headers=headers).json()["data"] == []


# =============================================================================
# Shallow routes
# =============================================================================


class TestShallowComments:
    def test_show(self, client, alice):
        _, headers = alice
        post = _post(client, headers)
        comment = _comment(client, headers, post["id"])
        
        response = client.get(f"/api/comments/{comment['id']}", headers=headers)
        
        assert response.json()["data"] == comment

    def test_missing(self, client, alice):
        _, headers = alice
        
        response = client.get("/api/comments/42", headers=headers)
        
        assert response.status_code == 404
        assert response.json() == {"message": "Comment 42 not found"}

    def test_update_and_delete(self, client, alice):
        _, headers = alice
        post = _post(client, headers)
        comment = _comment(client, headers, post["id"])
        url = f"/api/comments/{comment['id']}"
        
        assert client.patch(url, json={"body": "Edited"}, headers=headers).json()["data"]["body"] == "Edited"
        assert client.delete(url, headers=headers).status_code == 204
        assert client.get(url, headers=headers).status_code == 404


# =============================================================================
# Ownership
# =============================================================================


class TestCommentOwnership:
    def test_stranger_can_view(self, client, alice, bob):
        _, headers = alice
        _, other = bob
        post = _post(client, headers)
        comment = _comment(client, headers, post["id"])
        
        assert client.get(f"/api/comments/{comment['id']}", headers=other).status_code == 200

    def test_stranger_cannot_modify(self, client, alice, bob):
        _, headers = alice
        _, other = bob
        post = _post(client, headers)
        comment = _comment(client, headers, post["id"])
        
        for url in (
            f"/api/comments/{comment['id']}",
            f"/api/posts/{post['id']}/comments/{comment['id']}",
        ):
            assert client.put(url, json={"body": "Mine"}, headers=other).status_code == 403
            assert client.delete(url, headers=other).status_code == 403
        
        assert client.get(f"/api/comments/{comment['id']}", headers=headers).json()["data"]["body"] == "Nice!"

    def test_post_owner_cannot_edit_others_comment(self, client, alice, bob):
        _, headers = alice
        _, other = bob
        post = _post(client, headers)
        comment = _comment(client, other, post["id"])
        
        response = client.put(f"/api/comments/{comment['id']}", json={"body": "x"}, headers=headers)
        
        assert response.status_code == 403


# =============================================================================
# Registered view rules
# =============================================================================


class TestCommentViewRules:
    def test_list_hides_comments_the_rule_denies(self, app, client, alice, bob):
        _, headers = alice
        _, other = bob
        post = _post(client, headers)
        _comment(client, headers, post["id"], body="mine")
        _comment(client, other, post["id"], body="theirs")
        app.state.services.policy.register(EntityKind.COMMENT, Action.VIEW, owner_only)
        
        response = client.get(f"/api/posts/{post['id']}/comments", headers=other)
        
        assert [c["body"] for c in response.json()["data"]] == ["theirs"]
