"""
Unit Tests for Thumbnails API Endpoints

Tests for the REST API endpoints in api/routes/thumbnails.py
"""

import base64

from tests.conftest import FACE_URL, auth_headers, insert_record, make_image_bytes


class TestListThumbnails:
    """Tests for GET /api/thumbnails"""

    async def test_requires_auth(self, client):
        response = await client.get("/api/thumbnails")

        assert response.status_code == 401

    async def test_empty(self, client, sample_user):
        response = await client.get("/api/thumbnails", headers=auth_headers(sample_user))

        assert response.json() == {"thumbnails": [], "count": 0, "total": 0}

    async def test_newest_first_with_limit(self, client, test_db, sample_user):
        for title in ("first", "second", "third"):
            await insert_record(test_db, sample_user["id"], title)

        response = await client.get("/api/thumbnails?limit=2", headers=auth_headers(sample_user))

        data = response.json()
        assert [t["title"] for t in data["thumbnails"]] == ["third", "second"]
        assert data["count"] == 2
        assert data["total"] == 3

    async def test_limit_out_of_range(self, client, sample_user):
        response = await client.get("/api/thumbnails?limit=0", headers=auth_headers(sample_user))

        assert response.status_code == 422


class TestThumbnailDetail:

    async def test_get(self, client, test_db, sample_user):
        record_id = await insert_record(test_db, sample_user["id"], "mine")

        response = await client.get(f"/api/thumbnails/{record_id}", headers=auth_headers(sample_user))

        assert response.json()["title"] == "mine"

    async def test_other_users_record_is_not_found(self, client, test_db, sample_user):
        cursor = await test_db.execute(
            "INSERT INTO users (email, username, password_hash) VALUES (?, ?, ?)",
            ("other@example.com", "other", "x")
        )
        await test_db.commit()
        record_id = await insert_record(test_db, cursor.lastrowid, "theirs")

        response = await client.get(f"/api/thumbnails/{record_id}", headers=auth_headers(sample_user))

        assert response.status_code == 404

    async def test_delete(self, client, test_db, sample_user):
        record_id = await insert_record(test_db, sample_user["id"], "mine")

        response = await client.delete(f"/api/thumbnails/{record_id}", headers=auth_headers(sample_user))

        assert response.status_code == 200
        again = await client.delete(f"/api/thumbnails/{record_id}", headers=auth_headers(sample_user))
        assert again.status_code == 404


class TestDownloadThumbnail:
    """Tests for GET /api/thumbnails/{id}/download"""

    async def test_hosted_result_redirects(self, client, test_db, sample_user):
        record_id = await insert_record(test_db, sample_user["id"], "hosted")

        response = await client.get(
            f"/api/thumbnails/{record_id}/download",
            headers=auth_headers(sample_user)
        )

        assert response.status_code == 307
        assert response.headers["location"] == FACE_URL

    async def test_inline_result_is_streamed(self, client, test_db, sample_user):
        png = make_image_bytes()
        data_uri = "data:image/png;base64," + base64.b64encode(png).decode("ascii")
        record_id = await insert_record(test_db, sample_user["id"], "inline", result_url=data_uri)

        response = await client.get(
            f"/api/thumbnails/{record_id}/download",
            headers=auth_headers(sample_user)
        )

        assert response.status_code == 200
        assert response.content == png
        assert response.headers["content-type"] == "image/png"
        disposition = response.headers["content-disposition"]
        assert disposition.startswith('attachment; filename="thumbnail')
        assert disposition.endswith('.png"')

    async def test_corrupt_inline_result(self, client, test_db, sample_user):
        record_id = await insert_record(
            test_db, sample_user["id"], "broken", result_url="data:image/png;base64,abc"
        )

        response = await client.get(
            f"/api/thumbnails/{record_id}/download",
            headers=auth_headers(sample_user)
        )

        assert response.status_code == 422
