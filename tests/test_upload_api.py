"""Tests for POST /galleries/{gallery_id}/images."""

import re
import uuid
from unittest.mock import patch

from fastapi.testclient import TestClient
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from photoshelf.models.gallery import Image
from photoshelf.repositories.gallery_repository import GalleryRepository
from tests.helpers import make_image_bytes, make_token, multipart_files, stored_files


def upload_url(gallery_id) -> str:
    return f"/galleries/{gallery_id}/images"


def image_count(db_session) -> int:
    return db_session.execute(select(func.count()).select_from(Image)).scalar_one()


class TestUploadSuccess:
    def test_upload_batch(self, authenticated_client: TestClient, gallery, upload_dir, db_session):
        files = multipart_files(
            ("first.jpg", make_image_bytes("jpg", size=(1200, 800))),
            ("second.png", make_image_bytes("png", size=(400, 400), transparent=True)),
        )

        response = authenticated_client.post(upload_url(gallery.id), files=files)

        assert response.status_code == 201, response.text
        uploaded = response.json()["uploaded"]
        assert [item["original_filename"] for item in uploaded] == ["first.jpg", "second.png"]
        first = uploaded[0]
        assert set(first) == {"id", "filename", "thumbnail_filename", "original_filename", "file_size", "width", "height"}
        assert re.fullmatch(r"\d+_[0-9a-f]{12}\.jpg", first["filename"])
        assert first["thumbnail_filename"] == f"thumb_{first['filename']}"
        assert (first["width"], first["height"]) == (1200, 800)
        assert len(stored_files(upload_dir)) == 4
        assert image_count(db_session) == 2

    def test_response_carries_request_id(self, authenticated_client: TestClient, gallery):
        response = authenticated_client.post(upload_url(gallery.id), files=multipart_files(("a.jpg", make_image_bytes("jpg"))))
        assert re.fullmatch(r"[0-9a-f]{12}", response.headers["X-Request-ID"])


class TestUploadFailures:
    """Error statuses, bodies, and storage cleanliness."""

    def test_missing_token(self, client: TestClient, gallery, upload_dir):
        response = client.post(upload_url(gallery.id), files=multipart_files(("a.jpg", make_image_bytes("jpg"))))

        assert response.status_code == 401
        body = response.json()
        assert body["error"] == "Not authenticated"
        assert body["request_id"] == response.headers["X-Request-ID"]
        assert stored_files(upload_dir) == []

    def test_expired_token(self, client: TestClient, gallery, user):
        from datetime import timedelta

        headers = {"Authorization": f"Bearer {make_token(user.id, expires_in=timedelta(minutes=-1))}"}
        response = client.post(upload_url(gallery.id), files=multipart_files(("a.jpg", make_image_bytes("jpg"))), headers=headers)

        assert response.status_code == 401
        assert response.json()["error"] == "Token expired"

    def test_unknown_gallery(self, authenticated_client: TestClient, upload_dir):
        response = authenticated_client.post(upload_url(uuid.uuid4()), files=multipart_files(("a.jpg", make_image_bytes("jpg"))))

        assert response.status_code == 404
        assert response.json()["error"] == "Gallery not found"
        assert stored_files(upload_dir) == []

    def test_foreign_gallery(self, client: TestClient, gallery, other_user, upload_dir):
        headers = {"Authorization": f"Bearer {make_token(other_user.id)}"}
        response = client.post(upload_url(gallery.id), files=multipart_files(("a.jpg", make_image_bytes("jpg"))), headers=headers)

        assert response.status_code == 404
        assert stored_files(upload_dir) == []

    def test_no_files(self, authenticated_client: TestClient, gallery):
        response = authenticated_client.post(upload_url(gallery.id), data={"note": "nothing attached"})

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Upload failed"
        assert body["details"] == "No files provided"

    def test_invalid_file_rolls_back_batch(self, authenticated_client: TestClient, gallery, upload_dir, db_session):
        files = multipart_files(
            ("one.png", make_image_bytes("png")),
            ("two.png", make_image_bytes("png")),
            ("text.png", b"I am text pretending to be a picture"),
        )

        response = authenticated_client.post(upload_url(gallery.id), files=files)

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Upload failed"
        assert body["details"].startswith("text.png: File type not allowed")
        assert re.fullmatch(r"[0-9a-f]{12}", body["request_id"])
        assert stored_files(upload_dir) == []
        assert image_count(db_session) == 0

    def test_too_many_files(self, authenticated_client: TestClient, gallery, upload_dir):
        data = make_image_bytes("jpg", size=(16, 16))
        files = multipart_files(*[(f"{i}.jpg", data) for i in range(25)])

        response = authenticated_client.post(upload_url(gallery.id), files=files)

        assert response.status_code == 400
        assert response.json()["details"] == "Too many files. Maximum 20 files allowed per upload"
        assert stored_files(upload_dir) == []

    def test_undecodable_image(self, authenticated_client: TestClient, gallery, upload_dir):
        broken = make_image_bytes("png", size=(400, 400))[:120]
        response = authenticated_client.post(upload_url(gallery.id), files=multipart_files(("broken.png", broken)))

        assert response.status_code == 422
        assert response.json()["details"] == "broken.png: Failed to create thumbnail"
        assert stored_files(upload_dir) == []

    def test_metadata_failure_removes_files(self, authenticated_client: TestClient, gallery, upload_dir, db_session):
        with patch.object(GalleryRepository, "create_images_batch", side_effect=OperationalError("INSERT", {}, Exception("db down"))):
            response = authenticated_client.post(upload_url(gallery.id), files=multipart_files(("a.jpg", make_image_bytes("jpg"))))

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to save image metadata"
        assert stored_files(upload_dir) == []
        assert image_count(db_session) == 0
