"""Tests for GalleryRepository image metadata handling."""

import uuid

import pytest
from sqlalchemy.exc import IntegrityError

from photoshelf.repositories.gallery_repository import GalleryRepository
from photoshelf.schemas.upload import StoredImage


def stored_image(key: str, name: str = "photo.jpg") -> StoredImage:
    return StoredImage(
        storage_key=key,
        thumbnail_storage_key=f"thumb_{key}",
        original_filename=name,
        byte_size=1234,
        width=640,
        height=480,
        mime_type="image/jpeg",
    )


class TestGalleryRepository:
    def test_ownership_check(self, db_session, gallery, user, other_user):
        repo = GalleryRepository(db_session)
        assert repo.get_gallery_by_id_and_owner(gallery.id, user.id).id == gallery.id
        assert repo.get_gallery_by_id_and_owner(gallery.id, other_user.id) is None
        assert repo.get_gallery_by_id_and_owner(uuid.uuid4(), user.id) is None

    def test_create_images_batch_keeps_order(self, db_session, gallery):
        repo = GalleryRepository(db_session)
        images = [stored_image("1_aaaaaaaaaaaa.jpg", "z.jpg"), stored_image("1_bbbbbbbbbbbb.jpg", "a.jpg")]

        rows = repo.create_images_batch(gallery.id, images)

        assert [row.filename for row in rows] == ["1_aaaaaaaaaaaa.jpg", "1_bbbbbbbbbbbb.jpg"]
        assert all(row.gallery_id == gallery.id for row in rows)
        assert [image.original_filename for image in repo.get_images_by_gallery_id(gallery.id)] == ["a.jpg", "z.jpg"]

    def test_duplicate_filename_rolls_back(self, db_session, gallery):
        repo = GalleryRepository(db_session)
        repo.create_images_batch(gallery.id, [stored_image("1_aaaaaaaaaaaa.jpg")])

        with pytest.raises(IntegrityError):
            repo.create_images_batch(gallery.id, [stored_image("1_cccccccccccc.jpg"), stored_image("1_aaaaaaaaaaaa.jpg")])

        assert [row.filename for row in repo.get_images_by_gallery_id(gallery.id)] == ["1_aaaaaaaaaaaa.jpg"]

    def test_image_lookup_is_owner_scoped(self, db_session, gallery, user, other_user):
        repo = GalleryRepository(db_session)
        row = repo.create_images_batch(gallery.id, [stored_image("1_aaaaaaaaaaaa.jpg")])[0]

        assert repo.get_image_by_id_and_owner(row.id, user.id).id == row.id
        assert repo.get_image_by_id_and_owner(row.id, other_user.id) is None

        repo.delete_image(row)
        assert repo.get_images_by_gallery_id(gallery.id) == []
