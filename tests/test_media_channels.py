"""Tests for MediaChannelManager staging, validation and persisted deletion."""

import asyncio

import pytest

from authoring.engine import MediaChannelManager, NotificationLevel
from authoring.errors import MediaValidationError
from authoring.schemas import MediaKind, MediaRecord, ProductRead, StagedFile
from conftest import KB, make_image, make_pdf


def _product(**fields) -> ProductRead:
    data = {"id": 7, "category": 1, "name": "Forklift"}
    data.update(fields)
    return ProductRead.model_validate(data)


async def _yes(item):
    return True


async def _no(item):
    return False


class TestImageValidation:
    @pytest.mark.parametrize("size", [50 * KB, 200 * KB, 1024 * KB])
    def test_sizes_within_bounds_accepted(self, size):
        media = MediaChannelManager()
        accepted, rejections = media.stage_gallery_images([make_image(size=size)])
        assert len(accepted) == 1
        assert rejections == []

    @pytest.mark.parametrize("size", [50 * KB - 1, 1024 * KB + 1])
    def test_sizes_out_of_bounds_rejected(self, size):
        media = MediaChannelManager()
        accepted, rejections = media.stage_gallery_images([make_image("edge.jpg", size=size)])
        assert accepted == []
        assert len(rejections) == 1
        assert rejections[0].startswith("edge.jpg")
        assert media.staged_images == []

    def test_non_image_rejected(self):
        media = MediaChannelManager()
        with pytest.raises(MediaValidationError):
            media.stage_primary_image(make_image("doc.pdf", content_type="application/pdf"))

    def test_batch_keeps_valid_files(self):
        media = MediaChannelManager()
        accepted, rejections = media.stage_gallery_images([
            make_image("a.jpg"), make_image("tiny.jpg", size=KB), make_image("b.jpg"),
        ])
        assert [i.title for i in accepted] == ["a.jpg", "b.jpg"]
        assert len(rejections) == 1


class TestStaging:
    def test_primary_candidate_replaced(self):
        media = MediaChannelManager()
        media.stage_primary_image(make_image("first.jpg"))
        media.stage_primary_image(make_image("second.jpg"))
        assert media.staged_primary.title == "second.jpg"
        assert media.primary_image is media.staged_primary

    def test_persisted_primary_is_first_image(self):
        media = MediaChannelManager()
        media.load_persisted(_product(media=[
            {"id": 1, "image": "https://youtu.be/abc"},
            {"id": 2, "image": "https://cdn.test/front.jpg"},
            {"id": 3, "image": "https://cdn.test/side.jpg"},
        ]))
        media.stage_primary_image(make_image())
        assert media.primary_image.id == 2
        assert [v.id for v in media.persisted_videos] == [1]

    def test_upload_batch_orders_primary_first(self):
        media = MediaChannelManager()
        media.stage_gallery_images([make_image("g1.jpg"), make_image("g2.jpg")])
        media.stage_primary_image(make_image("main.jpg"))
        assert [f.filename for f in media.upload_batch()] == ["main.jpg", "g1.jpg", "g2.jpg"]

    def test_brochure_must_be_pdf(self):
        media = MediaChannelManager()
        with pytest.raises(MediaValidationError):
            media.stage_brochure(make_pdf("brochure.docx", content_type="application/msword"))

    def test_brochure_replaces_staged_predecessor(self):
        media = MediaChannelManager()
        media.stage_brochure(make_pdf("old.pdf"))
        item = media.stage_brochure(make_pdf("new.pdf"))
        assert media.brochure is item
        assert item.kind is MediaKind.document

        media.discard_staged_brochure()
        assert media.brochure is None

    def test_remove_staged_is_local(self):
        media = MediaChannelManager()
        accepted, _ = media.stage_gallery_images([make_image()])
        link = media.stage_video_link("https://youtu.be/abc")
        assert media.remove_staged(accepted[0].handle) is True
        assert media.remove_staged(link.handle) is True
        assert media.has_staged is False
        assert media.remove_staged("unknown") is False

    def test_find_by_key(self):
        media = MediaChannelManager()
        media.load_persisted(_product(media=[{"id": 11, "image": "https://cdn.test/a.jpg"}]))
        link = media.stage_video_link("https://vimeo.com/1")
        assert media.find("p11").id == 11
        assert media.find(link.handle) is link
        assert media.find("p99") is None

    def test_staged_file_from_path(self, tmp_path):
        path = tmp_path / "front.png"
        path.write_bytes(b"\x89PNG" + b"\x00" * (60 * KB))
        file = asyncio.run(StagedFile.from_path(path))
        assert file.filename == "front.png"
        assert file.content_type == "image/png"
        assert file.size == 60 * KB + 4


class TestVideoLinks:
    @pytest.mark.parametrize("url", ["", "   ", "not a url", "youtube.com/watch?v=1", "https://"])
    def test_invalid_links_rejected(self, url):
        with pytest.raises(MediaValidationError):
            MediaChannelManager().stage_video_link(url)

    def test_duplicate_staged_link_rejected(self):
        media = MediaChannelManager()
        media.stage_video_link("https://youtu.be/abc")
        with pytest.raises(MediaValidationError):
            media.stage_video_link("https://youtu.be/abc")
        assert media.pending_video_links == ["https://youtu.be/abc"]

    def test_duplicate_persisted_link_rejected(self):
        media = MediaChannelManager()
        media.load_persisted(_product(media=[{"id": 1, "image": "https://youtu.be/abc"}]))
        with pytest.raises(MediaValidationError):
            media.stage_video_link("https://youtu.be/abc")

    def test_resync_promotes_known_links(self):
        media = MediaChannelManager()
        media.stage_video_link("https://youtu.be/abc")
        media.stage_video_link("https://vimeo.com/2")
        media.resync(_product(media=[{"id": 5, "image": "https://youtu.be/abc"}]))
        assert [v.locator for v in media.persisted_videos] == ["https://youtu.be/abc"]
        assert media.pending_video_links == ["https://vimeo.com/2"]


class TestPersistedDeletion:
    def _loaded(self, backend) -> MediaChannelManager:
        record = backend.seed_product(
            7,
            media=[{"id": 1, "image": "https://cdn.test/a.jpg"}, {"id": 2, "image": "https://cdn.test/b.jpg"}],
            brochure="https://cdn.test/brochure.pdf",
        )
        media = MediaChannelManager()
        media.load_persisted(ProductRead.model_validate(record))
        return media

    def test_declined_confirmation_makes_no_call(self, client, backend):
        media = self._loaded(backend)
        notification = asyncio.run(media.delete_persisted(client, 7, media.find("p1"), _no))
        assert notification.level is NotificationLevel.info
        assert len(media.persisted_images) == 2
        assert ("DELETE", "/products/7/media/") not in backend.calls

    def test_confirmed_deletion(self, client, backend):
        media = self._loaded(backend)
        notification = asyncio.run(media.delete_persisted(client, 7, media.find("p1"), _yes))
        assert notification.level is NotificationLevel.success
        assert [m.id for m in media.persisted_images] == [2]
        assert [m["id"] for m in backend.products[7]["media"]] == [2]

    def test_failed_deletion_keeps_item(self, client, backend):
        media = self._loaded(backend)
        backend.fail("DELETE", "/products/7/media/", 500, {"detail": "Storage unavailable"})
        notification = asyncio.run(media.delete_persisted(client, 7, media.find("p1"), _yes))
        assert notification.is_error
        assert notification.description == "Storage unavailable"
        assert [m.id for m in media.persisted_images] == [1, 2]

    def test_brochure_deletion(self, client, backend):
        media = self._loaded(backend)
        notification = asyncio.run(media.delete_persisted(client, 7, media.persisted_brochure, _yes))
        assert notification.level is NotificationLevel.success
        assert media.brochure is None
        assert ("DELETE", "/products/7/brochure/") in backend.calls

    def test_staged_item_removed_without_confirmation(self, client, backend):
        media = MediaChannelManager()
        link = media.stage_video_link("https://youtu.be/abc")
        notification = asyncio.run(media.delete_persisted(client, 7, link, _no))
        assert notification.level is NotificationLevel.info
        assert media.staged_videos == []
        assert backend.calls == []


class TestCommit:
    def test_commit_removes_only_uploaded_items(self):
        media = MediaChannelManager()
        media.stage_gallery_images([make_image("a.jpg")])
        uploaded = media.upload_items()
        media.stage_gallery_images([make_image("b.jpg")])

        media.commit_uploaded_images(uploaded, [MediaRecord(id=1, url="https://cdn.test/a.jpg")])

        assert [m.id for m in media.persisted_images] == [1]
        assert [i.title for i in media.staged_images] == ["b.jpg"]

    def test_commit_brochure_keeps_newer_candidate(self):
        media = MediaChannelManager()
        uploaded = media.stage_brochure(make_pdf("old.pdf"))
        newer = media.stage_brochure(make_pdf("new.pdf"))

        media.commit_brochure(uploaded, "https://cdn.test/old.pdf")

        assert media.persisted_brochure.locator == "https://cdn.test/old.pdf"
        assert media.staged_brochure is newer
