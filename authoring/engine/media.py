from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Awaitable, Callable, Iterable

from config import MAX_IMAGE_BYTES, MIN_IMAGE_BYTES
from authoring.engine.notifications import Notification
from authoring.errors import AuthoringError, MediaValidationError
from authoring.helpers import is_url
from authoring.schemas import MediaItem, MediaKind, MediaOrigin, MediaRecord, ProductRead, StagedFile

if TYPE_CHECKING:
    from authoring.api import MarketplaceClient

Confirm = Callable[[MediaItem], Awaitable[bool]]

BROCHURE_CONTENT_TYPE = "application/pdf"


def validate_image(file: StagedFile) -> None:
    if not (file.content_type or "").lower().startswith("image/"):
        raise MediaValidationError(f"{file.filename}: not an image")
    if file.size < MIN_IMAGE_BYTES:
        raise MediaValidationError(f"{file.filename}: image is smaller than {MIN_IMAGE_BYTES // 1024} KB")
    if file.size > MAX_IMAGE_BYTES:
        raise MediaValidationError(f"{file.filename}: image is larger than {MAX_IMAGE_BYTES // 1024} KB")


def validate_brochure(file: StagedFile) -> None:
    if (file.content_type or "").lower() != BROCHURE_CONTENT_TYPE:
        raise MediaValidationError(f"{file.filename}: please select a valid PDF file for the brochure")


class MediaChannelManager:
    """
    Tracks the three media channels of one product:

    - brochure: 0..1 document, staged or persisted
    - primary image: 0..1 staged candidate; the persisted primary is the first persisted image
    - gallery: staged images + staged video links, plus everything already persisted

    Staged items live only here until their upload step succeeds.
    Persisted items disappear only after a confirmed server deletion.
    """

    def __init__(self):
        self.persisted: list[MediaItem] = []
        self.persisted_brochure: MediaItem | None = None
        self.staged_brochure: MediaItem | None = None
        self.staged_primary: MediaItem | None = None
        self.staged_images: list[MediaItem] = []
        self.staged_videos: list[MediaItem] = []
        self.log = logging.getLogger(self.__class__.__name__)

    def load_persisted(self, product: ProductRead) -> None:
        self.persisted = [MediaItem.from_record(r) for r in product.media]
        self.persisted_brochure = self._brochure_item(product.brochure)

    # ===================== views =====================

    @property
    def persisted_images(self) -> list[MediaItem]:
        return [m for m in self.persisted if m.kind is MediaKind.image]

    @property
    def persisted_videos(self) -> list[MediaItem]:
        return [m for m in self.persisted if m.kind is MediaKind.video]

    @property
    def primary_image(self) -> MediaItem | None:
        images = self.persisted_images
        if images: return images[0]
        return self.staged_primary

    @property
    def brochure(self) -> MediaItem | None:
        return self.staged_brochure or self.persisted_brochure

    @property
    def pending_video_links(self) -> list[str]:
        return [v.locator for v in self.staged_videos]

    @property
    def has_staged(self) -> bool:
        return bool(self.staged_brochure or self.staged_primary or self.staged_images or self.staged_videos)

    def find(self, key: str) -> MediaItem | None:
        """key is a staged handle or 'p<id>' for persisted items."""
        for item in self._all_items():
            if item.handle == key or (item.id is not None and key == f"p{item.id}"):
                return item
        return None

    # ===================== brochure =====================

    def stage_brochure(self, file: StagedFile) -> MediaItem:
        validate_brochure(file)
        if self.staged_brochure is not None:
            self.log.info("Staged brochure %s replaced by %s", self.staged_brochure.title, file.filename)
        self.staged_brochure = MediaItem.staged_file(file, MediaKind.document)
        return self.staged_brochure

    def discard_staged_brochure(self) -> None:
        self.staged_brochure = None

    def commit_brochure(self, uploaded: MediaItem, url: str | None) -> None:
        """A brochure staged while the upload was running stays staged."""
        self.persisted_brochure = self._brochure_item(url or uploaded.title)
        if self.staged_brochure is uploaded:
            self.staged_brochure = None

    # ===================== images & videos =====================

    def stage_primary_image(self, file: StagedFile) -> MediaItem:
        validate_image(file)
        self.staged_primary = MediaItem.staged_file(file)
        return self.staged_primary

    def discard_staged_primary(self) -> None:
        self.staged_primary = None

    def stage_gallery_images(self, files: Iterable[StagedFile]) -> tuple[list[MediaItem], list[str]]:
        accepted: list[MediaItem] = []
        rejections: list[str] = []
        for file in files:
            try:
                validate_image(file)
            except MediaValidationError as e:
                rejections.extend(e.problems)
                continue
            item = MediaItem.staged_file(file)
            self.staged_images.append(item)
            accepted.append(item)
        return accepted, rejections

    def stage_video_link(self, url: str) -> MediaItem:
        url = (url or "").strip()
        if not url:
            raise MediaValidationError("Video link is empty")
        if not is_url(url):
            raise MediaValidationError(f"'{url}' is not a valid link")
        if url in self.pending_video_links or url in {v.locator for v in self.persisted_videos}:
            raise MediaValidationError("This video link has already been added")
        item = MediaItem.staged_link(url)
        self.staged_videos.append(item)
        return item

    def remove_staged(self, handle: str) -> bool:
        """Drops a staged item locally. Persisted items are never touched here."""
        if self.staged_primary is not None and self.staged_primary.handle == handle:
            self.staged_primary = None
            return True
        if self.staged_brochure is not None and self.staged_brochure.handle == handle:
            self.staged_brochure = None
            return True
        for bucket in (self.staged_images, self.staged_videos):
            for item in bucket:
                if item.handle == handle:
                    bucket.remove(item)
                    return True
        return False

    def upload_items(self) -> list[MediaItem]:
        """Staged primary image first, then the staged gallery images, in staging order."""
        items = ([self.staged_primary] if self.staged_primary else []) + self.staged_images
        return [item for item in items if item.file is not None]

    def upload_batch(self) -> list[StagedFile]:
        return [item.file for item in self.upload_items()]

    def commit_uploaded_images(self, uploaded: list[MediaItem], records: list[MediaRecord]) -> list[MediaItem]:
        """
        Only the uploaded items leave staging.
        Images staged while the batch was in flight wait for the next submit.
        """
        created = [MediaItem.from_record(r) for r in records]
        self.persisted.extend(created)
        handles = {item.handle for item in uploaded}
        if self.staged_primary is not None and self.staged_primary.handle in handles:
            self.staged_primary = None
        self.staged_images = [item for item in self.staged_images if item.handle not in handles]
        return created

    def resync(self, product: ProductRead, sent_links: Iterable[str] = ()) -> None:
        """
        Server record is authoritative: persisted media and brochure are replaced by it.
        Staged links the server now lists, or that were already sent with the base record, stop being staged.
        """
        self.persisted = [MediaItem.from_record(r) for r in product.media]
        self.persisted_brochure = self._brochure_item(product.brochure)
        known = {m.locator for m in self.persisted} | set(sent_links)
        left = [v for v in self.staged_videos if v.locator not in known]
        if len(left) != len(self.staged_videos):
            self.log.info("Resynced %s video link(s) from server", len(self.staged_videos) - len(left))
        self.staged_videos = left

    def drop_staged_links(self, links: Iterable[str]) -> None:
        """Links already saved with the base record must not be sent twice."""
        links = set(links)
        self.staged_videos = [v for v in self.staged_videos if v.locator not in links]

    # ===================== persisted deletion =====================

    async def delete_persisted(
            self,
            client: MarketplaceClient,
            product_id: int | None,
            item: MediaItem,
            confirm: Confirm,
    ) -> Notification:
        if item is self.persisted_brochure:
            return await self.delete_persisted_brochure(client, product_id, confirm)
        if not item.is_persisted or item.id is None:
            self.remove_staged(item.handle)
            return Notification.info("Removed", f"{item.title} was not uploaded yet")
        if product_id is None:
            return Notification.error("Failed to remove media", "Product is not saved yet")
        if not await confirm(item):
            return Notification.info("Deletion cancelled")

        try:
            await client.delete_media(product_id, [item.id])
        except AuthoringError as e:
            self.log.error("❌ Media %s deletion failed for product %s: %s", item.id, product_id, e)
            return Notification.error("Failed to remove media", str(e))

        self.persisted = [m for m in self.persisted if m.id != item.id]
        self.log.info("🗑️ Media %s removed from product %s", item.id, product_id)
        label = "Video" if item.kind is MediaKind.video else "Image"
        return Notification.success(f"{label} removed successfully")

    async def delete_persisted_brochure(
            self,
            client: MarketplaceClient,
            product_id: int | None,
            confirm: Confirm,
    ) -> Notification:
        item = self.persisted_brochure
        if item is None or product_id is None:
            return Notification.info("No saved brochure to remove")
        if not await confirm(item):
            return Notification.info("Deletion cancelled")

        try:
            await client.delete_brochure(product_id)
        except AuthoringError as e:
            self.log.error("❌ Brochure deletion failed for product %s: %s", product_id, e)
            return Notification.error("Failed to remove brochure", str(e))

        self.persisted_brochure = None
        self.log.info("🗑️ Brochure removed from product %s", product_id)
        return Notification.success("Brochure removed successfully")

    # ===================== internals =====================

    @staticmethod
    def _brochure_item(url: str | None) -> MediaItem | None:
        if not url:
            return None
        return MediaItem(locator=url, kind=MediaKind.document, origin=MediaOrigin.persisted)

    def _all_items(self) -> list[MediaItem]:
        items = list(self.persisted)
        for extra in (self.persisted_brochure, self.staged_brochure, self.staged_primary):
            if extra is not None: items.append(extra)
        return items + self.staged_images + self.staged_videos
