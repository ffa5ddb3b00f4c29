from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from authoring.engine.directory import CategoryDirectory
from authoring.engine.media import MediaChannelManager
from authoring.engine.notifications import Notification
from authoring.engine.schema import AttributeSchemaResolver, ResolvedSchema
from authoring.engine.values import AttributeValueStore
from authoring.errors import AuthoringError, SchemaError, SubmissionInProgress, ValidationError
from authoring.schemas import ProductDraft

if TYPE_CHECKING:
    from authoring.api import MarketplaceClient

SAVED_DESCRIPTION = "Your product has been saved successfully!"
BASE_FAILED_DESCRIPTION = "Something went wrong. Please check the form and try again."


class SubmissionState(str, Enum):
    idle = "idle"
    validating = "validating"
    persisting_base = "persisting_base"
    uploading_brochure = "uploading_brochure"
    uploading_gallery = "uploading_gallery"
    persisting_video_links = "persisting_video_links"
    resyncing = "resyncing"
    done = "done"


class SubmissionStep(str, Enum):
    validation = "validation"
    base = "base"
    brochure = "brochure"
    images = "images"
    video_links = "video_links"


class StepStatus(str, Enum):
    ok = "ok"
    failed = "failed"
    skipped = "skipped"


class OutcomeStatus(str, Enum):
    complete = "complete"   # every step that ran succeeded
    partial = "partial"     # base record saved, some media channel failed
    rejected = "rejected"   # client-side validation, nothing was sent
    failed = "failed"       # base record could not be saved


# channel steps whose failure makes the whole run partial
RETRYABLE_STEPS = (SubmissionStep.brochure, SubmissionStep.images)

CHANNEL_LABELS = {
    SubmissionStep.brochure: "brochure",
    SubmissionStep.images: "images",
    SubmissionStep.video_links: "video links",
}


@dataclass
class StepOutcome:
    step: SubmissionStep
    status: StepStatus
    message: str = ""


@dataclass
class SubmissionOutcome:
    status: OutcomeStatus
    product_id: int | None = None
    created: bool = False
    steps: list[StepOutcome] = field(default_factory=list)
    notifications: list[Notification] = field(default_factory=list)

    @property
    def should_close(self) -> bool:
        return self.status is OutcomeStatus.complete

    @property
    def failed_steps(self) -> list[SubmissionStep]:
        return [s.step for s in self.steps if s.status is StepStatus.failed]

    @property
    def errors(self) -> dict[SubmissionStep, str]:
        return {s.step: s.message for s in self.steps if s.status is StepStatus.failed}

    def step(self, step: SubmissionStep) -> StepOutcome | None:
        for outcome in self.steps:
            if outcome.step is step: return outcome
        return None


def submit_label(draft: ProductDraft) -> str:
    return "Update Product" if draft.is_persisted else "Create Product"


class SubmissionOrchestrator:
    """
    Runs the save sequence of one product:

        validating -> persisting_base -> uploading_brochure? -> uploading_gallery?
                   -> persisting_video_links? -> resyncing -> done

    Steps run one after another. Only a base record failure aborts the run;
    every media step has its own error channel and a failed one leaves the saved base record as is.
    """

    def __init__(self, client: MarketplaceClient, directory: CategoryDirectory):
        self.client = client
        self.resolver = AttributeSchemaResolver(directory)
        self.state = SubmissionState.idle
        self._running = False
        self.log = logging.getLogger(self.__class__.__name__)

    @property
    def running(self) -> bool:
        return self._running

    async def submit(
            self,
            draft: ProductDraft,
            values: AttributeValueStore,
            media: MediaChannelManager,
            owner_id: int | None,
    ) -> SubmissionOutcome:
        if self._running:
            raise SubmissionInProgress("This product is already being saved")
        self._running = True
        try:
            return await self._run(draft, values, media, owner_id)
        finally:
            self._running = False

    # ===================== steps =====================

    async def _run(self, draft, values, media, owner_id) -> SubmissionOutcome:
        creating = draft.id is None
        outcome = SubmissionOutcome(status=OutcomeStatus.complete, product_id=draft.id, created=creating)

        self._enter(SubmissionState.validating)
        try:
            schema = self.validate(draft, values, owner_id)
        except ValidationError as e:
            self.log.warning("Submission rejected: %s", e)
            outcome.status = OutcomeStatus.rejected
            outcome.created = False
            outcome.steps.append(StepOutcome(SubmissionStep.validation, StepStatus.failed, str(e)))
            outcome.notifications.append(Notification.error("Please fix the form", "\n".join(e.problems)))
            self._enter(SubmissionState.done)
            return outcome
        outcome.steps.append(StepOutcome(SubmissionStep.validation, StepStatus.ok))

        self._enter(SubmissionState.persisting_base)
        links = media.pending_video_links
        payload = draft.to_write(owner_id=owner_id, product_details=values.serialize(schema.fields), videos=links)
        try:
            if creating:
                saved = await self.client.create_product(payload)
            else:
                saved = await self.client.update_product(draft.id, payload)
        except AuthoringError as e:
            self.log.error("❌ Base record %s failed: %s", "create" if creating else f"update of {draft.id}", e)
            outcome.status = OutcomeStatus.failed
            outcome.created = False
            outcome.steps.append(StepOutcome(SubmissionStep.base, StepStatus.failed, str(e)))
            title = "Failed to create product" if creating else "Failed to update product"
            outcome.notifications.append(Notification.error(title, str(e) or BASE_FAILED_DESCRIPTION))
            self._enter(SubmissionState.done)
            return outcome

        product_id = saved.id if creating else draft.id
        draft.id = product_id
        outcome.product_id = product_id
        outcome.steps.append(StepOutcome(SubmissionStep.base, StepStatus.ok))
        self.log.info("✅ Base record %s: product %s", "created" if creating else "updated", product_id)

        outcome.steps.append(await self._upload_brochure(product_id, media, outcome))
        outcome.steps.append(await self._upload_images(product_id, media, outcome))
        outcome.steps.append(await self._sync_video_links(product_id, media, links, outcome))

        self._enter(SubmissionState.resyncing)
        self._aggregate(outcome, creating)
        self._enter(SubmissionState.done)
        return outcome

    def validate(self, draft: ProductDraft, values: AttributeValueStore, owner_id: int | None) -> ResolvedSchema:
        problems: list[str] = []
        schema = ResolvedSchema()

        if draft.category is None:
            problems.append("Category is required")
        else:
            try:
                schema = self.resolver.resolve(draft.category, draft.subcategory)
            except SchemaError as e:
                problems.append(str(e))
            else:
                if schema.awaiting_subcategory:
                    problems.append("Subcategory is required")
                problems.extend(f"{f.label} is required" for f in values.missing_required(schema.fields))

        if not draft.name.strip():
            problems.append("Product name is required")
        if not draft.type:
            problems.append("Select at least one product type")
        if owner_id is None:
            problems.append("Owner account is missing, please sign in again")

        if problems:
            raise ValidationError(problems)
        return schema

    async def _upload_brochure(self, product_id: int, media: MediaChannelManager, outcome: SubmissionOutcome) -> StepOutcome:
        staged = media.staged_brochure
        if staged is None or staged.file is None:
            return StepOutcome(SubmissionStep.brochure, StepStatus.skipped)

        self._enter(SubmissionState.uploading_brochure)
        try:
            url = await self.client.upload_brochure(product_id, staged.file)
        except AuthoringError as e:
            self.log.error("❌ Brochure upload failed for product %s: %s", product_id, e)
            outcome.notifications.append(Notification.error("Failed to upload brochure", str(e)))
            return StepOutcome(SubmissionStep.brochure, StepStatus.failed, str(e))

        media.commit_brochure(staged, url)
        self.log.info("Brochure uploaded for product %s", product_id)
        return StepOutcome(SubmissionStep.brochure, StepStatus.ok)

    async def _upload_images(self, product_id: int, media: MediaChannelManager, outcome: SubmissionOutcome) -> StepOutcome:
        items = media.upload_items()
        batch = [item.file for item in items]
        if not batch:
            return StepOutcome(SubmissionStep.images, StepStatus.skipped)

        self._enter(SubmissionState.uploading_gallery)
        try:
            records = await self.client.upload_images(product_id, batch)
        except AuthoringError as e:
            self.log.error("❌ Image batch (%s files) failed for product %s: %s", len(batch), product_id, e)
            outcome.notifications.append(Notification.error("Failed to upload new images", str(e)))
            return StepOutcome(SubmissionStep.images, StepStatus.failed, str(e))

        created = media.commit_uploaded_images(items, records)
        self.log.info("%s image(s) uploaded for product %s", len(created), product_id)
        return StepOutcome(SubmissionStep.images, StepStatus.ok, f"{len(created)} image(s) uploaded")

    async def _sync_video_links(self, product_id: int, media: MediaChannelManager, links: list[str], outcome: SubmissionOutcome) -> StepOutcome:
        if not links:
            return StepOutcome(SubmissionStep.video_links, StepStatus.skipped)

        self._enter(SubmissionState.persisting_video_links)
        try:
            fresh = await self.client.get_product(product_id)
        except AuthoringError as e:
            # links are already stored with the base record, only the local view is stale
            self.log.error("Video link refresh failed for product %s: %s", product_id, e)
            media.drop_staged_links(links)
            outcome.notifications.append(Notification.warning(
                "Video links saved",
                "The links were saved but could not be refreshed. Reload the product to see them.",
            ))
            return StepOutcome(SubmissionStep.video_links, StepStatus.failed, str(e))

        media.resync(fresh, sent_links=links)
        return StepOutcome(SubmissionStep.video_links, StepStatus.ok)

    def _aggregate(self, outcome: SubmissionOutcome, creating: bool) -> None:
        failed = [s for s in outcome.failed_steps if s in RETRYABLE_STEPS]
        if not failed:
            outcome.status = OutcomeStatus.complete
            outcome.notifications.append(Notification.success("Product Created" if creating else "Product Updated", SAVED_DESCRIPTION))
            return

        outcome.status = OutcomeStatus.partial
        channels = ", ".join(CHANNEL_LABELS[s] for s in failed)
        outcome.notifications.append(Notification.warning(
            "Product saved with errors",
            f"The product details were saved, but these uploads failed: {channels}. Submit again to retry them.",
        ))
        self.log.warning("Product %s saved partially, failed: %s", outcome.product_id, channels)

    def _enter(self, state: SubmissionState) -> None:
        self.state = state
        self.log.debug("Submission state -> %s", state.value)
