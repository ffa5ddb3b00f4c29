from .directory import CategoryDirectory
from .media import MediaChannelManager
from .notifications import Notification, NotificationLevel
from .orchestrator import (
    OutcomeStatus,
    StepStatus,
    SubmissionOrchestrator,
    SubmissionOutcome,
    SubmissionState,
    SubmissionStep,
    submit_label,
)
from .preview import canonical_url_path, display_title, live_preview_url, slugify
from .schema import AttributeSchemaResolver, ResolvedSchema
from .session import AuthoringSession
from .values import AttributeValueStore

__all__ = [
    'CategoryDirectory', 'AttributeSchemaResolver', 'ResolvedSchema', 'AttributeValueStore',
    'MediaChannelManager', 'Notification', 'NotificationLevel',
    'SubmissionOrchestrator', 'SubmissionOutcome', 'SubmissionState', 'SubmissionStep', 'StepStatus', 'OutcomeStatus',
    'submit_label', 'slugify', 'display_title', 'canonical_url_path', 'live_preview_url', 'AuthoringSession',
]
