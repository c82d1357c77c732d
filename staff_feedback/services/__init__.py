# Services module

from .store_client import SupabaseStoreClient, StoreAPIError
from .mirror_sink import (
    MirrorSink, ExcelMirrorSink, WebhookMirrorSink, BackgroundMirror, MirrorSinkError, create_mirror_sink
)
from .notifier import Notifier, CollectingNotifier, Notification
from .unit_catalog import UnitCatalogLoader
from .staff_resolver import StaffResolver
from .form_state import EvaluationFormState, FormBusyError, FormValidationError
from .submission import SubmissionPipeline
from .form_session import FormSession

__all__ = [
    'SupabaseStoreClient', 'StoreAPIError',
    'MirrorSink', 'ExcelMirrorSink', 'WebhookMirrorSink', 'BackgroundMirror', 'MirrorSinkError', 'create_mirror_sink',
    'Notifier', 'CollectingNotifier', 'Notification',
    'UnitCatalogLoader', 'StaffResolver',
    'EvaluationFormState', 'FormBusyError', 'FormValidationError',
    'SubmissionPipeline', 'FormSession'
]
