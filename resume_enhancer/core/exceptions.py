"""Custom exception types for the service and API layers."""


class AppError(Exception):
    """Base app exception."""


class ConfigurationError(AppError):
    """Required configuration is missing or invalid."""


class IntegrationError(AppError):
    """External integration call failure."""


class BillingError(IntegrationError):
    """Stripe call failure."""


class WebhookSignatureError(AppError):
    """Inbound webhook could not be authenticated."""


class StorageError(IntegrationError):
    """Blob storage upload, download or signing failure."""


class DocumentExtractionError(IntegrationError):
    """OCR or text extraction failure."""


class PdfRenderError(IntegrationError):
    """Headless browser failed to produce a PDF."""


class EnhancementError(IntegrationError):
    """AI restyling failed or returned an unusable document."""
