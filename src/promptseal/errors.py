"""Error taxonomy shared by every layer.

Each class carries a stable ``code`` that the service layer copies into
:class:`~promptseal.services.result.ServiceError` so CLI and JSON consumers
can branch on it without parsing messages.
"""

from __future__ import annotations


class PromptSealError(Exception):
    """Base class for all pipeline errors."""

    code = "PROMPTSEAL_ERROR"


class ConfigurationError(PromptSealError):
    """A required piece of process configuration is missing or unusable."""

    code = "CONFIGURATION_ERROR"


class ModelUnavailableError(ConfigurationError):
    """No model identifier could be resolved for a completion call."""

    code = "MODEL_UNAVAILABLE"


class InvalidKeyError(ConfigurationError):
    """The symmetric key is not valid base64 or not exactly 32 bytes."""

    code = "INVALID_KEY"


class TemplateReadError(PromptSealError):
    """A template could not be read from the store."""

    code = "TEMPLATE_READ_ERROR"


class ValidationError(PromptSealError):
    """Malformed input, naming-convention violation, or an empty resolved prompt."""

    code = "VALIDATION_ERROR"


class PayloadFormatError(ValidationError):
    """An encrypted payload does not have the expected transport shape."""

    code = "PAYLOAD_FORMAT_ERROR"


class AuthenticationError(PromptSealError):
    """AEAD verification failed: wrong key, or tampered nonce, ciphertext or tag."""

    code = "AUTHENTICATION_ERROR"


class ExecutionError(PromptSealError):
    """The completion backend call failed."""

    code = "EXECUTION_ERROR"
