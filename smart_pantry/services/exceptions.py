from __future__ import annotations

class ServiceError(RuntimeError):
    """Base class for service-layer errors."""

class ConfigurationError(ServiceError):
    """Required configuration (e.g. the OpenAI API key) is missing."""

class InvalidInputError(ServiceError):
    """The caller asked for something we can't reason about (e.g. no ingredients)."""

class GenerationServiceError(ServiceError):
    """The generation call itself failed (network, quota, timeout, service fault)."""

class RepoError(ServiceError):
    """Errors from repositories (I/O, parse, schema)."""

class DocumentNotFoundError(RepoError):
    """A keyed document the operation needs does not exist."""
