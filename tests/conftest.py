import pytest

from telemetry_anonymizer.anonymization.engine import AnonymizationEngine
from telemetry_anonymizer.anonymization.factory import AnonymizationEngineFactory
from telemetry_anonymizer.anonymization.models import AnonymizationOptions
from telemetry_anonymizer.config.settings import Settings


@pytest.fixture()
def settings() -> Settings:
    return Settings()


@pytest.fixture()
def engine(settings: Settings) -> AnonymizationEngine:
    """Engine with its own pseudonym store and statistics."""
    return AnonymizationEngineFactory.create(settings)


@pytest.fixture()
def options() -> AnonymizationOptions:
    return AnonymizationOptions(
        enable_pseudonyms=True,
        preserve_structure=True,
        hash_salt="test-salt-123",
        max_processing_time=5000,
    )


@pytest.fixture()
def log_record() -> dict:
    """Operation log record with PII in message, context, error and metadata."""
    return {
        "timestamp": "2024-01-01T10:00:00Z",
        "correlationId": "corr-42",
        "operation": "sync",
        "phase": "start",
        "level": "info",
        "message": "Connected to 192.168.1.100 as admin@example.com",
        "context": {
            "workspace": "/home/alice/infra",
            "resourcesAffected": ["vm-100"],
            "duration": 12,
        },
        "error": {
            "type": "ConnectionError",
            "message": "refused by 10.0.0.7",
            "stack": "at /home/bob/app.js",
            "recoveryActions": ["retry"],
        },
        "metadata": {"server": "10.0.0.5"},
    }
