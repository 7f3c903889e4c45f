"""Translation API routes."""

from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, jsonify, request

from localeweave.ai.service import TranslationService
from localeweave.config import Configuration
from localeweave.exceptions import (
    ConfigurationError,
    LocaleWeaveError,
    ProviderNotFoundError,
    TranslationError,
    ValidationError,
)
from localeweave.logger import get_logger
from localeweave.web.tasks import cancel_job, create_translation_job, get_job, serialize_job

translation_bp = Blueprint("translation", __name__)
logger = get_logger(__name__)


def _error_response(error: LocaleWeaveError, status: int, default_code: str):
    payload: Dict[str, Any] = {"error": str(error), "code": error.code or default_code}
    return jsonify(payload), status


def _load_config(data: Dict[str, Any]) -> Configuration:
    raw_config = data.get("config")
    if not isinstance(raw_config, dict):
        raise ConfigurationError("A 'config' object is required", code="config_missing")
    return Configuration.from_dict(raw_config)


@translation_bp.post("/translations")
def start_translation_job():
    """Start an asynchronous translation run."""
    data: Dict[str, Any] = request.get_json(silent=True) or {}

    try:
        config = _load_config(data).validate()
    except (ConfigurationError, ProviderNotFoundError) as e:
        logger.warning("Translation configuration rejected: %s", e)
        return _error_response(e, 400, "invalid_config")

    try:
        job = create_translation_job(config)
    except Exception as e:
        logger.exception("Failed to create translation job: %s", e)
        return jsonify({"error": f"Failed to create translation job: {str(e)}"}), 500

    return jsonify({"job_id": job.job_id, "job": serialize_job(job)}), 202


@translation_bp.get("/translations/<job_id>")
def get_translation_job(job_id: str):
    """Return status for an asynchronous translation job."""
    job = get_job(job_id)
    if not job:
        return jsonify({"error": "Job not found or expired", "code": "job_not_found"}), 404
    return jsonify(serialize_job(job))


@translation_bp.post("/translations/<job_id>/cancel")
def cancel_translation_job(job_id: str):
    """Cancel a running translation job."""
    job = get_job(job_id)
    if not job:
        return jsonify({"error": "Job not found or expired", "code": "job_not_found"}), 404

    if cancel_job(job_id):
        return jsonify({"status": "cancellation_requested", "job_id": job_id})
    return jsonify({"error": "Job already finished", "code": "job_finished"}), 400


@translation_bp.post("/translate")
def translate_direct():
    """Translate text synchronously, without files."""
    data: Dict[str, Any] = request.get_json(silent=True) or {}
    target = data.get("to")
    language_name = data.get("language_name")

    if not target:
        return jsonify({"error": "Target language ('to') is required", "code": "target_missing"}), 400
    if "text" not in data and "texts" not in data:
        return jsonify({"error": "Either 'text' or 'texts' is required", "code": "text_missing"}), 400

    service = None
    try:
        service = TranslationService(_load_config(data))
        if "texts" in data:
            translations = service.translate_batch(
                data["texts"], target, language_name, skip_errors=bool(data.get("skip_errors", False))
            )
            return jsonify({"translations": translations, "to": target})
        return jsonify({"translation": service.translate(data["text"], target, language_name), "to": target})
    except (ConfigurationError, ProviderNotFoundError) as e:
        return _error_response(e, 400, "invalid_config")
    except ValidationError as e:
        return _error_response(e, 400, "validation_error")
    except TranslationError as e:
        logger.warning("Direct translation failed: %s", e)
        return _error_response(e, 502, "translation_failed")
    finally:
        if service is not None and hasattr(service.provider, "close"):
            service.provider.close()
