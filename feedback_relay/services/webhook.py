"""
Outbound relay of a stored feedback to the configured webhook.

Best effort and sequential: multipart POST to WEBHOOK_URL, then the same to
WEBHOOK_TEST_URL, then a JSON POST to WEBHOOK_TEST_URL, and finally a GET with
query parameters when the last answer was a 404 (test webhooks that only
listen on GET). Failures are logged and recorded, never raised.
"""
from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

import requests
from flask import current_app

from feedback_relay.extensions import db
from feedback_relay.observability import log_event
from feedback_relay.services import storage
from feedback_relay.services.uploads import StoredFile

STRATEGY_MULTIPART = "multipart"
STRATEGY_JSON = "json"
STRATEGY_GET = "get"

_BODY_LOG_LIMIT = 500


@dataclass
class DeliveryAttempt:
    strategy: str
    url: str
    status_code: int = 0
    ok: bool = False
    error: Optional[str] = None
    latency_ms: int = 0
    body: str = ""


@dataclass
class DeliveryResult:
    attempts: list[DeliveryAttempt] = field(default_factory=list)
    skipped: bool = False

    @property
    def ok(self) -> bool:
        return any(a.ok for a in self.attempts)

    @property
    def status_code(self) -> int:
        return self.attempts[-1].status_code if self.attempts else 0


def build_fields(feedback) -> dict[str, str]:
    """Webhook field names match the form's (camelCase); empty optionals are left out."""
    fields = {"companyName": feedback.company_name}
    if feedback.description:
        fields["description"] = feedback.description
    if feedback.impact_level:
        fields["impactLevel"] = feedback.impact_level
    fields["feedbackType"] = feedback.feedback_type
    return fields


def _file_summary(files: Sequence[StoredFile]) -> dict[str, str]:
    if not files:
        return {}
    return {
        "attachedFiles": ", ".join(f.original_name for f in files),
        "fileCount": str(len(files)),
    }


def _post_multipart(url: str, fields: dict, files: Sequence[StoredFile], timeout: float) -> requests.Response:
    # Every field goes in as a form part so the body is multipart even without files
    parts = [(name, (None, value)) for name, value in fields.items()]
    handles = []
    try:
        for f in files:
            if not os.path.exists(f.path):
                log_event(current_app.logger, "webhook_file_missing", logging.WARNING,
                          path=f.path, original_name=f.original_name)
                continue
            fh = open(f.path, "rb")
            handles.append(fh)
            parts.append(("files", (f.original_name, fh, f.mimetype)))
        return requests.post(url, files=parts, timeout=timeout)
    finally:
        for fh in handles:
            fh.close()


def _post_json(url: str, fields: dict, files: Sequence[StoredFile], timeout: float) -> requests.Response:
    return requests.post(url, json={**fields, **_file_summary(files)}, timeout=timeout)


def _get_query(url: str, fields: dict, files: Sequence[StoredFile], timeout: float) -> requests.Response:
    if files:
        log_event(current_app.logger, "webhook_get_without_files",
                  file_count=len(files), attached_files=[f.original_name for f in files])
    return requests.get(url, params={**fields, **_file_summary(files)}, timeout=timeout)


def _attempt(strategy: str, url: str, send: Callable[[], requests.Response]) -> DeliveryAttempt:
    attempt = DeliveryAttempt(strategy=strategy, url=url)
    start = time.perf_counter()
    try:
        resp = send()
        attempt.status_code = resp.status_code
        attempt.ok = 200 <= resp.status_code < 300
        attempt.body = (resp.text or "")[:_BODY_LOG_LIMIT]
    except requests.RequestException as ex:
        attempt.error = str(ex) or type(ex).__name__
    except OSError as ex:
        # attachment vanished between save and relay
        attempt.error = str(ex)
    attempt.latency_ms = int((time.perf_counter() - start) * 1000)

    log_event(
        current_app.logger,
        "webhook_attempt",
        logging.INFO if attempt.ok else logging.WARNING,
        strategy=strategy,
        url=url,
        status=attempt.status_code,
        ok=attempt.ok,
        error=attempt.error,
        latency_ms=attempt.latency_ms,
        body=attempt.body,
    )
    return attempt


def deliver(feedback, files: Sequence[StoredFile] = ()) -> DeliveryResult:
    """Run the fallback chain until one attempt answers 2xx."""
    cfg = current_app.config
    primary_url = cfg.get("WEBHOOK_URL") or ""
    test_url = cfg.get("WEBHOOK_TEST_URL") or ""
    timeout = float(cfg.get("WEBHOOK_TIMEOUT") or 15)

    result = DeliveryResult()
    if not primary_url and not test_url:
        log_event(current_app.logger, "webhook_skipped", logging.WARNING, reason="no webhook url configured")
        result.skipped = True
        return result

    fields = build_fields(feedback)

    if primary_url:
        result.attempts.append(_attempt(
            STRATEGY_MULTIPART, primary_url,
            lambda: _post_multipart(primary_url, fields, files, timeout),
        ))

    if test_url and not result.ok and test_url != primary_url:
        result.attempts.append(_attempt(
            STRATEGY_MULTIPART, test_url,
            lambda: _post_multipart(test_url, fields, files, timeout),
        ))

    if test_url and not result.ok:
        result.attempts.append(_attempt(
            STRATEGY_JSON, test_url,
            lambda: _post_json(test_url, fields, files, timeout),
        ))

    if test_url and not result.ok and result.status_code == 404:
        result.attempts.append(_attempt(
            STRATEGY_GET, test_url,
            lambda: _get_query(test_url, fields, files, timeout),
        ))

    return result


def relay_feedback(feedback, files: Sequence[StoredFile] = ()) -> DeliveryResult:
    """
    deliver() plus bookkeeping. Whatever happens, the caller gets a result;
    the submission already succeeded once the feedback row exists.
    """
    try:
        result = deliver(feedback, files)
    except Exception:
        current_app.logger.exception("webhook_relay_error")
        return DeliveryResult()

    for attempt in result.attempts:
        try:
            storage.record_delivery_attempt(feedback.id, attempt)
        except Exception:
            db.session.rollback()
            current_app.logger.exception("webhook_delivery_log_error")
            break

    log_event(
        current_app.logger,
        "webhook_result",
        logging.INFO if result.ok else logging.WARNING,
        feedback_id=feedback.id,
        ok=result.ok,
        skipped=result.skipped,
        status=result.status_code,
        attempts=len(result.attempts),
    )
    return result
