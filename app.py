"""Application entry point for the Slack Approval Relay."""

from __future__ import annotations

from pathlib import Path
from uuid import uuid4

from flask import Flask, Response, jsonify, request
from slack_sdk.signature import SignatureVerifier
import structlog
from structlog.contextvars import bind_contextvars, unbind_contextvars

from slack_approval_relay.approvals import handle_interaction, open_approval_form
from slack_approval_relay.background import run_async
from slack_approval_relay.config import AppSettings, get_settings
from slack_approval_relay.logging_config import configure_logging
from slack_approval_relay.slack_client import SlackClient


_LOGGING_CONFIGURED = False


def _load_version() -> str:
    version_file = Path(__file__).resolve().parent / "VERSION"
    if version_file.exists():
        return version_file.read_text(encoding="utf-8").strip()
    return "unknown"


def _create_slack_client(settings: AppSettings) -> SlackClient:
    """Build the single Slack client shared by every handler."""

    return SlackClient(token=settings.bot_token)


def _create_signature_verifier(settings: AppSettings) -> SignatureVerifier:
    return SignatureVerifier(signing_secret=settings.signing_secret)


def _is_signed_request(verifier: SignatureVerifier) -> bool:
    # Reading the raw body first keeps it cached for request.form.
    return verifier.is_valid_request(request.get_data(), dict(request.headers))


def _register_error_handlers(flask_app: Flask) -> None:
    """Register a JSON error handler that attaches a trace identifier."""

    @flask_app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):  # type: ignore[override]
        trace_id = str(uuid4())
        flask_app.logger.exception(
            "Unhandled application error", extra={"trace_id": trace_id}, exc_info=error
        )
        response = jsonify({"error": "internal_server_error", "trace_id": trace_id})
        response.status_code = 500
        return response


def _invalid_signature_response():
    response = jsonify({"error": "invalid_signature"})
    response.status_code = 401
    return response


def _schedule_approval_form(slack_client: SlackClient, form, trace_id: str) -> None:
    log = structlog.get_logger()
    trigger_id = form.get("trigger_id") or ""
    user_id = form.get("user_id")
    log.info("slash_command_received", command=form.get("command"), user_id=user_id)

    if not trigger_id:
        log.warning("slash_command_missing_trigger", user_id=user_id)
        return

    run_async(
        open_approval_form,
        slack_client,
        trigger_id,
        requester_id=user_id,
        trace_id=trace_id,
    )


def create_app(
    slack_client: SlackClient | None = None,
    signature_verifier: SignatureVerifier | None = None,
) -> Flask:
    """Create and configure the Flask application."""

    global _LOGGING_CONFIGURED
    settings = get_settings()
    if not _LOGGING_CONFIGURED:
        configure_logging(settings.log_level)
        _LOGGING_CONFIGURED = True

    if slack_client is None:
        slack_client = _create_slack_client(settings)
    if signature_verifier is None:
        signature_verifier = _create_signature_verifier(settings)

    flask_app = Flask(__name__)
    flask_app.config["APP_VERSION"] = _load_version()
    flask_app.logger.setLevel(settings.log_level)

    _register_error_handlers(flask_app)

    @flask_app.route("/slack/commands", methods=["POST"])
    def slack_commands():
        if not _is_signed_request(signature_verifier):
            return _invalid_signature_response()

        trace_id = str(uuid4())
        bind_contextvars(trace_id=trace_id)
        try:
            _schedule_approval_form(slack_client, request.form, trace_id)
        finally:
            unbind_contextvars("trace_id")

        # Slack only waits three seconds; the modal is opened in the background.
        return "", 200

    @flask_app.route("/slack/actions", methods=["POST"])
    def slack_actions():
        if not _is_signed_request(signature_verifier):
            return _invalid_signature_response()

        trace_id = str(uuid4())
        bind_contextvars(trace_id=trace_id)
        try:
            result = handle_interaction(slack_client, request.form.get("payload"))
        finally:
            unbind_contextvars("trace_id")

        if isinstance(result.body, dict):
            return jsonify(result.body), result.status
        return Response(result.body, status=result.status, mimetype="text/plain")

    @flask_app.route("/healthz", methods=["GET"])
    def healthz():
        health: dict[str, object] = {"ok": True}
        health["version"] = flask_app.config.get("APP_VERSION", "unknown")
        try:
            get_settings()
            health["config"] = "valid"
        except RuntimeError as exc:
            health["config"] = "invalid"
            health["config_error"] = str(exc)
            health["ok"] = False

        status = 200 if health["ok"] else 503
        return jsonify(health), status

    return flask_app


if __name__ == "__main__":  # pragma: no cover - manual execution helper
    application = create_app()
    application.run(host="0.0.0.0", port=get_settings().port)
