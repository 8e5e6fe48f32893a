"""Single-pick endpoints and the operator views of the ledger."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify
from flask_login import current_user, login_required

from database.models import isoformat
from web.extensions import get_services
from web.identity import resolve_identity


picks_bp = Blueprint("picks", __name__, url_prefix="/api")


@picks_bp.route("/status")
def status():
    """Tell the caller whether they can still pick."""
    services = get_services()
    caller = resolve_identity()
    eligibility = services.ledger.check_eligibility(caller.identity)
    return jsonify({
        "canPick": eligibility.eligible,
        "totalParticipants": eligibility.total_participants,
        "clientIP": caller.identity,
        "emailService": services.email_service,
        "message": (
            "Ready to make a pick!"
            if eligibility.eligible
            else "You have already made a pick from this device/network."
        ),
    })


@picks_bp.route("/pick", methods=["POST"])
def pick():
    caller = resolve_identity()
    record = get_services().ledger.pick(caller.identity, caller.user_agent)
    return jsonify({
        "success": True,
        "selectedParticipant": record.selected_participant,
        "timestamp": isoformat(record.timestamp),
        "message": "Congratulations! Here is your random pick.",
    })


@picks_bp.route("/participants")
def participants():
    return jsonify({"participants": get_services().ledger.list_participants()})


@picks_bp.route("/picks-log")
@login_required
def picks_log():
    """Last picks with totals, for operators."""
    return jsonify(get_services().ledger.picks_log().to_dict())


@picks_bp.route("/reset", methods=["POST"])
@login_required
def reset():
    get_services().ledger.reset_all()
    current_app.logger.warning("Picks reset by operator '%s'", current_user.username)
    return jsonify({"success": True, "message": "All picks have been reset"})
