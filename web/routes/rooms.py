"""Room endpoints: create, inspect and draw a winner with email results."""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from core.exceptions import InvalidInputError
from database.models import isoformat
from web.extensions import get_services
from web.identity import resolve_identity


rooms_bp = Blueprint("rooms", __name__, url_prefix="/api/rooms")


@rooms_bp.route("", methods=["POST"])
def create_room():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise InvalidInputError("Room name and email list are required")

    description = payload.get("description")
    if not isinstance(description, str):
        description = ""

    services = get_services()
    room = services.rooms.create_room(
        name=payload.get("roomName"),
        emails=payload.get("emails"),
        description=description,
        created_by=resolve_identity().identity,
    )
    return jsonify({
        "success": True,
        "roomId": room.id,
        "message": "Room created successfully",
        "room": room.to_dict(),
        "emailService": services.email_service,
    })


@rooms_bp.route("", methods=["GET"])
def list_rooms():
    services = get_services()
    return jsonify({
        "rooms": [room.to_dict() for room in services.rooms.list_rooms()],
        "emailService": services.email_service,
    })


@rooms_bp.route("/<room_id>", methods=["GET"])
def get_room(room_id: str):
    services = get_services()
    return jsonify({
        "room": services.rooms.get_room(room_id).to_dict(),
        "emailService": services.email_service,
    })


@rooms_bp.route("/<room_id>/pick", methods=["POST"])
def pick_winner(room_id: str):
    """Draw the room winner; the response lists each delivery outcome."""
    services = get_services()
    result = services.rooms.pick_room_winner(room_id)
    room = result.room

    if services.email_service == "console":
        message = "Winner selected! Check server logs for email previews."
    else:
        message = f"Winner selected and {result.emails_sent} emails sent via {services.email_service}!"

    return jsonify({
        "success": True,
        "winner": result.winner,
        "roomName": room.name,
        "timestamp": isoformat(room.picked_at),
        "emailsSent": result.emails_sent,
        "totalParticipants": len(room.emails),
        "emailService": services.email_service,
        "deliveries": [delivery.to_dict() for delivery in result.deliveries],
        "previewUrls": [
            {
                "email": delivery.recipient,
                "url": delivery.preview_url,
                "type": "winner" if delivery.recipient == result.winner else "participant",
            }
            for delivery in result.deliveries
            if delivery.preview_url
        ],
        "message": message,
    })
