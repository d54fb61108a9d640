"""
WebSocket hubs for collaborative diagram editing and pipeline status updates.

Clients send JSON messages of the form ``{"type": "<message>", ...}`` and
receive ``{"event": "<Event>", "payload": ...}``. Diagram edits go through
DiagramService first and are relayed to the other members of the
``diagram-<id>`` room only once persisted. Failures are reported back to the
sender as an ``Error`` event; the connection stays open.
"""
import json
import logging
from typing import Any, Dict, Set

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from pydantic import ValidationError as PydanticValidationError
from starlette.concurrency import run_in_threadpool

from c4catalog.application.diagram_service import DiagramService
from c4catalog.dependencies import get_broadcast_channel, get_diagram_service
from c4catalog.domain.entities import DiagramElement, DiagramRelationship
from c4catalog.domain.errors import DomainError, ValidationError
from c4catalog.domain.ports import BroadcastChannel
from c4catalog.realtime.hub import diagram_room, execution_room, pipeline_room

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/hubs")

ANONYMOUS = "Anonymous"


async def send_error(websocket: WebSocket, message: str) -> None:
    await websocket.send_json({"event": "Error", "payload": {"error": message}})


def require_field(message: Dict[str, Any], field: str) -> str:
    value = message.get(field)
    if not value or not isinstance(value, str):
        raise ValidationError(f"'{field}' is required")
    return value


async def receive_message(websocket: WebSocket) -> Dict[str, Any]:
    raw = await websocket.receive_text()
    try:
        message = json.loads(raw)
    except json.JSONDecodeError:
        raise ValidationError("Message is not valid JSON")
    if not isinstance(message, dict):
        raise ValidationError("Message must be a JSON object")
    return message


async def handle_diagram_message(
    websocket: WebSocket,
    message: Dict[str, Any],
    user: str,
    joined: Set[str],
    diagrams: DiagramService,
    channel: BroadcastChannel,
) -> None:
    kind = message.get("type")
    diagram_id = require_field(message, "diagramId")
    room = diagram_room(diagram_id)

    if kind == "joinDiagram":
        await channel.join_room(room, websocket)
        joined.add(room)
        await channel.broadcast(room, "UserJoined", {"user": user})
        logger.debug("User %s joined diagram %s (%d viewers)", user, diagram_id, channel.room_size(room))

    elif kind == "leaveDiagram":
        await channel.leave_room(room, websocket)
        joined.discard(room)
        await channel.broadcast(room, "UserLeft", {"user": user})
        logger.debug("User %s left diagram %s", user, diagram_id)

    elif kind == "addElement":
        element = DiagramElement.model_validate(message.get("element") or {})
        await run_in_threadpool(diagrams.add_element, diagram_id, element)
        await channel.broadcast_to_others(room, "ElementAdded", element, sender=websocket)
        logger.debug("Element %s added to diagram %s", element.id, diagram_id)

    elif kind == "updateElement":
        element = DiagramElement.model_validate(message.get("element") or {})
        await run_in_threadpool(diagrams.replace_element, diagram_id, element)
        await channel.broadcast_to_others(room, "ElementUpdated", element, sender=websocket)
        logger.debug("Element %s updated in diagram %s", element.id, diagram_id)

    elif kind == "removeElement":
        element_id = require_field(message, "elementId")
        await run_in_threadpool(diagrams.remove_element, diagram_id, element_id)
        await channel.broadcast_to_others(room, "ElementRemoved", {"elementId": element_id}, sender=websocket)
        logger.debug("Element %s removed from diagram %s", element_id, diagram_id)

    elif kind == "addRelationship":
        relationship = DiagramRelationship.model_validate(message.get("relationship") or {})
        await run_in_threadpool(diagrams.add_relationship, diagram_id, relationship)
        await channel.broadcast_to_others(room, "RelationshipAdded", relationship, sender=websocket)
        logger.debug("Relationship %s added to diagram %s", relationship.id, diagram_id)

    elif kind == "removeRelationship":
        relationship_id = require_field(message, "relationshipId")
        await run_in_threadpool(diagrams.remove_relationship, diagram_id, relationship_id)
        await channel.broadcast_to_others(
            room, "RelationshipRemoved", {"relationshipId": relationship_id}, sender=websocket
        )
        logger.debug("Relationship %s removed from diagram %s", relationship_id, diagram_id)

    else:
        raise ValidationError(f"Unknown message type: {kind}")


@router.websocket("/diagrams")
async def diagram_hub(
    websocket: WebSocket,
    diagrams: DiagramService = Depends(get_diagram_service),
    channel: BroadcastChannel = Depends(get_broadcast_channel),
):
    """
    Collaborative diagram editing.

    Messages: joinDiagram, leaveDiagram, addElement, updateElement,
    removeElement, addRelationship, removeRelationship. Every message carries
    ``diagramId``; edits carry ``element``, ``elementId``, ``relationship``
    or ``relationshipId``.
    """
    await websocket.accept()
    user = websocket.query_params.get("user") or ANONYMOUS
    joined: Set[str] = set()

    try:
        while True:
            try:
                message = await receive_message(websocket)
                await handle_diagram_message(websocket, message, user, joined, diagrams, channel)
            except DomainError as e:
                await send_error(websocket, str(e))
            except PydanticValidationError as e:
                await send_error(websocket, f"Invalid payload: {e.error_count()} validation error(s)")

    except WebSocketDisconnect:
        logger.debug("User %s disconnected from diagram hub", user)
    finally:
        for room in joined:
            await channel.leave_room(room, websocket)


@router.websocket("/pipelines")
async def pipeline_hub(
    websocket: WebSocket,
    channel: BroadcastChannel = Depends(get_broadcast_channel),
):
    """
    Pipeline and execution status updates.

    Messages: joinPipeline/leavePipeline with ``pipelineId`` and
    joinExecution/leaveExecution with ``executionId``. Status changes and log
    entries are published by the HTTP endpoints that make them.
    """
    await websocket.accept()
    joined: Set[str] = set()

    try:
        while True:
            try:
                message = await receive_message(websocket)
                kind = message.get("type")
                if kind in ("joinPipeline", "leavePipeline"):
                    room = pipeline_room(require_field(message, "pipelineId"))
                elif kind in ("joinExecution", "leaveExecution"):
                    room = execution_room(require_field(message, "executionId"))
                else:
                    raise ValidationError(f"Unknown message type: {kind}")

                if kind.startswith("join"):
                    await channel.join_room(room, websocket)
                    joined.add(room)
                else:
                    await channel.leave_room(room, websocket)
                    joined.discard(room)
                await websocket.send_json({"event": "Ack", "payload": {"type": kind, "room": room}})
            except DomainError as e:
                await send_error(websocket, str(e))

    except WebSocketDisconnect:
        logger.debug("Client disconnected from pipeline hub")
    finally:
        for room in joined:
            await channel.leave_room(room, websocket)
