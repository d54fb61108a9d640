"""Tests for the room broadcaster and the WebSocket hubs."""
from __future__ import annotations

import asyncio

import pytest
from unittest.mock import AsyncMock

from c4catalog.realtime.hub import RoomBroadcaster, broadcaster, diagram_room, execution_room


def run(coro):
    return asyncio.run(coro)


@pytest.fixture(autouse=True)
def empty_rooms():
    broadcaster.rooms.clear()
    yield
    broadcaster.rooms.clear()


class TestRoomBroadcaster:
    """Test room membership and fan-out."""

    def test_broadcast_skips_sender(self):
        hub = RoomBroadcaster()
        sender = AsyncMock()
        other = AsyncMock()
        run(hub.join_room("diagram-d1", sender))
        run(hub.join_room("diagram-d1", other))

        delivered = run(hub.broadcast_to_others("diagram-d1", "ElementAdded", {"id": "e1"}, sender=sender))

        assert delivered == 1
        other.send_json.assert_awaited_once_with({"event": "ElementAdded", "payload": {"id": "e1"}})
        sender.send_json.assert_not_awaited()

    def test_failed_connection_is_dropped(self):
        hub = RoomBroadcaster()
        broken = AsyncMock()
        broken.send_json.side_effect = RuntimeError("closed")
        healthy = AsyncMock()
        run(hub.join_room("room", broken))
        run(hub.join_room("room", healthy))

        delivered = run(hub.broadcast("room", "Ping", {}))

        assert delivered == 1
        assert hub.room_size("room") == 1

    def test_leave_room_removes_empty_rooms(self):
        hub = RoomBroadcaster()
        connection = AsyncMock()
        run(hub.join_room("room", connection))
        run(hub.leave_room("room", connection))
        run(hub.leave_room("unknown", connection))

        assert hub.rooms == {}

    def test_room_names(self):
        assert diagram_room("d1") == "diagram-d1"
        assert execution_room("x1") == "execution-x1"


class TestDiagramHub:
    """Test collaborative diagram editing over WebSockets."""

    @pytest.fixture
    def diagram(self, client):
        response = client.post("/api/diagrams", json={"id": "d1", "name": "Context", "type": "context"})
        assert response.status_code == 201
        client.post("/api/diagrams/d1/elements", json={"id": "e1", "name": "Customer", "type": "person"})
        return response.json()

    def test_edits_are_persisted_and_relayed(self, client, diagram):
        with client.websocket_connect("/hubs/diagrams?user=alice") as alice, \
                client.websocket_connect("/hubs/diagrams?user=bob") as bob:
            alice.send_json({"type": "joinDiagram", "diagramId": "d1"})
            assert alice.receive_json() == {"event": "UserJoined", "payload": {"user": "alice"}}

            bob.send_json({"type": "joinDiagram", "diagramId": "d1"})
            assert alice.receive_json()["payload"] == {"user": "bob"}
            assert bob.receive_json()["payload"] == {"user": "bob"}

            bob.send_json({
                "type": "addElement",
                "diagramId": "d1",
                "element": {"id": "e2", "name": "Billing", "type": "system"},
            })
            message = alice.receive_json()
            assert message["event"] == "ElementAdded"
            assert message["payload"]["id"] == "e2"

            bob.send_json({
                "type": "addRelationship",
                "diagramId": "d1",
                "relationship": {"id": "r1", "sourceId": "e1", "targetId": "e2"},
            })
            message = alice.receive_json()
            assert message["event"] == "RelationshipAdded"
            assert message["payload"]["sourceId"] == "e1"

            alice.send_json({"type": "removeElement", "diagramId": "d1", "elementId": "e2"})
            assert bob.receive_json() == {"event": "ElementRemoved", "payload": {"elementId": "e2"}}

        stored = client.get("/api/diagrams/d1").json()
        assert [e["id"] for e in stored["elements"]] == ["e1"]
        assert stored["relationships"] == []

    def test_errors_go_back_to_sender(self, client, diagram):
        with client.websocket_connect("/hubs/diagrams") as ws:
            ws.send_json({
                "type": "addElement",
                "diagramId": "d1",
                "element": {"id": "e1", "name": "Duplicate"},
            })
            message = ws.receive_json()
            assert message["event"] == "Error"
            assert "already exists" in message["payload"]["error"]

            ws.send_json({"type": "removeElement", "diagramId": "ghost", "elementId": "e1"})
            assert ws.receive_json()["event"] == "Error"

            ws.send_text("not json")
            assert ws.receive_json()["payload"]["error"] == "Message is not valid JSON"

            ws.send_json({"type": "teleport", "diagramId": "d1"})
            assert "Unknown message type" in ws.receive_json()["payload"]["error"]

    def test_leave_diagram(self, client, diagram):
        with client.websocket_connect("/hubs/diagrams") as ws:
            ws.send_json({"type": "joinDiagram", "diagramId": "d1"})
            ws.receive_json()
            assert broadcaster.room_size("diagram-d1") == 1

            ws.send_json({"type": "leaveDiagram", "diagramId": "d1"})
            # Messages are handled in order, so the error reply means the leave is done
            ws.send_json({"type": "leaveDiagram"})
            assert ws.receive_json()["event"] == "Error"
            assert broadcaster.room_size("diagram-d1") == 0


class TestPipelineHub:
    """Test execution status notifications."""

    def test_cancel_notifies_execution_watchers(self, client):
        client.post("/api/pipelines", json={"id": "ci", "serviceId": "svc-a", "name": "CI"})
        execution = client.post("/api/pipelines/ci/executions").json()

        with client.websocket_connect("/hubs/pipelines") as ws:
            ws.send_json({"type": "joinExecution", "executionId": execution["id"]})
            ack = ws.receive_json()
            assert ack["event"] == "Ack"
            assert ack["payload"]["room"] == f"execution-{execution['id']}"

            client.post(f"/api/pipelines/executions/{execution['id']}/cancel")

            message = ws.receive_json()
            assert message == {
                "event": "ExecutionStatusChanged",
                "payload": {"executionId": execution["id"], "status": "cancelled"},
            }

    def test_unknown_message(self, client):
        with client.websocket_connect("/hubs/pipelines") as ws:
            ws.send_json({"type": "joinEverything"})
            assert ws.receive_json()["event"] == "Error"
