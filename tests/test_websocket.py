"""
End-to-end tests for the /ws endpoint and the REST routes.

The app runs in FastAPI's TestClient with a file message store in a
temporary directory.
"""

import shutil
import tempfile
import unittest

from fastapi.testclient import TestClient

from roomchat.core import state
from roomchat.main import app
from roomchat.services.connection_manager import ConnectionManager
from roomchat.services.file_message_store import FileMessageStore


class ChatAppTestCase(unittest.TestCase):
    """Starts the app with a fresh store and connection manager per test."""

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        state.message_store = FileMessageStore(self.tmpdir)
        state.connection_manager = ConnectionManager()
        self.client = TestClient(app)
        self.client.__enter__()

    def tearDown(self):
        self.client.__exit__(None, None, None)
        state.message_store = None
        state.coordinator = None
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def join(self, ws, room, username, password=None):
        frame = {"action": "joinRoom", "room": room, "username": username}
        if password is not None:
            frame["password"] = password
        ws.send_json(frame)
        return ws.receive_json()


class TestWebSocketProtocol(ChatAppTestCase):
    """Test cases for the chat protocol over real WebSocket frames."""

    def test_protected_room_scenario(self):
        """Test that a wrong password is rejected without A noticing anything."""
        with self.client.websocket_connect("/ws") as a:
            joined = self.join(a, "CR3", "A", password="inktober30")
            self.assertEqual(
                joined,
                {"type": "roomJoined", "room": "CR3", "username": "A", "roomName": "Drawing", "messages": []},
            )

            with self.client.websocket_connect("/ws") as b:
                self.assertEqual(self.join(b, "CR3", "B", password="wrong"), {"type": "passwordRequired", "room": "CR3"})

            a.send_json({"action": "message", "text": "hi"})
            message = a.receive_json()

            self.assertEqual(message["type"], "message")
            self.assertEqual(message["user"], "A")
            self.assertEqual(message["text"], "hi")
            self.assertEqual(message["room"], "CR3")
            self.assertTrue(message["id"])
            self.assertTrue(message["timestamp"])

    def test_open_room_without_password_field(self):
        """Test that CR1 is joinable with no password field at all."""
        with self.client.websocket_connect("/ws") as a:
            joined = self.join(a, "CR1", "A")
            self.assertEqual(joined["type"], "roomJoined")
            self.assertEqual(joined["roomName"], "General")

    def test_two_members_exchange_messages(self):
        """Test join notification, broadcast to both members and leave notification."""
        with self.client.websocket_connect("/ws") as a, self.client.websocket_connect("/ws") as b:
            self.join(a, "CR1", "alice")
            self.assertEqual(self.join(b, "CR1", "bob")["type"], "roomJoined")
            self.assertEqual(a.receive_json(), {"type": "userJoined", "user": "bob", "message": "bob joined the room"})

            b.send_json({"action": "message", "text": "hey alice"})
            to_b = b.receive_json()
            to_a = a.receive_json()
            self.assertEqual(to_a, to_b)
            self.assertEqual(to_a["user"], "bob")

            b.send_json({"action": "leaveRoom"})
            self.assertEqual(a.receive_json(), {"type": "userLeft", "user": "bob", "message": "bob left the room"})

    def test_disconnect_notifies_room(self):
        """Test that closing a socket tells the remaining members."""
        with self.client.websocket_connect("/ws") as a:
            self.join(a, "CR2", "alice")
            with self.client.websocket_connect("/ws") as b:
                self.join(b, "CR2", "bob")
                a.receive_json()  # userJoined

            self.assertEqual(a.receive_json(), {"type": "userLeft", "user": "bob", "message": "bob disconnected"})

    def test_history_on_rejoin(self):
        """Test that a later connection receives the persisted messages."""
        with self.client.websocket_connect("/ws") as a:
            self.join(a, "CR1", "alice")
            a.send_json({"action": "message", "text": "remember me"})
            sent = a.receive_json()

        with self.client.websocket_connect("/ws") as b:
            joined = self.join(b, "CR1", "bob")

        self.assertEqual(len(joined["messages"]), 1)
        stored = joined["messages"][0]
        for field in ("id", "user", "room", "text", "timestamp"):
            self.assertEqual(stored[field], sent[field])

    def test_message_before_join_is_dropped(self):
        """Test that a message outside a room is neither stored nor echoed."""
        with self.client.websocket_connect("/ws") as a:
            a.send_json({"action": "message", "text": "into the void"})
            joined = self.join(a, "CR1", "alice")

        self.assertEqual(joined["type"], "roomJoined")
        self.assertEqual(joined["messages"], [])

    def test_invalid_frames(self):
        """Test error frames for bad JSON and unknown actions, and dropped bad payloads."""
        with self.client.websocket_connect("/ws") as a:
            a.send_text("not json")
            self.assertEqual(a.receive_json(), {"type": "error", "message": "Invalid JSON"})

            a.send_json({"action": "dance"})
            self.assertEqual(a.receive_json(), {"type": "error", "message": "Unknown action: dance"})

            a.send_json({"action": "joinRoom", "username": "alice"})
            self.assertEqual(self.join(a, "CR1", "alice")["type"], "roomJoined")


class TestRestRoutes(ChatAppTestCase):
    """Test cases for the HTTP endpoints."""

    def test_list_rooms_hides_passwords(self):
        response = self.client.get("/rooms")
        self.assertEqual(response.status_code, 200)

        rooms = {room["id"]: room for room in response.json()}
        self.assertEqual(set(rooms), {"CR1", "CR2", "CR3", "CR4", "CR5"})
        self.assertFalse(rooms["CR1"]["protected"])
        self.assertTrue(rooms["CR3"]["protected"])
        self.assertNotIn("password", rooms["CR3"])

    def test_get_room(self):
        self.assertEqual(self.client.get("/rooms/CR4").json()["name"], "Anime")
        self.assertEqual(self.client.get("/rooms/CR9").status_code, 404)

    def test_health_and_metrics(self):
        with self.client.websocket_connect("/ws") as a:
            self.join(a, "CR1", "alice")
            a.send_json({"action": "message", "text": "count me"})
            a.receive_json()

            health = self.client.get("/health").json()
            self.assertEqual(health["status"], "healthy")
            self.assertEqual(health["connections"], 1)
            self.assertEqual(health["active_rooms_with_members"], 1)

            metrics = self.client.get("/metrics").json()
            self.assertEqual(metrics["messages_persisted"], 1)
            self.assertEqual(metrics["messages_dropped"], 0)
            self.assertEqual(metrics["active_rooms"], {"CR1": 1})
            self.assertEqual(metrics["store_backend"], "file")

    def test_index_serves_client(self):
        response = self.client.get("/")
        self.assertEqual(response.status_code, 200)
        self.assertIn("text/html", response.headers["content-type"])


if __name__ == "__main__":
    unittest.main()
