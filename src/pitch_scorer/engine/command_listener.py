import json
import queue
import socket
import threading

from pitch_scorer.config import UDP_IP, UDP_PORT_COMMANDS
from pitch_scorer.protocol import validate_command_or_raise


class CommandListener:
    def __init__(self, ip: str = UDP_IP, port: int = UDP_PORT_COMMANDS):
        """Receives recording commands and parameter updates from the frontend.

        Messages are only queued here. The engine loop drains the queue with
        pending(), so scoring and analyzer state are never touched from this
        thread.
        """
        self.commands = queue.Queue()
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self.sock.bind((ip, port))
        self.running = True
        self.thread = threading.Thread(target=self._listen, daemon=True)
        self.thread.start()

    def _listen(self) -> None:
        """Listens for commands from the frontend."""
        self.sock.settimeout(0.1)  # Allow thread to exit gracefully
        while self.running:
            try:
                msg, _ = self.sock.recvfrom(1024)
            except socket.timeout:
                continue
            except OSError:
                break  # socket closed
            self.handle_datagram(msg)

    def handle_datagram(self, msg: bytes) -> bool:
        """Decodes and queues one datagram. Malformed ones are dropped."""
        try:
            update = json.loads(msg.decode())
            validate_command_or_raise(update)
        except (UnicodeDecodeError, json.JSONDecodeError, TypeError, ValueError) as e:
            print(f"Dropped command: {e}")
            return False
        self.commands.put(update)
        return True

    def pending(self) -> list[dict]:
        """Returns every queued message without blocking."""
        updates = []
        while True:
            try:
                updates.append(self.commands.get_nowait())
            except queue.Empty:
                return updates

    def close(self) -> None:
        """Stops the listener thread and closes the socket."""
        self.running = False
        self.sock.close()
