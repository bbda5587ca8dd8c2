import json
import socket

from pitch_scorer.config import UDP_IP, UDP_PORT_ENGINE
from pitch_scorer.protocol import validate_message_or_raise


class NetworkTransmitter:
    def __init__(self, ip: str = UDP_IP, port: int = UDP_PORT_ENGINE):
        self.dest = (ip, port)
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)

    def send(self, payload: dict) -> None:
        try:
            # validate and raise on contract mismatch
            validate_message_or_raise(payload)
            self.sock.sendto(json.dumps(payload).encode("utf-8"), self.dest)
        except (TypeError, ValueError, OSError) as e:
            print(f"Send Error: {e}")

    def send_reading(self, reading, recording: bool) -> None:
        """Sends one analysis tick to the display."""
        payload = reading.to_message()
        payload["recording"] = recording
        self.send(payload)

    def send_score(self, score: int) -> None:
        """Sends the final score once recording stops."""
        self.send({"score": int(score), "recording": False})

    def close(self) -> None:
        """Closes the UDP socket."""
        self.sock.close()
