import errno
import json
import socket

from pitch_scorer.config import UDP_IP, UDP_PORT_ENGINE
from pitch_scorer.protocol import is_structurally_valid


class TunerReceiver:
    def __init__(self, ip=UDP_IP, port=UDP_PORT_ENGINE):
        """
        Initializes the UDP receiver for the tuner engine's JSON readings.
        """
        self.ip = ip
        self.port = port
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)

        self.sock.setblocking(False)
        self.packet_size = 1024

        # Internal state to hold the latest data
        self.latest_data = {  # Initialize with dummy values
            "amplitude": 0.0,
            "pitch": None,
            "note": None,
            "octave": None,
            "cents": None,
            "detune": 0.0,
            "recording": False,
        }
        self.final_score = None
        self._is_bound = False

    def bind(self):
        """Binds the socket to the address. Call this once before receiving."""
        try:
            self.sock.bind((self.ip, self.port))
            self._is_bound = True
            print(f"Receiver bound to {self.ip}:{self.port}")
        except OSError as e:
            print(f"Error binding socket: {e}")

    def apply_packet(self, data: bytes) -> bool:
        """Merges one packet into the latest state. Returns False for malformed packets."""
        try:
            msg = json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            return False
        if not is_structurally_valid(msg):
            return False

        if "score" in msg:
            self.final_score = msg["score"]
        elif msg.get("recording"):
            self.final_score = None  # a new take started
        self.latest_data = {**self.latest_data, **{k: v for k, v in msg.items() if k != "score"}}
        return True

    def get_latest(self):
        """
        Non-blocking fetch. Clears the UDP buffer to get the MOST RECENT packet.
        Returns the data dictionary.
        """
        if not self._is_bound:
            self.bind()

        # We loop until the buffer is empty. The engine sends one packet per
        # analysis tick, far more than a terminal can show.
        while True:
            try:
                data, _ = self.sock.recvfrom(self.packet_size)
                self.apply_packet(data)
            except socket.error as e:
                # EAGAIN or EWOULDBLOCK means the buffer is finally empty
                err = e.args[0]
                if err == errno.EAGAIN or err == errno.EWOULDBLOCK:
                    break
                else:
                    # A real error occurred
                    print(f"Socket error: {e}")
                    break

        return self.latest_data

    def close(self):
        """Closes the socket."""
        self.sock.close()
