import json
import socket
import sys
import time

from pitch_scorer.config import UDP_IP, UDP_PORT_COMMANDS
from pitch_scorer.display.receiver import TunerReceiver
from pitch_scorer.engine.notes import MAX_DETUNE, detune_percent

BAR_WIDTH = 10  # characters per half of the detune bar


def detune_bar_widths(cents: float) -> tuple[float, float]:
    """Widths in percent of the flat (left) and sharp (right) halves of the detune bar.

    The side the pitch leans to shrinks with the detune, the other side stays full.
    """
    pct = detune_percent(cents)
    left = pct if cents < 0 else MAX_DETUNE
    right = pct if cents > 0 else MAX_DETUNE
    return left, right


def make_detune_bar(cents: float) -> str:
    left, right = detune_bar_widths(cents)
    n_left = int(left / MAX_DETUNE * BAR_WIDTH)
    n_right = int(right / MAX_DETUNE * BAR_WIDTH)
    return (
        " " * (BAR_WIDTH - n_left) + "=" * n_left
        + "I"
        + "=" * n_right + " " * (BAR_WIDTH - n_right)
    )


def format_reading(data: dict, final_score: int | None = None) -> str:
    """One status line for the terminal."""
    rec_marker = "[ REC ]" if data.get("recording") else "       "

    if data.get("note") is not None:
        note = f"{data['note']}{data['octave']}"
        pitch = f"{data['pitch']:7.2f} Hz"
        bar = make_detune_bar(data["cents"])
        cents = f"{data['cents']:+5.1f}c"
    else:
        note = "--"
        pitch = "     -- Hz"
        bar = make_detune_bar(0.0)
        cents = "   --"

    output = (
        f"{rec_marker} | "
        f"{note:<4} ({pitch}) | "
        f"[{bar}] {cents} | "
        f"Amp: {data.get('amplitude', 0.0):.3f}"
    )
    if final_score is not None:
        output += f" | Your score is {final_score}."
    return output


def send_command(command: str, ip: str = UDP_IP, port: int = UDP_PORT_COMMANDS) -> None:
    """Sends a recording command ("start" or "stop") to the engine."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        sock.sendto(json.dumps({"command": command}).encode(), (ip, port))
    finally:
        sock.close()


def control():
    """`pitch-scorer-control start|stop`"""
    if len(sys.argv) != 2 or sys.argv[1] not in ("start", "stop"):
        print("usage: pitch-scorer-control start|stop")
        sys.exit(2)
    send_command(sys.argv[1])


def run():
    """Command-Line tuner display using the TunerReceiver."""

    rx = TunerReceiver()
    rx.bind()

    print("\n" + "=" * 60)
    print(" PITCH SCORER CLI ".center(60, "="))
    print("=" * 60 + "\n")

    try:
        while True:
            data = rx.get_latest()

            # \r  = Go to start of line
            # \033[K = Clear everything from cursor to the right (ANSI Escape)
            sys.stdout.write("\r" + format_reading(data, rx.final_score) + "\033[K")
            sys.stdout.flush()

            time.sleep(1 / 30)
    except KeyboardInterrupt:
        print("\n\nDisplay stopped by user.")
    finally:
        rx.close()


if __name__ == "__main__":
    run()
