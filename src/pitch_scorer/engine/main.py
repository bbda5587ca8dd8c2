import time

from pitch_scorer.config import POLL_INTERVAL, UDP_PORT_COMMANDS, UDP_PORT_ENGINE

from .command_listener import CommandListener
from .debug_monitor import TunerMonitor
from .session import TunerSession
from .stream import AudioStream
from .transmitter import NetworkTransmitter


def run_engine():
    stream = AudioStream()
    transmitter = NetworkTransmitter()
    monitor = TunerMonitor(summary_interval=2.0, enable_event_logging=True)
    session = TunerSession(stream, monitor=monitor)

    # Start listening for recording commands from the frontend
    command_listener = CommandListener()

    print(f"Tuner Active. Listening for commands on {UDP_PORT_COMMANDS}, Sending data on {UDP_PORT_ENGINE}.")

    try:
        while True:
            for update in command_listener.pending():
                score = session.handle_command(update)
                if score is not None:
                    transmitter.send_score(score)

            reading = session.step()
            transmitter.send_reading(reading, session.scoring.running)

            time.sleep(POLL_INTERVAL)
    except KeyboardInterrupt:
        print("Shutting down engine...")
    finally:
        if session.scoring.running:
            print(f"Final score: {session.stop_scoring()}")
        stream.close()
        transmitter.close()
        command_listener.close()


if __name__ == "__main__":
    run_engine()
