# smoke_client.py
"""Manual check against a running server's TCP JSON-lines listener.

    python smoke_client.py [host] [port]
"""
import json
import socket
import sys
import time

from protocol import PacketType

host = sys.argv[1] if len(sys.argv) > 1 else "127.0.0.1"
port = int(sys.argv[2]) if len(sys.argv) > 2 else 5000

sock = socket.create_connection((host, port))
stream = sock.makefile("rw", encoding="utf-8", newline="\n")


def send_message(message):
    stream.write(json.dumps(message) + "\n")
    stream.flush()
    time.sleep(0.05)


send_message({"type": PacketType.PLAYER_MOVE, "x": 1.5, "y": 2, "z": -3, "rotation": 0.25})
# well above the generated terrain so it never collides
send_message({"type": PacketType.PLACE_BLOCK, "x": 0, "y": 30, "z": 0, "blockType": "brick"})
send_message({"type": PacketType.REMOVE_BLOCK, "x": 0, "y": 30, "z": 0})
# fractional coordinate: the server logs and drops it
send_message({"type": PacketType.PLACE_BLOCK, "x": 0.5, "y": 30, "z": 0, "blockType": "brick"})

sock.settimeout(1.0)
try:
    for line in stream:
        message = json.loads(line)
        if message["type"] == PacketType.INIT:
            print(f"RECV init: clientId={message['clientId']} "
                  f"players={len(message['players'])} blocks={len(message['blocks'])}")
        else:
            print("RECV", message["type"], line.strip())
except socket.timeout:
    pass
finally:
    stream.close()
    sock.close()
print("smoke client done")
