import json
from typing import Any, Dict, Union

from packets import BasePacket, MalformedPacket, parse_raw_packet


class PacketFactory:
    @staticmethod
    def build(packet: Union[BasePacket, Dict[str, Any]]) -> str:
        """Serialize a packet (or an already-shaped message dict) to a JSON string."""
        if isinstance(packet, BasePacket):
            packet = packet.to_message()
        return json.dumps(packet, separators=(",", ":"))

    @staticmethod
    def parse(raw_data: Union[str, bytes]):
        """Deserialize one wire message into a packet object.

        Raises MalformedPacket for undecodable JSON or invalid fields.
        """
        try:
            message = json.loads(raw_data)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise MalformedPacket(f"invalid JSON: {e}") from e
        return parse_raw_packet(message)
