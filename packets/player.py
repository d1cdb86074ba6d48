from protocol import PacketType
from . import BasePacket, coordinate, mapping, number, sequence
from .registry import register_packet


@register_packet
class InitPacket(BasePacket):
    packet_type = PacketType.INIT
    fields = {"clientId": coordinate, "players": sequence, "blocks": sequence}


@register_packet
class PlayerJoinedPacket(BasePacket):
    packet_type = PacketType.PLAYER_JOINED
    fields = {"player": mapping}


@register_packet
class PlayerMovePacket(BasePacket):
    packet_type = PacketType.PLAYER_MOVE
    fields = {"x": number, "y": number, "z": number, "rotation": number}


@register_packet
class PlayerMovedPacket(BasePacket):
    packet_type = PacketType.PLAYER_MOVED
    fields = {"clientId": coordinate, "x": number, "y": number, "z": number, "rotation": number}


@register_packet
class PlayerLeftPacket(BasePacket):
    packet_type = PacketType.PLAYER_LEFT
    fields = {"clientId": coordinate}
