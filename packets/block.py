from protocol import PacketType
from . import BasePacket, block_type, coordinate, passthrough
from .registry import register_packet


@register_packet
class PlaceBlockPacket(BasePacket):
    packet_type = PacketType.PLACE_BLOCK
    fields = {"x": coordinate, "y": coordinate, "z": coordinate, "blockType": block_type}


@register_packet
class RemoveBlockPacket(BasePacket):
    packet_type = PacketType.REMOVE_BLOCK
    fields = {"x": coordinate, "y": coordinate, "z": coordinate}


@register_packet
class BlockPlacedPacket(BasePacket):
    packet_type = PacketType.BLOCK_PLACED
    fields = {"clientId": coordinate, "x": coordinate, "y": coordinate, "z": coordinate,
              "blockType": block_type}


@register_packet
class BlockRemovedPacket(BasePacket):
    packet_type = PacketType.BLOCK_REMOVED
    fields = {"clientId": coordinate, "x": coordinate, "y": coordinate, "z": coordinate,
              "blockType": block_type}


@register_packet
class BlockRejectedPacket(BasePacket):
    packet_type = PacketType.BLOCK_REJECTED
    fields = {"action": passthrough, "x": coordinate, "y": coordinate, "z": coordinate}
