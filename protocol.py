class PacketType:
    # Server -> client
    INIT = "init"
    PLAYER_JOINED = "playerJoined"
    PLAYER_MOVED = "playerMoved"
    PLAYER_LEFT = "playerLeft"
    BLOCK_PLACED = "blockPlaced"
    BLOCK_REMOVED = "blockRemoved"
    # Optional reply to the requester of a placeBlock/removeBlock that had no effect
    BLOCK_REJECTED = "blockRejected"

    # Client -> server
    PLAYER_MOVE = "playerMove"
    PLACE_BLOCK = "placeBlock"
    REMOVE_BLOCK = "removeBlock"
