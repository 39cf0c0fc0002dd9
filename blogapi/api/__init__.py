"""HTTP layer: app factory, routers and request/response shaping."""
