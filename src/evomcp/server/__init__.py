"""HTTP and WebSocket transports for the gateway."""
