from .proxy import RelayResponse, build_relay_headers, relay_stream

__all__ = ["RelayResponse", "build_relay_headers", "relay_stream"]
