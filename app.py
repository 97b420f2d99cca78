import os
import socket

from statboard.logging_config import configure_logging
from statboard.ui.dash_app import build_context, build_dash_app, resolve_config_root

configure_logging()

context = build_context(resolve_config_root())
app = build_dash_app(context)
server = app.server


def find_free_port(start_port: int, attempts: int = 100) -> int:
    """First port from start_port on that nothing is listening on."""
    for port in range(start_port, start_port + attempts):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            if s.connect_ex(("localhost", port)) != 0:
                return port
    return start_port


if __name__ == "__main__":
    cfg = context.global_config
    preferred_port = int(os.getenv("PORT", cfg.port))
    final_port = find_free_port(preferred_port)

    # Dash debug tooling follows dev mode unless DEBUG says otherwise
    debug = os.getenv("DEBUG", "1" if cfg.dev_mode else "0") == "1"

    if final_port != preferred_port:
        print(f"Warning: Port {preferred_port} was taken. Starting on {final_port}")

    app.run(host="0.0.0.0", port=final_port, debug=debug)
