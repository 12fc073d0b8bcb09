"""Run the room relay: python -m relay"""

import uvicorn

from relay.server.settings import RelayServerSettings


def main() -> None:
    settings = RelayServerSettings()
    uvicorn.run("relay.server.app:get_app", factory=True, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
