import logging
from fastapi import FastAPI
from fastapi.middleware.gzip import GZipMiddleware
from vpnstate.config import get_settings
from vpnstate.routers import openvpn

settings = get_settings()

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(level=(level or settings.log_level).upper(), format=LOG_FORMAT)


def create_app() -> FastAPI:
    app = FastAPI(title="OpenVPN State API", version="1.0.0")
    app.add_middleware(GZipMiddleware, minimum_size=settings.gzip_minimum_size)
    app.include_router(openvpn.router)

    @app.get("/")
    def root():
        return {"message": "OpenVPN State API", "docs": "/docs"}

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve on bind_host:bind_port with a single worker."""
    import uvicorn

    configure_logging()
    uvicorn.run(app, host=settings.bind_host, port=settings.bind_port, workers=1, log_config=None)
