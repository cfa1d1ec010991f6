"""FastAPI application and startup."""

import sys

from fastapi import FastAPI

from taskline.adapters.storage import init_db, make_engine, make_session_factory
from taskline.adapters.web import message_routes
from taskline.adapters.web.message_routes import message_router
from taskline.config import AppConfig, __version__
from taskline.jobs import build_job

app = FastAPI(title="Taskline", version=__version__)
app.include_router(message_router)


@app.on_event("startup")
def startup_event():
    if message_routes.job is not None:
        return
    config = AppConfig.from_env()
    engine = make_engine(config.database_url)
    init_db(engine)
    message_routes.job = build_job(make_session_factory(engine), config=config)
    print(f"Taskline ready (database: {engine.url.render_as_string(hide_password=True)})", file=sys.stderr)


@app.get("/health")
def health():
    return {"status": "ok", "version": __version__}


def main():
    import uvicorn

    config = AppConfig.from_env()
    uvicorn.run(app, host="0.0.0.0", port=config.port, log_level="info")


if __name__ == "__main__":
    main()
