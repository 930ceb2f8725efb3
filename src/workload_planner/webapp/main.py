from fastapi import FastAPI
from workload_planner import __version__
from workload_planner.logging_config import get_logger
from workload_planner.webapp.api import DB_PATH, api

logger = get_logger("webapp", "webapp")
logger.debug(f"Workload Planner API {__version__}, store at {DB_PATH}")

app = FastAPI(title="Workload Planner API", version=__version__)
app.include_router(api)


@app.get("/api/version")
def api_version():
	return {"version": __version__}

