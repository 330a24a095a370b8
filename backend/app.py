from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend import config
from backend.routers import terrain

app = FastAPI(
    title="flightterrain API",
    description="Terrain scenes for drone flight tracks",
    version="0.1.0",
)

# ---------------------------------------------------------------------------
# CORS -- allow the renderer's dev server
# ---------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
app.include_router(terrain.router)


@app.get("/")
async def root():
    return {"status": "ok", "service": "flightterrain API"}
