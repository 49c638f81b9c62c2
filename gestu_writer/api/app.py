from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routes import classify
from gestu_writer.api.ws import router as ws_router

app = FastAPI(title="Gestu Writer API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(classify.router)
app.include_router(ws_router)
