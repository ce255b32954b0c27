"""
FastAPI web server — stateless topology and diagnosis endpoints.

Every request carries its own file map (identifier → raw text), so the
server keeps no session state; a browser front end fetches the config
repository itself and posts the files along with the failing keys.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from matrixdiag.diagnosis import describe_report, localize_failures, report_to_dict
from matrixdiag.geometry import key_at, key_outlines, layout_bounds
from matrixdiag.reference import (
    DatabaseError, ReferenceDatabase, database_template, parse_database,
)
from matrixdiag.topology import (
    KeyboardTopology, TopologyError, build_topology, topology_to_dict,
)


log = logging.getLogger(__name__)

# ── App ────────────────────────────────────────────────────────────

app = FastAPI(title="Matrix Diagnoser")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Models ─────────────────────────────────────────────────────────

class SourcesRequest(BaseModel):
    files: dict[str, str]


class DiagnoseRequest(SourcesRequest):
    failing: list[int] = Field(default_factory=list)
    database: dict | None = None


class KeyAtRequest(SourcesRequest):
    x: float
    y: float


# ── Helpers ────────────────────────────────────────────────────────

def _topology(files: dict[str, str]) -> KeyboardTopology:
    try:
        return build_topology(files)
    except TopologyError as exc:
        raise HTTPException(422, {"reason": exc.reason, "message": str(exc)})


def _database(data: dict | None) -> ReferenceDatabase | None:
    if data is None:
        return None
    try:
        return parse_database(data)
    except DatabaseError as exc:
        log.warning("Ignoring reference database: %s", exc)
        return None


# ── Routes ─────────────────────────────────────────────────────────

@app.post("/api/topology")
def get_topology(req: SourcesRequest):
    """Extract the topology plus rotated key outlines for drawing."""
    topology = _topology(req.files)
    return {
        **topology_to_dict(topology),
        "outlines": key_outlines(topology.physical_keys),
        "bounds": list(layout_bounds(topology.physical_keys)),
    }


@app.post("/api/diagnose")
def diagnose(req: DiagnoseRequest):
    """Localize the failing keys and explain each report."""
    topology = _topology(req.files)
    db = _database(req.database)
    reports = localize_failures(topology, req.failing)
    out = []
    for r in reports:
        text = describe_report(r, db)
        out.append({
            **report_to_dict(r),
            "title": text.title,
            "summary": text.summary,
            "causes": text.causes,
        })
    return {"reports": out}


@app.post("/api/template")
def template(req: SourcesRequest):
    """Empty reference database for the user to fill in."""
    return database_template(_topology(req.files))


@app.post("/api/key_at")
def get_key_at(req: KeyAtRequest):
    """Index of the key under a point (keyboard units), or null."""
    topology = _topology(req.files)
    return {"index": key_at(topology.physical_keys, req.x, req.y)}


# ── Entry point ────────────────────────────────────────────────────

def main(host: str = "127.0.0.1", port: int = 8000):
    import uvicorn
    uvicorn.run("matrixdiag.web.server:app", host=host, port=port, reload=False)


if __name__ == "__main__":
    main()
