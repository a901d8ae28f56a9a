import os
import sys
import uuid
from typing import Any, Dict, List, Optional
from collections import Counter
from fastapi import FastAPI, HTTPException, BackgroundTasks
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
import uvicorn

# Add the project root to the path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from regsim.data_loader import (
    load_config, load_section_catalog, parse_section_records, resolve_path, schedule_rows, enrollment_rows,
    coerce_config, save_artifacts_to_sheet
)
from regsim.errors import DataIntegrityError
from regsim.simulation import run_simulation, check_run_inputs

app = FastAPI(
    title="Registration Simulator API",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Constants
BASE_PATH = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
CONFIG_FILE = os.environ.get('REGSIM_CONFIG', os.path.join(BASE_PATH, 'config.json'))
SPREADSHEET_NAME = os.environ.get('REGSIM_SPREADSHEET', "REGISTRATION_SIMULATION")
CREDENTIALS_FILE = "credentials.json"

# --- Job registry (in memory, single instance) ---
jobs: Dict[str, Dict] = {}
active_job_id: Optional[str] = None  # Singleton semaphore

# --- Data models ---

class SectionRecord(BaseModel):
    CourseCode: str
    Department: str
    CourseLevel: int
    Component: str
    EnrollmentCap: Optional[int] = None
    SectionID: Optional[str] = None

class ScheduleRecord(BaseModel):
    SectionID: str
    Department: str
    Component: str
    EnrollmentCap: Any = ""
    Days: str
    StartTime: str
    EndTime: str
    RoomID: str
    RoomType: str
    BuildingName: str

class EnrollmentRecord(BaseModel):
    StudentID: int
    SectionID: str

class SimulationRequest(BaseModel):
    config: Dict[str, Any] = {}
    sections: Optional[List[SectionRecord]] = None

class JobResponse(BaseModel):
    job_id: str
    status: str

class CatalogSummary(BaseModel):
    total_sections: int
    by_component: Dict[str, int]
    departments: int

class SaveRequest(BaseModel):
    schedule: List[ScheduleRecord]
    enrollment: List[EnrollmentRecord]

def _base_config() -> dict:
    return load_config(CONFIG_FILE if os.path.exists(CONFIG_FILE) else None)

def _default_sections(config: dict):
    return load_section_catalog(resolve_path(config, 'section_catalog_file', BASE_PATH))

# --- Endpoints ---

@app.api_route("/", methods=["GET", "HEAD"], tags=["General"])
def read_root():
    return {"status": "online", "system": "Registration Simulator"}

@app.get("/catalog/summary", response_model=CatalogSummary, tags=["Data"])
def get_catalog_summary():
    try:
        sections = _default_sections(_base_config())
    except DataIntegrityError as e:
        raise HTTPException(status_code=422, detail=e.problems)
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {
        "total_sections": len(sections),
        "by_component": dict(Counter(s.component for s in sections)),
        "departments": len({s.department for s in sections})
    }

def run_simulation_bg_task(job_id: str, sections, config: dict):
    """
    Runs the simulation in the background and updates the global 'jobs' registry.
    """
    global active_job_id
    try:
        print(f"🔄 [Job {job_id}] Starting background simulation...")

        def on_progress_update(phase: str, percent: int):
            jobs[job_id]["phase"] = phase
            jobs[job_id]["progress"] = percent

        result = run_simulation(sections, config, on_progress=on_progress_update)

        jobs[job_id]["status"] = "completed"
        jobs[job_id]["progress"] = 100
        jobs[job_id]["result"] = {
            "status": "Clean" if not result.conflicts else "With violations",
            "summary": result.report.summary(),
            "shortfalls": result.report.describe(),
            "conflicts": result.conflicts,
            "schedule": schedule_rows(result.sections),
            "enrollment": enrollment_rows(result.enrollments)
        }
        print(f"✅ [Job {job_id}] Completed.")

    except Exception as e:
        import traceback
        traceback.print_exc()
        jobs[job_id]["status"] = "failed"
        jobs[job_id]["error"] = str(e)
        print(f"❌ [Job {job_id}] Failed: {e}")
    finally:
        # Always release the semaphore
        if active_job_id == job_id:
            active_job_id = None

@app.post("/simulate", response_model=JobResponse, tags=["Simulation"])
def start_simulation(background_tasks: BackgroundTasks, request: Optional[SimulationRequest] = None):
    """
    Validates the inputs and starts a simulation job in the background.
    Poll GET /progress/{job_id} for the result.
    """
    global active_job_id
    request = request or SimulationRequest()

    if active_job_id is not None:
        current_job = jobs.get(active_job_id)
        if current_job and current_job["status"] == "running":
            raise HTTPException(
                status_code=503,
                detail="Another simulation is running. Please try again in a few minutes."
            )
        print("⚠️ Stale semaphore detected. Resetting.")
        active_job_id = None

    # Fatal input errors are reported before a job is created
    try:
        config = _base_config()
        config.update(coerce_config(request.config))
        if request.sections is not None:
            sections = parse_section_records([s.model_dump() for s in request.sections])
        else:
            sections = _default_sections(config)
        check_run_inputs(sections, config)
    except DataIntegrityError as e:
        raise HTTPException(status_code=422, detail=e.problems)
    except (ValueError, FileNotFoundError) as e:
        raise HTTPException(status_code=400, detail=str(e))

    job_id = str(uuid.uuid4())
    active_job_id = job_id
    jobs[job_id] = {
        "status": "running",
        "phase": "queued",
        "progress": 0,
        "result": None
    }

    background_tasks.add_task(run_simulation_bg_task, job_id, sections, config)
    return {"job_id": job_id, "status": "started"}

@app.get("/progress/{job_id}", tags=["Simulation"])
def get_job_progress(job_id: str):
    if job_id not in jobs:
        raise HTTPException(status_code=404, detail="Job not found")

    job = jobs[job_id]
    return {
        "job_id": job_id,
        "status": job["status"],
        "phase": job.get("phase"),
        "progress": job.get("progress", 0),
        "result": job.get("result"),  # null while running
        "error": job.get("error")
    }

@app.post("/save", tags=["Persistence"])
def save_artifacts(payload: SaveRequest):
    """
    Saves both artifacts to Google Sheets ('Schedule' and 'Enrollment' worksheets).
    """
    schedule = [item.model_dump() for item in payload.schedule]
    enrollment = [item.model_dump() for item in payload.enrollment]
    print(f"💾 Saving {len(schedule)} sections and {len(enrollment)} enrollments...")

    try:
        save_artifacts_to_sheet(schedule, enrollment, SPREADSHEET_NAME, CREDENTIALS_FILE)
    except Exception as e:
        import traceback
        traceback.print_exc()
        raise HTTPException(status_code=500, detail=f"Could not save: {str(e)}")

    return {"status": "Saved", "sections": len(schedule), "enrollments": len(enrollment)}

if __name__ == "__main__":
    uvicorn.run("regsim.api:app", host="127.0.0.1", port=8000, reload=True)
