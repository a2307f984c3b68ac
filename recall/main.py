import logging
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException, Depends, BackgroundTasks
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .errors import InvalidRating, InvalidTransition, PersistenceFailure
from .models import Card, NewCard, RateRequest, StudyRequest, PoolStats, PresetInfo, SessionView
from .presets import list_presets
from .services import ReviewService
from .store import CsvCardStore

# Configure logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')

app = FastAPI(title="Recall API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Singleton Service
service = ReviewService(CsvCardStore(settings.data_file), settings)


def get_service() -> ReviewService:
    return service


@app.on_event("startup")
def startup_event():
    if isinstance(service.store, CsvCardStore):
        try:
            service.store.load_data()
        except Exception as e:
            # unreadable file: requests will retry the load
            logging.error(f"Error loading {service.store.file_path}: {e}")


@app.get("/stats", response_model=PoolStats)
def get_stats(owner_id: Optional[str] = None, svc: ReviewService = Depends(get_service)):
    return svc.get_stats(owner_id)


@app.post("/study/start", response_model=SessionView)
def start_study(request: StudyRequest, svc: ReviewService = Depends(get_service)):
    return svc.start_session(owner_id=request.owner_id, cap=request.cap)


@app.get("/study/current", response_model=SessionView)
def get_current(svc: ReviewService = Depends(get_service)):
    return svc.current()


@app.post("/study/reveal", response_model=SessionView)
def reveal_card(svc: ReviewService = Depends(get_service)):
    try:
        return svc.reveal()
    except InvalidTransition as e:
        raise HTTPException(status_code=409, detail=str(e))


@app.post("/study/rate", response_model=SessionView)
def rate_card(request: RateRequest, background_tasks: BackgroundTasks,
              svc: ReviewService = Depends(get_service)):
    try:
        view, persist = svc.rate(request.quality)
    except InvalidRating as e:
        raise HTTPException(status_code=422, detail=str(e))
    except InvalidTransition as e:
        raise HTTPException(status_code=409, detail=str(e))
    # Persist after the response; failures show up in later warnings
    background_tasks.add_task(persist)
    return view


@app.post("/cards", response_model=Card)
def add_card(card: NewCard, owner_id: Optional[str] = None, svc: ReviewService = Depends(get_service)):
    if not card.front.strip() or not card.back.strip():
        raise HTTPException(status_code=422, detail="Front and back must not be empty")
    try:
        return svc.add_card(card.front, card.back, owner_id)
    except PersistenceFailure as e:
        raise HTTPException(status_code=503, detail=str(e))


@app.post("/cards/generated", response_model=List[Card])
def add_generated_cards(pairs: List[Dict[str, str]], owner_id: Optional[str] = None,
                        svc: ReviewService = Depends(get_service)):
    try:
        return svc.add_generated(pairs, owner_id)
    except PersistenceFailure as e:
        raise HTTPException(status_code=503, detail=str(e))


@app.get("/presets", response_model=List[PresetInfo])
def get_presets():
    return list_presets()


@app.post("/presets/{preset_id}", response_model=List[Card])
def add_preset(preset_id: str, owner_id: Optional[str] = None, svc: ReviewService = Depends(get_service)):
    try:
        return svc.add_preset(preset_id, owner_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown preset: {preset_id}")
    except PersistenceFailure as e:
        raise HTTPException(status_code=503, detail=str(e))
