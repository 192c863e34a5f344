import logging
from typing import Annotated, Dict, List, Optional

from fastapi import FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from finalcalc.config.settings import settings
from finalcalc.core.components import build_component_set
from finalcalc.core.grades import calculate, classify
from finalcalc.core.models import (
    MIDTERM_SCHEME,
    Achievable,
    CalculationMode,
    Completed,
    ComponentSet,
    DirectCombination,
    Result,
    ThresholdInversion,
)
from finalcalc.core.validation import GradeCalculationError, check_weights
from finalcalc.services.history_service import (
    HistoryRecord,
    HistoryServiceError,
    HistoryStore,
    record_from_calculation,
    result_from_dict,
    result_to_dict,
)

logger = logging.getLogger(__name__)

app = FastAPI(title="FinalCalc API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_allowed_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


FiniteFloat = Annotated[float, Field(allow_inf_nan=False)]


class CalculationPayload(BaseModel):
    weights: List[FiniteFloat] = Field(min_length=1, max_length=10)
    scores: List[Optional[FiniteFloat]] = Field(min_length=1, max_length=10)
    passing_grade: float = Field(default=settings.default_passing_grade, allow_inf_nan=False)
    scheme: str = MIDTERM_SCHEME
    save: bool = False


class HistoryPayload(BaseModel):
    mode: str
    scheme: str = MIDTERM_SCHEME
    passing_grade: FiniteFloat
    scores: List[Optional[FiniteFloat]]
    weights: List[FiniteFloat]
    result: Dict


def _build_set(payload: CalculationPayload) -> ComponentSet:
    try:
        return build_component_set(payload.weights, payload.scores, scheme=payload.scheme)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


def _result_payload(component_set: ComponentSet, result: Result) -> Dict:
    body = result_to_dict(result)
    if isinstance(result, Achievable):
        body["display_score"] = result.display_score
    if isinstance(result, Completed):
        body["letter_grade"] = classify(result.final_score).value
    advisory = check_weights(component_set)
    body["advisory"] = advisory.message if advisory is not None else None
    return body


def _run(payload: CalculationPayload, mode: CalculationMode) -> Dict:
    component_set = _build_set(payload)
    try:
        result = calculate(component_set, mode)
    except GradeCalculationError as exc:
        logger.info("Rejected calculation: %s (%s)", exc, exc.code)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": exc.code, "message": str(exc)},
        ) from exc

    body = _result_payload(component_set, result)
    if payload.save:
        store = HistoryStore.from_settings()
        try:
            body["history_id"] = store.add_record(record_from_calculation(component_set, mode, result))
        except HistoryServiceError as exc:
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc
    return body


def _record_payload(record: HistoryRecord) -> Dict:
    return {
        "id": record.id,
        "mode": record.mode,
        "scheme": record.scheme,
        "passing_grade": record.passing_grade,
        "scores": record.scores,
        "weights": record.weights,
        "result": record.result,
        "created_at": record.created_at,
    }


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.post("/calculate/minimum-final")
def minimum_final(payload: CalculationPayload) -> Dict:
    return _run(payload, ThresholdInversion(passing_grade=payload.passing_grade))


@app.post("/calculate/year-end")
def year_end(payload: CalculationPayload) -> Dict:
    return _run(payload, DirectCombination(passing_grade=payload.passing_grade))


@app.get("/classify")
def classify_score(score: float) -> Dict:
    return {"score": score, "letter_grade": classify(score).value}


@app.get("/history")
def list_history() -> List[Dict]:
    store = HistoryStore.from_settings()
    try:
        return [_record_payload(record) for record in store.list_records()]
    except HistoryServiceError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc


@app.post("/history")
def add_history(payload: HistoryPayload) -> Dict[str, int]:
    store = HistoryStore.from_settings()
    try:
        result_from_dict(payload.result)
        record_id = store.add_record(HistoryRecord(**payload.model_dump()))
        return {"id": record_id}
    except HistoryServiceError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@app.delete("/history/{record_id}")
def delete_history(record_id: int) -> Dict[str, str]:
    store = HistoryStore.from_settings()
    try:
        store.delete_record(record_id)
        return {"status": "deleted"}
    except HistoryServiceError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@app.delete("/history")
def clear_history() -> Dict[str, str]:
    store = HistoryStore.from_settings()
    try:
        store.clear()
        return {"status": "cleared"}
    except HistoryServiceError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc
