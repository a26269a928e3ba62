import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import Field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.auth.context import ActorContext
from backend.auth.dependencies import get_actor
from backend.database import get_db
from backend.models.menstrual_cycle import CycleEntry, MenstrualCycle
from backend.schemas.appointments import MessageResponse
from backend.schemas.base import CamelModel
from backend.wellness.menstrual_cycle import (
    DEFAULT_CYCLE_LENGTH,
    DEFAULT_PERIOD_LENGTH,
    MAX_TRACKED_CYCLES,
    analyze_cycle_regularity,
    average_cycle_length,
    calculate_next_period,
    common_symptoms,
    derive_cycle_lengths,
    get_current_phase,
)

router = APIRouter(tags=['menstrual-cycle'])

logger = logging.getLogger(__name__)

TRACKING_NOT_ENABLED = 'Menstrual cycle tracking is not enabled'
DATABASE_UNAVAILABLE = 'Database unavailable. Verify DATABASE_URL and database credentials.'


class CycleRecord(CamelModel):
    period_start_date: date
    period_end_date: date | None = None
    cycle_length: int | None = Field(default=None, ge=1, le=120)


class CyclePredictionRequest(CamelModel):
    last_period_start_date: date | None = None
    average_cycle_length: int = Field(default=DEFAULT_CYCLE_LENGTH, ge=15, le=60)
    average_period_length: int = Field(default=DEFAULT_PERIOD_LENGTH, ge=1, le=15)
    cycle_history: list[CycleRecord] = Field(default_factory=list)


class CyclePredictionResponse(CamelModel):
    next_period_date: date | None = None
    ovulation_date: date | None = None
    fertile_window_start: date | None = None
    fertile_window_end: date | None = None
    cycle_regularity: str
    current_phase: str


class EnableTrackingRequest(CamelModel):
    average_cycle_length: int = Field(default=DEFAULT_CYCLE_LENGTH, ge=15, le=60)
    average_period_length: int = Field(default=DEFAULT_PERIOD_LENGTH, ge=1, le=15)


class TrackingResponse(CamelModel):
    is_tracking: bool
    average_cycle_length: int
    average_period_length: int
    cycle_regularity: str


class Symptom(CamelModel):
    type: str
    severity: str | None = None


class LogPeriodRequest(CamelModel):
    start_date: date
    end_date: date | None = None
    symptoms: list[Symptom] = Field(default_factory=list)
    flow_intensity: list[str] = Field(default_factory=list)
    notes: str = Field(default='', max_length=600)


class CycleEntryResponse(CamelModel):
    period_start_date: date
    period_end_date: date | None = None
    cycle_length: int | None = None
    period_length: int | None = None
    symptoms: list[Symptom] = Field(default_factory=list)
    flow_intensity: list[str] = Field(default_factory=list)
    notes: str = ''


class LogPeriodResponse(CamelModel):
    cycle: CycleEntryResponse
    next_period_date: date | None = None
    ovulation_date: date | None = None
    fertile_window_start: date | None = None
    fertile_window_end: date | None = None
    cycle_regularity: str


class SymptomCount(CamelModel):
    symptom: str
    occurrences: int


class CycleInsightsResponse(CamelModel):
    next_period_date: date | None = None
    days_until_next_period: int | None = None
    ovulation_date: date | None = None
    fertile_window_start: date | None = None
    fertile_window_end: date | None = None
    average_cycle_length: int
    average_period_length: int
    cycle_regularity: str
    total_cycles_tracked: int
    common_symptoms: list[SymptomCount]
    last_period_start_date: date | None = None
    last_period_end_date: date | None = None


def _database_unavailable(db: Session, exc: SQLAlchemyError) -> HTTPException:
    db.rollback()
    logger.exception('Menstrual cycle database operation failed.')
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=DATABASE_UNAVAILABLE)


def _get_tracker(db: Session, user_id: int) -> MenstrualCycle | None:
    return db.query(MenstrualCycle).filter(MenstrualCycle.user_id == user_id).first()


def _get_active_tracker(db: Session, user_id: int) -> MenstrualCycle:
    tracker = _get_tracker(db, user_id)
    if tracker is None or not tracker.is_tracking:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=TRACKING_NOT_ENABLED)
    return tracker


@router.post('/prediction', response_model=CyclePredictionResponse)
def predict_cycle(
    data: CyclePredictionRequest,
    actor: ActorContext = Depends(get_actor),
):
    del actor
    history = sorted(data.cycle_history, key=lambda record: record.period_start_date)
    cycle_lengths = derive_cycle_lengths(
        [record.period_start_date for record in history],
        [record.cycle_length for record in history],
    )

    last_start = data.last_period_start_date
    if last_start is None and history:
        last_start = history[-1].period_start_date

    prediction = calculate_next_period(last_start, cycle_lengths, data.average_cycle_length)

    return CyclePredictionResponse(
        next_period_date=prediction.next_period_date,
        ovulation_date=prediction.ovulation_date,
        fertile_window_start=prediction.fertile_window_start,
        fertile_window_end=prediction.fertile_window_end,
        cycle_regularity=analyze_cycle_regularity(cycle_lengths),
        current_phase=get_current_phase(
            last_start,
            data.average_cycle_length,
            data.average_period_length,
        ),
    )


@router.post('/enable', response_model=TrackingResponse)
def enable_tracking(
    data: EnableTrackingRequest,
    actor: ActorContext = Depends(get_actor),
    db: Session = Depends(get_db),
):
    try:
        tracker = _get_tracker(db, actor.actor_id)
        if tracker is None:
            tracker = MenstrualCycle(user_id=actor.actor_id)
            db.add(tracker)

        # Enabling starts a fresh history.
        tracker.entries.clear()
        tracker.is_tracking = True
        tracker.average_cycle_length = data.average_cycle_length
        tracker.average_period_length = data.average_period_length
        tracker.last_period_start_date = None
        tracker.last_period_end_date = None
        tracker.next_period_date = None
        tracker.ovulation_date = None
        tracker.fertile_window_start = None
        tracker.fertile_window_end = None
        tracker.cycle_regularity = 'unknown'

        db.commit()
        db.refresh(tracker)
    except SQLAlchemyError as exc:
        raise _database_unavailable(db, exc) from exc

    logger.info('Enabled cycle tracking for user=%s', actor.actor_id)
    return TrackingResponse(
        is_tracking=tracker.is_tracking,
        average_cycle_length=tracker.average_cycle_length,
        average_period_length=tracker.average_period_length,
        cycle_regularity=tracker.cycle_regularity,
    )


@router.post('/disable', response_model=MessageResponse)
def disable_tracking(
    actor: ActorContext = Depends(get_actor),
    db: Session = Depends(get_db),
):
    try:
        tracker = _get_tracker(db, actor.actor_id)
        if tracker is not None:
            tracker.is_tracking = False
            db.commit()
    except SQLAlchemyError as exc:
        raise _database_unavailable(db, exc) from exc

    logger.info('Disabled cycle tracking for user=%s', actor.actor_id)
    return MessageResponse(message='Menstrual cycle tracking disabled')


@router.post('/log-period', response_model=LogPeriodResponse)
def log_period(
    data: LogPeriodRequest,
    actor: ActorContext = Depends(get_actor),
    db: Session = Depends(get_db),
):
    if data.end_date is not None and data.end_date < data.start_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='endDate must not be before startDate',
        )

    try:
        tracker = _get_active_tracker(db, actor.actor_id)

        cycle_length = None
        if tracker.last_period_start_date is not None:
            cycle_length = (data.start_date - tracker.last_period_start_date).days

        entry = CycleEntry(
            period_start_date=data.start_date,
            period_end_date=data.end_date,
            cycle_length=cycle_length,
            period_length=(data.end_date - data.start_date).days if data.end_date else None,
            symptoms=[symptom.model_dump() for symptom in data.symptoms],
            flow_intensity=list(data.flow_intensity),
            notes=data.notes,
        )
        tracker.entries.append(entry)
        del tracker.entries[:-MAX_TRACKED_CYCLES]

        cycle_lengths = [cycle.cycle_length for cycle in tracker.entries]
        prediction = calculate_next_period(data.start_date, cycle_lengths, tracker.average_cycle_length)

        tracker.last_period_start_date = data.start_date
        tracker.last_period_end_date = data.end_date
        tracker.next_period_date = prediction.next_period_date
        tracker.ovulation_date = prediction.ovulation_date
        tracker.fertile_window_start = prediction.fertile_window_start
        tracker.fertile_window_end = prediction.fertile_window_end
        tracker.cycle_regularity = analyze_cycle_regularity(cycle_lengths)

        db.commit()
        db.refresh(entry)
    except SQLAlchemyError as exc:
        raise _database_unavailable(db, exc) from exc

    logger.info(
        'Logged period for user=%s start=%s cycle_length=%s',
        actor.actor_id, data.start_date, cycle_length,
    )
    return LogPeriodResponse(
        cycle=CycleEntryResponse(
            period_start_date=entry.period_start_date,
            period_end_date=entry.period_end_date,
            cycle_length=entry.cycle_length,
            period_length=entry.period_length,
            symptoms=entry.symptoms or [],
            flow_intensity=entry.flow_intensity or [],
            notes=entry.notes or '',
        ),
        next_period_date=tracker.next_period_date,
        ovulation_date=tracker.ovulation_date,
        fertile_window_start=tracker.fertile_window_start,
        fertile_window_end=tracker.fertile_window_end,
        cycle_regularity=tracker.cycle_regularity,
    )


@router.get('/insights', response_model=CycleInsightsResponse)
def get_cycle_insights(
    actor: ActorContext = Depends(get_actor),
    db: Session = Depends(get_db),
):
    try:
        tracker = _get_active_tracker(db, actor.actor_id)
        entries = list(tracker.entries)
    except SQLAlchemyError as exc:
        raise _database_unavailable(db, exc) from exc

    days_until_next_period = None
    if tracker.next_period_date is not None:
        days_until_next_period = (tracker.next_period_date - date.today()).days

    return CycleInsightsResponse(
        next_period_date=tracker.next_period_date,
        days_until_next_period=days_until_next_period,
        ovulation_date=tracker.ovulation_date,
        fertile_window_start=tracker.fertile_window_start,
        fertile_window_end=tracker.fertile_window_end,
        average_cycle_length=average_cycle_length(
            [entry.cycle_length for entry in entries],
            tracker.average_cycle_length,
        ),
        average_period_length=tracker.average_period_length,
        cycle_regularity=tracker.cycle_regularity,
        total_cycles_tracked=len(entries),
        common_symptoms=[
            SymptomCount(symptom=name, occurrences=count)
            for name, count in common_symptoms(entry.symptoms for entry in entries)
        ],
        last_period_start_date=tracker.last_period_start_date,
        last_period_end_date=tracker.last_period_end_date,
    )
