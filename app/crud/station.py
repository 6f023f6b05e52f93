from sqlalchemy.orm import Session
from typing import List, Set
from sqlalchemy import func

from app.crud.base import CRUDBase
from app.models.station import Station
from app.models.question import Question
from app.models.station_result import StationResult
from app.schemas.exam import StationIn


class CRUDStation(CRUDBase[Station, StationIn, StationIn]):

    def get_by_exam(self, db: Session, *, exam_id: int) -> List[Station]:
        return (
            db.query(Station)
            .filter(Station.exam_id == exam_id)
            .order_by(Station.order, Station.id)
            .all()
        )

    def get_active_by_exam(self, db: Session, *, exam_id: int) -> List[Station]:
        return (
            db.query(Station)
            .filter(Station.exam_id == exam_id)
            .filter(Station.active.is_(True))
            .order_by(Station.order, Station.id)
            .all()
        )

    def ids_with_results(self, db: Session, station_ids: List[int]) -> Set[int]:
        if not station_ids:
            return set()
        rows = (
            db.query(StationResult.station_id)
            .filter(StationResult.station_id.in_(station_ids))
            .distinct()
            .all()
        )
        return {row[0] for row in rows}

    def recompute_max_scores(self, db: Session, *, exam_id: int) -> List[Station]:
        totals = dict(
            db.query(Question.station_id, func.coalesce(func.sum(Question.score_weight), 0.0))
            .join(Station, Station.id == Question.station_id)
            .filter(Station.exam_id == exam_id)
            .group_by(Question.station_id)
            .all()
        )
        stations = self.get_by_exam(db, exam_id=exam_id)
        for db_station in stations:
            db_station.max_score = float(totals.get(db_station.id, 0.0))
        db.flush()
        return stations

station = CRUDStation(Station)
