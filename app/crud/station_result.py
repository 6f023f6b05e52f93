from sqlalchemy.orm import Session
from typing import List, Optional

from app.crud.base import CRUDBase
from app.models.station_result import StationResult

class CRUDStationResult(CRUDBase[StationResult, dict, dict]):

    def get_by_session_and_station(self, db: Session, session_id: int,
                                   station_id: int) -> Optional[StationResult]:
        return (
            db.query(StationResult)
            .filter(StationResult.session_id == session_id)
            .filter(StationResult.station_id == station_id)
            .first()
        )

    def get_all_by_session(self, db: Session, session_id: int) -> List[StationResult]:
        return (
            db.query(StationResult)
            .filter(StationResult.session_id == session_id)
            .order_by(StationResult.station_id)
            .all()
        )

station_result = CRUDStationResult(StationResult)
