from app.crud.base import CRUDBase
from app.models.evaluator import Evaluator

class CRUDEvaluator(CRUDBase[Evaluator, dict, dict]):
    pass

evaluator = CRUDEvaluator(Evaluator)
