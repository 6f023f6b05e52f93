from app.crud.base import CRUDBase
from app.models.student import Student

class CRUDStudent(CRUDBase[Student, dict, dict]):
    pass

student = CRUDStudent(Student)
