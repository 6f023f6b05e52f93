from enum import Enum


# Credit awarded for a "partially" answer on a checklist (listing) item,
# as a fraction of the question's score weight.
PARTIAL_CREDIT_RATIO = 0.5

DUPLICATE_TITLE_DATE_FORMAT = "%d/%m/%Y"

class ExamStatusEnum(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

class QuestionTypeEnum(str, Enum):
    FREE_TEXT = "free_text"
    SINGLE_CHOICE = "single_choice"
    MULTI_CHOICE = "multi_choice"
    LISTING = "listing"
    NUMERIC_SCALE = "numeric_scale"

CHOICE_QUESTION_TYPES = {QuestionTypeEnum.SINGLE_CHOICE, QuestionTypeEnum.MULTI_CHOICE}
OPTION_QUESTION_TYPES = CHOICE_QUESTION_TYPES | {QuestionTypeEnum.LISTING}
EVALUATOR_SCORED_QUESTION_TYPES = {QuestionTypeEnum.FREE_TEXT, QuestionTypeEnum.NUMERIC_SCALE}

class SessionStatusEnum(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"

class ChecklistResponseEnum(str, Enum):
    YES = "yes"
    PARTIALLY = "partially"
    NO = "no"

CHECKLIST_RESPONSE_ALIASES = {
    "yes": ChecklistResponseEnum.YES,
    "si": ChecklistResponseEnum.YES,
    "sí": ChecklistResponseEnum.YES,
    "partially": ChecklistResponseEnum.PARTIALLY,
    "partial": ChecklistResponseEnum.PARTIALLY,
    "parcial": ChecklistResponseEnum.PARTIALLY,
    "parcialmente": ChecklistResponseEnum.PARTIALLY,
    "no": ChecklistResponseEnum.NO,
}

class NodeTagEnum(str, Enum):
    NEW = "new"
    EXISTING = "existing"
    REMOVED = "removed"
