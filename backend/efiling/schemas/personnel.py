"""Personnel request/response schemas."""
from typing import Optional
from efiling.schemas.base import CamelModel, TrashableResponse


class PersonnelCreate(CamelModel):
    emp_no: Optional[str] = None
    surname: str = ""
    firstname: str = ""
    personal_info: dict = {}
    nok_info: dict = {}
    emp_info: dict = {}
    qualifications: list[dict] = []
    leaves: list[dict] = []
    promotions: list[dict] = []
    queries: list[dict] = []


class PersonnelUpdate(CamelModel):
    emp_no: Optional[str] = None
    surname: Optional[str] = None
    firstname: Optional[str] = None
    personal_info: Optional[dict] = None
    nok_info: Optional[dict] = None
    emp_info: Optional[dict] = None
    qualifications: Optional[list[dict]] = None
    leaves: Optional[list[dict]] = None
    promotions: Optional[list[dict]] = None
    queries: Optional[list[dict]] = None


class PersonnelResponse(TrashableResponse):
    emp_no: Optional[str] = None
    surname: str
    firstname: str
    personal_info: dict = {}
    nok_info: dict = {}
    emp_info: dict = {}
    qualifications: list[dict] = []
    leaves: list[dict] = []
    promotions: list[dict] = []
    queries: list[dict] = []


class PersonnelEntry(CamelModel):
    """One qualification, leave, promotion or query.

    Section-specific fields (institution, days, grade level, ...) are kept
    as sent. The entry id is assigned by the server.
    """
    model_config = {**CamelModel.model_config, "extra": "allow"}

    title: Optional[str] = None
    date: Optional[str] = None
    remark: Optional[str] = None
