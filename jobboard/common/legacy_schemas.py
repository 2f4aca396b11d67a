"""
Legacy collection schemas: jobs, results, admit_cards.

These predate the unified announcements collection and are kept as passive
data definitions so old documents can still be validated and indexed.
Index declarations live next to each schema and are applied by
``jobboard.common.database.ensure_indexes``.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pymongo import ASCENDING, DESCENDING, TEXT


class _LegacyModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    is_active: bool = Field(default=True, alias="isActive")
    is_featured: bool = Field(default=False, alias="isFeatured")
    views: int = Field(default=0, ge=0)
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    @field_validator("title", "organization", check_fields=False)
    @classmethod
    def strip_required_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


# =============================================================================
# Jobs
# =============================================================================

class JobCategory(str, Enum):
    RAILWAY = "Railway Jobs"
    BANK = "Bank Jobs"
    SSC = "SSC Jobs"
    UPSC = "UPSC Jobs"
    STATE_GOVT = "State Govt Jobs"
    CENTRAL_GOVT = "Central Govt Jobs"
    POLICE = "Police Jobs"
    TEACHING = "Teaching Jobs"
    DEFENSE = "Defense Jobs"
    PSU = "PSU Jobs"
    COURT = "Court Jobs"
    OTHER = "Other Jobs"


class EmploymentType(str, Enum):
    FULL_TIME = "Full Time"
    PART_TIME = "Part Time"
    CONTRACT = "Contract"
    TEMPORARY = "Temporary"


class ExamMode(str, Enum):
    ONLINE = "Online"
    OFFLINE = "Offline"
    BOTH = "Both"


class CategoryBreakdown(BaseModel):
    """Per-reservation-category numbers (fees, seats)."""
    general: Optional[float] = None
    obc: Optional[float] = None
    sc: Optional[float] = None
    st: Optional[float] = None
    ews: Optional[float] = None


class NumericRange(BaseModel):
    minimum: Optional[float] = None
    maximum: Optional[float] = None


class AgeRelaxation(BaseModel):
    obc: Optional[int] = None
    sc: Optional[int] = None
    st: Optional[int] = None


class AgeLimit(NumericRange):
    relaxation: Optional[AgeRelaxation] = None


class Salary(NumericRange):
    currency: str = "INR"


class Qualification(BaseModel):
    minimum: Optional[str] = None
    preferred: Optional[str] = None


class JobLocation(BaseModel):
    state: Optional[str] = None
    city: Optional[str] = None
    district: Optional[str] = None


class PostDetail(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    post_name: Optional[str] = Field(default=None, alias="postName")
    number_of_posts: Optional[int] = Field(default=None, alias="numberOfPosts")
    reservation: Optional[CategoryBreakdown] = None


class JobImportantDates(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    notification_date: Optional[datetime] = Field(default=None, alias="notificationDate")
    application_start_date: Optional[datetime] = Field(default=None, alias="applicationStartDate")
    application_end_date: Optional[datetime] = Field(default=None, alias="applicationEndDate")
    exam_date: Optional[datetime] = Field(default=None, alias="examDate")
    result_date: Optional[datetime] = Field(default=None, alias="resultDate")


class ExamDetails(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    exam_pattern: Optional[str] = Field(default=None, alias="examPattern")
    syllabus: Optional[str] = None
    exam_mode: Optional[ExamMode] = Field(default=None, alias="examMode")


class JobPosting(_LegacyModel):
    """Legacy ``jobs`` document."""
    title: str
    organization: str
    department: Optional[str] = None
    category: JobCategory
    type: EmploymentType = EmploymentType.FULL_TIME
    qualification: Optional[Qualification] = None
    experience: Optional[NumericRange] = None
    age_limit: Optional[AgeLimit] = Field(default=None, alias="ageLimit")
    salary: Optional[Salary] = None
    location: Optional[JobLocation] = None
    total_posts: int = Field(..., alias="totalPosts", ge=0)
    post_details: List[PostDetail] = Field(default_factory=list, alias="postDetails")
    application_fee: Optional[CategoryBreakdown] = Field(default=None, alias="applicationFee")
    important_dates: Optional[JobImportantDates] = Field(default=None, alias="importantDates")
    exam_details: Optional[ExamDetails] = Field(default=None, alias="examDetails")
    how_to_apply: str = Field(..., alias="howToApply")
    official_website: Optional[str] = Field(default=None, alias="officialWebsite")
    notification_pdf: Optional[str] = Field(default=None, alias="notificationPDF")
    application_link: Optional[str] = Field(default=None, alias="applicationLink")
    description: Optional[str] = None
    eligibility_criteria: Optional[str] = Field(default=None, alias="eligibilityCriteria")
    selection_process: Optional[str] = Field(default=None, alias="selectionProcess")
    created_by: Optional[str] = Field(default=None, alias="createdBy")


# =============================================================================
# Results
# =============================================================================

class ResultCategory(str, Enum):
    RAILWAY = "Railway Results"
    BANK = "Bank Results"
    SSC = "SSC Results"
    UPSC = "UPSC Results"
    STATE_GOVT = "State Govt Results"
    CENTRAL_GOVT = "Central Govt Results"
    POLICE = "Police Results"
    TEACHING = "Teaching Results"
    DEFENSE = "Defense Results"
    PSU = "PSU Results"
    COURT = "Court Results"
    OTHER = "Other Results"


class ResultType(str, Enum):
    WRITTEN_EXAM = "Written Exam"
    INTERVIEW = "Interview"
    PHYSICAL_TEST = "Physical Test"
    MEDICAL_TEST = "Medical Test"
    FINAL_MERIT_LIST = "Final Merit List"
    CUT_OFF = "Cut Off"
    ANSWER_KEY = "Answer Key"


class ReservationCategory(str, Enum):
    GENERAL = "General"
    OBC = "OBC"
    SC = "SC"
    ST = "ST"
    EWS = "EWS"


class CutOffMark(BaseModel):
    category: Optional[ReservationCategory] = None
    marks: Optional[float] = None
    percentage: Optional[float] = None


class ExamResult(_LegacyModel):
    """Legacy ``results`` document."""
    title: str
    organization: str
    exam_name: str = Field(..., alias="examName")
    category: ResultCategory
    result_type: ResultType = Field(..., alias="resultType")
    exam_date: Optional[datetime] = Field(default=None, alias="examDate")
    result_date: datetime = Field(..., alias="resultDate")
    total_candidates: Optional[int] = Field(default=None, alias="totalCandidates")
    selected_candidates: Optional[int] = Field(default=None, alias="selectedCandidates")
    cut_off_marks: List[CutOffMark] = Field(default_factory=list, alias="cutOffMarks")
    result_pdf: Optional[str] = Field(default=None, alias="resultPDF")
    official_website: Optional[str] = Field(default=None, alias="officialWebsite")
    result_link: Optional[str] = Field(default=None, alias="resultLink")
    instructions: Optional[str] = None
    description: Optional[str] = None
    next_step_info: Optional[str] = Field(default=None, alias="nextStepInfo")
    related_job: Optional[str] = Field(default=None, alias="relatedJob")
    created_by: str = Field(..., alias="createdBy")


# =============================================================================
# Admit cards
# =============================================================================

class AdmitCardCategory(str, Enum):
    RAILWAY = "Railway Admit Cards"
    BANK = "Bank Admit Cards"
    SSC = "SSC Admit Cards"
    UPSC = "UPSC Admit Cards"
    STATE_GOVT = "State Govt Admit Cards"
    CENTRAL_GOVT = "Central Govt Admit Cards"
    POLICE = "Police Admit Cards"
    TEACHING = "Teaching Admit Cards"
    DEFENSE = "Defense Admit Cards"
    PSU = "PSU Admit Cards"
    COURT = "Court Admit Cards"
    OTHER = "Other Admit Cards"


class LoginCredentials(BaseModel):
    required: List[str] = Field(default_factory=list)  # e.g. ["Registration Number", "Date of Birth"]
    format: Optional[str] = None


class ContactInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    helpline_number: Optional[str] = Field(default=None, alias="helplineNumber")
    email: Optional[str] = None
    address: Optional[str] = None


class AdmitCard(_LegacyModel):
    """Legacy ``admit_cards`` document."""
    title: str
    organization: str
    exam_name: str = Field(..., alias="examName")
    category: AdmitCardCategory
    exam_date: datetime = Field(..., alias="examDate")
    exam_time: Optional[str] = Field(default=None, alias="examTime")
    exam_duration: Optional[str] = Field(default=None, alias="examDuration")
    release_date: Optional[datetime] = Field(default=None, alias="releaseDate")
    last_date_to_download: Optional[datetime] = Field(default=None, alias="lastDateToDownload")
    download_link: Optional[str] = Field(default=None, alias="downloadLink")
    official_website: Optional[str] = Field(default=None, alias="officialWebsite")
    login_credentials: Optional[LoginCredentials] = Field(default=None, alias="loginCredentials")
    exam_centers: List[str] = Field(default_factory=list, alias="examCenters")
    important_instructions: List[str] = Field(default_factory=list, alias="importantInstructions")
    documents_required: List[str] = Field(default_factory=list, alias="documentsRequired")
    contact_info: Optional[ContactInfo] = Field(default=None, alias="contactInfo")
    related_job: Optional[str] = Field(default=None, alias="relatedJob")
    created_by: str = Field(..., alias="createdBy")


# =============================================================================
# Index declarations: (name, keys, options)
# =============================================================================

IndexSpec = Tuple[str, List[Tuple[str, Any]], Dict[str, Any]]

LEGACY_INDEXES: Dict[str, List[IndexSpec]] = {
    "jobs": [
        ("text_search", [("title", TEXT), ("organization", TEXT), ("category", TEXT)], {}),
        ("category", [("category", ASCENDING)], {}),
        ("location_state", [("location.state", ASCENDING)], {}),
        ("application_end_date", [("importantDates.applicationEndDate", ASCENDING)], {}),
        ("is_active", [("isActive", ASCENDING)], {}),
        ("is_featured", [("isFeatured", ASCENDING)], {}),
    ],
    "results": [
        ("text_search", [("title", TEXT), ("organization", TEXT), ("examName", TEXT)], {}),
        ("category", [("category", ASCENDING)], {}),
        ("result_type", [("resultType", ASCENDING)], {}),
        ("result_date", [("resultDate", DESCENDING)], {}),
        ("is_active", [("isActive", ASCENDING)], {}),
        ("is_featured", [("isFeatured", ASCENDING)], {}),
    ],
    "admit_cards": [
        ("text_search", [("title", TEXT), ("organization", TEXT), ("examName", TEXT)], {}),
        ("category", [("category", ASCENDING)], {}),
        ("exam_date", [("examDate", ASCENDING)], {}),
        ("release_date", [("releaseDate", DESCENDING)], {}),
        ("is_active", [("isActive", ASCENDING)], {}),
        ("is_featured", [("isFeatured", ASCENDING)], {}),
    ],
}
