from typing import Any

from pydantic import BaseModel, Field, ValidationError

from app.core.errors import MissingFieldError
from app.models.composition import VerseRecord

JOB_ID_PATTERN = r"^[A-Za-z0-9_-]+$"
REQUIRED_FIELDS = ("recitation_files", "background", "ayat")
MISSING_FIELDS_MESSAGE = "Missing required fields: recitation_files, background, or ayat"


class AudioFile(BaseModel):
    url: str


class RecitationFile(BaseModel):
    audio_files: list[AudioFile] = Field(min_length=1)


class BackgroundSpec(BaseModel):
    links: list[str]


class AyahItem(BaseModel):
    verse_key: str
    aya: str
    translation: str

    def to_record(self) -> VerseRecord:
        return VerseRecord(verse_key=self.verse_key, primary_text=self.aya, translation_text=self.translation)


class ProcessRequest(BaseModel):
    recitation_files: list[RecitationFile]
    background: BackgroundSpec
    ayat: list[AyahItem]

    @classmethod
    def from_payload(cls, payload: Any) -> "ProcessRequest":
        if not isinstance(payload, dict) or any(not payload.get(name) for name in REQUIRED_FIELDS):
            raise MissingFieldError(MISSING_FIELDS_MESSAGE)
        try:
            return cls.model_validate(payload)
        except ValidationError as exc:
            raise MissingFieldError(f"Invalid request payload: {exc.errors()[0]['msg']}") from exc

    def verses(self) -> list[VerseRecord]:
        return [item.to_record() for item in self.ayat]


class PresignedUrlResponse(BaseModel):
    videoId: str
    presignedUrl: str
    expiresIn: int


class ProcessResponse(BaseModel):
    output: str
    videoId: str
    videoUrl: str
    presignedUrl: str


class RunJobRequest(BaseModel):
    id: str = Field(pattern=JOB_ID_PATTERN)
    input: dict[str, Any] = Field(default_factory=dict)


class RunJobResponse(BaseModel):
    id: str
    output: dict[str, Any]
