from __future__ import annotations

import os
from pathlib import Path
from typing import Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

ImageSource = Union[bytes, str, os.PathLike]

DOCUMENTS_DIR = Path("~/Documents")
DEFAULT_OUTPUT_PATH = DOCUMENTS_DIR / "photo_metadata.json"
DEFAULT_SCRIPT_PATH = DOCUMENTS_DIR / "process_photos.sh"
DEFAULT_SHELL = "/bin/bash"


def _check_coordinates(latitude: Optional[float], longitude: Optional[float]) -> None:
    if (latitude is None) != (longitude is None):
        raise ValueError("latitude and longitude must be set together")


class ExifData(BaseModel):
    """Timestamp and signed GPS coordinates read from an image's EXIF block."""

    model_config = ConfigDict(frozen=True)

    datetime_original: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @model_validator(mode="after")
    def _coordinates_paired(self) -> "ExifData":
        _check_coordinates(self.latitude, self.longitude)
        return self


class MetadataRecord(BaseModel):
    """One image's extraction outcome.

    Absent fields are dropped from the JSON form rather than written as null,
    so a consumer reads a missing key as "unknown".
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    datetime_original: Optional[str] = Field(default=None, alias="datetimeoriginal")
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    qr_codes: Optional[list[str]] = Field(default=None, alias="qrcodes")

    @model_validator(mode="after")
    def _check_invariants(self) -> "MetadataRecord":
        _check_coordinates(self.latitude, self.longitude)
        if self.qr_codes is not None and not self.qr_codes:
            raise ValueError("qrcodes must be omitted when no codes were found")
        return self

    def merge_exif(self, exif: ExifData) -> "MetadataRecord":
        update: dict = {}
        if exif.datetime_original is not None:
            update["datetime_original"] = exif.datetime_original
        if exif.latitude is not None and exif.longitude is not None:
            update["latitude"] = exif.latitude
            update["longitude"] = exif.longitude
        return self.model_copy(update=update) if update else self

    def with_qr_codes(self, codes: Optional[Sequence[str]]) -> "MetadataRecord":
        if not codes:
            return self
        return self.model_copy(update={"qr_codes": list(codes)})

    def to_json_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class DispatchPaths(BaseModel):
    """Where the aggregated JSON is written and which script runs afterwards."""

    output_path: Path = DEFAULT_OUTPUT_PATH
    script_path: Path = DEFAULT_SCRIPT_PATH
    shell: str = DEFAULT_SHELL

    @model_validator(mode="after")
    def _expand_home(self) -> "DispatchPaths":
        self.output_path = self.output_path.expanduser()
        self.script_path = self.script_path.expanduser()
        return self


class DispatchReport(BaseModel):
    written: bool = False
    launched: bool = False
    errors: list[str] = Field(default_factory=list)


class BatchResult(BaseModel):
    records: list[MetadataRecord] = Field(default_factory=list)
    json_bytes: Optional[bytes] = None
    output_text: str = ""
    error: Optional[str] = None
    dispatch: Optional[DispatchReport] = None
