from __future__ import annotations

import logging
import math
import numbers
from io import BytesIO
from typing import Mapping, Optional

from PIL import ExifTags, Image

from photo_meta.core.models import ExifData

logger = logging.getLogger(__name__)

DATETIME_ORIGINAL_TAG = 36867  # EXIF DateTimeOriginal
GPS_LATITUDE_REF_TAG = 1
GPS_LATITUDE_TAG = 2
GPS_LONGITUDE_REF_TAG = 3
GPS_LONGITUDE_TAG = 4


def _to_float(value: object) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, tuple) and len(value) == 2 and value[1]:
        result = float(value[0]) / float(value[1])
    elif isinstance(value, numbers.Real):
        # IFDRational with a zero denominator converts to nan.
        result = float(value)
    else:
        return None
    return result if math.isfinite(result) else None


def _coordinate_magnitude(value: object) -> Optional[float]:
    """Decimal degrees from either a plain number or a (deg, min, sec) triple."""
    if isinstance(value, tuple) and len(value) == 3:
        parts = [_to_float(v) for v in value]
        if any(p is None for p in parts):
            return None
        degrees, minutes, seconds = parts  # type: ignore[misc]
        return degrees + minutes / 60.0 + seconds / 3600.0
    return _to_float(value)


def signed_coordinate(magnitude: float, ref: str, negative_ref: str) -> float:
    """Apply a hemisphere reference; only an exact match negates."""
    return -magnitude if ref == negative_ref else magnitude


def coordinates_from_gps(gps: Mapping[int, object]) -> tuple[Optional[float], Optional[float]]:
    """Signed (lat, lon) from a GPS IFD, or (None, None) if any component is missing."""
    lat = _coordinate_magnitude(gps.get(GPS_LATITUDE_TAG))
    lon = _coordinate_magnitude(gps.get(GPS_LONGITUDE_TAG))
    lat_ref = gps.get(GPS_LATITUDE_REF_TAG)
    lon_ref = gps.get(GPS_LONGITUDE_REF_TAG)
    if lat is None or lon is None:
        return None, None
    if not isinstance(lat_ref, str) or not isinstance(lon_ref, str):
        return None, None
    return signed_coordinate(lat, lat_ref, "S"), signed_coordinate(lon, lon_ref, "W")


def exif_from_ifds(
    exif_ifd: Mapping[int, object], gps_ifd: Mapping[int, object]
) -> ExifData:
    dt_value = exif_ifd.get(DATETIME_ORIGINAL_TAG)
    datetime_original = dt_value if isinstance(dt_value, str) else None
    latitude, longitude = coordinates_from_gps(gps_ifd)
    return ExifData(
        datetime_original=datetime_original,
        latitude=latitude,
        longitude=longitude,
    )


def read_exif_bytes(data: bytes) -> ExifData:
    """Extract the capture timestamp and GPS position from encoded image bytes.

    Unreadable input yields an empty ExifData; this never raises.
    """
    try:
        with Image.open(BytesIO(data)) as img:
            exif = img.getexif()
            if not exif:
                return ExifData()
            exif_ifd = dict(exif.get_ifd(ExifTags.IFD.Exif))
            if DATETIME_ORIGINAL_TAG not in exif_ifd and DATETIME_ORIGINAL_TAG in exif:
                # Some writers leave DateTimeOriginal in IFD0.
                exif_ifd[DATETIME_ORIGINAL_TAG] = exif[DATETIME_ORIGINAL_TAG]
            gps_ifd = exif.get_ifd(ExifTags.IFD.GPSInfo)
            return exif_from_ifds(exif_ifd, gps_ifd)
    except Exception:
        # A malformed container must not fail the batch.
        logger.debug("EXIF: could not read metadata from %d bytes", len(data), exc_info=True)
        return ExifData()
