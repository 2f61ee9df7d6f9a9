# destitutes/geolocation.py
# Geolocation Probe: one on-demand position fix from the browser.
import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

from .errors import GeolocationUnavailable, PermissionDenied
from .models import GeoPoint

log = logging.getLogger(__name__)

# GeolocationPositionError codes
PERMISSION_DENIED, POSITION_UNAVAILABLE, TIMEOUT = 1, 2, 3


@dataclass(frozen=True)
class GeolocationOptions:
    enable_high_accuracy: bool = True
    timeout_ms: int = 10_000
    maximum_age_ms: int = 60_000


# (options, attempt) -> raw browser payload, or None while the browser has not answered
PositionSource = Callable[[GeolocationOptions, int], Optional[Mapping[str, Any]]]


def parse_position(payload: Mapping[str, Any]) -> GeoPoint:
    """
    Turn the browser's answer into a GeoPoint.

    Success looks like {"coords": {"latitude": .., "longitude": .., ...}},
    failure like {"error": {"code": 1, "message": ".."}}. Precision is kept
    as delivered; only the display layer rounds.
    """
    err = payload.get("error")
    if err is not None:
        code = err.get("code") if isinstance(err, Mapping) else None
        message = (err.get("message") if isinstance(err, Mapping) else str(err)) or "unknown error"
        if code == PERMISSION_DENIED:
            raise PermissionDenied(f"Location permission denied: {message}")
        raise GeolocationUnavailable(f"Location unavailable: {message}")

    coords = payload.get("coords") or {}
    lat, lon = coords.get("latitude"), coords.get("longitude")
    if lat is None or lon is None:
        raise GeolocationUnavailable("Location unavailable: no coordinates in response")
    return GeoPoint(latitude=float(lat), longitude=float(lon))


class GeolocationProbe:
    def __init__(self, source: PositionSource, options: GeolocationOptions = GeolocationOptions()):
        self.source = source
        self.options = options
        self.attempt = 0
        self.pending = False

    def locate(self) -> Optional[GeoPoint]:
        """
        Ask for a fix. Returns None while the request is still in flight;
        raises PermissionDenied / GeolocationUnavailable on failure.
        A new attempt starts only after the previous one settled.
        """
        if not self.pending:
            self.attempt += 1
            self.pending = True
        try:
            raw = self.source(self.options, self.attempt)
        except Exception:
            self.pending = False
            raise
        if raw is None:
            return None
        self.pending = False
        fix = parse_position(raw)
        log.info("location fix attempt=%d", self.attempt)
        return fix
