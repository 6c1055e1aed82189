"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_HISTORY_LIMIT = 30
DEFAULT_LATE_GRACE_MINUTES = 5
# Without a shift, a check-in after this hour (local time) is LATE.
DEFAULT_LATE_AFTER_HOUR = 9

STANDARD_WORKING_HOURS = 8.0
BREAK_THRESHOLD_HOURS = 6.0
BREAK_HOURS = 1.0

DEFAULT_API_BASE_URL = "https://alfa-salaray-app.onrender.com/api"
DEFAULT_API_TIMEOUT_SECONDS = 10.0

GEOLOCATION_TIMEOUT_SECONDS = 10.0
NOMINATIM_REVERSE_URL = "https://nominatim.openstreetmap.org/reverse"
DEFAULT_GEOCODER_USER_AGENT = "Employee Attendance System"

STATUS_POLL_SECONDS = 30.0
TRACKING_INTERVAL_SECONDS = 30.0

CAMERA_IDEAL_WIDTH = 1280
CAMERA_IDEAL_HEIGHT = 720
CAMERA_MIN_WIDTH = 640
CAMERA_MIN_HEIGHT = 480
CAPTURE_JPEG_QUALITY = 0.85
SELFIE_MAX_WIDTH = 1200
THUMBNAIL_MAX_WIDTH = 200

AUTO_SUBMIT_BASE_DELAY = 0.5
AUTO_SUBMIT_BYTES_PER_SECOND = 200_000
AUTO_SUBMIT_MAX_DELAY = 3.0
