"""Settings shared by every environment; environment modules override them."""

import os

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Backend
LATE_GRACE_MINUTES = int(os.getenv("LATE_GRACE_MINUTES", "5"))

# Client
API_BASE_URL = os.getenv("ATTENDANCE_API_URL", "https://alfa-salaray-app.onrender.com/api")
API_TIMEOUT_SECONDS = float(os.getenv("API_TIMEOUT_SECONDS", "10"))
API_TOKEN = os.getenv("API_TOKEN") or None
EMPLOYEE_ID = int(os.getenv("EMPLOYEE_ID")) if os.getenv("EMPLOYEE_ID") else None
USER_AGENT = os.getenv("USER_AGENT", "SelfAttendanceKiosk/1.0 (X11; Linux x86_64)")

GEOCODER_URL = os.getenv("GEOCODER_URL", "https://nominatim.openstreetmap.org/reverse")
GEOCODER_USER_AGENT = os.getenv("GEOCODER_USER_AGENT", "Employee Attendance System")
GEOLOCATION_TIMEOUT_SECONDS = float(os.getenv("GEOLOCATION_TIMEOUT_SECONDS", "10"))

# Stationary check-in point; leave unset when the device has no position source
FIXED_LATITUDE = float(os.getenv("FIXED_LATITUDE")) if os.getenv("FIXED_LATITUDE") else None
FIXED_LONGITUDE = float(os.getenv("FIXED_LONGITUDE")) if os.getenv("FIXED_LONGITUDE") else None
FIXED_ACCURACY = float(os.getenv("FIXED_ACCURACY")) if os.getenv("FIXED_ACCURACY") else None

# "user=0,environment=1"
CAMERA_INDEXES = os.getenv("CAMERA_INDEXES", "user=0")

STATUS_POLL_SECONDS = float(os.getenv("STATUS_POLL_SECONDS", "30"))
TRACKING_INTERVAL_SECONDS = float(os.getenv("TRACKING_INTERVAL_SECONDS", "30"))
