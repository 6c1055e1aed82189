"""Self-attendance package.

Organized by feature modules (attendance, tracking, employees, shifts) with thin
Flask controllers over service/repository layers, plus a ``client`` package that
drives the self check-in/check-out workflow against the REST API.
"""
