"""Shared helpers for Tab Engine."""

# Tab Engine
# Copyright (C) 2025  Tab Engine developers
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

import logging
from datetime import date, datetime
from typing import Any, Optional, Union

from dateutil.parser import isoparse

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logger(name: str) -> logging.Logger:
    """Return the module logger for ``name``.

    Handlers are left to the application; the package root carries a
    ``NullHandler`` so library use stays silent unless logging is configured.
    """
    return logging.getLogger(name)


def configure_logging(level: Union[int, str] = logging.INFO) -> None:
    """Configure root logging for command line use."""
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)


def normalize_institution(institution: Optional[str]) -> Optional[str]:
    """Canonical form used when comparing institutions (case/space-insensitive)."""
    if institution is None:
        return None
    cleaned = " ".join(institution.split()).casefold()
    return cleaned or None


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 string into a datetime, passing datetimes through."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return isoparse(str(value))


def parse_date(value: Any) -> date:
    """Parse an ISO-8601 date (or datetime) string into a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return isoparse(str(value)).date()
