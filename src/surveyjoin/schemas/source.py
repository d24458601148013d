"""Source registry records: one SourceEntry per remote survey file.

A category (laboratory or demographics) is an ordered, chronologically
sorted sequence of SourceEntry records. Both are validated once when the
configuration is resolved; runtime code never re-checks them.
"""

import re
from typing import Any

from pydantic import ConfigDict, Field, field_validator, model_validator

from surveyjoin.schemas.base import SurveyBaseModel


_IDENTIFIER_RE = re.compile(r"^[A-Za-z0-9_]+$")
_YEAR_RE = re.compile(r"^\d{4}$")


class SourceEntry(SurveyBaseModel):
    """One remote file of a category.

    Attributes
    ----------
    remote_identifier : str
        File stem on the remote server, e.g. ``"GHB_J"``. Also the local
        file stem.
    label : str
        Cycle label written to every row's ``Cycle`` column, e.g. ``"2017-2018"``.
    cycle_year : str
        First year of the cycle; selects the remote directory, e.g. ``"2017"``.
    """

    remote_identifier: str = Field(min_length=1)
    label: str = Field(min_length=1)
    cycle_year: str

    model_config = ConfigDict(
        extra='forbid',
        str_strip_whitespace=True,
        frozen=True,
    )

    @field_validator("remote_identifier")
    @classmethod
    def check_identifier(cls, v):
        if not _IDENTIFIER_RE.match(v):
            raise ValueError(f"remote_identifier must be letters, digits or '_': {v!r}")
        return v

    @field_validator("cycle_year", mode="before")
    @classmethod
    def coerce_cycle_year(cls, v):
        """Accept 2017 as well as "2017"."""
        if isinstance(v, int):
            v = str(v)
        if not isinstance(v, str) or not _YEAR_RE.match(v.strip()):
            raise ValueError(f"cycle_year must be a four-digit year: {v!r}")
        return v.strip()

    @model_validator(mode="before")
    @classmethod
    def accept_triples(cls, data: Any):
        """Allow ``("GHB_J", "2017-2018", "2017")`` shorthand in user configs."""
        if isinstance(data, (list, tuple)):
            if len(data) != 3:
                raise ValueError(
                    f"source triple must be (remote_identifier, label, cycle_year), got {data!r}"
                )
            identifier, label, year = data
            return {"remote_identifier": identifier, "label": label, "cycle_year": year}
        return data


class CategoryConfig(SurveyBaseModel):
    """A named category of sources stacked into one combined table."""

    name: str = Field(min_length=1)
    raw_subdir: str = Field(min_length=1)
    output_name: str = Field(min_length=1)
    sources: tuple[SourceEntry, ...] = ()

    @model_validator(mode="after")
    def check_sources(self):
        """Identifiers unique, cycle years in chronological order."""
        seen = set()
        previous_year = None
        for entry in self.sources:
            if entry.remote_identifier in seen:
                raise ValueError(
                    f"duplicate source '{entry.remote_identifier}' in category '{self.name}'"
                )
            seen.add(entry.remote_identifier)

            if previous_year is not None and entry.cycle_year < previous_year:
                raise ValueError(
                    f"sources of category '{self.name}' must be ordered by cycle_year "
                    f"('{entry.cycle_year}' follows '{previous_year}')"
                )
            previous_year = entry.cycle_year
        return self
