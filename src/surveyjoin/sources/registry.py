"""Default source registry.

Category A (laboratory): glycohemoglobin (GHB) files.
Category B (demographics): demographic variables and sample weights (DEMO).

Cycles run from 2005-2006 (letter D) through 2017-2018 (letter J). Each file
shares the respondent sequence number ``SEQN`` within its cycle.

Rows here are plain dicts; they become validated SourceEntry records when
ParamConfig is built.
"""

__all__ = ['CYCLES', 'LABORATORY_PREFIX', 'DEMOGRAPHIC_PREFIX', 'registry_rows']


# (file suffix letter, label, cycle year), chronological
CYCLES = (
    ("D", "2005-2006", "2005"),
    ("E", "2007-2008", "2007"),
    ("F", "2009-2010", "2009"),
    ("G", "2011-2012", "2011"),
    ("H", "2013-2014", "2013"),
    ("I", "2015-2016", "2015"),
    ("J", "2017-2018", "2017"),
)

LABORATORY_PREFIX = "GHB"
DEMOGRAPHIC_PREFIX = "DEMO"


def registry_rows(prefix: str, cycles=CYCLES) -> list[dict]:
    """Build one source row per cycle for a file prefix.

    Examples
    --------
    >>> registry_rows("DEMO", [("J", "2017-2018", "2017")])
    [{'remote_identifier': 'DEMO_J', 'label': '2017-2018', 'cycle_year': '2017'}]
    """
    return [
        {
            "remote_identifier": f"{prefix}_{letter}",
            "label": label,
            "cycle_year": year,
        }
        for letter, label, year in cycles
    ]
