"""ORM conversion helpers."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

import pandas as pd


def rows_to_df(rows: Iterable[Mapping[str, Any]], columns: Mapping[str, str]) -> pd.DataFrame:
    """Convert row dicts to a DataFrame, keeping and relabelling only ``columns``.

    ``columns`` maps row keys to header labels, in output order.
    """
    df = pd.DataFrame(list(rows), columns=list(columns))
    return df.rename(columns=dict(columns))
