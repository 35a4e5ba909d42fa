import json
from pathlib import Path
from typing import Any

import pandas as pd


def read_portfolio_input(path: str) -> list[dict[str, Any]]:
    """
    Load a portfolio snapshot: a JSON list of
    {"property": {...}, "live": {...}, "normalized": {...}, "deal_model": ...}
    """
    data = json.loads(Path(path).read_text())
    if isinstance(data, dict):
        data = data.get("properties", [])
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a list of property entries")
    return data


def write_df(df: pd.DataFrame, path: str):
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    if path.endswith(".parquet"):
        df.to_parquet(path, index=False)
    elif path.endswith(".json"):
        df.to_json(path, orient="records", indent=2)
    else:
        df.to_csv(path, index=False)
