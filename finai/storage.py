"""Local key-value persistence for the ledger and the session store.

``JsonStore`` keeps every namespace as a top-level key of one JSON file,
the way a browser's local storage keeps strings under keys. The finance
record is merged field by field over the seed defaults on load, so an old
or partial record never leaves a field undefined.
"""
import json
import logging
import os
import tempfile
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union
from uuid import uuid4

from finai.domain import FinanceState
from finai.transforms import SEED_PATH, load_seed, resync, state_from_dict, total_spent

logger = logging.getLogger(__name__)

FINANCE_KEY = "finai-finance"
FINANCE_FIELDS = ("income", "expenses", "categories", "investments", "savings", "invested")


class JsonStore:
    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Store file {self.path} does not hold a JSON object")
        return data

    def get(self, key: str, default: Any = None) -> Any:
        return self._read_all().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def remove(self, key: str) -> None:
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)

    def _write_all(self, data: Dict[str, Any]) -> None:
        # write-then-rename so a failed write never truncates the old file
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp, self.path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise


def _present(entry: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in entry.items() if v is not None}


def _usable(entries: Any, required: Tuple[str, ...], kind: str) -> Iterator[Dict[str, Any]]:
    for entry in entries:
        if isinstance(entry, dict) and all(entry.get(k) is not None for k in required):
            yield _present(entry)
        else:
            logger.warning("Dropping persisted %s without %s: %r", kind, "/".join(required), entry)


def merge_categories(stored: Any, defaults: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Fill each stored category's missing fields from the seed category of the same name."""
    seed = {c["name"]: c for c in defaults}
    return [
        {**seed.get(entry["name"], {"limit": 0, "amount": 0}), **entry}
        for entry in _usable(stored, ("name",), "category")
    ]


def merge_expenses(stored: Any, defaults: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [
        {"id": f"exp-{uuid4().hex}", "description": "", "date": "", **entry}
        for entry in _usable(stored, ("category", "amount"), "expense")
    ]


def merge_investments(stored: Any, defaults: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [
        {"id": f"inv-{uuid4().hex}", "description": "", **entry}
        for entry in _usable(stored, ("name", "amount", "risk"), "investment")
    ]


ENTRY_MERGERS = {
    "categories": merge_categories,
    "expenses": merge_expenses,
    "investments": merge_investments,
}


def merge_with_defaults(stored: Optional[Dict[str, Any]], defaults: Dict[str, Any]) -> Dict[str, Any]:
    """Take each finance field from ``stored`` when present, else from ``defaults``.

    List fields are merged entry by entry: an entry missing optional fields
    gets them filled in, an entry missing identifying fields is dropped.
    """
    stored = stored if isinstance(stored, dict) else {}
    merged = {}
    for key in FINANCE_FIELDS:
        value = stored.get(key)
        if value is None:
            logger.debug("Persisted finance record has no %r, using default", key)
            value = defaults.get(key)
        elif key in ENTRY_MERGERS:
            if isinstance(value, list):
                value = ENTRY_MERGERS[key](value, defaults.get(key) or [])
            else:
                logger.warning("Persisted %r is not a list, using default", key)
                value = defaults.get(key)
        merged[key] = value
    return merged


def _restore_invested(state: FinanceState, savings: Any) -> FinanceState:
    # records without ``invested`` kept investment debits only in ``savings``
    invested = max(0.0, state.income - total_spent(state.categories) - float(savings))
    return resync(replace(state, invested=invested))


def load_finance_state(
    store: JsonStore,
    key: str = FINANCE_KEY,
    seed_path: Union[str, Path] = SEED_PATH,
) -> FinanceState:
    """Load the persisted finance record merged over the seed.

    An unreadable store or a record that does not parse falls back to the
    seed state with a warning; the next successful save replaces it.
    """
    defaults = load_seed(seed_path)
    try:
        stored = store.get(key)
    except (OSError, ValueError):
        logger.warning("Could not read finance store %s, starting from seed", store.path, exc_info=True)
        stored = None
    if stored is None:
        logger.info("No persisted finance record under %r, starting from seed", key)

    try:
        state = state_from_dict(merge_with_defaults(stored, defaults))
        if isinstance(stored, dict) and stored.get("invested") is None and stored.get("savings") is not None:
            state = _restore_invested(state, stored["savings"])
    except (KeyError, TypeError, ValueError):
        logger.warning("Persisted finance record under %r does not parse, starting from seed", key, exc_info=True)
        state = state_from_dict(defaults)
    return state


def save_finance_state(store: JsonStore, state: FinanceState, key: str = FINANCE_KEY) -> None:
    store.set(key, state.to_dict())
