import io
import json
import math
import logging
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any, Dict, List, Tuple, Union
import pandas as pd
from .models import (
    CaseInfo, CaseInputs, EarningsParams, FrequencyType, HhServices, LcpItem,
    DEFAULT_CASE_INFO, DEFAULT_EARNINGS_PARAMS, DEFAULT_HH_SERVICES, default_cpi,
)

logger = logging.getLogger(__name__)


class CaseImportError(Exception):
    """Raised when a file cannot be read as a case at all."""


# Flat-record aliases: normalised header -> (section, field)
FLAT_FIELD_ALIASES: Dict[str, Tuple[str, str]] = {
    "plaintiff": ("case_info", "plaintiff"),
    "name": ("case_info", "plaintiff"),
    "attorney": ("case_info", "attorney"),
    "lawfirm": ("case_info", "law_firm"),
    "dob": ("case_info", "dob"),
    "dateofbirth": ("case_info", "dob"),
    "dateofinjury": ("case_info", "date_of_injury"),
    "dateoftrial": ("case_info", "date_of_trial"),
    "retirementage": ("case_info", "retirement_age"),
    "lifeexpectancy": ("case_info", "life_expectancy"),
    "gender": ("case_info", "gender"),
    "education": ("case_info", "education"),
    "baseearnings": ("earnings_params", "base_earnings"),
    "preinjuryearnings": ("earnings_params", "base_earnings"),
    "residualearnings": ("earnings_params", "residual_earnings"),
    "postinjuryearnings": ("earnings_params", "residual_earnings"),
    "wle": ("earnings_params", "wle"),
    "worklifeexpectancy": ("earnings_params", "wle"),
    "wagegrowth": ("earnings_params", "wage_growth"),
    "discountrate": ("earnings_params", "discount_rate"),
}


def normalise_key(key: Any) -> str:
    """Lower-case a field name and drop separators: 'Date_Of-Injury' -> 'dateofinjury'."""
    return ''.join(ch for ch in str(key).lower() if ch.isalnum())


def _coerce(value: Any, default: Any) -> Any:
    """Coerce value to the type of default, falling back to default."""
    if value is None:
        return default
    try:
        if isinstance(default, bool):
            if isinstance(value, str):
                return value.strip().lower() in ('1', 'true', 'yes', 'y', 'on')
            return bool(value)
        if isinstance(default, int):
            return int(float(value))
        if isinstance(default, float):
            if isinstance(value, str) and not value.strip():
                return default
            result = float(str(value).replace(',', '').replace('$', '').replace('%', ''))
            if not math.isfinite(result):
                logger.warning(f"Non-finite value {value!r}, using default {default!r}")
                return default
            return result
        if isinstance(default, str):
            return str(value)
    except (TypeError, ValueError, OverflowError):
        logger.warning(f"Could not read {value!r}, using default {default!r}")
        return default
    return value


def _merge_section(cls, defaults, data: Any):
    """Build a dataclass from a dict, merging field by field over defaults.

    Accepts snake_case or camelCase keys; unknown keys are ignored.
    """
    if not isinstance(data, dict):
        return cls(**asdict(defaults))

    by_key = {normalise_key(key): value for key, value in data.items()}
    values = {}
    for f in fields(cls):
        default = getattr(defaults, f.name)
        raw = by_key.get(normalise_key(f.name))
        if f.name == 'selected_scenario':
            values[f.name] = str(raw) if raw not in (None, '') else None
        else:
            values[f.name] = _coerce(raw, default)
    return cls(**values)


def _lcp_item_from_record(data: Dict[str, Any], fallback_id: int) -> LcpItem:
    by_key = {normalise_key(key): value for key, value in data.items()}
    category_id = str(by_key.get('categoryid') or 'custom')

    freq = str(by_key.get('freqtype') or 'annual').lower()
    if freq not in {member.value for member in FrequencyType}:
        logger.warning(f"Unknown frequency type {freq!r}, treating as annual")
        freq = FrequencyType.ANNUAL.value

    custom_years = by_key.get('customyears') or []
    if not isinstance(custom_years, list):
        custom_years = []

    return LcpItem(
        id=_coerce(by_key.get('id'), fallback_id),
        category_id=category_id,
        name=_coerce(by_key.get('name'), ''),
        base_cost=max(0.0, _coerce(by_key.get('basecost'), 0.0)),
        freq_type=FrequencyType(freq),
        duration=max(1, _coerce(by_key.get('duration'), 1)),
        start_year=max(1, _coerce(by_key.get('startyear'), 1)),
        cpi=_coerce(by_key.get('cpi'), default_cpi(category_id)),
        recurrence_interval=max(1, _coerce(by_key.get('recurrenceinterval'), 1)),
        custom_years=[year for year in (_coerce(y, 0) for y in custom_years) if year > 0],
    )


def _past_actuals_from_record(data: Any) -> Dict[int, str]:
    if not isinstance(data, dict):
        return {}
    actuals = {}
    for year, value in data.items():
        try:
            actuals[int(year)] = '' if value is None else str(value)
        except (TypeError, ValueError):
            logger.warning(f"Ignoring actual earnings for invalid year {year!r}")
    return actuals


def case_inputs_from_record(data: Dict[str, Any]) -> CaseInputs:
    """Build CaseInputs from a structured record, falling back to defaults per field."""
    by_key = {normalise_key(key): value for key, value in data.items()}

    raw_items = by_key.get('lcpitems') or []
    items: List[LcpItem] = []
    if isinstance(raw_items, list):
        for index, raw in enumerate(raw_items, start=1):
            if isinstance(raw, dict):
                items.append(_lcp_item_from_record(raw, index))

    return CaseInputs(
        case_info=_merge_section(CaseInfo, DEFAULT_CASE_INFO, by_key.get('caseinfo')),
        earnings_params=_merge_section(EarningsParams, DEFAULT_EARNINGS_PARAMS, by_key.get('earningsparams')),
        hh_services=_merge_section(HhServices, DEFAULT_HH_SERVICES, by_key.get('hhservices')),
        lcp_items=items,
        past_actuals=_past_actuals_from_record(by_key.get('pastactuals')),
        is_union_mode=_coerce(by_key.get('isunionmode'), False),
    )


def case_inputs_to_record(inputs: CaseInputs) -> Dict[str, Any]:
    """Serialize CaseInputs to a JSON-compatible structured record."""
    items = []
    for item in inputs.lcp_items:
        record = asdict(item)
        record['freq_type'] = item.freq_type.value
        items.append(record)

    return {
        "case_info": asdict(inputs.case_info),
        "earnings_params": asdict(inputs.earnings_params),
        "hh_services": asdict(inputs.hh_services),
        "lcp_items": items,
        "past_actuals": {str(year): value for year, value in inputs.past_actuals.items()},
        "is_union_mode": inputs.is_union_mode,
    }


def case_inputs_from_flat(data: Dict[str, Any]) -> CaseInputs:
    """Build CaseInputs from a flat field -> value mapping (one CSV row, flat JSON)."""
    sections: Dict[str, Dict[str, Any]] = {"case_info": {}, "earnings_params": {}}
    for key, value in data.items():
        target = FLAT_FIELD_ALIASES.get(normalise_key(key))
        if target is None or value in (None, ''):
            continue
        section, name = target
        sections[section].setdefault(name, value)
    return case_inputs_from_record(sections)


def _is_structured(data: Dict[str, Any]) -> bool:
    keys = {normalise_key(key) for key in data}
    return 'caseinfo' in keys and 'earningsparams' in keys


def parse_json_case(content: str) -> Tuple[str, CaseInputs]:
    """Parse a structured or flat JSON case. Returns (case name, inputs)."""
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise CaseImportError(f"Invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise CaseImportError("JSON case must be an object")

    inputs = case_inputs_from_record(data) if _is_structured(data) else case_inputs_from_flat(data)
    name = data.get('name') or inputs.case_info.plaintiff or 'Imported Case'
    return str(name), inputs


def parse_csv_case(content: str) -> Tuple[str, CaseInputs]:
    """Parse a flat CSV case: a header row and one data row."""
    try:
        df = pd.read_csv(io.StringIO(content), dtype=str, keep_default_na=False,
                         skipinitialspace=True)
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise CaseImportError(f"Invalid CSV: {e}") from e
    if df.empty:
        raise CaseImportError("CSV case needs a header row and a data row")

    row = {column.strip(): value.strip() for column, value in df.iloc[0].items()}
    inputs = case_inputs_from_flat(row)
    return inputs.case_info.plaintiff or 'Imported Case', inputs


def import_case_file(path: Union[str, Path]) -> Tuple[str, CaseInputs]:
    """Import a case file, choosing the parser by extension (JSON first, then CSV, if unknown)."""
    path = Path(path)
    content = path.read_text(encoding='utf-8')

    if path.suffix.lower() == '.json':
        return parse_json_case(content)
    if path.suffix.lower() == '.csv':
        return parse_csv_case(content)

    try:
        return parse_json_case(content)
    except CaseImportError:
        logger.info(f"{path.name} is not JSON, trying CSV")
        return parse_csv_case(content)
