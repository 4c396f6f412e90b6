"""Forensic economic loss projection: earnings, household services and life care plans."""

from .calculator import LossCalculator, compute_case
from .database import CaseDatabase
from .importers import CaseImportError, import_case_file
from .models import (
    CaseConfigModel, CaseInfo, CaseInputs, CaseResults, EarningsParams, FrequencyType, HhServices,
    LcpItem, ScenarioAssumptions,
)
from .scenarios import ECONOMIC_SCENARIOS, retirement_age_scenarios

__version__ = "1.0.0"
