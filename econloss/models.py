from typing import List, Optional, Dict, Any, Tuple
from dataclasses import dataclass, field, replace, asdict
from enum import Enum
from pydantic import BaseModel, ConfigDict, field_validator


class FrequencyType(str, Enum):
    """How often a life care plan item recurs within its duration."""
    ANNUAL = "annual"
    ONETIME = "onetime"
    RECURRING = "recurring"

    def is_active(self, t: int, interval: int = 1) -> bool:
        """Whether the item incurs a cost in period t (0-based) of its duration."""
        if self is FrequencyType.ANNUAL:
            return True
        if self is FrequencyType.ONETIME:
            return t == 0
        return t % max(1, interval) == 0


@dataclass(frozen=True)
class RateFringe:
    """Fringe benefits expressed as a percentage of base earnings."""
    percent: float

    def resolve(self, base_earnings: float) -> Tuple[float, float]:
        """Return (fringe_factor, flat_fringe_amount)."""
        return 1 + self.percent / 100, 0.0


@dataclass(frozen=True)
class FlatFringe:
    """Union-contract fringe benefits expressed as flat annual dollar amounts."""
    pension: float = 0.0
    health_welfare: float = 0.0
    annuity: float = 0.0
    clothing_allowance: float = 0.0
    other_benefits: float = 0.0

    @property
    def total(self) -> float:
        return (self.pension + self.health_welfare + self.annuity +
                self.clothing_allowance + self.other_benefits)

    def resolve(self, base_earnings: float) -> Tuple[float, float]:
        """Return (fringe_factor, flat_fringe_amount)."""
        amount = self.total
        effective_rate = amount / base_earnings if base_earnings > 0 else 0.0
        return 1 + effective_rate, amount


@dataclass
class CaseInfo:
    """Plaintiff identity, key case dates and narrative fields."""
    plaintiff: str = ""
    file_number: str = ""
    attorney: str = ""
    law_firm: str = ""
    report_date: str = ""
    gender: str = ""
    dob: str = ""
    education: str = ""
    marital_status: str = ""
    dependents: str = ""
    city: str = ""
    county: str = ""
    state: str = "New Jersey"
    date_of_injury: str = ""
    date_of_trial: str = ""
    retirement_age: float = 67.0
    life_expectancy: float = 0.0
    wle_source: str = "Skoog-Ciecka Work Life Expectancy Tables (2017)"
    life_table_source: str = "CDC National Vital Statistics Reports (2021)"
    jurisdiction: str = "New Jersey"
    case_type: str = "Personal Injury"

    # Narrative text, carried through for reports only
    medical_summary: str = ""
    employment_history: str = ""
    earnings_history: str = ""
    pre_injury_capacity: str = ""
    post_injury_capacity: str = ""
    functional_limitations: str = ""


@dataclass
class EarningsParams:
    """Earnings, fringe, unemployment and tax assumptions (rates in percent)."""
    base_earnings: float = 0.0
    residual_earnings: float = 0.0
    wle: float = 0.0
    wage_growth: float = 3.5
    discount_rate: float = 4.25
    fringe_rate: float = 21.5
    pension: float = 0.0
    health_welfare: float = 0.0
    annuity: float = 0.0
    clothing_allowance: float = 0.0
    other_benefits: float = 0.0
    unemployment_rate: float = 4.2
    ui_replacement_rate: float = 40.0
    fed_tax_rate: float = 15.0
    state_tax_rate: float = 4.5
    selected_scenario: Optional[str] = None
    enable_fringe_benefits: bool = True
    enable_present_value: bool = True

    def fringe_model(self, is_union_mode: bool):
        """Pick the fringe variant for this case."""
        if is_union_mode:
            return FlatFringe(
                pension=self.pension,
                health_welfare=self.health_welfare,
                annuity=self.annuity,
                clothing_allowance=self.clothing_allowance,
                other_benefits=self.other_benefits,
            )
        return RateFringe(self.fringe_rate)


@dataclass
class HhServices:
    """Household services the plaintiff can no longer perform."""
    active: bool = False
    hours_per_week: float = 0.0
    hourly_rate: float = 25.0
    growth_rate: float = 3.0
    discount_rate: float = 4.25


@dataclass
class LcpItem:
    """A single life care plan line item."""
    id: int
    category_id: str = "custom"
    name: str = ""
    base_cost: float = 0.0
    freq_type: FrequencyType = FrequencyType.ANNUAL
    duration: int = 1
    start_year: int = 1
    cpi: float = 0.0
    recurrence_interval: int = 1
    custom_years: List[int] = field(default_factory=list)

    def __post_init__(self):
        if not isinstance(self.freq_type, FrequencyType):
            try:
                self.freq_type = FrequencyType(str(self.freq_type).lower())
            except ValueError:
                raise ValueError(f"Unknown frequency type: {self.freq_type!r}")

    def active_years(self) -> List[int]:
        """1-based plan years in which this item incurs a cost."""
        if self.custom_years:
            return sorted({year for year in self.custom_years if year > 0})

        start = max(1, self.start_year or 1)
        interval = max(1, self.recurrence_interval or 1)
        return [start + t for t in range(max(0, self.duration))
                if self.freq_type.is_active(t, interval)]


@dataclass
class CaseInputs:
    """Everything the engine needs for one case."""
    case_info: CaseInfo = field(default_factory=CaseInfo)
    earnings_params: EarningsParams = field(default_factory=EarningsParams)
    hh_services: HhServices = field(default_factory=HhServices)
    lcp_items: List[LcpItem] = field(default_factory=list)
    past_actuals: Dict[int, str] = field(default_factory=dict)
    is_union_mode: bool = False


@dataclass(frozen=True)
class DateCalc:
    age_injury: str = "0"
    age_trial: str = "0"
    current_age: str = "0"
    past_years: float = 0.0
    derived_yfs: float = 0.0


@dataclass(frozen=True)
class Algebraic:
    """Composite earnings multipliers and the factors they are built from."""
    wlf: float
    unemp_factor: float
    after_tax_factor: float
    fringe_factor: float
    full_multiplier: float
    realized_multiplier: float
    combined_tax_rate: float
    yfs: float
    flat_fringe_amount: float = 0.0


@dataclass(frozen=True)
class PastScheduleRow:
    year: int
    label: str
    gross_base: float
    gross_actual: float
    net_loss: float
    is_manual: bool
    fraction: float


@dataclass(frozen=True)
class FutureScheduleRow:
    year: int
    gross: float
    net_loss: float
    pv: float


@dataclass(frozen=True)
class Projection:
    past_schedule: Tuple[PastScheduleRow, ...] = ()
    future_schedule: Tuple[FutureScheduleRow, ...] = ()
    total_past_loss: float = 0.0
    total_future_nominal: float = 0.0
    total_future_pv: float = 0.0


@dataclass(frozen=True)
class HhsData:
    total_nom: float = 0.0
    total_pv: float = 0.0


@dataclass(frozen=True)
class LcpItemResult:
    """A life care plan item together with its projected totals."""
    item: LcpItem
    total_nom: float
    total_pv: float


@dataclass(frozen=True)
class LcpData:
    items: Tuple[LcpItemResult, ...] = ()
    total_nom: float = 0.0
    total_pv: float = 0.0


@dataclass(frozen=True)
class ScenarioAssumptions:
    """A named set of overrides applied on top of the case assumptions."""
    id: str
    label: str
    wage_growth: Optional[float] = None
    discount_rate: Optional[float] = None
    wle: Optional[float] = None
    retirement_age: Optional[float] = None

    def apply(self, earnings_params: EarningsParams) -> EarningsParams:
        """Return a copy of earnings_params with this scenario's overrides."""
        overrides = {name: value for name, value in (
            ("wage_growth", self.wage_growth),
            ("discount_rate", self.discount_rate),
            ("wle", self.wle),
        ) if value is not None}
        return replace(earnings_params, **overrides)

    def apply_case_info(self, case_info: CaseInfo) -> CaseInfo:
        if self.retirement_age is None:
            return replace(case_info)
        return replace(case_info, retirement_age=self.retirement_age)


@dataclass
class ScenarioProjection:
    """Results of re-running the earnings chain under one scenario."""
    id: str
    label: str
    assumptions: ScenarioAssumptions
    date_calc: DateCalc
    algebraic: Algebraic
    projection: Projection
    hhs_data: HhsData
    lcp_data: LcpData
    grand_total: float
    included: bool = True

    @property
    def total_earnings_loss(self) -> float:
        return self.projection.total_past_loss + self.projection.total_future_pv


@dataclass
class CaseResults:
    """All derived outputs for one case."""
    date_calc: DateCalc
    algebraic: Algebraic
    projection: Projection
    hhs_data: HhsData
    lcp_data: LcpData
    grand_total: float
    scenarios: List[ScenarioProjection] = field(default_factory=list)

    def get_scenario(self, scenario_id: Optional[str]) -> Optional[ScenarioProjection]:
        """Get a scenario by id."""
        for scenario in self.scenarios:
            if scenario.id == scenario_id:
                return scenario
        return None


CPI_CATEGORIES: Dict[str, Dict[str, Any]] = {
    "evals": {"label": "Physician Evals & Home Care", "rate": 2.88},
    "rx": {"label": "Rx / Medical Commodities", "rate": 1.65},
    "surgery": {"label": "Hospital/Surgical Services", "rate": 4.07},
    "therapy": {"label": "Therapy & Treatments", "rate": 1.62},
    "transport": {"label": "Transportation", "rate": 4.32},
    "home": {"label": "Home Modifications", "rate": 4.16},
    "educ": {"label": "Education/Training", "rate": 2.61},
    "custom": {"label": "Custom Rate", "rate": 0.00},
}

DEFAULT_CASE_INFO = CaseInfo()
DEFAULT_EARNINGS_PARAMS = EarningsParams()
DEFAULT_HH_SERVICES = HhServices()


def default_cpi(category_id: str) -> float:
    """Default escalation rate for a CPI category (0 for unknown categories)."""
    return CPI_CATEGORIES.get(category_id, CPI_CATEGORIES["custom"])["rate"]


class CaseInfoModel(BaseModel):
    """Pydantic model for the case_info block of a case file."""
    model_config = ConfigDict(extra='forbid')

    plaintiff: str = ""
    file_number: str = ""
    attorney: str = ""
    law_firm: str = ""
    report_date: str = ""
    gender: str = ""
    dob: str = ""
    education: str = ""
    marital_status: str = ""
    dependents: str = ""
    city: str = ""
    county: str = ""
    state: str = DEFAULT_CASE_INFO.state
    date_of_injury: str = ""
    date_of_trial: str = ""
    retirement_age: float = DEFAULT_CASE_INFO.retirement_age
    life_expectancy: float = 0.0
    wle_source: str = DEFAULT_CASE_INFO.wle_source
    life_table_source: str = DEFAULT_CASE_INFO.life_table_source
    jurisdiction: str = DEFAULT_CASE_INFO.jurisdiction
    case_type: str = DEFAULT_CASE_INFO.case_type
    medical_summary: str = ""
    employment_history: str = ""
    earnings_history: str = ""
    pre_injury_capacity: str = ""
    post_injury_capacity: str = ""
    functional_limitations: str = ""

    @field_validator('retirement_age')
    @classmethod
    def validate_retirement_age(cls, v):
        if v < 0 or v > 120:
            raise ValueError('Retirement age must be between 0 and 120')
        return v


class EarningsParamsModel(BaseModel):
    """Pydantic model for the earnings_params block of a case file."""
    model_config = ConfigDict(extra='forbid')

    base_earnings: float = 0.0
    residual_earnings: float = 0.0
    wle: float = 0.0
    wage_growth: float = DEFAULT_EARNINGS_PARAMS.wage_growth
    discount_rate: float = DEFAULT_EARNINGS_PARAMS.discount_rate
    fringe_rate: float = DEFAULT_EARNINGS_PARAMS.fringe_rate
    pension: float = 0.0
    health_welfare: float = 0.0
    annuity: float = 0.0
    clothing_allowance: float = 0.0
    other_benefits: float = 0.0
    unemployment_rate: float = DEFAULT_EARNINGS_PARAMS.unemployment_rate
    ui_replacement_rate: float = DEFAULT_EARNINGS_PARAMS.ui_replacement_rate
    fed_tax_rate: float = DEFAULT_EARNINGS_PARAMS.fed_tax_rate
    state_tax_rate: float = DEFAULT_EARNINGS_PARAMS.state_tax_rate
    selected_scenario: Optional[str] = None
    enable_fringe_benefits: bool = True
    enable_present_value: bool = True

    @field_validator('base_earnings', 'residual_earnings', 'wle', 'pension', 'health_welfare',
                     'annuity', 'clothing_allowance', 'other_benefits')
    @classmethod
    def validate_non_negative(cls, v):
        if v < 0:
            raise ValueError('Amount cannot be negative')
        return v

    @field_validator('unemployment_rate', 'ui_replacement_rate', 'fed_tax_rate', 'state_tax_rate')
    @classmethod
    def validate_percentage(cls, v):
        if v < 0 or v > 100:
            raise ValueError('Rate must be between 0 and 100')
        return v


class HhServicesModel(BaseModel):
    """Pydantic model for the hh_services block of a case file."""
    model_config = ConfigDict(extra='forbid')

    active: bool = False
    hours_per_week: float = 0.0
    hourly_rate: float = DEFAULT_HH_SERVICES.hourly_rate
    growth_rate: float = DEFAULT_HH_SERVICES.growth_rate
    discount_rate: float = DEFAULT_HH_SERVICES.discount_rate

    @field_validator('hours_per_week', 'hourly_rate', 'growth_rate', 'discount_rate')
    @classmethod
    def validate_non_negative(cls, v):
        if v < 0:
            raise ValueError('Value cannot be negative')
        return v


class LcpItemModel(BaseModel):
    """Pydantic model for one life care plan item in a case file."""
    model_config = ConfigDict(extra='forbid')

    id: int
    category_id: str = "custom"
    name: str = ""
    base_cost: float
    freq_type: FrequencyType = FrequencyType.ANNUAL
    duration: int = 1
    start_year: int = 1
    cpi: Optional[float] = None
    recurrence_interval: int = 1
    custom_years: List[int] = []

    @field_validator('base_cost')
    @classmethod
    def validate_base_cost(cls, v):
        if v < 0:
            raise ValueError('Base cost cannot be negative')
        return v

    @field_validator('duration', 'start_year', 'recurrence_interval')
    @classmethod
    def validate_at_least_one(cls, v):
        if v < 1:
            raise ValueError('Must be at least 1')
        return v


class CaseConfigModel(BaseModel):
    """Pydantic model for validating a case configuration from JSON."""
    name: str = ""
    case_info: CaseInfoModel = CaseInfoModel()
    earnings_params: EarningsParamsModel = EarningsParamsModel()
    hh_services: HhServicesModel = HhServicesModel()
    lcp_items: List[LcpItemModel] = []
    past_actuals: Dict[int, str] = {}
    is_union_mode: bool = False

    @field_validator('lcp_items')
    @classmethod
    def validate_unique_ids(cls, v):
        ids = [item.id for item in v]
        if len(ids) != len(set(ids)):
            raise ValueError('Life care plan item ids must be unique')
        return v

    def to_case_inputs(self) -> CaseInputs:
        """Convert this config model to CaseInputs."""
        items = []
        for item in self.lcp_items:
            data = item.model_dump()
            if data['cpi'] is None:
                data['cpi'] = default_cpi(item.category_id)
            items.append(LcpItem(**data))

        return CaseInputs(
            case_info=CaseInfo(**self.case_info.model_dump()),
            earnings_params=EarningsParams(**self.earnings_params.model_dump()),
            hh_services=HhServices(**self.hh_services.model_dump()),
            lcp_items=items,
            past_actuals=dict(self.past_actuals),
            is_union_mode=self.is_union_mode,
        )

    @classmethod
    def from_case_inputs(cls, inputs: CaseInputs, name: str = "") -> 'CaseConfigModel':
        """Build a config model from CaseInputs (the inverse of to_case_inputs)."""
        return cls(
            name=name or inputs.case_info.plaintiff,
            case_info=asdict(inputs.case_info),
            earnings_params=asdict(inputs.earnings_params),
            hh_services=asdict(inputs.hh_services),
            lcp_items=[asdict(item) for item in inputs.lcp_items],
            past_actuals=dict(inputs.past_actuals),
            is_union_mode=inputs.is_union_mode,
        )
